from __future__ import annotations

import json
from pathlib import Path

from nse_tracker.portfolio.store import PortfolioStore


def test_portfolio_store_should_persist_mutations(tmp_path: Path) -> None:
    path = tmp_path / "portfolio.json"
    store = PortfolioStore(path)
    assert store.list() == []

    store.add("SBIN")
    store.add("TCS")
    store.add("SBIN")
    assert store.list() == ["SBIN", "TCS"]
    assert json.loads(path.read_text(encoding="utf-8")) == ["SBIN", "TCS"]

    store.remove("SBIN")
    store.remove("UNKNOWN")
    assert store.list() == ["TCS"]

    reloaded = PortfolioStore(path)
    assert reloaded.list() == ["TCS"]


def test_portfolio_store_should_load_existing_file(tmp_path: Path) -> None:
    path = tmp_path / "portfolio.json"
    path.write_text(json.dumps(["INFY", "ITC", "INFY"]), encoding="utf-8")
    assert PortfolioStore(path).list() == ["INFY", "ITC"]


def test_portfolio_store_should_survive_corrupt_file(tmp_path: Path) -> None:
    path = tmp_path / "portfolio.json"
    path.write_text("{not json", encoding="utf-8")
    store = PortfolioStore(path)
    assert store.list() == []

    store.add("ITC")
    assert json.loads(path.read_text(encoding="utf-8")) == ["ITC"]


def test_portfolio_store_should_reject_non_list_payload(tmp_path: Path) -> None:
    path = tmp_path / "portfolio.json"
    path.write_text(json.dumps({"symbols": ["ITC"]}), encoding="utf-8")
    assert PortfolioStore(path).list() == []


def test_portfolio_store_should_keep_memory_state_when_save_fails(tmp_path: Path) -> None:
    path = tmp_path / "portfolio.json"
    path.mkdir()
    store = PortfolioStore(path)
    store.add("SBIN")
    assert store.list() == ["SBIN"]
