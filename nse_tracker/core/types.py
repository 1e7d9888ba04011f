"""Shared type aliases for readability and contract enforcement."""
from __future__ import annotations

from typing import Any, Callable, Mapping, NewType, TypeAlias

Symbol = NewType("Symbol", str)

JSONLike: TypeAlias = Mapping[str, Any]
SubscriberCallback: TypeAlias = Callable[[Any], None]
