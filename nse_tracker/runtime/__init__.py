"""Runtime helpers package: the jittered poll loop."""

from .poller import CycleOutcome, CycleStatus, Poller

__all__ = ["CycleOutcome", "CycleStatus", "Poller"]
