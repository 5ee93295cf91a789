from __future__ import annotations

from typing import Optional


class EngineError(Exception):
    """Base class for everything the hand engine raises."""


class ContractViolation(EngineError, ValueError):
    """The caller asked for something the rules do not allow."""


class ActionRejected(ContractViolation):
    def __init__(self, reason: str, seat: Optional[int] = None) -> None:
        super().__init__(reason)
        self.reason = reason
        self.seat = seat


class InsufficientChips(ContractViolation):
    pass


class ResourceExhaustion(EngineError, RuntimeError):
    """A finite resource ran out mid-hand; the hand cannot continue."""


class DeckExhausted(ResourceExhaustion):
    pass
