"""Errors raised by the rollups engine.

Hierarchy:
- RollupsError (base)
  ├── InputRejectedError  guest program declined the input
  ├── FatalError          guest exception, protocol violation or machine failure
  ├── ClosedError         operation attempted after shutdown
  ├── BusyError           a session is already open on the engine
  └── TransactionError    commit/rollback without an open transaction

Every engine operation completes its open transaction before raising, so
canonical state is never left half-applied when one of these surfaces.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class RollupsError(Exception):
    code: str = "ROLLUPS_ERROR"
    message: str = "Rollups engine error"

    def __init__(
        self,
        message: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message or self.message
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "details": dict(self.details),
        }


class InputRejectedError(RollupsError):
    code = "INPUT_REJECTED"
    message = "Input rejected"


class FatalError(RollupsError):
    code = "FATAL"
    message = "Rollups fatal error"


class ClosedError(RollupsError):
    code = "CLOSED"
    message = "Rollups engine is shut down"


class BusyError(RollupsError):
    code = "BUSY"
    message = "A session is already open on this engine"


class TransactionError(RollupsError):
    code = "TRANSACTION"
    message = "No open transaction"
