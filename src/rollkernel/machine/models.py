from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum


class BreakReason(IntEnum):
    """Why a call to ``run()`` returned control to the host."""

    FAILED = 0
    HALTED = 1
    YIELDED_MANUALLY = 2
    YIELDED_AUTOMATICALLY = 3
    YIELDED_SOFTLY = 4
    REACHED_TARGET_MCYCLE = 5


class YieldCommand(IntEnum):
    AUTOMATIC = 0
    MANUAL = 1


class AutomaticReason(IntEnum):
    PROGRESS = 1
    TX_OUTPUT = 2
    TX_REPORT = 4


class ManualReason(IntEnum):
    RX_ACCEPTED = 1
    RX_REJECTED = 2
    TX_EXCEPTION = 4


class RequestReason(IntEnum):
    """Reason codes the host sends with a yield response."""

    ADVANCE_STATE = 0
    INSPECT_STATE = 1


@dataclass(frozen=True)
class YieldRequest:
    command: int
    reason: int
    payload: bytes = b""


def describe_code(enum_cls: type[IntEnum], value: int) -> str:
    try:
        return enum_cls(value).name
    except ValueError:
        return str(value)
