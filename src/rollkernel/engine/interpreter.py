from __future__ import annotations

import struct
from typing import Optional

from rollkernel.utils.logging import get_logger

from ..machine.models import (
    AutomaticReason,
    BreakReason,
    ManualReason,
    YieldRequest,
    describe_code,
)
from .events import (
    Accepted,
    GuestException,
    Output,
    Progress,
    ProtocolEvent,
    ProtocolViolation,
    Rejected,
    Report,
)

logger = get_logger(__name__)

_PROGRESS = struct.Struct("<I")


def is_yield(break_reason: int) -> bool:
    return break_reason in (
        BreakReason.YIELDED_MANUALLY,
        BreakReason.YIELDED_AUTOMATICALLY,
    )


def interpret(
    break_reason: int, request: Optional[YieldRequest]
) -> Optional[ProtocolEvent]:
    """Classify one break of the machine into a protocol event.

    Returns ``None`` when the break carries nothing for the host: an
    automatic yield with an unknown reason, or a progress payload that
    cannot be decoded. The machine is expected to be run again in both
    cases.
    """
    if not is_yield(break_reason):
        return ProtocolViolation(
            f"unexpected break reason: {describe_code(BreakReason, break_reason)}"
        )
    if request is None:
        return ProtocolViolation("yield without a pending request")
    if break_reason == BreakReason.YIELDED_MANUALLY:
        return _interpret_manual(request)
    return _interpret_automatic(request)


def _interpret_manual(request: YieldRequest) -> ProtocolEvent:
    if request.reason == ManualReason.RX_ACCEPTED:
        return Accepted(request.payload)
    if request.reason == ManualReason.RX_REJECTED:
        return Rejected()
    if request.reason == ManualReason.TX_EXCEPTION:
        return GuestException(request.payload.decode("utf-8", errors="replace"))
    return ProtocolViolation(
        f"unexpected yield reason: {describe_code(ManualReason, request.reason)}"
    )


def _interpret_automatic(request: YieldRequest) -> Optional[ProtocolEvent]:
    if request.reason == AutomaticReason.PROGRESS:
        try:
            (value,) = _PROGRESS.unpack_from(request.payload)
        except struct.error:
            logger.debug("dropping undecodable progress: %r", request.payload)
            return None
        return Progress(value)
    if request.reason == AutomaticReason.TX_OUTPUT:
        return Output(request.payload)
    if request.reason == AutomaticReason.TX_REPORT:
        return Report(request.payload)
    logger.debug("ignoring automatic yield reason: %s", request.reason)
    return None
