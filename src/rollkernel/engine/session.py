from __future__ import annotations

from enum import Enum
from typing import Iterator, Optional, Union

from rollkernel.utils.logging import get_logger

from ..machine.models import RequestReason
from ..machine.protocols import MachineHandle
from .config import IsolationMode
from .errors import FatalError, InputRejectedError, RollupsError, TransactionError
from .events import (
    Accepted,
    AdvanceResult,
    GuestException,
    InspectResult,
    Output,
    Progress,
    ProtocolEvent,
    ProtocolViolation,
    Rejected,
    Report,
    StreamEvent,
)
from .interpreter import interpret, is_yield
from .transaction import TransactionController

logger = get_logger(__name__)


class SessionKind(str, Enum):
    ADVANCE = "advance"
    INSPECT = "inspect"


class SessionState(str, Enum):
    START = "start"
    RUNNING = "running"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    FATAL = "fatal"
    CANCELLED = "cancelled"


_REQUEST_REASONS = {
    SessionKind.ADVANCE: RequestReason.ADVANCE_STATE,
    SessionKind.INSPECT: RequestReason.INSPECT_STATE,
}


class Session(Iterator[StreamEvent]):
    """One advance or inspect run, pulled event by event.

    Nothing touches the machine until the first pull. The transaction is
    opened then, and closed exactly once: on the terminal yield, on any
    machine failure, or when the caller stops early through ``close()``
    (also called by ``__exit__`` and when the session is garbage
    collected). An advance commits on accept; an inspect always rolls
    back.
    """

    def __init__(
        self,
        kind: SessionKind,
        payload: bytes,
        controller: TransactionController,
        isolation: IsolationMode = IsolationMode.ISOLATED,
    ) -> None:
        self.kind = kind
        self.payload = payload
        self.result: Optional[bytes] = None
        self._controller = controller
        self._isolation = isolation
        self._working: Optional[MachineHandle] = None
        self._state = SessionState.START

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def done(self) -> bool:
        return self._state not in (SessionState.START, SessionState.RUNNING)

    def __iter__(self) -> "Session":
        return self

    def __next__(self) -> StreamEvent:
        event = self.next_event()
        if event is None:
            raise StopIteration
        return event

    def __enter__(self) -> "Session":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __del__(self) -> None:
        if getattr(self, "_state", None) is not SessionState.RUNNING:
            return
        try:
            self.close()
        except Exception:
            logger.error("failed to cancel abandoned session", exc_info=True)

    def next_event(self) -> Optional[StreamEvent]:
        """Run the machine up to the next streamed event.

        Returns ``None`` once the session is over.
        """
        if self._state is SessionState.START:
            self._start()
        while self._state is SessionState.RUNNING:
            event = self._step()
            if event is None:
                continue
            delivered = self._handle(event)
            if delivered is not None:
                return delivered
        return None

    def close(self) -> None:
        if self._state is SessionState.START:
            self._state = SessionState.CANCELLED
            return
        if self._state is not SessionState.RUNNING:
            return
        logger.debug("%s session cancelled", self.kind.value)
        self._finish(SessionState.CANCELLED, commit=False)

    def _start(self) -> None:
        self._working = self._controller.begin(self._isolation)
        self._state = SessionState.RUNNING
        logger.debug(
            "%s session started (%d bytes)", self.kind.value, len(self.payload)
        )
        try:
            self._working.send_yield_response(
                _REQUEST_REASONS[self.kind], self.payload
            )
        except Exception as exc:
            raise self._machine_failure(exc) from exc

    def _step(self) -> Optional[ProtocolEvent]:
        working = self._working
        if working is None:
            raise TransactionError("session has no working machine")
        try:
            break_reason = working.run()
            request = (
                working.receive_yield_request()
                if is_yield(break_reason)
                else None
            )
        except Exception as exc:
            raise self._machine_failure(exc) from exc
        return interpret(break_reason, request)

    def _handle(self, event: ProtocolEvent) -> Optional[StreamEvent]:
        if isinstance(event, Report):
            return event
        if isinstance(event, Output):
            if self.kind is SessionKind.INSPECT:
                self._fatal(ProtocolViolation("inspect emitted an output"))
            return event
        if isinstance(event, Progress):
            return event if self.kind is SessionKind.ADVANCE else None
        if isinstance(event, Accepted):
            self.result = event.payload
            self._finish(
                SessionState.ACCEPTED, commit=self.kind is SessionKind.ADVANCE
            )
            return None
        if isinstance(event, Rejected):
            self._finish(SessionState.REJECTED, commit=False)
            logger.info("%s input rejected", self.kind.value)
            raise InputRejectedError()
        if isinstance(event, (GuestException, ProtocolViolation)):
            self._fatal(event)
        return None

    def _fatal(self, event: Union[GuestException, ProtocolViolation]) -> None:
        self._finish(SessionState.FATAL, commit=False)
        if isinstance(event, GuestException):
            logger.error(
                "%s raised guest exception: %s", self.kind.value, event.description
            )
            raise FatalError(event.description, details={"source": "guest"})
        logger.error("%s protocol violation: %s", self.kind.value, event.description)
        raise FatalError(event.description, details={"source": "protocol"})

    def _machine_failure(self, exc: Exception) -> FatalError:
        logger.error("%s machine error", self.kind.value, exc_info=True)
        try:
            self._finish(SessionState.FATAL, commit=False)
        except Exception:
            logger.error(
                "%s rollback after machine error failed", self.kind.value, exc_info=True
            )
        return FatalError(f"machine error: {exc}", details={"source": "machine"})

    def _finish(self, state: SessionState, commit: bool) -> None:
        self._state = state
        self._working = None
        try:
            if commit:
                self._controller.commit()
            else:
                self._controller.rollback()
        except RollupsError:
            raise
        except Exception as exc:
            raise FatalError(
                f"failed to close transaction: {exc}", details={"source": "machine"}
            ) from exc


def collect_advance(session: Session) -> AdvanceResult:
    result = AdvanceResult()
    with session:
        for event in session:
            if isinstance(event, Output):
                result.outputs.append(event.payload)
            elif isinstance(event, Report):
                result.reports.append(event.payload)
    result.outputs_merkle_root = session.result or b""
    return result


def collect_inspect(session: Session) -> InspectResult:
    result = InspectResult()
    with session:
        for event in session:
            if isinstance(event, Report):
                result.reports.append(event.payload)
    return result
