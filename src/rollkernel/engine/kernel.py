from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Optional, Union

from rollkernel.utils.logging import get_logger

from ..machine.protocols import MachineHandle
from .config import DeliveryMode, EngineConfig, IsolationMode
from .errors import ClosedError
from .events import AdvanceResult, InspectResult
from .session import Session, SessionKind, collect_advance, collect_inspect
from .transaction import TransactionController

logger = get_logger(__name__)


class EngineState(str, Enum):
    IDLE = "idle"
    IN_SESSION = "in_session"
    SHUTDOWN = "shutdown"


class RollupsKernel:
    def __init__(
        self,
        machine: MachineHandle,
        config: Optional[EngineConfig] = None,
    ) -> None:
        self.config = config or EngineConfig()
        self._controller = TransactionController(machine)
        if self.config.isolation is IsolationMode.DIRECT:
            logger.warning("direct isolation: rejected inputs are not rolled back")

    @property
    def state(self) -> EngineState:
        if self._controller.closed:
            return EngineState.SHUTDOWN
        if self._controller.in_transaction:
            return EngineState.IN_SESSION
        return EngineState.IDLE

    @property
    def canonical(self) -> MachineHandle:
        return self._controller.canonical

    @property
    def outstanding_forks(self) -> int:
        return self._controller.outstanding_forks

    @property
    def leaked_handles(self) -> int:
        return self._controller.handles_leaked

    def advance(
        self, payload: bytes, collect: Optional[bool] = None
    ) -> Union[Session, AdvanceResult]:
        session = self._open(SessionKind.ADVANCE, payload)
        if self._collects(collect):
            return collect_advance(session)
        return session

    def inspect(
        self, query: bytes, collect: Optional[bool] = None
    ) -> Union[Session, InspectResult]:
        session = self._open(SessionKind.INSPECT, query)
        if self._collects(collect):
            return collect_inspect(session)
        return session

    def store(self, path: Union[str, Path]) -> "RollupsKernel":
        self._controller.store(str(path))
        return self

    def shutdown(self) -> None:
        self._controller.shutdown()

    def _open(self, kind: SessionKind, payload: bytes) -> Session:
        if self._controller.closed:
            raise ClosedError()
        if not isinstance(payload, (bytes, bytearray, memoryview)):
            raise TypeError(
                f"{kind.value} payload must be bytes, not {type(payload).__name__}"
            )
        return Session(
            kind, bytes(payload), self._controller, self.config.isolation
        )

    def _collects(self, collect: Optional[bool]) -> bool:
        if collect is None:
            return self.config.delivery is DeliveryMode.COLLECT
        return collect
