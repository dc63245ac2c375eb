from .config import DeliveryMode, EngineConfig, IsolationMode, load_engine_config
from .errors import (
    BusyError,
    ClosedError,
    FatalError,
    InputRejectedError,
    RollupsError,
    TransactionError,
)
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
from .interpreter import interpret
from .kernel import EngineState, RollupsKernel
from .session import (
    Session,
    SessionKind,
    SessionState,
    collect_advance,
    collect_inspect,
)
from .transaction import Transaction, TransactionController

__all__ = [
    "DeliveryMode",
    "EngineConfig",
    "IsolationMode",
    "load_engine_config",
    "BusyError",
    "ClosedError",
    "FatalError",
    "InputRejectedError",
    "RollupsError",
    "TransactionError",
    "Accepted",
    "AdvanceResult",
    "GuestException",
    "InspectResult",
    "Output",
    "Progress",
    "ProtocolEvent",
    "ProtocolViolation",
    "Rejected",
    "Report",
    "StreamEvent",
    "interpret",
    "EngineState",
    "RollupsKernel",
    "Session",
    "SessionKind",
    "SessionState",
    "collect_advance",
    "collect_inspect",
    "Transaction",
    "TransactionController",
]
