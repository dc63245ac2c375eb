"""Transactional advance/inspect engine for rollups machines."""

from .composition import rollups, rollups_from_store
from .engine import (
    AdvanceResult,
    BusyError,
    ClosedError,
    DeliveryMode,
    EngineConfig,
    EngineState,
    FatalError,
    InputRejectedError,
    InspectResult,
    IsolationMode,
    Output,
    Progress,
    Report,
    RollupsError,
    RollupsKernel,
    Session,
)
from .machine import MachineHandle, MachineLoader, RemoteConfig, RuntimeConfig

__all__ = [
    "rollups",
    "rollups_from_store",
    "AdvanceResult",
    "BusyError",
    "ClosedError",
    "DeliveryMode",
    "EngineConfig",
    "EngineState",
    "FatalError",
    "InputRejectedError",
    "InspectResult",
    "IsolationMode",
    "Output",
    "Progress",
    "Report",
    "RollupsError",
    "RollupsKernel",
    "Session",
    "MachineHandle",
    "MachineLoader",
    "RemoteConfig",
    "RuntimeConfig",
]
