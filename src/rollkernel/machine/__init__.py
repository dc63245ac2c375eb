from .config import (
    DEFAULT_ADDRESS,
    DEFAULT_TIMEOUT,
    RemoteConfig,
    RuntimeConfig,
    load_remote_config,
)
from .models import (
    AutomaticReason,
    BreakReason,
    ManualReason,
    RequestReason,
    YieldCommand,
    YieldRequest,
)
from .protocols import MachineHandle, MachineLoader

__all__ = [
    "DEFAULT_ADDRESS",
    "DEFAULT_TIMEOUT",
    "RemoteConfig",
    "RuntimeConfig",
    "load_remote_config",
    "AutomaticReason",
    "BreakReason",
    "ManualReason",
    "RequestReason",
    "YieldCommand",
    "YieldRequest",
    "MachineHandle",
    "MachineLoader",
]
