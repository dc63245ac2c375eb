from __future__ import annotations

from pathlib import Path
from typing import Optional, Union

from rollkernel.utils.logging import get_logger

from ..engine.config import EngineConfig
from ..engine.kernel import RollupsKernel
from ..machine.config import RemoteConfig, RuntimeConfig
from ..machine.protocols import MachineHandle, MachineLoader

logger = get_logger(__name__)


def rollups(
    machine: MachineHandle, config: Optional[EngineConfig] = None
) -> RollupsKernel:
    return RollupsKernel(machine, config=config)


def rollups_from_store(
    store_dir: Union[str, Path],
    loader: MachineLoader,
    config: Optional[EngineConfig] = None,
    remote: Optional[RemoteConfig] = None,
    runtime: Optional[RuntimeConfig] = None,
) -> RollupsKernel:
    """Load a stored machine snapshot and wrap it in an engine."""
    remote = remote or RemoteConfig()
    runtime_config = runtime.to_dict() if runtime else None
    logger.info("loading machine from %s (address=%s)", store_dir, remote.address)
    machine = loader.load(
        store_dir,
        remote.address,
        remote.timeout,
        runtime_config,
    )
    return rollups(machine, config=config)
