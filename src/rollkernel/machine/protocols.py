from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional, Protocol, Union, runtime_checkable

from .models import YieldRequest


@runtime_checkable
class MachineHandle(Protocol):
    def run(self) -> int: ...

    def send_yield_response(self, reason: int, payload: bytes) -> None: ...

    def receive_yield_request(self) -> YieldRequest: ...

    def fork(self) -> "MachineHandle": ...

    def shutdown(self) -> None: ...

    def store(self, path: str) -> None: ...


class MachineLoader(Protocol):
    def load(
        self,
        store_dir: Union[str, Path],
        address: str,
        timeout: int,
        runtime_config: Optional[Dict[str, Any]] = None,
    ) -> MachineHandle: ...
