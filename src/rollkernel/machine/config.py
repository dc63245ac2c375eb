from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Dict, Optional

from dotenv import load_dotenv

DEFAULT_ADDRESS = "127.0.0.1:0"
DEFAULT_TIMEOUT = -1


@dataclass(frozen=True)
class RemoteConfig:
    address: str = DEFAULT_ADDRESS
    # milliseconds, negative means wait forever
    timeout: int = DEFAULT_TIMEOUT


@dataclass(frozen=True)
class RuntimeConfig:
    update_merkle_tree_concurrency: Optional[int] = None
    no_console_putchar: Optional[bool] = None
    skip_root_hash_check: Optional[bool] = None
    skip_root_hash_store: Optional[bool] = None
    skip_version_check: Optional[bool] = None
    soft_yield: Optional[bool] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        if self.update_merkle_tree_concurrency is not None:
            data["concurrency"] = {
                "update_merkle_tree": self.update_merkle_tree_concurrency
            }
        if self.no_console_putchar is not None:
            data["htif"] = {"no_console_putchar": self.no_console_putchar}
        for key in (
            "skip_root_hash_check",
            "skip_root_hash_store",
            "skip_version_check",
            "soft_yield",
        ):
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        return data


def load_remote_config() -> RemoteConfig:
    load_dotenv()
    address = os.environ.get("ROLLKERNEL_REMOTE_ADDRESS", DEFAULT_ADDRESS)
    raw_timeout = os.environ.get("ROLLKERNEL_REMOTE_TIMEOUT", "")
    try:
        timeout = int(raw_timeout) if raw_timeout else DEFAULT_TIMEOUT
    except ValueError as exc:
        raise ValueError("ROLLKERNEL_REMOTE_TIMEOUT must be an integer") from exc
    return RemoteConfig(address=address, timeout=timeout)
