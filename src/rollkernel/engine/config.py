from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum

from dotenv import load_dotenv


class IsolationMode(str, Enum):
    ISOLATED = "isolated"
    # no fork; rollback cannot undo mutations of the canonical machine
    DIRECT = "direct"


class DeliveryMode(str, Enum):
    STREAM = "stream"
    COLLECT = "collect"


@dataclass(frozen=True)
class EngineConfig:
    isolation: IsolationMode = IsolationMode.ISOLATED
    delivery: DeliveryMode = DeliveryMode.STREAM


def load_engine_config() -> EngineConfig:
    load_dotenv()
    isolation = _parse(
        IsolationMode, "ROLLKERNEL_ISOLATION", IsolationMode.ISOLATED
    )
    delivery = _parse(DeliveryMode, "ROLLKERNEL_DELIVERY", DeliveryMode.STREAM)
    return EngineConfig(isolation=isolation, delivery=delivery)


def _parse(enum_cls, env_name: str, default):
    raw = os.environ.get(env_name, "").strip().lower()
    if not raw:
        return default
    try:
        return enum_cls(raw)
    except ValueError as exc:
        choices = ", ".join(member.value for member in enum_cls)
        raise ValueError(f"{env_name} must be one of: {choices}") from exc
