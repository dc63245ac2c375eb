from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar, List, Union


@dataclass(frozen=True)
class Output:
    payload: bytes
    kind: ClassVar[str] = "output"


@dataclass(frozen=True)
class Report:
    payload: bytes
    kind: ClassVar[str] = "report"


@dataclass(frozen=True)
class Progress:
    value: int
    kind: ClassVar[str] = "progress"


@dataclass(frozen=True)
class Accepted:
    payload: bytes


@dataclass(frozen=True)
class Rejected:
    pass


@dataclass(frozen=True)
class GuestException:
    description: str


@dataclass(frozen=True)
class ProtocolViolation:
    description: str


StreamEvent = Union[Output, Report, Progress]
ProtocolEvent = Union[
    Output, Report, Progress, Accepted, Rejected, GuestException, ProtocolViolation
]


@dataclass
class AdvanceResult:
    outputs: List[bytes] = field(default_factory=list)
    reports: List[bytes] = field(default_factory=list)
    outputs_merkle_root: bytes = b""


@dataclass
class InspectResult:
    reports: List[bytes] = field(default_factory=list)
