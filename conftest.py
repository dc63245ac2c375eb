from __future__ import annotations

import hashlib
import json
import struct
from pathlib import Path
from types import SimpleNamespace
from typing import Callable, Iterable, Iterator, List, Optional, Tuple

import pytest

from rollkernel.machine.models import (
    AutomaticReason,
    BreakReason,
    ManualReason,
    RequestReason,
    YieldCommand,
    YieldRequest,
)

Step = Tuple[int, Optional[YieldRequest]]
Program = Callable[["ScriptedMachine", int, bytes], Iterable[Step]]


def progress(value: int) -> Step:
    return (
        BreakReason.YIELDED_AUTOMATICALLY,
        YieldRequest(
            YieldCommand.AUTOMATIC, AutomaticReason.PROGRESS, struct.pack("<I", value)
        ),
    )


def output(payload: bytes) -> Step:
    return (
        BreakReason.YIELDED_AUTOMATICALLY,
        YieldRequest(YieldCommand.AUTOMATIC, AutomaticReason.TX_OUTPUT, payload),
    )


def report(payload: bytes) -> Step:
    return (
        BreakReason.YIELDED_AUTOMATICALLY,
        YieldRequest(YieldCommand.AUTOMATIC, AutomaticReason.TX_REPORT, payload),
    )


def accept(payload: bytes = b"") -> Step:
    return (
        BreakReason.YIELDED_MANUALLY,
        YieldRequest(YieldCommand.MANUAL, ManualReason.RX_ACCEPTED, payload),
    )


def reject() -> Step:
    return (
        BreakReason.YIELDED_MANUALLY,
        YieldRequest(YieldCommand.MANUAL, ManualReason.RX_REJECTED),
    )


def exception(description: str) -> Step:
    return (
        BreakReason.YIELDED_MANUALLY,
        YieldRequest(
            YieldCommand.MANUAL, ManualReason.TX_EXCEPTION, description.encode()
        ),
    )


def halt() -> Step:
    return (BreakReason.HALTED, None)


def ledger_program(machine: "ScriptedMachine", reason: int, payload: bytes):
    """Guest that appends every advance input to its ledger.

    ``reject...`` and ``raise:<msg>`` inputs still touch the ledger before
    refusing, so a missing rollback shows up in the canonical state.
    Inspect reports every ledger entry and then scribbles on the ledger.
    """
    if reason == RequestReason.INSPECT_STATE:
        yield progress(10)
        if payload == b"emit-output":
            yield output(b"not allowed")
        for entry in list(machine.ledger):
            yield report(entry)
        machine.ledger.append(b"inspected")
        yield accept(b"")
        return
    machine.ledger.append(payload)
    yield progress(0)
    if payload.startswith(b"reject"):
        yield reject()
        return
    if payload.startswith(b"raise:"):
        yield exception(payload[len(b"raise:"):].decode())
        return
    if payload == b"halt":
        yield halt()
        return
    yield output(payload)
    yield report(b"len=%d" % len(machine.ledger))
    yield progress(100)
    yield accept(machine.root_hash())


class MachineRegistry:
    def __init__(self) -> None:
        self.created = 0
        self.forks = 0
        self.shutdowns = 0

    @property
    def live(self) -> int:
        return self.created - self.shutdowns


class ScriptedMachine:
    def __init__(
        self,
        program: Program,
        registry: MachineRegistry,
        ledger: Optional[List[bytes]] = None,
    ) -> None:
        self.program = program
        self.registry = registry
        self.ledger: List[bytes] = list(ledger or [])
        self.alive = True
        self.fail_fork = False
        self.responses: List[Tuple[int, bytes]] = []
        self._steps: Iterator[Step] = iter(())
        self._request: Optional[YieldRequest] = None
        registry.created += 1

    def run(self) -> int:
        self._check_alive()
        try:
            break_reason, request = next(self._steps)
        except StopIteration:
            return BreakReason.HALTED
        self._request = request
        return int(break_reason)

    def send_yield_response(self, reason: int, payload: bytes) -> None:
        self._check_alive()
        self.responses.append((reason, payload))
        self._steps = iter(self.program(self, reason, payload))

    def receive_yield_request(self) -> YieldRequest:
        self._check_alive()
        if self._request is None:
            raise RuntimeError("no pending yield request")
        return self._request

    def fork(self) -> "ScriptedMachine":
        self._check_alive()
        if self.fail_fork:
            raise ConnectionError("cannot spawn fork")
        self.registry.forks += 1
        return ScriptedMachine(self.program, self.registry, self.ledger)

    def shutdown(self) -> None:
        self._check_alive()
        self.alive = False
        self.registry.shutdowns += 1

    def store(self, path: str) -> None:
        self._check_alive()
        directory = Path(path)
        directory.mkdir(parents=True, exist_ok=True)
        (directory / "ledger.json").write_text(
            json.dumps([entry.hex() for entry in self.ledger]), encoding="utf-8"
        )

    def root_hash(self) -> bytes:
        digest = hashlib.sha256()
        for entry in self.ledger:
            digest.update(len(entry).to_bytes(4, "little"))
            digest.update(entry)
        return digest.digest()

    def _check_alive(self) -> None:
        if not self.alive:
            raise RuntimeError("machine is shut down")


class ScriptedLoader:
    def __init__(self, registry: MachineRegistry, program: Program) -> None:
        self.registry = registry
        self.program = program
        self.calls: List[tuple] = []

    def load(self, store_dir, address, timeout, runtime_config=None):
        self.calls.append((store_dir, address, timeout, runtime_config))
        raw = (Path(store_dir) / "ledger.json").read_text(encoding="utf-8")
        ledger = [bytes.fromhex(entry) for entry in json.loads(raw)]
        return ScriptedMachine(self.program, self.registry, ledger)


def scripted(*steps: Step) -> Program:
    def _program(machine, reason, payload):
        return iter(steps)

    return _program


@pytest.fixture
def registry() -> MachineRegistry:
    return MachineRegistry()


@pytest.fixture
def make_machine(registry):
    def _make(program: Program = ledger_program, ledger=None) -> ScriptedMachine:
        return ScriptedMachine(program, registry, ledger)

    return _make


@pytest.fixture
def machine(make_machine) -> ScriptedMachine:
    return make_machine()


@pytest.fixture
def loader(registry) -> ScriptedLoader:
    return ScriptedLoader(registry, ledger_program)


@pytest.fixture
def steps() -> SimpleNamespace:
    return SimpleNamespace(
        progress=progress,
        output=output,
        report=report,
        accept=accept,
        reject=reject,
        exception=exception,
        halt=halt,
        scripted=scripted,
    )
