from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Optional

from rollkernel.utils.logging import get_logger

from ..machine.protocols import MachineHandle
from .config import IsolationMode
from .errors import BusyError, ClosedError, FatalError, TransactionError

logger = get_logger(__name__)


@dataclass
class Transaction:
    working: MachineHandle
    backup: Optional[MachineHandle]
    mode: IsolationMode


class TransactionController:
    """Owns the canonical machine handle and the single open transaction.

    ``begin`` hands out the working handle of a new transaction. In
    isolated mode that is a fresh fork and the canonical handle is kept as
    the backup; ``commit`` promotes the fork and ``rollback`` discards it.
    In direct mode the canonical handle itself is the working handle and
    both ``commit`` and ``rollback`` only close the transaction.

    A handle whose shutdown fails is counted in ``handles_leaked``. A
    failed rollback shutdown still raises; a failed commit shutdown does
    not, since the new canonical handle is already in place.
    """

    def __init__(self, canonical: MachineHandle) -> None:
        self._canonical = canonical
        self._transaction: Optional[Transaction] = None
        self._closed = False
        self._lock = threading.Lock()
        self.forks_created = 0
        self.forks_released = 0
        self.handles_leaked = 0

    @property
    def canonical(self) -> MachineHandle:
        return self._canonical

    @property
    def in_transaction(self) -> bool:
        return self._transaction is not None

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def outstanding_forks(self) -> int:
        return self.forks_created - self.forks_released

    def begin(self, mode: IsolationMode) -> MachineHandle:
        with self._lock:
            self._ensure_idle()
            if mode is IsolationMode.DIRECT:
                self._transaction = Transaction(
                    working=self._canonical, backup=None, mode=mode
                )
                logger.debug("transaction begin (direct)")
                return self._canonical
            try:
                working = self._canonical.fork()
            except Exception as exc:
                logger.error("fork failed", exc_info=True)
                raise FatalError(f"fork failed: {exc}") from exc
            self.forks_created += 1
            self._transaction = Transaction(
                working=working, backup=self._canonical, mode=mode
            )
            logger.debug("transaction begin (isolated)")
            return working

    def commit(self) -> None:
        with self._lock:
            transaction = self._take()
            if transaction.backup is None:
                logger.debug("transaction commit (direct)")
                return
            self._canonical = transaction.working
            # the promoted fork no longer counts as scratch
            self.forks_released += 1
            logger.debug("transaction commit")
            # the commit stands once canonical is switched
            try:
                transaction.backup.shutdown()
            except Exception:
                self.handles_leaked += 1
                logger.error(
                    "failed to release previous canonical machine", exc_info=True
                )

    def rollback(self) -> None:
        with self._lock:
            transaction = self._take()
            if transaction.backup is None:
                logger.warning(
                    "rollback in direct mode: canonical machine keeps its changes"
                )
                return
            logger.debug("transaction rollback")
            try:
                transaction.working.shutdown()
            except Exception:
                self.handles_leaked += 1
                raise
            self.forks_released += 1

    def store(self, path: str) -> None:
        with self._lock:
            self._ensure_idle()
            self._canonical.store(path)
            logger.info("stored canonical machine: %s", path)

    def shutdown(self) -> None:
        with self._lock:
            if self._closed:
                return
            if self._transaction is not None:
                raise BusyError("cannot shut down while a session is open")
            self._closed = True
            self._canonical.shutdown()
            logger.info("engine shut down")

    def _ensure_idle(self) -> None:
        if self._closed:
            raise ClosedError()
        if self._transaction is not None:
            raise BusyError()

    def _take(self) -> Transaction:
        transaction = self._transaction
        if transaction is None:
            raise TransactionError()
        self._transaction = None
        return transaction
