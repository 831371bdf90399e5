import subprocess
import threading
from typing import Dict, List, Optional

from ..core.exceptions import ExecutionNotFound
from .models import ExecutionRecord, ExecutionStatus


class ExecutionRegistry:
    """
    Lock-guarded maps of execution id to record and to live process.

    All mutation of a record happens under ``lock`` so reader-thread updates
    cannot race a concurrent cancel or status query. ``changed`` is notified
    whenever a record reaches a terminal state.
    """

    def __init__(self):
        self.lock = threading.RLock()
        self.changed = threading.Condition(self.lock)
        self._records: Dict[str, ExecutionRecord] = {}
        self._processes: Dict[str, subprocess.Popen] = {}

    def add(self, record: ExecutionRecord, process: Optional[subprocess.Popen] = None) -> None:
        with self.lock:
            self._records[record.id] = record
            if process is not None:
                self._processes[record.id] = process

    def record(self, execution_id: str) -> ExecutionRecord:
        """Live record; caller must hold ``lock`` while mutating it"""
        with self.lock:
            try:
                return self._records[execution_id]
            except KeyError:
                raise ExecutionNotFound(f"Execution {execution_id} not found") from None

    def snapshot(self, execution_id: str) -> ExecutionRecord:
        with self.lock:
            return self.record(execution_id).snapshot()

    def process(self, execution_id: str) -> Optional[subprocess.Popen]:
        with self.lock:
            return self._processes.get(execution_id)

    def release_process(self, execution_id: str) -> Optional[subprocess.Popen]:
        with self.lock:
            return self._processes.pop(execution_id, None)

    def running_ids(self) -> List[str]:
        with self.lock:
            return [
                execution_id for execution_id, record in self._records.items()
                if record.status is ExecutionStatus.RUNNING
            ]

    def remove(self, execution_id: str) -> ExecutionRecord:
        with self.lock:
            record = self.record(execution_id)
            del self._records[execution_id]
            self._processes.pop(execution_id, None)
            return record

    def notify(self) -> None:
        with self.changed:
            self.changed.notify_all()
