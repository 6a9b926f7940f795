from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Deque, Dict, List, Optional, Tuple

from dropfour.errors import ProtocolError
from dropfour.parallel.protocol import task_key
from dropfour.types import Score


@dataclass(slots=True)
class Task:
    cpu_move: int
    opp_move: int
    score: Score = 0.0
    completed: bool = False

    worker: Optional[int] = None
    issued_at: float = 0.0
    attempts: int = 0

    @property
    def key(self) -> str:
        return task_key(self.cpu_move, self.opp_move)


class TaskRegistry:
    """
    Tasks of one CPU turn: the width x width cross product of (cpu move, opponent reply).

    Tasks are created lazily, in ascending (cpu, opp) order, the first time they are
    handed out. Requeued tasks are handed out again before any new one.
    """

    def __init__(self, width: int) -> None:
        self.width = width
        self.tasks: Dict[str, Task] = {}
        self.completed = 0
        self._next = 0  # index into the cross product of the next task to create
        self._requeued: Deque[str] = deque()

    @property
    def total(self) -> int:
        return self.width * self.width

    def all_created(self) -> bool:
        return self._next >= self.total

    def all_complete(self) -> bool:
        return self.completed >= self.total

    def next_task(self, worker: int, now: float) -> Optional[Task]:
        task: Optional[Task] = None
        while self._requeued:
            candidate = self.tasks[self._requeued.popleft()]
            if not candidate.completed:
                task = candidate
                break

        if task is None:
            if self.all_created():
                return None
            cpu, opp = divmod(self._next, self.width)
            self._next += 1
            task = Task(cpu, opp)
            self.tasks[task.key] = task

        task.worker = worker
        task.issued_at = now
        task.attempts += 1
        return task

    def record(self, key: str, score: Score) -> bool:
        """Store a result. Returns False for a duplicate of an already completed task."""
        task = self.tasks.get(key)
        if task is None:
            raise ProtocolError(f"Result for a task that was never issued: {key}")
        if task.completed:
            return False
        task.score = score
        task.completed = True
        task.worker = None
        self.completed += 1
        return True

    def outstanding(self) -> List[Task]:
        """Issued, not completed, and not already waiting in the requeue."""
        waiting = set(self._requeued)
        return [t for t in self.tasks.values() if not t.completed and t.key not in waiting]

    def overdue(self, now: float, timeout: float) -> List[Task]:
        return [t for t in self.outstanding() if t.worker is not None and now - t.issued_at > timeout]

    def assigned_to(self, worker: int) -> List[Task]:
        return [t for t in self.outstanding() if t.worker == worker]

    def requeue(self, task: Task) -> None:
        task.worker = None
        self._requeued.append(task.key)

    def has_requeued(self) -> bool:
        return any(not self.tasks[k].completed for k in self._requeued)

    def scores(self) -> Dict[Tuple[int, int], Score]:
        return {(t.cpu_move, t.opp_move): t.score for t in self.tasks.values() if t.completed}
