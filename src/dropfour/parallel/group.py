from __future__ import annotations

import logging
import multiprocessing as mp
import queue
import threading
from typing import Any, Dict, List, Optional, Sequence

from dropfour.config import SHUTDOWN_TIMEOUT_SEC
from dropfour.parallel.protocol import Mailbox, Message, game_over
from dropfour.parallel.worker import run_worker

log = logging.getLogger(__name__)

BACKENDS = ("process", "thread")


class WorkerGroup:
    """
    The evaluator side of a game: `workers` workers with ids 1..workers, one inbox
    each, all reporting into one shared coordinator inbox.

    backend="process" runs each worker in its own multiprocessing.Process (no shared
    memory; boards travel as snapshots). backend="thread" runs them as daemon threads
    in this process, which is what tests and debugging use.
    """

    def __init__(
        self,
        workers: int,
        depth: int,
        backend: str = "process",
        log_level: Optional[int] = None,
        shutdown_timeout_sec: float = SHUTDOWN_TIMEOUT_SEC,
    ) -> None:
        if workers < 0:
            raise ValueError("workers must be >= 0")
        if backend not in BACKENDS:
            raise ValueError(f"unsupported backend: {backend}")

        self.backend = backend
        self.depth = depth
        self.log_level = log_level
        self.shutdown_timeout_sec = shutdown_timeout_sec

        self._ctx = mp.get_context() if backend == "process" else None
        self.inbox = Mailbox(self._new_queue())
        self._queues: Dict[int, Any] = {w: self._new_queue() for w in range(1, workers + 1)}
        self._runners: Dict[int, Any] = {}
        self._closed = False

    def _new_queue(self) -> Any:
        if self._ctx is not None:
            return self._ctx.Queue()
        return queue.Queue()

    @property
    def worker_ids(self) -> Sequence[int]:
        return sorted(self._queues)

    def start(self) -> "WorkerGroup":
        for w, q in self._queues.items():
            if self._ctx is not None:
                runner: Any = self._ctx.Process(
                    target=run_worker,
                    args=(w, q, self.inbox.q, self.depth, self.log_level),
                    name=f"evaluator-{w}",
                    daemon=True,
                )
            else:
                runner = threading.Thread(
                    target=run_worker,
                    args=(w, q, self.inbox.q, self.depth),
                    name=f"evaluator-{w}",
                    daemon=True,
                )
            runner.start()
            self._runners[w] = runner
        log.info("started %d %s worker(s) at task depth %d", len(self._runners), self.backend, self.depth)
        return self

    def send(self, worker_id: int, msg: Message) -> None:
        self._queues[worker_id].put(msg)

    def broadcast(self, msg: Message) -> None:
        for w in self.worker_ids:
            self.send(w, msg)

    def is_alive(self, worker_id: int) -> bool:
        runner = self._runners.get(worker_id)
        return runner is not None and runner.is_alive()

    def shutdown(self) -> None:
        if self._closed:
            return
        self._closed = True

        self.broadcast(game_over())
        stragglers: List[int] = []
        for w, runner in self._runners.items():
            runner.join(self.shutdown_timeout_sec)
            if runner.is_alive():
                stragglers.append(w)

        for w in stragglers:
            runner = self._runners[w]
            if hasattr(runner, "terminate"):
                log.warning("worker %d did not exit; terminating", w)
                runner.terminate()
                runner.join(self.shutdown_timeout_sec)
            else:
                log.warning("worker thread %d did not exit", w)

    def __enter__(self) -> "WorkerGroup":
        return self.start()

    def __exit__(self, *exc: object) -> None:
        self.shutdown()
