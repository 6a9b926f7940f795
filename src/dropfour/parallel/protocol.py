"""
Messages exchanged between the coordinator (id 0) and its evaluator workers.

Every message carries the turn it belongs to, so anything left in a mailbox
from an earlier turn can be recognised and dropped.
"""

from __future__ import annotations

import queue
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Any, Deque, Optional, Tuple

from dropfour.errors import ProtocolError

COORDINATOR_ID = 0


class MessageKind(str, Enum):
    BOARD_SYNC = "board_sync"            # master -> all: board snapshot
    TASK_REQUEST = "task_request"        # worker -> master: ready for work
    TASK_ASSIGNMENT = "task_assignment"  # master -> worker: "<cpu>-<opp>"
    WORK_DONE = "work_done"              # master -> worker: nothing left this turn
    TASK_RESULT = "task_result"          # worker -> master: "<cpu>-<opp>=<score>"
    GAME_OVER = "game_over"              # master -> all: exit


@dataclass(frozen=True, slots=True)
class Message:
    kind: MessageKind
    sender: int = COORDINATOR_ID
    turn: int = 0
    payload: str = ""


def board_sync(turn: int, snapshot: str) -> Message:
    return Message(MessageKind.BOARD_SYNC, COORDINATOR_ID, turn, snapshot)


def task_request(worker_id: int, turn: int) -> Message:
    return Message(MessageKind.TASK_REQUEST, worker_id, turn)


def task_assignment(turn: int, key: str) -> Message:
    return Message(MessageKind.TASK_ASSIGNMENT, COORDINATOR_ID, turn, key)


def work_done(turn: int) -> Message:
    return Message(MessageKind.WORK_DONE, COORDINATOR_ID, turn)


def task_result(worker_id: int, turn: int, key: str, score: float) -> Message:
    return Message(MessageKind.TASK_RESULT, worker_id, turn, format_result(key, score))


def game_over() -> Message:
    return Message(MessageKind.GAME_OVER)


# ---------- payload codec ----------
def task_key(cpu_move: int, opp_move: int) -> str:
    return f"{cpu_move}-{opp_move}"


def parse_task_key(key: str) -> Tuple[int, int]:
    cpu, sep, opp = key.partition("-")
    if not sep:
        raise ProtocolError(f"Malformed task key: {key!r}")
    try:
        return int(cpu), int(opp)
    except ValueError:
        raise ProtocolError(f"Malformed task key: {key!r}") from None


def format_result(key: str, score: float) -> str:
    return f"{key}={score!r}"


def parse_result(payload: str) -> Tuple[str, float]:
    key, sep, raw = payload.partition("=")
    if not sep:
        raise ProtocolError(f"Malformed task result: {payload!r}")
    parse_task_key(key)
    try:
        return key, float(raw)
    except ValueError:
        raise ProtocolError(f"Malformed score in task result: {payload!r}") from None


# ---------- mailbox ----------
class Mailbox:
    """
    Receiving end for one role, over any queue with put/get(timeout)/get_nowait
    (multiprocessing.Queue for processes, queue.Queue for threads).

    A GAME_OVER that is already waiting is delivered before anything queued ahead of it.
    """

    def __init__(self, q: Any) -> None:
        self.q = q
        self._pending: Deque[Message] = deque()

    def put(self, msg: Message) -> None:
        self.q.put(msg)

    def _drain(self) -> None:
        while True:
            try:
                self._pending.append(self.q.get_nowait())
            except queue.Empty:
                return

    def receive(self, timeout: Optional[float] = None) -> Optional[Message]:
        """Next message, or None if nothing arrived within `timeout` seconds."""
        if not self._pending:
            try:
                self._pending.append(self.q.get(timeout=timeout))
            except queue.Empty:
                return None
        self._drain()

        for msg in self._pending:
            if msg.kind is MessageKind.GAME_OVER:
                self._pending.clear()
                return msg
        return self._pending.popleft()
