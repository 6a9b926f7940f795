from __future__ import annotations

import logging
import time
from collections import deque
from dataclasses import dataclass, field
from typing import Callable, Deque, Dict, Mapping, Optional, Protocol, Sequence, Tuple

from dropfour.ai.base import Decision, pick_column
from dropfour.ai.evaluator import SearchStats
from dropfour.ai.solo_agent import SoloAgent
from dropfour.config import NO_REPLY_SCORE, SearchSettings
from dropfour.core.board import Board, placed
from dropfour.errors import ProtocolError
from dropfour.game.state import GameSession
from dropfour.parallel.protocol import (
    Mailbox,
    Message,
    MessageKind,
    board_sync,
    parse_result,
    task_assignment,
    work_done,
)
from dropfour.parallel.registry import Task, TaskRegistry
from dropfour.parallel.worker import score_task
from dropfour.types import CPU, LOSS, WIN, Move, Score

log = logging.getLogger(__name__)


class WorkerTransport(Protocol):
    """What the coordinator needs from a worker group."""
    inbox: Mailbox

    @property
    def worker_ids(self) -> Sequence[int]:
        ...

    def send(self, worker_id: int, msg: Message) -> None:
        ...

    def is_alive(self, worker_id: int) -> bool:
        ...


def aggregate(board: Board, scores: Mapping[Tuple[int, int], Score]) -> Dict[int, Score]:
    """
    Per legal CPU column: mean score over the opponent replies that are legal after it.

    Illegal replies do not count towards the mean. Any reply scored -1 forces the
    column to -1 (the opponent is assumed to take a winning reply). A CPU move
    that wins outright is +1; one that leaves no legal reply gets NO_REPLY_SCORE.
    """
    out: Dict[int, Score] = {}
    for cpu_move in board.legal_columns():
        with placed(board, cpu_move, CPU):
            won, _ = board.detect_win(cpu_move)
            if won:
                out[int(cpu_move)] = WIN
                continue

            total = 0.0
            replies = 0
            forced_loss = False
            for opp_move in board.legal_columns():
                replies += 1
                score = scores[(int(cpu_move), int(opp_move))]
                if score == LOSS:
                    forced_loss = True
                    break
                total += score

        if forced_loss:
            out[int(cpu_move)] = LOSS
        elif replies == 0:
            out[int(cpu_move)] = NO_REPLY_SCORE
        else:
            out[int(cpu_move)] = total / replies
    return out


@dataclass
class TurnResult:
    scores: Dict[Tuple[int, int], Score]
    requeued: int = 0
    local_tasks: int = 0
    nodes: int = 0


class Coordinator:
    """
    Master side of the protocol for one CPU turn at a time.

    Blocks on the shared inbox and dispatches on message kind. Workers that ask for
    work when nothing is left to hand out are parked until the turn ends (or until a
    stalled task is requeued to them). WORK_DONE goes to every live worker once all
    width * width results are in.
    """

    def __init__(self, transport: WorkerTransport, settings: SearchSettings,
                 clock: Callable[[], float] = time.monotonic) -> None:
        self.transport = transport
        self.settings = settings
        self.clock = clock

        self._handlers = {
            MessageKind.TASK_REQUEST: self._on_request,
            MessageKind.TASK_RESULT: self._on_result,
        }

        # per-turn state
        self.turn = 0
        self.board = Board()
        self.registry = TaskRegistry(0)
        self.live: set[int] = set()
        self.suspect: set[int] = set()  # workers sitting on an overdue task
        self.idle: Deque[int] = deque()
        self.requeued = 0
        self.local_tasks = 0
        self.local_stats = SearchStats()

    def run_turn(self, board: Board, turn: int) -> TurnResult:
        self.turn = turn
        self.board = board.copy()
        self.registry = TaskRegistry(board.cols)
        self.live = {w for w in self.transport.worker_ids if self.transport.is_alive(w)}
        self.idle = deque()
        self.suspect = set()
        self.requeued = 0
        self.local_tasks = 0
        self.local_stats = SearchStats()

        snapshot = board.to_snapshot()
        for w in self.live:
            self.transport.send(w, board_sync(turn, snapshot))
        log.debug("turn %d: board sent to %d workers", turn, len(self.live))

        while not self.registry.all_complete():
            msg = self.transport.inbox.receive(timeout=self.settings.poll_interval_sec)
            if msg is not None:
                self._dispatch(msg)
            self._recover()

        for w in self.live:
            self.transport.send(w, work_done(turn))

        log.info(
            "turn %d: %d tasks complete (requeued=%d, local=%d)",
            turn, self.registry.completed, self.requeued, self.local_tasks,
        )
        return TurnResult(self.registry.scores(), self.requeued, self.local_tasks, self.local_stats.nodes)

    # ---------- dispatch ----------
    def _dispatch(self, msg: Message) -> None:
        if msg.turn != self.turn:
            log.debug("dropping %s from worker %d for old turn %d", msg.kind.value, msg.sender, msg.turn)
            return
        if msg.sender not in self.live and msg.kind is not MessageKind.TASK_RESULT:
            # a dead worker cannot take work; its result still counts
            log.debug("dropping %s from dead worker %d", msg.kind.value, msg.sender)
            return
        self.suspect.discard(msg.sender)
        handler = self._handlers.get(msg.kind)
        if handler is None:
            raise ProtocolError(f"coordinator: unexpected {msg.kind.value} from worker {msg.sender}")
        handler(msg)

    def _on_request(self, msg: Message) -> None:
        if not self._assign(msg.sender):
            self.idle.append(msg.sender)

    def _on_result(self, msg: Message) -> None:
        key, score = parse_result(msg.payload)
        if not self.registry.record(key, score):
            log.debug("duplicate result for %s from worker %d ignored", key, msg.sender)

    def _assign(self, worker: int) -> bool:
        task = self.registry.next_task(worker, self.clock())
        if task is None:
            return False
        self.transport.send(worker, task_assignment(self.turn, task.key))
        return True

    # ---------- recovery ----------
    def _recover(self) -> None:
        now = self.clock()

        for w in sorted(self.live):
            if not self.transport.is_alive(w):
                self.live.discard(w)
                if w in self.idle:
                    self.idle.remove(w)
                lost = self.registry.assigned_to(w)
                log.warning("worker %d is gone; requeueing %d task(s)", w, len(lost))
                for task in lost:
                    self._requeue(task)

        for task in self.registry.overdue(now, self.settings.task_timeout_sec):
            log.warning(
                "task %s on worker %s exceeded %.1fs; requeueing",
                task.key, task.worker, self.settings.task_timeout_sec,
            )
            if task.worker is not None:
                self.suspect.add(task.worker)
            self._requeue(task)

        while self.idle and self.registry.has_requeued():
            self._assign(self.idle.popleft())

        if not (self.live - self.suspect):
            self._finish_locally()

    def _requeue(self, task: Task) -> None:
        self.requeued += 1
        if task.attempts >= self.settings.max_task_attempts:
            log.warning("task %s failed %d times; evaluating it on the coordinator", task.key, task.attempts)
            self._evaluate_locally(task)
        else:
            self.registry.requeue(task)

    def _finish_locally(self) -> None:
        if not self.registry.all_complete():
            log.warning("no live workers left; coordinator finishes the turn itself")
        while not self.registry.all_complete():
            task = self.registry.next_task(0, self.clock())
            if task is None:
                # issued to a worker that is gone and never requeued
                for t in self.registry.outstanding():
                    self._evaluate_locally(t)
                break
            self._evaluate_locally(task)

    def _evaluate_locally(self, task: Task) -> None:
        score = score_task(self.board, task.cpu_move, task.opp_move, self.settings.task_depth, self.local_stats)
        self.registry.record(task.key, score)
        self.local_tasks += 1


@dataclass
class ParallelAgent:
    """CPU player that spreads the two-ply cross product over a worker group."""
    transport: Optional[WorkerTransport]
    settings: SearchSettings = field(default_factory=SearchSettings)
    name: str = "CPU"
    last_decision: Optional[Decision] = None
    _coordinator: Optional[Coordinator] = field(default=None, init=False, repr=False)
    _solo: Optional[SoloAgent] = field(default=None, init=False, repr=False)

    def __post_init__(self) -> None:
        if self.transport is not None and self.transport.worker_ids:
            self._coordinator = Coordinator(self.transport, self.settings)
        else:
            self._solo = SoloAgent(name=self.name, depth=self.settings.depth)

    def choose_move(self, session: GameSession) -> Move:
        if self._solo is not None:
            col = self._solo.choose_move(session)
            self.last_decision = self._solo.last_decision
            return col

        if self._coordinator is None:
            raise RuntimeError("ParallelAgent has neither workers nor a solo fallback.")
        board = session.board
        if not board.legal_columns():
            raise ValueError("No valid moves.")

        start = time.perf_counter()
        result = self._coordinator.run_turn(board, session.turn)
        scores = aggregate(board, result.scores)
        col = pick_column(scores)

        self.last_decision = Decision(
            column=col,
            scores=scores,
            depth=self.settings.depth,
            mode="parallel",
            workers=len(self.transport.worker_ids) if self.transport is not None else 0,
            nodes=result.nodes,
            time_ms=max(1, int((time.perf_counter() - start) * 1000)),
            requeued=result.requeued,
        )
        return col
