from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Optional

from dropfour.ai.evaluator import SearchStats, evaluate
from dropfour.config import LOG_FORMAT
from dropfour.core.board import Board, placed
from dropfour.errors import ProtocolError
from dropfour.parallel.protocol import (
    Mailbox,
    Message,
    MessageKind,
    parse_task_key,
    task_request,
    task_result,
)
from dropfour.types import CPU, OPPONENT, UNKNOWN, WIN, Score

log = logging.getLogger(__name__)


def score_task(
    board: Board, cpu_move: int, opp_move: int, depth: int, stats: Optional[SearchStats] = None
) -> Score:
    """
    Score the line "CPU plays cpu_move, opponent answers opp_move".

    Either move being illegal on this board makes the task trivially 0. A CPU move
    that wins on the spot is +1 whatever the reply.
    """
    if not board.is_legal(cpu_move):
        return UNKNOWN

    with placed(board, cpu_move, CPU):
        won, _ = board.detect_win(cpu_move)
        if won:
            return WIN
        if not board.is_legal(opp_move):
            return UNKNOWN
        with placed(board, opp_move, OPPONENT):
            return evaluate(board, OPPONENT, opp_move, depth, stats)


class WorkerState(str, Enum):
    AWAITING_BOARD = "awaiting_board"
    REQUESTING = "requesting"
    AWAITING_ASSIGNMENT = "awaiting_assignment"
    EVALUATING = "evaluating"
    TERMINATED = "terminated"


class Worker:
    """
    Evaluator side of the protocol. One board copy per worker, replaced on every BOARD_SYNC.

        AWAITING_BOARD --BOARD_SYNC--> REQUESTING --send TASK_REQUEST--> AWAITING_ASSIGNMENT
        AWAITING_ASSIGNMENT --TASK_ASSIGNMENT--> EVALUATING --send TASK_RESULT--> REQUESTING
        AWAITING_ASSIGNMENT --WORK_DONE--> AWAITING_BOARD
        any awaiting state --GAME_OVER--> TERMINATED
    """

    def __init__(self, worker_id: int, inbox: Mailbox, outbox: Mailbox, depth: int) -> None:
        self.worker_id = worker_id
        self.inbox = inbox
        self.outbox = outbox
        self.depth = depth

        self.state = WorkerState.AWAITING_BOARD
        self.board: Optional[Board] = None
        self.turn = -1
        self.task: Optional[str] = None
        self.tasks_done = 0

    def run(self) -> int:
        while self.state is not WorkerState.TERMINATED:
            self.step()
        log.debug("worker %d terminated after %d tasks", self.worker_id, self.tasks_done)
        return self.tasks_done

    def step(self) -> None:
        if self.state is WorkerState.AWAITING_BOARD:
            self._await_board()
        elif self.state is WorkerState.REQUESTING:
            self.outbox.put(task_request(self.worker_id, self.turn))
            self.state = WorkerState.AWAITING_ASSIGNMENT
        elif self.state is WorkerState.AWAITING_ASSIGNMENT:
            self._await_assignment()
        elif self.state is WorkerState.EVALUATING:
            self._evaluate()

    def _receive(self) -> Message:
        msg = self.inbox.receive()
        if msg is None:
            raise ProtocolError(f"worker {self.worker_id}: blocking receive returned nothing")
        if msg.kind is MessageKind.GAME_OVER:
            self.state = WorkerState.TERMINATED
        return msg

    def _await_board(self) -> None:
        msg = self._receive()
        if msg.kind is MessageKind.GAME_OVER:
            return
        if msg.kind is MessageKind.BOARD_SYNC:
            self.board = Board.from_snapshot(msg.payload)
            self.turn = msg.turn
            self.state = WorkerState.REQUESTING
            return
        if msg.kind is MessageKind.WORK_DONE:
            # released from a turn we already left
            log.debug("worker %d: stale work_done for turn %d", self.worker_id, msg.turn)
            return
        raise ProtocolError(f"worker {self.worker_id}: unexpected {msg.kind.value} while awaiting board")

    def _await_assignment(self) -> None:
        msg = self._receive()
        if msg.kind is MessageKind.GAME_OVER:
            return
        if msg.kind is MessageKind.TASK_ASSIGNMENT:
            self.task = msg.payload
            self.state = WorkerState.EVALUATING
            return
        if msg.kind is MessageKind.WORK_DONE:
            self.state = WorkerState.AWAITING_BOARD
            return
        raise ProtocolError(f"worker {self.worker_id}: unexpected {msg.kind.value} while awaiting assignment")

    def _evaluate(self) -> None:
        if self.board is None or self.task is None:
            raise ProtocolError(f"worker {self.worker_id}: evaluating without a board or task")
        cpu_move, opp_move = parse_task_key(self.task)
        stats = SearchStats()
        score = score_task(self.board, cpu_move, opp_move, self.depth, stats)
        log.debug("worker %d: task %s = %.3f (%d nodes)", self.worker_id, self.task, score, stats.nodes)

        self.outbox.put(task_result(self.worker_id, self.turn, self.task, score))
        self.tasks_done += 1
        self.task = None
        self.state = WorkerState.REQUESTING


def run_worker(worker_id: int, inbox: Any, outbox: Any, depth: int, log_level: Optional[int] = None) -> int:
    """Process/thread entry point. `inbox` and `outbox` are raw queues."""
    if log_level is not None:
        logging.basicConfig(level=log_level, format=LOG_FORMAT)
    worker = Worker(worker_id, Mailbox(inbox), Mailbox(outbox), depth)
    return worker.run()
