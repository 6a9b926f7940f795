from __future__ import annotations

import logging
from typing import Callable, Optional

from dropfour.ai.base import Agent, format_scores
from dropfour.game.state import GameSession
from dropfour.reports.turn_log import TurnLog
from dropfour.types import CPU
from dropfour.ui.prompts import prompt_move
from dropfour.ui.render import render, render_plain

log = logging.getLogger(__name__)


def _show(session: GameSession, plain: bool) -> None:
    if plain:
        render_plain(session.board, session.last_status)
    else:
        render(session.board, session.last_status, highlight=session.winning_line)


def _final_status(session: GameSession) -> str:
    if session.winner is None:
        return "Draw game."
    if session.winner == CPU:
        return "Game over! CPU won."
    return "Game over! You won."


def run_game(
    agent: Agent,
    read: Callable[[str], str] = input,
    plain: bool = False,
    turn_log: Optional[TurnLog] = None,
    session: Optional[GameSession] = None,
) -> GameSession:
    """
    Human (P) against `agent` (C), human first. Returns the finished (or quit) session.
    """
    session = session or GameSession()
    _show(session, plain)

    while not session.finished:
        move = prompt_move(session.board, read=read)
        if move is None:
            session.last_status = "Game quit."
            _show(session, plain)
            return session

        session.apply(move)
        if session.finished:
            break

        col = agent.choose_move(session)
        decision = agent.last_decision
        if decision is not None:
            print(format_scores(decision.scores))
            log.info(
                "turn %d: %s chose %d (score=%.3f depth=%d nodes=%d %dms)",
                session.turn, agent.name, col, decision.best_score,
                decision.depth, decision.nodes, decision.time_ms,
            )
            if turn_log is not None:
                turn_log.write(session.turn, decision)

        session.apply(col)
        session.turn += 1
        session.last_status = f"{agent.name} chose {int(col)}. Your move."
        if not session.finished:
            _show(session, plain)

    session.last_status = _final_status(session)
    _show(session, plain)
    return session
