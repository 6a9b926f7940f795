import pytest

from dropfour.config import SearchSettings
from dropfour.core.board import Board
from dropfour.parallel.group import WorkerGroup
from dropfour.parallel.master import Coordinator


def test_rejects_bad_arguments() -> None:
    with pytest.raises(ValueError):
        WorkerGroup(-1, 0)
    with pytest.raises(ValueError):
        WorkerGroup(1, 0, backend="mpi")


def test_zero_workers_is_valid() -> None:
    with WorkerGroup(0, 0, backend="thread") as group:
        assert list(group.worker_ids) == []


def test_thread_workers_exit_on_game_over() -> None:
    group = WorkerGroup(2, 0, backend="thread").start()
    assert group.is_alive(1) and group.is_alive(2)
    group.shutdown()
    assert not group.is_alive(1)
    assert not group.is_alive(2)


def test_process_backend_runs_a_turn() -> None:
    settings = SearchSettings(depth=2, poll_interval_sec=0.05, task_timeout_sec=60.0)
    with WorkerGroup(2, settings.task_depth, backend="process") as group:
        result = Coordinator(group, settings).run_turn(Board(), 0)
    assert len(result.scores) == 49
    assert result.local_tasks == 0
