import pytest

from dropfour.errors import ProtocolError
from dropfour.parallel.registry import TaskRegistry


def test_hands_out_full_cross_product_in_order() -> None:
    reg = TaskRegistry(7)
    keys = []
    while True:
        task = reg.next_task(1, 0.0)
        if task is None:
            break
        keys.append(task.key)

    assert reg.total == 49
    assert len(keys) == 49
    assert len(reg.tasks) == 49
    assert keys[:3] == ["0-0", "0-1", "0-2"]
    assert keys[7] == "1-0"
    assert keys[-1] == "6-6"
    assert reg.all_created()
    assert not reg.all_complete()


def test_record_counts_once() -> None:
    reg = TaskRegistry(2)
    t = reg.next_task(1, 0.0)
    assert reg.record(t.key, 0.5)
    assert not reg.record(t.key, -1.0)
    assert reg.completed == 1
    assert reg.tasks["0-0"].score == 0.5


def test_record_unknown_task_raises() -> None:
    with pytest.raises(ProtocolError):
        TaskRegistry(2).record("1-1", 0.0)


def test_requeued_task_goes_out_first() -> None:
    reg = TaskRegistry(3)
    first = reg.next_task(1, 0.0)
    reg.next_task(2, 0.0)
    reg.requeue(first)

    again = reg.next_task(3, 1.0)
    assert again is first
    assert (again.worker, again.attempts, again.issued_at) == (3, 2, 1.0)
    assert reg.next_task(3, 1.0).key == "0-2"


def test_completed_task_is_not_reissued() -> None:
    reg = TaskRegistry(2)
    t = reg.next_task(1, 0.0)
    reg.requeue(t)
    reg.record(t.key, 0.0)   # late answer from the first worker
    assert not reg.has_requeued()
    assert reg.next_task(2, 0.0).key == "0-1"


def test_overdue_and_assigned() -> None:
    reg = TaskRegistry(2)
    a = reg.next_task(1, 0.0)
    b = reg.next_task(2, 8.0)
    assert reg.overdue(10.0, 5.0) == [a]
    assert reg.assigned_to(2) == [b]

    reg.requeue(a)
    assert reg.overdue(10.0, 5.0) == []


def test_scores_keyed_by_move_pair() -> None:
    reg = TaskRegistry(2)
    for _ in range(4):
        t = reg.next_task(1, 0.0)
        reg.record(t.key, float(t.cpu_move - t.opp_move))
    assert reg.all_complete()
    assert reg.scores() == {(0, 0): 0.0, (0, 1): -1.0, (1, 0): 1.0, (1, 1): 0.0}
