import queue

import pytest

from dropfour.errors import ProtocolError
from dropfour.parallel.protocol import (
    Mailbox,
    MessageKind,
    board_sync,
    format_result,
    game_over,
    parse_result,
    parse_task_key,
    task_key,
    task_request,
    task_result,
    work_done,
)


def test_task_key_codec() -> None:
    assert task_key(3, 6) == "3-6"
    assert parse_task_key("3-6") == (3, 6)


def test_result_codec() -> None:
    assert format_result("0-4", -1.0) == "0-4=-1.0"
    assert parse_result("0-4=-1.0") == ("0-4", -1.0)
    assert parse_result(format_result("2-2", 1 / 3)) == ("2-2", 1 / 3)


def test_task_result_message_carries_encoded_payload() -> None:
    msg = task_result(2, 5, "1-0", 0.25)
    assert msg.kind is MessageKind.TASK_RESULT
    assert (msg.sender, msg.turn, msg.payload) == (2, 5, "1-0=0.25")


@pytest.mark.parametrize("payload", ["", "1-2", "12=0.5", "a-b=0.5", "1-2=high"])
def test_malformed_results_rejected(payload: str) -> None:
    with pytest.raises(ProtocolError):
        parse_result(payload)


def test_mailbox_is_fifo() -> None:
    box = Mailbox(queue.Queue())
    box.put(board_sync(1, "="))
    box.put(work_done(1))
    assert box.receive().kind is MessageKind.BOARD_SYNC
    assert box.receive().kind is MessageKind.WORK_DONE


def test_mailbox_delivers_game_over_first() -> None:
    box = Mailbox(queue.Queue())
    box.put(board_sync(1, "="))
    box.put(work_done(1))
    box.put(game_over())
    assert box.receive().kind is MessageKind.GAME_OVER
    assert box.receive(timeout=0.01) is None


def test_mailbox_timeout_returns_none() -> None:
    box = Mailbox(queue.Queue())
    assert box.receive(timeout=0.01) is None
    box.put(task_request(1, 0))
    assert box.receive(timeout=0.01).sender == 1
