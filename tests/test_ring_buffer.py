import numpy as np
import pytest

from fallguard.buffers.ring_buffer import RingBuffer


def test_never_grows_beyond_capacity():
    buffer = RingBuffer(30, (33, 4))
    for i in range(1000):
        buffer.append(np.full((33, 4), i), float(i))
        assert len(buffer) <= 30

    assert len(buffer) == 30
    assert buffer.is_full()
    assert buffer.total_appended == 1000


def test_evicts_oldest_first():
    buffer = RingBuffer(3, (2,))
    for i in range(5):
        buffer.append(np.array([i, i]), float(i))

    timestamps = [ts for _, ts in buffer.items()]
    assert timestamps == [2.0, 3.0, 4.0]


def test_latest_offsets():
    buffer = RingBuffer(4, ())
    for i in range(6):
        buffer.append(np.float64(i * 10), float(i))

    newest, newest_ts = buffer.latest(0)
    previous, previous_ts = buffer.latest(1)
    assert float(newest) == 50.0 and newest_ts == 5.0
    assert float(previous) == 40.0 and previous_ts == 4.0

    with pytest.raises(IndexError):
        buffer.latest(4)


def test_latest_returns_copy():
    buffer = RingBuffer(2, (2,))
    buffer.append(np.array([1.0, 2.0]), 0.0)
    item, _ = buffer.latest()
    item[0] = 99.0
    assert buffer.latest()[0][0] == 1.0


def test_clear_and_info():
    buffer = RingBuffer(5, (1,))
    assert buffer.get_buffer_info()["num_items"] == 0

    buffer.append(np.array([1.0]), 1.0)
    buffer.append(np.array([2.0]), 3.5)
    info = buffer.get_buffer_info()
    assert info["num_items"] == 2
    assert info["duration_seconds"] == pytest.approx(2.5)

    buffer.clear()
    assert len(buffer) == 0
    assert buffer.items() == []


def test_rejects_bad_arguments():
    with pytest.raises(ValueError):
        RingBuffer(0)

    buffer = RingBuffer(2, (3,))
    with pytest.raises(ValueError):
        buffer.append(np.zeros(4), 0.0)
