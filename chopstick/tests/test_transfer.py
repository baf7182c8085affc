import io

import pytest

from chopstick.core.errors import ReadFailed, WriteFailed
from chopstick.core.transfer import ChunkedTransfer, TransferBuffer

DATA = bytes(range(50))


class BrokenWriter:
    def write(self, data):
        raise OSError("No space left on device")


def test_buffer_capacity_must_be_positive():
    with pytest.raises(ValueError):
        TransferBuffer(0)


def test_read_up_to_respects_capacity_and_end():
    transfer = ChunkedTransfer(io.BytesIO(DATA), TransferBuffer(4), "src")
    transfer.seek_to(0)
    chunks = []
    while True:
        chunk = transfer.read_up_to(10)
        if chunk is None:
            break
        chunks.append(bytes(chunk))
    assert [len(c) for c in chunks] == [4, 4, 2]
    assert b"".join(chunks) == DATA[:10]


def test_copy_range():
    dest = io.BytesIO()
    transfer = ChunkedTransfer(io.BytesIO(DATA), TransferBuffer(7), "src")
    assert transfer.copy_to(dest, "dest", 10, 45) == 35
    assert dest.getvalue() == DATA[10:45]


def test_buffer_reused_across_copies():
    buffer = TransferBuffer(8)
    first, second = io.BytesIO(), io.BytesIO()
    ChunkedTransfer(io.BytesIO(DATA), buffer, "a").copy_to(first, "x", 0, 20)
    ChunkedTransfer(io.BytesIO(DATA[::-1]), buffer, "b").copy_to(second, "y", 0, 20)
    assert first.getvalue() == DATA[:20]
    assert second.getvalue() == DATA[::-1][:20]
    assert buffer.capacity == 8


def test_premature_end_of_file():
    transfer = ChunkedTransfer(io.BytesIO(DATA[:5]), TransferBuffer(4), "short")
    with pytest.raises(ReadFailed) as exc:
        transfer.copy_to(io.BytesIO(), "dest", 0, 10)
    assert exc.value.path == "short"
    assert exc.value.exit_code == 2


def test_write_failure_tagged_with_destination():
    transfer = ChunkedTransfer(io.BytesIO(DATA), TransferBuffer(4), "src")
    with pytest.raises(WriteFailed) as exc:
        transfer.copy_to(BrokenWriter(), "dest.p1", 0, 10)
    assert exc.value.path == "dest.p1"
    assert isinstance(exc.value.__cause__, OSError)
