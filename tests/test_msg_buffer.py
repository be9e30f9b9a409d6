import os

import pytest

from netutils.msg_buffer import MsgBuffer


def test_readable():
    buffer = MsgBuffer()
    assert buffer.readable_bytes() == 0
    buffer.append(b"a" * 128)
    assert buffer.readable_bytes() == 128
    buffer.retrieve(100)
    assert buffer.readable_bytes() == 28
    assert buffer.peek_int8() == ord("a")
    buffer.retrieve_all()
    assert buffer.readable_bytes() == 0


def test_writable():
    buffer = MsgBuffer(100)
    assert buffer.writable_bytes() == 100
    buffer.append(b"abcde")
    assert buffer.writable_bytes() == 95
    buffer.append(b"x" * 100)
    assert buffer.writable_bytes() == 111
    buffer.retrieve(100)
    assert buffer.writable_bytes() == 111
    buffer.append(b"c" * 112)
    assert buffer.writable_bytes() == 99
    buffer.retrieve_all()
    assert buffer.writable_bytes() == 216


def test_add_in_front():
    buffer = MsgBuffer(100)
    assert buffer.writable_bytes() == 100
    buffer.add_in_front_int8(ord("a"))
    assert buffer.writable_bytes() == 100
    buffer.add_in_front_int64(123)
    assert buffer.writable_bytes() == 92
    buffer.add_in_front_int64(100)
    assert buffer.writable_bytes() == 84
    buffer.add_in_front_int8(1)
    assert buffer.writable_bytes() == 84
    assert buffer.read_int8() == 1
    assert buffer.read_int64() == 100
    assert buffer.read_int64() == 123
    assert buffer.read_int8() == ord("a")
    assert len(buffer) == 0


def test_swap_moves_contents_and_capacity():
    small = MsgBuffer(100)
    writable = small.writable_bytes()
    big = MsgBuffer(1000)
    big.swap(small)
    assert big.writable_bytes() == writable
    assert small.writable_bytes() == 1000


def test_swap_exchanges_data():
    first = MsgBuffer(100)
    first.append(b"abc")
    second = MsgBuffer(1000)
    second.swap(first)
    assert second.peek() == b"abc"
    assert second.writable_bytes() == 97
    assert first.peek() == b""


def test_integer_round_trip():
    buffer = MsgBuffer()
    buffer.append_int8(0xAB)
    buffer.append_int16(0x1234)
    buffer.append_int32(0xDEADBEEF)
    buffer.append_int64(0x0102030405060708)
    assert buffer.read_int8() == 0xAB
    assert buffer.read_int16() == 0x1234
    assert buffer.read_int32() == 0xDEADBEEF
    assert buffer.read_int64() == 0x0102030405060708
    assert buffer.readable_bytes() == 0


def test_network_byte_order():
    buffer = MsgBuffer()
    buffer.append_int16(0x1234)
    buffer.append_int32(0x01020304)
    assert buffer.peek() == b"\x12\x34\x01\x02\x03\x04"
    buffer.add_in_front_int16(0xABCD)
    assert buffer.peek()[:2] == b"\xab\xcd"


def test_peek_does_not_consume():
    buffer = MsgBuffer()
    buffer.append_int32(7)
    assert buffer.peek_int32() == 7
    assert buffer.peek_int16() == 0
    assert buffer.readable_bytes() == 4


def test_peek_needs_enough_data():
    buffer = MsgBuffer()
    buffer.append(b"ab")
    with pytest.raises(ValueError):
        buffer.peek_int32()
    with pytest.raises(ValueError):
        MsgBuffer().peek_int8()


def test_append_int_out_of_range():
    buffer = MsgBuffer()
    with pytest.raises(OverflowError):
        buffer.append_int16(1 << 16)
    with pytest.raises(OverflowError):
        buffer.append_int8(-1)


def test_read_clamps_length():
    buffer = MsgBuffer()
    buffer.append(b"hello")
    assert buffer.read(2) == b"he"
    assert buffer.read(100) == b"llo"
    assert buffer.read(5) == b""


def test_append_other_buffer():
    source = MsgBuffer()
    source.append(b"payload")
    target = MsgBuffer(4)
    target.append(b"x")
    target.append(source)
    assert target.peek() == b"xpayload"
    assert source.peek() == b"payload"


def test_add_in_front_grows():
    buffer = MsgBuffer(4)
    buffer.append(b"tail")
    header = b"h" * 30
    buffer.add_in_front(header)
    assert buffer.peek() == header + b"tail"


def test_add_in_front_shifts_when_room_after():
    buffer = MsgBuffer(100)
    buffer.append(b"body")
    buffer.add_in_front(b"0123456789")
    assert buffer.peek() == b"0123456789body"


def test_find_crlf_and_retrieve_until():
    buffer = MsgBuffer()
    buffer.append(b"GET / HTTP/1.1\r\nHost: example.com\r\n")
    end = buffer.find_crlf()
    assert buffer.peek()[:end] == b"GET / HTTP/1.1"
    buffer.retrieve_until(end + 2)
    assert buffer.peek() == b"Host: example.com\r\n"
    buffer.retrieve_until(buffer.readable_bytes())
    assert buffer.find_crlf() is None


def test_retrieve_until_out_of_range():
    buffer = MsgBuffer()
    buffer.append(b"abc")
    with pytest.raises(ValueError):
        buffer.retrieve_until(4)


def test_begin_write_and_has_written():
    buffer = MsgBuffer(16)
    with buffer.begin_write() as view:
        view[:3] = b"xyz"
    buffer.has_written(3)
    assert buffer.peek() == b"xyz"
    assert buffer.writable_bytes() == 13
    with pytest.raises(ValueError):
        buffer.has_written(14)


def test_unwrite():
    buffer = MsgBuffer()
    buffer.append(b"abcdef")
    buffer.unwrite(2)
    assert buffer.peek() == b"abcd"
    with pytest.raises(ValueError):
        buffer.unwrite(5)


def test_indexing():
    buffer = MsgBuffer()
    buffer.append(b"abc")
    buffer.retrieve(1)
    assert buffer[0] == ord("b")
    assert buffer[1] == ord("c")
    with pytest.raises(IndexError):
        buffer[2]


def test_read_fd():
    read_end, write_end = os.pipe()
    try:
        os.write(write_end, b"hello\r\nworld")
        buffer = MsgBuffer(100)
        count = buffer.read_fd(read_end)
        assert count == 12
        assert buffer.peek() == b"hello\r\nworld"
        assert buffer.find_crlf() == 5
    finally:
        os.close(read_end)
        os.close(write_end)


def test_read_fd_spills_past_writable_space():
    read_end, write_end = os.pipe()
    payload = bytes(range(256)) * 4
    try:
        os.write(write_end, payload)
        buffer = MsgBuffer(10)
        count = buffer.read_fd(read_end)
        assert count == len(payload)
        assert buffer.peek() == payload
    finally:
        os.close(read_end)
        os.close(write_end)