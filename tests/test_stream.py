import os
import queue
import threading

from rssterm.stream import END_OF_STREAM, DebouncedInputStream, _raw_key_reader, decode_key


def _stream(clock, *keys):
    source = queue.Queue()
    for key in keys:
        source.put(key)
    return source, DebouncedInputStream(source, delay=0.015, clock=clock)


def test_burst_emits_leading_and_trailing_only(clock):
    _, stream = _stream(clock, *(["DOWN"] * 9 + ["UP"]))

    emitted = stream.poll()
    assert emitted == ["DOWN"]
    assert stream.is_suppressed
    assert stream.has_pending

    clock.advance(0.02)
    emitted += stream.poll()
    clock.advance(0.02)
    emitted += stream.poll()

    assert emitted == ["DOWN", "UP"]
    assert not stream.has_pending
    assert not stream.is_suppressed


def test_nothing_emitted_before_window_closes(clock):
    source, stream = _stream(clock, "DOWN")
    assert stream.poll() == ["DOWN"]

    source.put("DOWN")
    clock.advance(0.005)
    assert stream.poll() == []

    clock.advance(0.015)
    assert stream.poll() == ["DOWN"]


def test_spaced_out_keys_are_each_emitted(clock):
    source, stream = _stream(clock, "j")
    assert stream.poll() == ["j"]

    clock.advance(1)
    source.put("k")
    assert stream.poll() == ["k"]


def test_other_keys_pass_through_while_suppressed(clock):
    _, stream = _stream(clock, "DOWN", "DOWN", "ENTER", "q")

    assert stream.poll() == ["DOWN", "ENTER", "q"]
    assert stream.has_pending


def test_end_of_stream_flushes_pending_key(clock):
    _, stream = _stream(clock, "DOWN", "UP", END_OF_STREAM)

    assert stream.poll() == ["DOWN", "UP"]
    assert stream.closed
    assert stream.poll() == []


def test_decode_key():
    assert decode_key("\r") == "ENTER"
    assert decode_key("\x04") == "CTRL_D"
    assert decode_key("a") == "a"


def _read_keys(data):
    read_fd, write_fd = os.pipe()
    os.write(write_fd, data)
    os.close(write_fd)
    keys = queue.Queue()
    try:
        _raw_key_reader(read_fd, keys, threading.Event())
    finally:
        os.close(read_fd)
    result = []
    while not keys.empty():
        result.append(keys.get_nowait())
    return result


def test_raw_reader_keeps_multibyte_keys():
    assert _read_keys("é".encode("utf-8") + b"j") == ["é", "j", END_OF_STREAM]


def test_raw_reader_decodes_escape_sequences():
    assert _read_keys(b"\x1b[B\r") == ["DOWN", "ENTER", END_OF_STREAM]
