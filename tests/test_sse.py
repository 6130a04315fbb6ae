"""Tests for the incremental SSE parser."""

from diet_journal.services.sse import SseParser, StreamFrame, extract_delta
from tests.conftest import DONE_FRAME, sse_frame


def _forwarded(chunks: list[bytes]) -> str:
    parser = SseParser()
    output = []
    for chunk in chunks:
        for frame in parser.feed(chunk):
            if frame.is_done:
                return "".join(output)
            delta = extract_delta(frame)
            if delta:
                output.append(delta)
    for frame in parser.flush():
        if frame.is_done:
            break
        delta = extract_delta(frame)
        if delta:
            output.append(delta)
    return "".join(output)


def test_feed_returns_complete_frames() -> None:
    parser = SseParser()

    frames = parser.feed(sse_frame("Hello") + sse_frame(" world"))

    assert [extract_delta(frame) for frame in frames] == ["Hello", " world"]
    assert parser.remainder == ""


def test_partial_line_is_kept_until_completed() -> None:
    parser = SseParser()
    data = sse_frame("oats")

    assert parser.feed(data[:12]) == []
    assert parser.remainder == data[:12].decode()
    frames = parser.feed(data[12:])

    assert [extract_delta(frame) for frame in frames] == ["oats"]


def test_arbitrary_chunk_boundaries_produce_identical_output() -> None:
    body = (
        b": keep-alive\n\n"
        + sse_frame("Grilled ")
        + sse_frame("鸡胸肉 ")
        + b"data: {broken json}\n\n"
        + sse_frame("with greens 🥗")
        + DONE_FRAME
    )
    expected = _forwarded([body])

    for size in range(1, len(body)):
        chunks = [body[index : index + size] for index in range(0, len(body), size)]
        assert _forwarded(chunks) == expected

    assert expected == "Grilled 鸡胸肉 with greens 🥗"


def test_done_sentinel_frame() -> None:
    frames = SseParser().feed(DONE_FRAME)

    assert frames == [StreamFrame(data="[DONE]")]
    assert frames[0].is_done


def test_done_sentinel_stops_output_mid_buffer() -> None:
    body = sse_frame("A") + b"data: [DONE]\n" + sse_frame("B") + b"garbage"

    assert _forwarded([body]) == "A"


def test_non_data_lines_are_ignored() -> None:
    frames = SseParser().feed(b"event: message\nid: 4\n: comment\ndata:\n\n")

    assert frames == []


def test_crlf_line_endings() -> None:
    frames = SseParser().feed(sse_frame("x").replace(b"\n", b"\r\n"))

    assert [extract_delta(frame) for frame in frames] == ["x"]


def test_flush_returns_trailing_line_without_newline() -> None:
    parser = SseParser()
    parser.feed(sse_frame("a") + sse_frame("b").rstrip(b"\n"))

    frames = parser.flush()

    assert [extract_delta(frame) for frame in frames] == ["b"]
    assert parser.remainder == ""


def test_extract_delta_skips_malformed_and_empty_frames() -> None:
    assert extract_delta(StreamFrame(data="{not json")) is None
    assert extract_delta(StreamFrame(data='{"choices": []}')) is None
    assert extract_delta(StreamFrame(data='{"choices": [{"delta": {}}]}')) is None
    assert (
        extract_delta(StreamFrame(data='{"choices": [{"delta": {"content": ""}}]}'))
        is None
    )
    role_only = StreamFrame(data='{"choices": [{"delta": {"role": "x"}}]}')
    assert extract_delta(role_only) is None
