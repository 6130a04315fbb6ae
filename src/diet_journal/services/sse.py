"""Incremental parser for server-sent event streams."""

import codecs
import logging
from dataclasses import dataclass, field

from pydantic import ValidationError

from diet_journal.domain.recommendation import ChatCompletionChunk

logger = logging.getLogger(__name__)

DATA_PREFIX = "data:"
DONE_SENTINEL = "[DONE]"


@dataclass(frozen=True)
class StreamFrame:
    """Payload of one ``data:`` line."""

    data: str

    @property
    def is_done(self) -> bool:
        return self.data == DONE_SENTINEL


@dataclass
class SseParser:
    """Turns arbitrarily split byte chunks into complete frames.

    Bytes are decoded incrementally so multi-byte characters may straddle
    chunk boundaries. The text after the last newline is kept until more
    input arrives or :meth:`flush` is called.
    """

    remainder: str = ""
    _decoder: codecs.IncrementalDecoder = field(
        init=False,
        repr=False,
        default_factory=lambda: codecs.getincrementaldecoder("utf-8")("replace"),
    )

    def feed(self, chunk: bytes) -> list[StreamFrame]:
        """Consume a chunk and return the frames it completed."""
        text = self.remainder + self._decoder.decode(chunk)
        lines = text.split("\n")
        self.remainder = lines.pop()
        return _parse_lines(lines)

    def flush(self) -> list[StreamFrame]:
        """Treat any buffered text as a final line."""
        text = self.remainder + self._decoder.decode(b"", final=True)
        self.remainder = ""
        return _parse_lines([text])


def extract_delta(frame: StreamFrame) -> str | None:
    """Return the text delta of a completion frame, or None.

    Malformed frames are logged and skipped.
    """
    try:
        chunk = ChatCompletionChunk.model_validate_json(frame.data)
    except ValidationError:
        logger.warning("Skipping malformed stream frame: %s", frame.data[:100])
        return None
    return chunk.text()


def _parse_lines(lines: list[str]) -> list[StreamFrame]:
    frames = []
    for raw in lines:
        line = raw.strip()
        if not line.startswith(DATA_PREFIX):
            continue
        payload = line[len(DATA_PREFIX) :].strip()
        if payload:
            frames.append(StreamFrame(data=payload))
    return frames
