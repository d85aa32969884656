"""
Helpers for the chat-completions event stream.

The relay never parses what it forwards; ``DoneMarkerWatcher`` only looks at
the tail of the bytes for the terminal marker. ``DeltaDecoder`` and friends
decode the stream the way a browser client does and are what the tests and
any Python caller use to read ``/chat``.
"""
import codecs
import json
from collections.abc import AsyncIterable, Iterable, Iterator

from tutor.core.errors import StreamTruncatedError

DATA_PREFIX = "data: "
DONE_MARKER = "[DONE]"
_DONE_LINE = b"data: [DONE]"


class DoneMarkerWatcher:
    """Tracks whether ``data: [DONE]`` went past, across chunk boundaries."""

    def __init__(self):
        self._tail = b""
        self.seen_done = False
        self.bytes_forwarded = 0

    def feed(self, chunk: bytes) -> None:
        self.bytes_forwarded += len(chunk)
        window = self._tail + chunk
        if _DONE_LINE in window:
            self.seen_done = True
        self._tail = window[-len(_DONE_LINE):]


def _delta_content(payload) -> str | None:
    try:
        content = payload["choices"][0]["delta"].get("content")
    except (KeyError, IndexError, TypeError, AttributeError):
        return None
    return content if isinstance(content, str) and content else None


class DeltaDecoder:
    """Incremental decoder: feed raw bytes, get back content fragments in order."""

    def __init__(self):
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._buffer = ""
        self.done = False

    def feed(self, chunk: bytes) -> list[str]:
        self._buffer += self._decoder.decode(chunk)
        fragments = []
        while "\n" in self._buffer:
            line, self._buffer = self._buffer.split("\n", 1)
            fragment = self._parse_line(line)
            if fragment:
                fragments.append(fragment)
        return fragments

    def close(self) -> list[str]:
        self._buffer += self._decoder.decode(b"", final=True)
        line, self._buffer = self._buffer, ""
        fragment = self._parse_line(line)
        return [fragment] if fragment else []

    def _parse_line(self, line: str) -> str | None:
        line = line.rstrip("\r")
        if not line.startswith(DATA_PREFIX):
            return None
        data = line[len(DATA_PREFIX):].strip()
        if data == DONE_MARKER:
            self.done = True
            return None
        try:
            payload = json.loads(data)
        except ValueError:
            # Malformed fragment: skip it, the stream carries on.
            return None
        return _delta_content(payload)


def iter_delta_content(chunks: Iterable[bytes]) -> Iterator[str]:
    decoder = DeltaDecoder()
    for chunk in chunks:
        yield from decoder.feed(chunk)
    yield from decoder.close()


def collect_stream(chunks: Iterable[bytes]) -> str:
    """Join every fragment; raise StreamTruncatedError if the terminal marker never came."""
    decoder = DeltaDecoder()
    parts: list[str] = []
    for chunk in chunks:
        parts.extend(decoder.feed(chunk))
    parts.extend(decoder.close())
    if not decoder.done:
        raise StreamTruncatedError()
    return "".join(parts)


async def acollect_stream(chunks: AsyncIterable[bytes]) -> str:
    decoder = DeltaDecoder()
    parts: list[str] = []
    async for chunk in chunks:
        parts.extend(decoder.feed(chunk))
    parts.extend(decoder.close())
    if not decoder.done:
        raise StreamTruncatedError()
    return "".join(parts)
