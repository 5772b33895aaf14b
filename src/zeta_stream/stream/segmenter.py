"""Splitting reasoning from answer text.

Some backends interleave reasoning and answer text in one channel using
inline markers; others send reasoning in a separate delta field.  The
``ThinkingSegmenter`` handles the first kind, ``NativeReasoningTracker``
the second.
"""

from __future__ import annotations

import logging

from zeta_stream.types import StreamEvent

_logger = logging.getLogger(__name__)

OPEN_TAG = "<thinking>"
CLOSE_TAG = "</thinking>"


class ThinkingSegmenter:
    """Incremental inline-tag parser, safe against markers split across chunks.

    States:
      outside - emitting answer text, looking for the opening marker
      inside  - emitting reasoning, looking for the closing marker

    While no marker is visible, the last ``len(marker) - 1`` characters
    are held back so a marker arriving in pieces is still recognised.
    """

    def __init__(self, open_tag: str = OPEN_TAG, close_tag: str = CLOSE_TAG) -> None:
        if not open_tag or not close_tag:
            raise ValueError("Thinking markers must be non-empty")
        self._open = open_tag
        self._close = close_tag
        self._pending = ""
        self.inside = False
        self.done_emitted = False
        self.saw_thinking = False

    def feed(self, fragment: str) -> list[StreamEvent]:
        """Consume a text fragment and return the events it completes."""
        self._pending += fragment
        events: list[StreamEvent] = []

        while True:
            marker = self._close if self.inside else self._open
            idx = self._pending.find(marker)
            if idx == -1:
                keep = len(marker) - 1
                if len(self._pending) > keep:
                    cut = len(self._pending) - keep
                    self._emit(events, self._pending[:cut])
                    self._pending = self._pending[cut:]
                break

            self._emit(events, self._pending[:idx])
            self._pending = self._pending[idx + len(marker):]
            if self.inside:
                self._close_block(events)
            self.inside = not self.inside

        return events

    def drain(self) -> list[StreamEvent]:
        """Release the held-back suffix without ending the stream."""
        events: list[StreamEvent] = []
        self._emit(events, self._pending)
        self._pending = ""
        return events

    def finish(self) -> list[StreamEvent]:
        """Flush the held-back suffix at end of stream.

        An unclosed block is flushed as reasoning and closed.
        """
        events = self.drain()
        if self.inside:
            _logger.debug("Stream ended inside an unclosed thinking block")
            self._close_block(events)
            self.inside = False
        return events

    def _emit(self, events: list[StreamEvent], content: str) -> None:
        if not content:
            return
        if self.inside:
            self.saw_thinking = True
            events.append(StreamEvent.thinking(content))
        else:
            events.append(StreamEvent.text(content))

    def _close_block(self, events: list[StreamEvent]) -> None:
        if not self.done_emitted:
            events.append(StreamEvent.thinking_done())
            self.done_emitted = True


class NativeReasoningTracker:
    """Maps a separate reasoning field to thinking events.

    Emits exactly one ``thinking_done`` at the first answer delta that
    follows reasoning content.
    """

    def __init__(self) -> None:
        self.saw_thinking = False
        self.done_emitted = False

    def reasoning(self, content: str) -> list[StreamEvent]:
        if not content:
            return []
        self.saw_thinking = True
        return [StreamEvent.thinking(content)]

    def content(self) -> list[StreamEvent]:
        """Call before forwarding an answer delta."""
        if self.saw_thinking and not self.done_emitted:
            self.done_emitted = True
            return [StreamEvent.thinking_done()]
        return []

    def finish(self) -> list[StreamEvent]:
        return self.content()
