"""Tests for thinking-tag segmentation and native reasoning tracking."""

from zeta_stream.stream.segmenter import NativeReasoningTracker, ThinkingSegmenter
from zeta_stream.types import EventType


def _run(chunks, segmenter=None):
    seg = segmenter or ThinkingSegmenter()
    events = []
    for c in chunks:
        events.extend(seg.feed(c))
    events.extend(seg.finish())
    return events


def _merged(events):
    """Collapse consecutive same-type content events."""
    out = []
    for ev in events:
        if out and ev.type is out[-1][0] and ev.type in (EventType.TEXT, EventType.THINKING):
            out[-1] = (ev.type, out[-1][1] + ev.content)
        else:
            out.append((ev.type, ev.content))
    return out


class TestThinkingSegmenter:
    def test_split_markers(self):
        events = _run(["<thi", "nking>a</think", "ing>b"])
        assert [(e.type, e.content) for e in events] == [
            (EventType.THINKING, "a"),
            (EventType.THINKING_DONE, ""),
            (EventType.TEXT, "b"),
        ]

    def test_single_char_chunks_lossless(self):
        source = "Intro <thinking>step one, step two</thinking>The answer is 42."
        events = _run(list(source))
        assert _merged(events) == [
            (EventType.TEXT, "Intro "),
            (EventType.THINKING, "step one, step two"),
            (EventType.THINKING_DONE, ""),
            (EventType.TEXT, "The answer is 42."),
        ]

    def test_no_markers_is_plain_text(self):
        events = _run(["hello ", "world"])
        assert all(e.type is EventType.TEXT for e in events)
        assert "".join(e.content for e in events) == "hello world"

    def test_partial_marker_lookalike_released(self):
        events = _run(["a <thin", "g> b"])
        assert "".join(e.content for e in events) == "a <thing> b"
        assert all(e.type is EventType.TEXT for e in events)

    def test_unclosed_block_flushed_as_thinking(self):
        events = _run(["<thinking>never closed"])
        assert _merged(events) == [
            (EventType.THINKING, "never closed"),
            (EventType.THINKING_DONE, ""),
        ]

    def test_thinking_done_at_most_once(self):
        events = _run(["<thinking>a</thinking>x<thinking>b</thinking>y"])
        done = [e for e in events if e.type is EventType.THINKING_DONE]
        assert len(done) == 1

    def test_drain_releases_held_suffix(self):
        seg = ThinkingSegmenter()
        assert seg.feed("abc") == []
        drained = seg.drain()
        assert [(e.type, e.content) for e in drained] == [(EventType.TEXT, "abc")]
        assert seg.finish() == []

    def test_custom_markers(self):
        events = _run(["<think>r</think>t"], ThinkingSegmenter("<think>", "</think>"))
        assert _merged(events) == [
            (EventType.THINKING, "r"),
            (EventType.THINKING_DONE, ""),
            (EventType.TEXT, "t"),
        ]


class TestNativeReasoningTracker:
    def test_done_before_first_answer(self):
        tracker = NativeReasoningTracker()
        events = tracker.reasoning("r1") + tracker.reasoning("r2") + tracker.content()
        events += tracker.content() + tracker.finish()
        assert [e.type for e in events] == [
            EventType.THINKING, EventType.THINKING, EventType.THINKING_DONE,
        ]

    def test_no_reasoning_no_done(self):
        tracker = NativeReasoningTracker()
        assert tracker.content() == []
        assert tracker.finish() == []

    def test_reasoning_only_closed_at_finish(self):
        tracker = NativeReasoningTracker()
        tracker.reasoning("r")
        assert [e.type for e in tracker.finish()] == [EventType.THINKING_DONE]
