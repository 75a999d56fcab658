"""Tests for the interactive recorder."""

import json
from datetime import datetime, timedelta, timezone

import pytest

from chat_sessions.errors import RecorderClosed
from chat_sessions.record import SENTINEL, Recorder, RecorderState, record_pairs, save_recording
from chat_sessions.transcripts import COUNTERPART, OPERATOR
from chat_sessions.transcripts.normalize import load_transcript


def _ticking_clock(start=datetime(2024, 1, 1, tzinfo=timezone.utc)):
    """A clock that advances one second per call."""
    state = {"now": start - timedelta(seconds=1)}

    def clock():
        state["now"] += timedelta(seconds=1)
        return state["now"]

    return clock


def _scripted(lines):
    """Line reader returning each item in turn, then end-of-input."""
    remaining = list(lines)

    def read_line():
        return remaining.pop(0) if remaining else None

    return read_line


class TestStateMachine:
    def test_starts_awaiting_operator(self):
        recorder = Recorder()
        assert recorder.state is RecorderState.AWAITING_INPUT
        assert recorder.current_role == OPERATOR

    def test_text_flips_role(self):
        recorder = Recorder()
        assert recorder.feed("hello") is RecorderState.AWAITING_INPUT
        assert recorder.current_role == COUNTERPART
        recorder.feed("hi back")
        assert recorder.current_role == OPERATOR

    @pytest.mark.parametrize("sentinel", ["DONE", "done", "Done", "  done  "])
    def test_sentinel_case_insensitive(self, sentinel):
        recorder = Recorder()
        recorder.feed("hello")
        assert recorder.feed(sentinel) is RecorderState.FINALIZING
        assert len(recorder.turns) == 1

    def test_feed_after_finish_raises(self):
        recorder = Recorder()
        recorder.feed("DONE")
        with pytest.raises(RecorderClosed):
            recorder.feed("late")

    def test_sentinel_text_inside_sentence_is_content(self):
        recorder = Recorder()
        recorder.feed("I am DONE now")
        assert recorder.turns[0].content == ("I am DONE now",)

    def test_add_turn_keeps_prompt_role(self):
        recorder = Recorder(clock=_ticking_clock())
        recorder.add_turn("model", "aside")
        assert recorder.current_role == OPERATOR
        assert recorder.turns[0].role == "model"
        assert recorder.turns[0].label == "MODEL"

    def test_add_turn_after_finish_raises(self):
        recorder = Recorder()
        recorder.finish()
        with pytest.raises(RecorderClosed):
            recorder.add_turn("user", "late")

    def test_default_sentinel(self):
        assert Recorder().sentinel == SENTINEL == "DONE"


class TestFinalize:
    def test_scenario_e(self):
        recorder = Recorder(clock=_ticking_clock())
        for line in ["hello", "hi back", "DONE"]:
            recorder.feed(line)
        transcript = recorder.finalize()

        assert [turn.role for turn in transcript.turns] == [OPERATOR, COUNTERPART]
        assert [turn.content for turn in transcript.turns] == [("hello",), ("hi back",)]

    def test_no_turns_returns_none(self):
        recorder = Recorder()
        recorder.feed("DONE")
        assert recorder.finalize() is None

    def test_bookkeeping_from_turns(self):
        recorder = Recorder(clock=_ticking_clock())
        for line in ["a", "b", "c"]:
            recorder.feed(line)
        transcript = recorder.finalize()

        assert transcript.started_at == transcript.turns[0].timestamp
        assert transcript.updated_at == transcript.turns[-1].timestamp
        assert transcript.started_at <= transcript.updated_at
        assert transcript.id.startswith("chat-save-session-")

    def test_fresh_id_each_recording(self):
        first = record_pairs([("user", "a")])
        second = record_pairs([("user", "a")])
        assert first.id != second.id

    def test_roles_alternate(self):
        recorder = Recorder()
        for line in ["one", "two", "three", "four", "five"]:
            recorder.feed(line)
        turns = recorder.finalize().turns
        assert turns[0].role == OPERATOR
        for current, following in zip(turns, turns[1:]):
            assert current.role != following.role


class TestRunInteractive:
    def test_stops_at_sentinel(self):
        prompts = []
        recorder = Recorder(clock=_ticking_clock())
        transcript = recorder.run_interactive(_scripted(["hello", "hi back", "DONE", "ignored"]), prompts.append)

        assert len(transcript.turns) == 2
        assert prompts[0] == "Enter content for [USER] (or type DONE to finish):"
        assert prompts[1] == "Enter content for [GEMINI] (or type DONE to finish):"
        assert len(prompts) == 3

    def test_end_of_input_finalizes(self):
        transcript = Recorder().run_interactive(_scripted(["only line"]), lambda text: None)
        assert [turn.content for turn in transcript.turns] == [("only line",)]

    def test_immediate_sentinel(self):
        assert Recorder().run_interactive(_scripted(["DONE"]), lambda text: None) is None

    def test_long_session_does_not_recurse(self):
        lines = [f"line {n}" for n in range(5000)] + ["DONE"]
        transcript = Recorder().run_interactive(_scripted(lines), lambda text: None)
        assert len(transcript.turns) == 5000


class TestRecordPairs:
    def test_keeps_given_roles_and_order(self):
        transcript = record_pairs([("user", "q"), ("model", "a"), ("user", "q2")], clock=_ticking_clock())
        assert [turn.role for turn in transcript.turns] == ["user", "model", "user"]

    def test_empty_returns_none(self):
        assert record_pairs([]) is None


class TestSaveRecording:
    def test_writes_messages_document(self, tmp_path):
        transcript = record_pairs([("user", "hello"), ("gemini", "hi back")], clock=_ticking_clock())
        now = datetime(2024, 1, 1, 12, 30, 45, tzinfo=timezone.utc)
        path = save_recording(tmp_path, transcript, now=now)

        assert path.name == "session-2024-01-01T12-30-45-chatsave.json"
        document = json.loads(path.read_text())
        assert document["sessionId"] == transcript.id
        assert [m["type"] for m in document["messages"]] == ["user", "gemini"]
        assert document["startTime"] == "2024-01-01T00:00:00.000Z"
        assert document["lastUpdated"] == "2024-01-01T00:00:01.000Z"

    def test_saved_file_loads_back(self, tmp_path):
        transcript = record_pairs([("user", "hello"), ("gemini", "hi back")], clock=_ticking_clock())
        path = save_recording(tmp_path, transcript)

        loaded = load_transcript(path.read_bytes(), path.name)
        assert [turn.content for turn in loaded.turns] == [("hello",), ("hi back",)]
        assert [turn.timestamp for turn in loaded.turns] == [turn.timestamp for turn in transcript.turns]

    def test_same_second_gets_suffix(self, tmp_path):
        transcript = record_pairs([("user", "hello")])
        now = datetime(2024, 1, 1, tzinfo=timezone.utc)
        first = save_recording(tmp_path, transcript, now=now)
        second = save_recording(tmp_path, transcript, now=now)

        assert first != second
        assert second.name == "session-2024-01-01T00-00-00-chatsave-2.json"

    def test_refuses_empty_transcript(self, tmp_path):
        from chat_sessions.transcripts import Transcript

        with pytest.raises(ValueError):
            save_recording(tmp_path, Transcript(id="x", turns=()))
        assert list(tmp_path.iterdir()) == []
