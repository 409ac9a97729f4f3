"""
Tests for domain models and time helpers.
"""
from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from chatcadence.core.models import Message, SegmentationOptions, Turn, sort_participants
from chatcadence.core.utils import compute_gaps, format_duration, gap_seconds, iso_utc, parse_timestamp

from conftest import at, msg


class TestMessage:
    """Test Message validation."""

    def test_iso_timestamp(self):
        m = Message(sender_id=1, sent_at="2024-01-01T10:00:00Z", content="Hello")
        assert m.sent_at == datetime(2024, 1, 1, 10, 0, tzinfo=timezone.utc)

    def test_naive_timestamp_is_utc(self):
        m = Message(sender_id=1, sent_at=datetime(2024, 1, 1, 10, 0))
        assert m.sent_at.tzinfo is not None
        assert m.sent_at == at(0)

    def test_offset_timestamp_normalized(self):
        m = Message(sender_id=1, sent_at="2024-01-01T12:00:00+02:00")
        assert m.sent_at == at(0)
        assert m.sent_at.utcoffset().total_seconds() == 0

    def test_epoch_timestamp(self):
        m = Message(sender_id=1, sent_at=1704103200)
        assert m.sent_at == at(0)

    def test_raw_export_row(self):
        """WhatsApp-style rows validate through aliases; extra keys are ignored."""
        row = {
            "ID": 7,
            "chat_id": 3,
            "from_id": 42,
            "content": "hey",
            "sent_at": "2024-01-01T10:00:00Z",
            "message_id": "msg_7",
            "key_version": 1,
        }
        m = Message.model_validate(row)
        assert m.id == 7
        assert m.sender_id == 42
        assert m.chat_id == 3

    def test_timestamp_alias(self):
        m = Message.model_validate({"sender_id": "a", "timestamp": "2024-01-01T10:00:00Z"})
        assert m.sent_at == at(0)
        assert m.content is None

    @pytest.mark.parametrize("bad", ["not a date", "2024-13-45T99:00:00Z", None, True, 1e20, -1e20])
    def test_malformed_timestamp_fails_fast(self, bad):
        with pytest.raises(ValidationError):
            Message(sender_id=1, sent_at=bad)

    def test_missing_sender(self):
        with pytest.raises(ValidationError):
            Message.model_validate({"sent_at": "2024-01-01T10:00:00Z"})

    def test_frozen(self):
        m = msg(1, 0)
        with pytest.raises(ValidationError):
            m.content = "changed"

    def test_to_dict(self):
        d = msg(1, 0, "hi", id=5).to_dict()
        assert d == {
            "id": 5,
            "chat_id": None,
            "sender_id": 1,
            "content": "hi",
            "sent_at": "2024-01-01T10:00:00.000Z",
        }


class TestTurnAndOptions:
    """Test structural validation of derived units."""

    def test_turn_requires_messages(self):
        with pytest.raises(ValidationError):
            Turn(messages=[], sender_id=1, start_time=at(0), end_time=at(0))

    def test_turn_keeps_message_instances(self):
        m = msg(1, 0)
        t = Turn(messages=[m], sender_id=1, start_time=m.sent_at, end_time=m.sent_at)
        assert t.messages[0] is m

    def test_options_default_to_derived(self):
        options = SegmentationOptions()
        assert options.turn_timeout is None
        assert options.volley_timeout is None
        assert options.session_timeout is None
        assert options.self_id is None

    def test_options_reject_negative_timeouts(self):
        with pytest.raises(ValidationError):
            SegmentationOptions(turn_timeout=-1)

    def test_options_accept_zero(self):
        assert SegmentationOptions(volley_timeout=0).volley_timeout == 0


class TestTimeUtils:
    """Test time helpers."""

    def test_parse_timestamp_rejects_garbage(self):
        with pytest.raises(ValueError):
            parse_timestamp("yesterday")
        with pytest.raises(ValueError):
            parse_timestamp([2024])
        with pytest.raises(ValueError, match="Invalid timestamp"):
            parse_timestamp(1e20)

    def test_iso_utc(self):
        assert iso_utc(at(0.25)) == "2024-01-01T10:00:00.250Z"

    def test_gap_seconds_is_absolute(self):
        assert gap_seconds(at(30), at(0)) == 30
        assert gap_seconds(at(0), at(30)) == 30

    def test_compute_gaps(self):
        assert compute_gaps([at(0), at(10), at(40)]) == [10, 30]
        assert compute_gaps([at(0)]) == []
        assert compute_gaps([]) == []

    @pytest.mark.parametrize("seconds, expected", [
        (45, "45s"),
        (720, "12m"),
        (3 * 3600, "3h"),
        (2 * 86400, "2d"),
    ])
    def test_format_duration(self, seconds, expected):
        assert format_duration(seconds) == expected


class TestSortParticipants:
    """Test participant ordering."""

    def test_distinct_and_ascending(self):
        assert sort_participants([3, 1, 3, 2]) == [1, 2, 3]

    def test_mixed_types_ints_first(self):
        assert sort_participants(["bot", 42, "alice", 7]) == [7, 42, "alice", "bot"]

    def test_numeric_string_stays_distinct_from_int(self):
        assert sort_participants([1, "1"]) == [1, "1"]
