"""
Shared fixtures for segmentation tests.
"""
from datetime import datetime, timedelta, timezone

import pytest

from chatcadence.core.config import SegmentationConfig
from chatcadence.core.models import Message, Turn

BASE_TIME = datetime(2024, 1, 1, 10, 0, 0, tzinfo=timezone.utc)


def at(seconds: float) -> datetime:
    """Datetime ``seconds`` after 2024-01-01T10:00:00Z."""
    return BASE_TIME + timedelta(seconds=seconds)


def msg(sender, seconds: float, content: str = "hi", **kwargs) -> Message:
    """Message from ``sender`` sent ``seconds`` after the base time."""
    return Message(sender_id=sender, sent_at=at(seconds), content=content, **kwargs)


def turn(sender, *seconds: float, content: str = "hi") -> Turn:
    """Turn of one message per offset, all from ``sender``."""
    messages = [msg(sender, s, content) for s in seconds]
    return Turn(
        messages=messages,
        sender_id=sender,
        start_time=messages[0].sent_at,
        end_time=messages[-1].sent_at,
    )


@pytest.fixture
def config():
    """Default config, independent of the process environment."""
    return SegmentationConfig()


@pytest.fixture
def two_day_chat():
    """Two participants, two bursts of conversation a day apart."""
    day = 24 * 3600
    return [
        msg(1, 0, "Morning!"),
        msg(1, 20, "Are you up?"),
        msg(2, 90, "Barely"),
        msg(1, 150, "Coffee?"),
        msg(2, 200, "Yes please"),
        msg(2, 215, "Usual place?"),
        msg(1, 260, "See you there"),
        msg(2, 2 * 3600, "That was great"),
        msg(1, 2 * 3600 + 40, "Agreed"),
        msg(1, day, "Same time tomorrow?"),
        msg(2, day + 120, "Can't, sorry"),
        msg(1, day + 180, "No worries"),
        msg(2, day + 200, "Friday?"),
        msg(1, day + 230, "Friday works"),
    ]
