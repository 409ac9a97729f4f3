"""
Domain models for conversation segmentation.

Messages come in from the caller; turns, volleys and sessions are produced by
the three segmentation phases. All models are frozen: once a phase has built
a unit it never changes, and no phase mutates its input.

All models use Pydantic for validation, serialization, and type safety.
"""
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from chatcadence.core.utils import iso_utc, parse_timestamp

# Sender identifiers only need equality. One conversation may mix int and str
# senders, so participant lists are ordered with ``sort_participants``.
SenderId = Union[int, str]


def sort_participants(ids: Iterable[SenderId]) -> List[SenderId]:
    """Distinct sender ids, ints ascending first and then strs ascending."""
    return sorted(set(ids), key=lambda p: (isinstance(p, str), p))


class Message(BaseModel):
    """
    A single timestamped, attributed chat message.

    Raw export rows validate directly: ``from_id`` is accepted for
    ``sender_id`` and ``timestamp`` for ``sent_at``, and unknown keys are
    ignored. Naive timestamps are taken to be UTC.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    sender_id: SenderId = Field(
        ..., validation_alias=AliasChoices("sender_id", "from_id")
    )
    sent_at: datetime = Field(
        ..., validation_alias=AliasChoices("sent_at", "timestamp")
    )
    content: Optional[str] = None
    id: Optional[Union[int, str]] = Field(
        None, validation_alias=AliasChoices("id", "ID", "message_id")
    )
    chat_id: Optional[Union[int, str]] = None

    @field_validator("sent_at", mode="before")
    @classmethod
    def parse_sent_at(cls, v: Any) -> datetime:
        """Normalize the timestamp to an aware UTC datetime."""
        return parse_timestamp(v)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-ready dictionary."""
        return {
            "id": self.id,
            "chat_id": self.chat_id,
            "sender_id": self.sender_id,
            "content": self.content,
            "sent_at": iso_utc(self.sent_at),
        }


class Turn(BaseModel):
    """
    Consecutive messages from one sender, undivided by the turn timeout.

    Attributes
    ----------
    messages : List[Message]
        Constituent messages in chronological order (never empty)
    sender_id : int or str
        Sender shared by every message in the turn
    start_time : datetime
        Timestamp of the first message
    end_time : datetime
        Timestamp of the last message
    """

    model_config = ConfigDict(frozen=True)

    messages: List[Message] = Field(..., min_length=1)
    sender_id: SenderId
    start_time: datetime
    end_time: datetime

    @property
    def message_count(self) -> int:
        return len(self.messages)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-ready dictionary."""
        return {
            "sender_id": self.sender_id,
            "start_time": iso_utc(self.start_time),
            "end_time": iso_utc(self.end_time),
            "message_count": self.message_count,
            "messages": [m.to_dict() for m in self.messages],
        }


class Volley(BaseModel):
    """
    A back-and-forth exchange made of one or more turns.

    Volleys are the unit handed to downstream analyzers: ``pivot_text`` is
    what they read, and ``id`` is what they cache against. The id depends
    only on the start time, end time and participants, so two volleys that
    agree on those three fields share an id whatever their content.

    Attributes
    ----------
    id : str
        Content-derived hex identifier
    turns : List[Turn]
        Constituent turns in chronological order (never empty)
    participants : List[int or str]
        Sorted unique sender ids across all turns
    start_time : datetime
        Start of the first turn
    end_time : datetime
        End of the last turn
    depth : int
        Number of speaker changes across the turn sequence
    message_count : int
        Total messages across all turns
    pivot_text : str
        Chronological transcript, one ``HH:MM - Me|Them: content`` line per
        message
    """

    model_config = ConfigDict(frozen=True)

    id: str
    turns: List[Turn] = Field(..., min_length=1)
    participants: List[SenderId]
    start_time: datetime
    end_time: datetime
    depth: int = Field(..., ge=0)
    message_count: int = Field(..., ge=1)
    pivot_text: str

    @property
    def messages(self) -> List[Message]:
        """All messages of the volley, in order."""
        return [msg for turn in self.turns for msg in turn.messages]

    @property
    def duration_seconds(self) -> float:
        return (self.end_time - self.start_time).total_seconds()

    def to_dict(self, include_turns: bool = False) -> Dict[str, Any]:
        """
        Convert to a JSON-ready dictionary.

        Parameters
        ----------
        include_turns : bool
            Whether to embed the full turn and message structure
            (default: False, metadata and pivot text only)
        """
        data = {
            "id": self.id,
            "participants": list(self.participants),
            "start_time": iso_utc(self.start_time),
            "end_time": iso_utc(self.end_time),
            "depth": self.depth,
            "message_count": self.message_count,
            "turn_count": len(self.turns),
            "pivot_text": self.pivot_text,
        }
        if include_turns:
            data["turns"] = [t.to_dict() for t in self.turns]
        return data


class Session(BaseModel):
    """
    A longer conversational period made of one or more volleys.

    Attributes
    ----------
    volleys : List[Volley]
        Constituent volleys in chronological order (never empty)
    participants : List[int or str]
        Sorted union of the volleys' participants
    start_time : datetime
        Start of the first volley
    end_time : datetime
        End of the last volley
    duration_minutes : float
        ``(end_time - start_time)`` in minutes
    """

    model_config = ConfigDict(frozen=True)

    volleys: List[Volley] = Field(..., min_length=1)
    participants: List[SenderId]
    start_time: datetime
    end_time: datetime
    duration_minutes: float = Field(..., ge=0)

    @property
    def message_count(self) -> int:
        return sum(v.message_count for v in self.volleys)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-ready dictionary (volleys without turns)."""
        return {
            "participants": list(self.participants),
            "start_time": iso_utc(self.start_time),
            "end_time": iso_utc(self.end_time),
            "duration_minutes": self.duration_minutes,
            "message_count": self.message_count,
            "volleys": [v.to_dict() for v in self.volleys],
        }


class TimeoutTriple(BaseModel):
    """Turn, volley ("threadlet") and session timeouts, in seconds."""

    model_config = ConfigDict(frozen=True)

    turn_timeout: float
    threadlet_timeout: float
    session_timeout: float

    def to_dict(self) -> Dict[str, float]:
        return self.model_dump()


class GapStats(BaseModel):
    """
    Summary statistics of a gap distribution.

    ``knee_point`` is only set when there were enough gaps to look for one.
    """

    model_config = ConfigDict(frozen=True)

    count: int = 0
    min: float = 0.0
    max: float = 0.0
    median: float = 0.0
    mean: float = 0.0
    p70: float = 0.0
    p85: float = 0.0
    p95: float = 0.0
    knee_point: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump()


class SegmentationOptions(BaseModel):
    """
    Optional overrides for a segmentation run.

    A timeout left as None is derived from that phase's own gap
    distribution. Any number, including 0, is used exactly as given.

    Attributes
    ----------
    turn_timeout : float, optional
        Maximum gap (seconds) between messages of one turn
    volley_timeout : float, optional
        Maximum gap (seconds) between turns of one volley
    session_timeout : float, optional
        Maximum gap (seconds) between volleys of one session
    self_id : int or str, optional
        Sender rendered as "Me" in pivot text. When None, the lowest
        participant id of each volley is used.
    """

    model_config = ConfigDict(frozen=True)

    turn_timeout: Optional[float] = Field(None, ge=0)
    volley_timeout: Optional[float] = Field(None, ge=0)
    session_timeout: Optional[float] = Field(None, ge=0)
    self_id: Optional[SenderId] = None


class Segmentation(BaseModel):
    """
    Output of the full three-phase pipeline.

    ``timeouts`` holds the timeout each phase actually applied, whether it
    was derived or supplied.
    """

    model_config = ConfigDict(frozen=True)

    turns: List[Turn] = []
    volleys: List[Volley] = []
    sessions: List[Session] = []
    timeouts: TimeoutTriple

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-ready dictionary (turns are summarized by count)."""
        sessions = []
        for session in self.sessions:
            data = session.to_dict()
            data["volley_ids"] = [v["id"] for v in data.pop("volleys")]
            sessions.append(data)

        return {
            "turn_count": len(self.turns),
            "timeouts": self.timeouts.to_dict(),
            "volleys": [v.to_dict() for v in self.volleys],
            "sessions": sessions,
        }
