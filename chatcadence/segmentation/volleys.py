"""
Phase 2: turns -> volleys.

A volley is a run of turns with no gap longer than the volley ("threadlet")
timeout between them. Sender identity plays no part in the grouping; it only
feeds the derived fields (participants, depth, pivot text).
"""
import hashlib
import logging
from datetime import datetime
from typing import List, Optional, Sequence

from chatcadence.core.config import SegmentationConfig, VOLLEY_ID_LENGTH, resolve_config
from chatcadence.core.errors import EmptyVolleyError
from chatcadence.core.models import Message, SenderId, Turn, Volley, sort_participants
from chatcadence.core.utils import gap_seconds, iso_utc, to_utc
from .kneedle import calculate_timeouts

logger = logging.getLogger(__name__)

SELF_LABEL = "Me"
OTHER_LABEL = "Them"


def create_volley_id(
    start_time: datetime,
    end_time: datetime,
    participants: Sequence[SenderId],
    length: int = VOLLEY_ID_LENGTH,
) -> str:
    """
    Deterministic identifier for a volley.

    Hashes ``"<start>-<end>-<p1,p2,...>"`` with sha256 and keeps the first
    ``length`` hex characters. Message content does not contribute.

    Parameters
    ----------
    start_time : datetime
        Volley start
    end_time : datetime
        Volley end
    participants : Sequence[int or str]
        Participant ids; sorted here, so order does not matter
    length : int
        Number of hex characters to keep (default: 16)

    Returns
    -------
    str
        Hex identifier
    """
    joined = ",".join(str(p) for p in sort_participants(participants))
    data = f"{iso_utc(start_time)}-{iso_utc(end_time)}-{joined}"
    return hashlib.sha256(data.encode("utf-8")).hexdigest()[:length]


def compute_depth(turns: Sequence[Turn]) -> int:
    """Number of speaker changes across a turn sequence."""
    return sum(
        1 for prev, curr in zip(turns, turns[1:]) if curr.sender_id != prev.sender_id
    )


def render_pivot_text(
    messages: Sequence[Message],
    participants: Sequence[SenderId],
    self_id: Optional[SenderId] = None,
) -> str:
    """
    Render messages as a chronological transcript.

    Each line reads ``HH:MM - Me: content`` or ``HH:MM - Them: content``,
    with the time of day in UTC. Messages from ``self_id`` are labelled
    "Me"; without a ``self_id`` the lowest participant id is used, which
    only makes sense for two-party chats.

    Parameters
    ----------
    messages : Sequence[Message]
        Messages in the order they should appear
    participants : Sequence[int or str]
        Sorted participant ids of the volley
    self_id : int or str, optional
        Sender to label "Me"

    Returns
    -------
    str
        Newline-joined transcript; missing content renders as empty text
    """
    if self_id is None and participants:
        self_id = participants[0]

    lines = []
    for msg in messages:
        time_str = to_utc(msg.sent_at).strftime("%H:%M")
        label = SELF_LABEL if msg.sender_id == self_id else OTHER_LABEL
        lines.append(f"{time_str} - {label}: {msg.content or ''}")
    return "\n".join(lines)


def build_volley(
    turns: Sequence[Turn],
    self_id: Optional[SenderId] = None,
    config: Optional[SegmentationConfig] = None,
) -> Volley:
    """
    Build a volley from a finalized run of turns.

    Parameters
    ----------
    turns : Sequence[Turn]
        Turns in chronological order
    self_id : int or str, optional
        Sender rendered as "Me" in the pivot text
    config : SegmentationConfig, optional
        Supplies the id length

    Returns
    -------
    Volley
        Volley with id, participants, depth, message count and pivot text

    Raises
    ------
    EmptyVolleyError
        If ``turns`` is empty
    """
    if not turns:
        raise EmptyVolleyError("Cannot build volley from empty turns list")

    config = resolve_config(config)
    turns = list(turns)
    messages = [msg for turn in turns for msg in turn.messages]
    participants = sort_participants(turn.sender_id for turn in turns)
    start_time = turns[0].start_time
    end_time = turns[-1].end_time

    return Volley(
        id=create_volley_id(start_time, end_time, participants, config.volley_id_length),
        turns=turns,
        participants=participants,
        start_time=start_time,
        end_time=end_time,
        depth=compute_depth(turns),
        message_count=len(messages),
        pivot_text=render_pivot_text(messages, participants, self_id),
    )


def derive_volley_timeout(
    turns: Sequence[Turn],
    config: Optional[SegmentationConfig] = None,
) -> float:
    """Volley timeout derived from the end->start gaps between turns."""
    gaps = [gap_seconds(prev.end_time, curr.start_time) for prev, curr in zip(turns, turns[1:])]
    return calculate_timeouts(gaps, config).threadlet_timeout


def turns_to_volleys(
    turns: Sequence[Turn],
    volley_timeout: Optional[float] = None,
    self_id: Optional[SenderId] = None,
    config: Optional[SegmentationConfig] = None,
) -> List[Volley]:
    """
    Group turns into volleys.

    Parameters
    ----------
    turns : Sequence[Turn]
        Turns in chronological order, as produced by ``messages_to_turns``
    volley_timeout : float, optional
        Maximum gap in seconds between one turn's end and the next turn's
        start. Derived from the turn gaps when None. A gap equal to the
        timeout does not split.
    self_id : int or str, optional
        Sender rendered as "Me" in pivot text
    config : SegmentationConfig, optional
        Percentiles and defaults for deriving the timeout

    Returns
    -------
    List[Volley]
        Volleys in chronological order
    """
    if not turns:
        return []

    if volley_timeout is None:
        volley_timeout = derive_volley_timeout(turns, config)
        logger.debug("Derived volley timeout: %.1fs", volley_timeout)

    volleys: List[Volley] = []
    current: List[Turn] = [turns[0]]

    for prev_turn, curr_turn in zip(turns, turns[1:]):
        if gap_seconds(prev_turn.end_time, curr_turn.start_time) > volley_timeout:
            volleys.append(build_volley(current, self_id, config))
            current = [curr_turn]
        else:
            current.append(curr_turn)

    volleys.append(build_volley(current, self_id, config))

    logger.debug("Built %d volleys from %d turns", len(volleys), len(turns))
    return volleys
