"""
Phase 1: messages -> turns.

A turn is a run of consecutive messages from the same sender. A new turn
starts whenever the sender changes or the gap since the previous message
exceeds the turn timeout.
"""
import logging
from typing import List, Optional, Sequence

from chatcadence.core.config import SegmentationConfig
from chatcadence.core.models import Message, Turn
from chatcadence.core.utils import compute_gaps, gap_seconds
from .kneedle import calculate_timeouts

logger = logging.getLogger(__name__)


def sort_messages(messages: Sequence[Message]) -> List[Message]:
    """Stable sort by timestamp into a new list."""
    return sorted(messages, key=lambda m: m.sent_at)


def derive_turn_timeout(
    sorted_messages: Sequence[Message],
    config: Optional[SegmentationConfig] = None,
) -> float:
    """Turn timeout derived from the gaps between consecutive messages."""
    gaps = compute_gaps(m.sent_at for m in sorted_messages)
    return calculate_timeouts(gaps, config).turn_timeout


def create_turn(messages: List[Message]) -> Turn:
    """Build a turn from a finalized run of same-sender messages."""
    return Turn(
        messages=messages,
        sender_id=messages[0].sender_id,
        start_time=messages[0].sent_at,
        end_time=messages[-1].sent_at,
    )


def messages_to_turns(
    messages: Sequence[Message],
    turn_timeout: Optional[float] = None,
    config: Optional[SegmentationConfig] = None,
) -> List[Turn]:
    """
    Group messages into turns.

    Parameters
    ----------
    messages : Sequence[Message]
        Messages in any order; the caller's sequence is not modified
    turn_timeout : float, optional
        Maximum gap in seconds inside a turn. Derived from the message gaps
        when None. A gap equal to the timeout does not split.
    config : SegmentationConfig, optional
        Percentiles and defaults for deriving the timeout

    Returns
    -------
    List[Turn]
        Turns in chronological order
    """
    if not messages:
        return []

    ordered = sort_messages(messages)
    if turn_timeout is None:
        turn_timeout = derive_turn_timeout(ordered, config)
        logger.debug("Derived turn timeout: %.1fs", turn_timeout)

    turns: List[Turn] = []
    current: List[Message] = [ordered[0]]

    for prev_msg, curr_msg in zip(ordered, ordered[1:]):
        sender_changed = curr_msg.sender_id != current[0].sender_id
        timeout_exceeded = gap_seconds(prev_msg.sent_at, curr_msg.sent_at) > turn_timeout

        if sender_changed or timeout_exceeded:
            turns.append(create_turn(current))
            current = [curr_msg]
        else:
            current.append(curr_msg)

    turns.append(create_turn(current))

    logger.debug("Built %d turns from %d messages", len(turns), len(ordered))
    return turns
