"""
Phase 3: volleys -> sessions.
"""
import logging
from typing import List, Optional, Sequence

from chatcadence.core.config import SegmentationConfig
from chatcadence.core.errors import EmptySessionError
from chatcadence.core.models import Session, Volley, sort_participants
from chatcadence.core.utils import gap_seconds
from .kneedle import calculate_timeouts

logger = logging.getLogger(__name__)


def build_session(volleys: Sequence[Volley]) -> Session:
    """
    Build a session from a finalized run of volleys.

    Raises
    ------
    EmptySessionError
        If ``volleys`` is empty
    """
    if not volleys:
        raise EmptySessionError("Cannot build session from empty volleys list")

    volleys = list(volleys)
    start_time = volleys[0].start_time
    end_time = volleys[-1].end_time
    participants = sort_participants(p for v in volleys for p in v.participants)

    return Session(
        volleys=volleys,
        participants=participants,
        start_time=start_time,
        end_time=end_time,
        duration_minutes=gap_seconds(start_time, end_time) / 60,
    )


def derive_session_timeout(
    volleys: Sequence[Volley],
    config: Optional[SegmentationConfig] = None,
) -> float:
    """Session timeout derived from the end->start gaps between volleys."""
    gaps = [gap_seconds(prev.end_time, curr.start_time) for prev, curr in zip(volleys, volleys[1:])]
    return calculate_timeouts(gaps, config).session_timeout


def volleys_to_sessions(
    volleys: Sequence[Volley],
    session_timeout: Optional[float] = None,
    config: Optional[SegmentationConfig] = None,
) -> List[Session]:
    """
    Group volleys into sessions.

    Parameters
    ----------
    volleys : Sequence[Volley]
        Volleys in chronological order
    session_timeout : float, optional
        Maximum gap in seconds between volleys of one session. Derived from
        the volley gaps when None.
    config : SegmentationConfig, optional
        Percentiles and defaults for deriving the timeout

    Returns
    -------
    List[Session]
        Sessions in chronological order
    """
    if not volleys:
        return []

    if session_timeout is None:
        session_timeout = derive_session_timeout(volleys, config)
        logger.debug("Derived session timeout: %.1fs", session_timeout)

    sessions: List[Session] = []
    current: List[Volley] = [volleys[0]]

    for prev_volley, curr_volley in zip(volleys, volleys[1:]):
        if gap_seconds(prev_volley.end_time, curr_volley.start_time) > session_timeout:
            sessions.append(build_session(current))
            current = [curr_volley]
        else:
            current.append(curr_volley)

    sessions.append(build_session(current))
    return sessions
