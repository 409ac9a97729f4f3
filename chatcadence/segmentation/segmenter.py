"""
Three-phase conversation segmenter.

Wires the phases together:

1. messages -> turns (turn timeout from message gaps)
2. turns -> volleys (volley timeout from turn gaps)
3. volleys -> sessions (session timeout from volley gaps)

Each phase derives its own timeout from its own gap distribution unless the
caller pins it through ``SegmentationOptions``. Nothing here holds state
between calls, so a fixed message list always segments the same way.
"""
import logging
from typing import List, Optional, Sequence

from chatcadence.core.config import SegmentationConfig, resolve_config
from chatcadence.core.models import (
    Message,
    Segmentation,
    SegmentationOptions,
    TimeoutTriple,
    Volley,
)
from .sessions import derive_session_timeout, volleys_to_sessions
from .turns import derive_turn_timeout, messages_to_turns, sort_messages
from .volleys import derive_volley_timeout, turns_to_volleys

logger = logging.getLogger(__name__)

_NO_OPTIONS = SegmentationOptions()


def get_volleys(
    messages: Sequence[Message],
    options: Optional[SegmentationOptions] = None,
    config: Optional[SegmentationConfig] = None,
) -> List[Volley]:
    """
    Segment messages into volleys (phases 1 and 2).

    This is the primary entry point for analyzers; sessions are not
    computed.

    Parameters
    ----------
    messages : Sequence[Message]
        Messages in any order
    options : SegmentationOptions, optional
        Timeout overrides and the "Me" sender for pivot text
    config : SegmentationConfig, optional
        Percentiles and defaults for derived timeouts

    Returns
    -------
    List[Volley]
        Volleys in chronological order; empty for empty input
    """
    if not messages:
        return []

    options = options or _NO_OPTIONS
    turns = messages_to_turns(messages, options.turn_timeout, config)
    return turns_to_volleys(turns, options.volley_timeout, options.self_id, config)


def get_full_segmentation(
    messages: Sequence[Message],
    options: Optional[SegmentationOptions] = None,
    config: Optional[SegmentationConfig] = None,
) -> Segmentation:
    """
    Run all three phases.

    Parameters
    ----------
    messages : Sequence[Message]
        Messages in any order
    options : SegmentationOptions, optional
        Timeout overrides and the "Me" sender for pivot text
    config : SegmentationConfig, optional
        Percentiles and defaults for derived timeouts

    Returns
    -------
    Segmentation
        Turns, volleys, sessions and the timeout each phase applied
    """
    options = options or _NO_OPTIONS
    config = resolve_config(config)

    ordered = sort_messages(messages)
    turn_timeout = options.turn_timeout
    if turn_timeout is None:
        turn_timeout = derive_turn_timeout(ordered, config)
    turns = messages_to_turns(ordered, turn_timeout, config)

    volley_timeout = options.volley_timeout
    if volley_timeout is None:
        volley_timeout = derive_volley_timeout(turns, config)
    volleys = turns_to_volleys(turns, volley_timeout, options.self_id, config)

    session_timeout = options.session_timeout
    if session_timeout is None:
        session_timeout = derive_session_timeout(volleys, config)
    sessions = volleys_to_sessions(volleys, session_timeout, config)

    logger.debug(
        "Segmented %d messages: %d turns (%.1fs), %d volleys (%.1fs), %d sessions (%.1fs)",
        len(ordered), len(turns), turn_timeout, len(volleys), volley_timeout,
        len(sessions), session_timeout,
    )

    return Segmentation(
        turns=turns,
        volleys=volleys,
        sessions=sessions,
        timeouts=TimeoutTriple(
            turn_timeout=turn_timeout,
            threadlet_timeout=volley_timeout,
            session_timeout=session_timeout,
        ),
    )


class ConversationSegmenter:
    """
    Segmenter bound to one config and one set of default options.

    A convenience for callers that configure once and segment many message
    lists. Instances hold no per-call state and can be shared.

    Attributes
    ----------
    config : SegmentationConfig
        Percentiles and defaults for derived timeouts
    options : SegmentationOptions
        Overrides applied to every call
    """

    def __init__(
        self,
        config: Optional[SegmentationConfig] = None,
        options: Optional[SegmentationOptions] = None,
    ):
        self.config = resolve_config(config)
        self.options = options or _NO_OPTIONS

    def volleys(self, messages: Sequence[Message]) -> List[Volley]:
        """Segment messages into volleys."""
        return get_volleys(messages, self.options, self.config)

    def segment(self, messages: Sequence[Message]) -> Segmentation:
        """Run the full three-phase segmentation."""
        return get_full_segmentation(messages, self.options, self.config)
