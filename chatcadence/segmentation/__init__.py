"""
Adaptive conversation segmentation.

Splits a flat, timestamped message list into a hierarchy:

- turns: consecutive messages from one sender
- volleys: back-and-forth exchanges of turns
- sessions: longer conversational periods of volleys

Boundaries come from per-conversation timeouts derived from the gap
distribution at each level (Kneedle knee detection with percentile
fallbacks), not from global constants.
"""
from .kneedle import (
    analyze_gaps,
    calculate_timeouts,
    find_knee_point,
    get_adaptive_timeout,
    get_percentile_timeout,
)
from .turns import messages_to_turns
from .volleys import build_volley, create_volley_id, render_pivot_text, turns_to_volleys
from .sessions import build_session, volleys_to_sessions
from .segmenter import ConversationSegmenter, get_full_segmentation, get_volleys

__all__ = [
    # Threshold estimation
    "find_knee_point",
    "get_percentile_timeout",
    "get_adaptive_timeout",
    "calculate_timeouts",
    "analyze_gaps",
    # Phases
    "messages_to_turns",
    "build_volley",
    "create_volley_id",
    "render_pivot_text",
    "turns_to_volleys",
    "build_session",
    "volleys_to_sessions",
    # Orchestration
    "ConversationSegmenter",
    "get_volleys",
    "get_full_segmentation",
]
