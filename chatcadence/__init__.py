"""
chatcadence: adaptive turn, volley and session segmentation of chat logs.
"""
from chatcadence.core.models import (
    GapStats,
    Message,
    Segmentation,
    SegmentationOptions,
    Session,
    TimeoutTriple,
    Turn,
    Volley,
)
from chatcadence.segmentation import (
    ConversationSegmenter,
    get_full_segmentation,
    get_volleys,
)

__version__ = "0.1.0"

__all__ = [
    "Message",
    "Turn",
    "Volley",
    "Session",
    "TimeoutTriple",
    "GapStats",
    "SegmentationOptions",
    "Segmentation",
    "ConversationSegmenter",
    "get_volleys",
    "get_full_segmentation",
]
