"""
Extractors for loading message lists from files.
"""

from .messages import MessageFileExtractor

__all__ = [
    "MessageFileExtractor",
]
