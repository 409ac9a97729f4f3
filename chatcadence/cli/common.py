"""
Shared CLI options and helpers.
"""

from __future__ import annotations

from typing import List

import click
from pydantic import ValidationError

from chatcadence.core.models import Message, SegmentationOptions
from chatcadence.extractors import MessageFileExtractor


def messages_argument(f):
    """Positional PATH argument pointing at a JSON/JSONL message file."""
    return click.argument("path", type=click.Path(exists=True, dir_okay=False))(f)


def timeout_options(f):
    """Timeout override and self-id options shared by segmentation commands."""
    f = click.option("--session-timeout", type=click.FloatRange(min=0), default=None, help="Session timeout in seconds (default: derived)")(f)
    f = click.option("--volley-timeout", type=click.FloatRange(min=0), default=None, help="Volley timeout in seconds (default: derived)")(f)
    f = click.option("--turn-timeout", type=click.FloatRange(min=0), default=None, help="Turn timeout in seconds (default: derived)")(f)
    f = click.option("--self-id", default=None, help="Sender id rendered as 'Me' in transcripts")(f)
    return f


def load_messages(path: str) -> List[Message]:
    """Load messages, turning read/validation failures into click errors."""
    try:
        return MessageFileExtractor(path).load()
    except (ValueError, ValidationError) as e:
        raise click.ClickException(f"Could not load messages from {path}: {e}") from e


def build_options(
    self_id: str | None,
    turn_timeout: float | None,
    volley_timeout: float | None,
    session_timeout: float | None,
    messages: List[Message],
) -> SegmentationOptions:
    """
    Build segmentation options from CLI flags.

    ``--self-id`` arrives as text; it is matched against the message sender
    ids so numeric ids still compare equal.
    """
    resolved_self = None
    if self_id is not None:
        senders = {str(m.sender_id): m.sender_id for m in messages}
        if self_id not in senders:
            raise click.BadParameter(
                f"'{self_id}' is not a sender in this file", param_hint="--self-id"
            )
        resolved_self = senders[self_id]

    return SegmentationOptions(
        turn_timeout=turn_timeout,
        volley_timeout=volley_timeout,
        session_timeout=session_timeout,
        self_id=resolved_self,
    )
