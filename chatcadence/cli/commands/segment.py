"""
Segmentation CLI commands.
"""

from __future__ import annotations

import json

import click

from chatcadence.cli.common import build_options, load_messages, messages_argument, timeout_options
from chatcadence.core.utils import compute_gaps, format_duration, iso_utc
from chatcadence.segmentation import analyze_gaps, calculate_timeouts, get_full_segmentation, get_volleys
from chatcadence.segmentation.turns import sort_messages


def _volley_line(volley) -> str:
    participants = ",".join(str(p) for p in volley.participants)
    return (
        f"{volley.id}  {iso_utc(volley.start_time)} -> {iso_utc(volley.end_time)}"
        f"  [{participants}]  depth={volley.depth} messages={volley.message_count}"
    )


@click.group()
def segment():
    """Turn, volley and session segmentation of a message file."""


@segment.command("volleys")
@messages_argument
@timeout_options
@click.option("--json", "as_json", is_flag=True, help="Print volleys as JSON")
def volleys(path, self_id, turn_timeout, volley_timeout, session_timeout, as_json):
    """List the volleys in a message file."""
    messages = load_messages(path)
    options = build_options(self_id, turn_timeout, volley_timeout, session_timeout, messages)
    result = get_volleys(messages, options)

    if as_json:
        click.echo(json.dumps([v.to_dict() for v in result], indent=2))
        return

    if not result:
        click.secho("No messages found.", fg="yellow")
        return
    for volley in result:
        click.echo(_volley_line(volley))
    click.secho(f"{len(result)} volleys from {len(messages)} messages", fg="green")


@segment.command("sessions")
@messages_argument
@timeout_options
@click.option("--json", "as_json", is_flag=True, help="Print the full segmentation as JSON")
def sessions(path, self_id, turn_timeout, volley_timeout, session_timeout, as_json):
    """List sessions and the volleys inside them."""
    messages = load_messages(path)
    options = build_options(self_id, turn_timeout, volley_timeout, session_timeout, messages)
    result = get_full_segmentation(messages, options)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        return

    t = result.timeouts
    click.echo(
        f"Timeouts: turn={format_duration(t.turn_timeout)} "
        f"volley={format_duration(t.threadlet_timeout)} "
        f"session={format_duration(t.session_timeout)}"
    )
    for i, session in enumerate(result.sessions, start=1):
        click.secho(
            f"Session {i}: {iso_utc(session.start_time)} "
            f"({session.duration_minutes:.1f} min, {len(session.volleys)} volleys, "
            f"{session.message_count} messages)",
            bold=True,
        )
        for volley in session.volleys:
            click.echo(f"  - {_volley_line(volley)}")
    click.secho(
        f"{len(result.turns)} turns, {len(result.volleys)} volleys, {len(result.sessions)} sessions",
        fg="green",
    )


@segment.command("gaps")
@messages_argument
def gaps(path):
    """Show the message gap distribution and the timeouts it yields."""
    messages = load_messages(path)
    message_gaps = compute_gaps(m.sent_at for m in sort_messages(messages))
    stats = analyze_gaps(message_gaps)
    timeouts = calculate_timeouts(message_gaps)

    click.echo(f"Gaps: {stats.count}")
    if stats.count:
        click.echo(f"  min:    {format_duration(stats.min)}")
        click.echo(f"  median: {format_duration(stats.median)}")
        click.echo(f"  mean:   {format_duration(stats.mean)}")
        click.echo(f"  max:    {format_duration(stats.max)}")
        click.echo(f"  p70/p85/p95: {format_duration(stats.p70)} / {format_duration(stats.p85)} / {format_duration(stats.p95)}")
        if stats.knee_point is not None:
            click.echo(f"  knee:   {format_duration(stats.knee_point)}")
    click.echo("Timeouts:")
    for name, value in timeouts.to_dict().items():
        click.echo(f"  {name}: {value:g}s")


@segment.command("show")
@messages_argument
@click.argument("volley_id")
@timeout_options
def show(path, volley_id, self_id, turn_timeout, volley_timeout, session_timeout):
    """Print the transcript of one volley."""
    messages = load_messages(path)
    options = build_options(self_id, turn_timeout, volley_timeout, session_timeout, messages)

    matches = [v for v in get_volleys(messages, options) if v.id.startswith(volley_id)]
    if not matches:
        click.secho(f"No volley matching '{volley_id}'. Run: chatcadence segment volleys {path}", fg="yellow")
        raise click.Abort()
    if len(matches) > 1:
        raise click.UsageError(f"'{volley_id}' matches {len(matches)} volleys; use a longer prefix")

    volley = matches[0]
    click.echo(_volley_line(volley))
    click.echo()
    click.echo(volley.pivot_text)
