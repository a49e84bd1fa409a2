"""Plain-text renderings of search results."""

from __future__ import annotations

from collections.abc import Iterable

from message_archive.services.messages.dto import MessageOut

#: Separator written before every message header line.
SEPARATOR = "-------------"

SENT_AT_FORMAT = "%Y/%m/%d %H:%M:%S"


def render_markdown(messages: Iterable[MessageOut]) -> str:
    """
    Render messages as a markdown transcript grouped by channel.

    Channels appear in order of first appearance and keep the input order of
    their messages, so a search result (newest first) stays newest first
    within each channel.

    Layout per channel::

        # <channel>
        ------------- 2024/01/02 03:04:05 alice
        hello
        <blank>
        <blank>

    :param messages: Messages in display order.
    :type messages: Iterable[MessageOut]
    :returns: Markdown document; empty string for no messages.
    :rtype: str
    """
    channels: dict[str, list[MessageOut]] = {}
    for msg in messages:
        channels.setdefault(msg.channel_id, []).append(msg)

    parts: list[str] = []
    for channel_id, items in channels.items():
        parts.append(f"# {channel_id}\n")
        for msg in items:
            parts.append(f"{SEPARATOR} {msg.sent_at.strftime(SENT_AT_FORMAT)} {msg.sender}\n")
            parts.append(f"{msg.content}\n\n")
        parts.append("\n")
    return "".join(parts)
