"""Message archive use-cases."""

from .dto import MessageCreateIn, MessageOut, MessageSearchIn
from .formatting import render_markdown
from .service import MessageService

__all__ = ["MessageCreateIn", "MessageOut", "MessageSearchIn", "MessageService", "render_markdown"]
