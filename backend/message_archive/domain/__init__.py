"""Plain entities returned by the repositories."""

from message_archive.domain.message import KeywordMode, Message, SearchCriteria
from message_archive.domain.token import Token

__all__ = ["KeywordMode", "Message", "SearchCriteria", "Token"]
