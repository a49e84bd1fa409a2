from message_archive.models.message import MessageRecord
from message_archive.models.token import TokenRecord

__all__ = [
    "MessageRecord",
    "TokenRecord",
]
