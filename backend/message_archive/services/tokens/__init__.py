"""Bearer token use-cases."""

from .dto import TokenCreateIn, TokenOut
from .service import TokenService

__all__ = ["TokenCreateIn", "TokenOut", "TokenService"]
