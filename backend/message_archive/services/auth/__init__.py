"""Request authentication."""

from .dto import GateDecision, GateState
from .gate import AuthGate, parse_bearer

__all__ = ["AuthGate", "GateDecision", "GateState", "parse_bearer"]
