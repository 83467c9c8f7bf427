"""Daifugo rule engine."""

from .engine import DaifugoEngine
from .errors import GameError
from .models import Card, FieldState, SequenceLock
from .rules import RuleConfig, create_rules, default_rules
from .serialization import MatchSnapshot

__all__ = [
    "Card",
    "DaifugoEngine",
    "FieldState",
    "GameError",
    "MatchSnapshot",
    "RuleConfig",
    "SequenceLock",
    "create_rules",
    "default_rules",
]
