"""
Special card effects.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

from .constants import (
    RANK_EIGHT, RANK_FIVE, RANK_JACK, RANK_SEVEN, RANK_TEN, REVOLUTION_COUNT,
)
from .models import Card
from .rules import RuleConfig, default_rules


class EffectKind(str, Enum):
    """Effect triggered by a played group."""
    NONE = "none"
    CLEAR = "clear"            # 8: flush the field, same player leads
    SKIP = "skip"              # 5: skip N players
    TRANSFER = "transfer"      # 7: hand N cards to the next seat
    DISCARD = "discard"        # 10: discard N cards
    REVERSAL = "reversal"      # J: eleven-back until the field clears
    REVOLUTION = "revolution"  # four or more of a rank


@dataclass(frozen=True)
class Effect:
    kind: EffectKind
    count: int = 0

    @property
    def is_none(self) -> bool:
        return self.kind == EffectKind.NONE


NO_EFFECT = Effect(EffectKind.NONE)


def classify_effect(cards: Sequence[Card], rules: Optional[RuleConfig] = None) -> Effect:
    """
    Classify the effect of a played group.

    The dedicated ranks take precedence, so four 8s clear the field rather
    than starting a revolution.

    Args:
        cards: Rank-homogeneous group that was just played
        rules: Rule switches; disabled effects classify as none

    Returns:
        The effect to resolve
    """
    if not cards:
        return NO_EFFECT

    rules = rules or default_rules
    rank = cards[0].rank
    count = len(cards)

    if rank == RANK_EIGHT:
        return Effect(EffectKind.CLEAR) if rules.enable_clear else NO_EFFECT
    if rank == RANK_FIVE:
        return Effect(EffectKind.SKIP, count) if rules.enable_skip else NO_EFFECT
    if rank == RANK_SEVEN:
        return Effect(EffectKind.TRANSFER, count) if rules.enable_transfer else NO_EFFECT
    if rank == RANK_TEN:
        return Effect(EffectKind.DISCARD, count) if rules.enable_discard else NO_EFFECT
    if rank == RANK_JACK:
        return Effect(EffectKind.REVERSAL) if rules.enable_reversal else NO_EFFECT
    if count >= REVOLUTION_COUNT and rules.enable_revolution:
        return Effect(EffectKind.REVOLUTION)
    return NO_EFFECT
