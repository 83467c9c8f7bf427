"""
Card strength comparison with support for revolution and eleven-back.
"""

from typing import Sequence, Tuple

from .models import Card


def is_reversed(revolution: bool, reversal: bool) -> bool:
    """Whether lower ranks currently beat higher ranks.

    Revolution and eleven-back cancel each other out, so the direction is
    the XOR of the two flags.
    """
    return revolution != reversal


def is_stronger(card: Card, other: Card, revolution: bool = False, reversal: bool = False) -> bool:
    """Check if ``card`` beats ``other`` under the current ordering."""
    if card.is_joker:
        return True
    if other.is_joker:
        return False

    if is_reversed(revolution, reversal):
        return card.rank < other.rank
    return card.rank > other.rank


def can_beat(
    cards: Sequence[Card],
    field_cards: Sequence[Card],
    revolution: bool = False,
    reversal: bool = False
) -> bool:
    """
    Check if a group of cards beats the group on the field.

    Groups are rank-homogeneous, so the first card of each side stands in
    for the whole group.
    """
    if not cards or not field_cards:
        return False

    if any(card.is_joker for card in cards):
        return True
    if any(card.is_joker for card in field_cards):
        return False

    return is_stronger(cards[0], field_cards[0], revolution, reversal)


def strength_key(card: Card, revolution: bool = False, reversal: bool = False) -> Tuple[int, int]:
    """Sort key putting the strongest card first (jokers always first)."""
    if card.is_joker:
        return (0, 0)
    if is_reversed(revolution, reversal):
        return (1, card.rank)
    return (1, -card.rank)


def next_sequence_rank(rank: int, revolution: bool = False, reversal: bool = False) -> int:
    """The rank that continues a sequence from ``rank`` in the strong direction."""
    return rank - 1 if is_reversed(revolution, reversal) else rank + 1
