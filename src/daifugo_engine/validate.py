"""
Play legality, lock detection and playable-card hints.
"""

from collections import defaultdict
from typing import Dict, List, Optional, Sequence, Set

from .comparator import can_beat, is_reversed, next_sequence_rank
from .errors import (
    COUNT_MISMATCH, EMPTY_SELECTION, PATTERN_MISMATCH, RANK_TOO_LOW,
    SEQUENCE_LOCK_VIOLATION, SUIT_LOCK_VIOLATION,
)
from .models import Card, FieldState, SequenceLock
from .shuffle import sort_hand


def detect_pattern(cards: Sequence[Card]) -> Optional[int]:
    """Return the single rank of a group, or None if empty or mixed."""
    ranks = {card.rank for card in cards}
    if len(ranks) != 1:
        return None
    return next(iter(ranks))


def can_play_with_sequence_lock(
    cards: Sequence[Card],
    sequence_lock: SequenceLock,
    revolution: bool = False,
    reversal: bool = False
) -> bool:
    """Check if cards continue an active sequence lock."""
    if len(cards) != sequence_lock.required_count:
        return False
    if not cards:
        return False

    # Jokers stand in for the missing rank
    if any(card.is_joker for card in cards):
        return True

    expected = next_sequence_rank(sequence_lock.anchor_rank, revolution, reversal)
    return cards[0].rank == expected


def check_play(cards: Sequence[Card], field_state: FieldState) -> Optional[str]:
    """
    Validate a candidate group against the field.

    Args:
        cards: Cards the player wants to play
        field_state: Current field

    Returns:
        None if the play is legal, otherwise the rejection code
    """
    if not cards:
        return EMPTY_SELECTION

    if detect_pattern(cards) is None:
        return PATTERN_MISMATCH

    if field_state.is_empty:
        return None

    if len(cards) != field_state.last_played_count:
        return COUNT_MISMATCH

    if field_state.suit_lock is not None:
        if any(not card.is_joker and card.suit != field_state.suit_lock for card in cards):
            return SUIT_LOCK_VIOLATION

    if field_state.sequence_lock is not None:
        if not can_play_with_sequence_lock(
            cards,
            field_state.sequence_lock,
            field_state.is_revolution,
            field_state.is_reversal
        ):
            return SEQUENCE_LOCK_VIOLATION

    if not can_beat(
        cards,
        field_state.last_played_cards,
        field_state.is_revolution,
        field_state.is_reversal
    ):
        return RANK_TOO_LOW

    return None


def can_play(cards: Sequence[Card], field_state: FieldState) -> bool:
    """Check if a group of cards may be played on the field."""
    return check_play(cards, field_state) is None


def detect_suit_lock(new_cards: Sequence[Card], field_state: FieldState) -> Optional[str]:
    """
    Detect a suit lock formed by playing ``new_cards`` on the field.

    The field must still hold the previous group. A lock forms when both
    groups carry exactly one non-joker suit and it is the same suit; the
    opening play of a trick never locks.
    """
    if field_state.is_empty:
        return None

    new_suits = {card.suit for card in new_cards if not card.is_joker}
    field_suits = {card.suit for card in field_state.last_played_cards if not card.is_joker}

    if len(new_suits) != 1 or len(field_suits) != 1:
        return None

    if new_suits == field_suits:
        return next(iter(new_suits))
    return None


def detect_sequence_lock(
    new_cards: Sequence[Card],
    field_state: FieldState,
    revolution: bool = False,
    reversal: bool = False
) -> Optional[SequenceLock]:
    """
    Detect a sequence lock formed or continued by playing ``new_cards``.

    The field must still hold the previous group.
    """
    if field_state.is_empty or not new_cards:
        return None

    new_rank = detect_pattern(new_cards)
    if new_rank is None:
        return None
    ascending = not is_reversed(revolution, reversal)

    existing = field_state.sequence_lock
    if existing is not None:
        if any(card.is_joker for card in new_cards):
            return None
        if new_rank == next_sequence_rank(existing.anchor_rank, revolution, reversal):
            return SequenceLock(
                anchor_rank=new_rank,
                required_count=existing.required_count,
                ascending=ascending
            )
        return None

    field_rank = detect_pattern(field_state.last_played_cards)
    if field_rank is None:
        return None

    if any(card.is_joker for card in new_cards):
        return None
    if any(card.is_joker for card in field_state.last_played_cards):
        return None

    if len(new_cards) != field_state.last_played_count:
        return None

    if new_rank == next_sequence_rank(field_rank, revolution, reversal):
        return SequenceLock(
            anchor_rank=new_rank,
            required_count=len(new_cards),
            ascending=ascending
        )
    return None


def _group_by_rank(hand: Sequence[Card]) -> Dict[int, List[Card]]:
    groups: Dict[int, List[Card]] = defaultdict(list)
    for card in hand:
        groups[card.rank].append(card)
    return groups


def playable_card_ids(hand: Sequence[Card], field_state: FieldState) -> Set[str]:
    """
    Get the ids of cards that could take part in a legal play right now.

    This is a hint for selection UIs, not a legality check: a whole rank is
    marked when its strongest cards, in the required count, can be played.
    """
    if field_state.is_empty:
        return {card.id for card in hand}

    required_count = field_state.last_played_count
    playable: Set[str] = set()

    for same_rank in _group_by_rank(hand).values():
        if len(same_rank) < required_count:
            continue
        ordered = sort_hand(same_rank, field_state.is_revolution, field_state.is_reversal)
        if can_play(ordered[:required_count], field_state):
            playable.update(card.id for card in same_rank)

    return playable


def can_play_card(card: Card, hand: Sequence[Card], field_state: FieldState) -> bool:
    """Check if a single card could be part of some legal play from the hand."""
    if field_state.is_empty:
        return True

    same_rank = [c for c in hand if c.rank == card.rank]
    for count in range(1, len(same_rank) + 1):
        if can_play(same_rank[:count], field_state):
            return True
    return False
