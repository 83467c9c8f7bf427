"""
Deck, shuffling and dealing utilities.
"""

import logging
import random
from typing import Dict, List, Optional, Sequence

from .comparator import strength_key
from .constants import DECK_SIZE, NORMAL_ORDER, SUITS
from .errors import INTERNAL_ERROR, GameError
from .models import Card, MatchState, Player

logger = logging.getLogger(__name__)


def create_deck() -> List[Card]:
    """Create the 53-card deck: 52 standard cards plus one joker."""
    deck = []

    for suit in SUITS:
        for rank in NORMAL_ORDER:
            deck.append(Card.of(rank, suit))

    deck.append(Card.joker())

    return deck


class Deck:
    """An ordered, consumable pile of cards."""

    def __init__(self, cards: Optional[Sequence[Card]] = None):
        self.cards: List[Card] = list(cards) if cards is not None else create_deck()

    def shuffle(self, rng: Optional[random.Random] = None) -> None:
        (rng or random).shuffle(self.cards)

    def draw(self) -> Optional[Card]:
        """Remove and return the front card, or None when the deck is empty."""
        if not self.cards:
            return None
        return self.cards.pop(0)

    def __len__(self) -> int:
        return len(self.cards)


def sort_hand(hand: Sequence[Card], revolution: bool = False, reversal: bool = False) -> List[Card]:
    """
    Sort a hand by strength, strongest first.

    Args:
        hand: Cards to sort
        revolution: Whether revolution is active
        reversal: Whether eleven-back is active

    Returns:
        Sorted copy of the hand; jokers lead, ties keep their order
    """
    return sorted(hand, key=lambda card: strength_key(card, revolution, reversal))


def deal_cards(deck: Deck, players: List[Player], rng: random.Random) -> Dict[str, List[Card]]:
    """
    Deal the whole deck to the players.

    Every player gets ``len(deck) // n`` cards in seat order; each leftover
    card then goes to a seat drawn uniformly at random.

    Args:
        deck: Shuffled deck to deal from
        players: Players in seat order
        rng: Random source for the leftover cards

    Returns:
        Dictionary mapping player_id to their dealt cards
    """
    if not players:
        return {}

    player_count = len(players)
    base_count = len(deck) // player_count
    remainder = len(deck) % player_count

    hands: Dict[str, List[Card]] = {player.id: [] for player in players}

    for player in players:
        for _ in range(base_count):
            hands[player.id].append(_draw_or_fail(deck))

    for _ in range(remainder):
        lucky = players[rng.randrange(player_count)]
        hands[lucky.id].append(_draw_or_fail(deck))

    logger.debug(f"Dealt {sum(len(h) for h in hands.values())} cards to {player_count} players")
    return hands


def _draw_or_fail(deck: Deck) -> Card:
    card = deck.draw()
    if card is None:
        raise GameError(INTERNAL_ERROR, "Deck ran out of cards while dealing")
    return card


def validate_deck_integrity(state: MatchState) -> bool:
    """
    Validate that all cards are accounted for and no duplicates exist.

    Cards live in exactly one of: a player's hand, the field, the discard
    pile or the undealt deck.
    """
    all_cards: List[Card] = []

    for player in state.players:
        all_cards.extend(player.hand)

    all_cards.extend(state.field_state.last_played_cards)
    all_cards.extend(state.discard_pile)
    all_cards.extend(state.deck)

    ids = [card.id for card in all_cards]
    expected = {card.id for card in create_deck()}

    return len(ids) == DECK_SIZE and len(set(ids)) == len(ids) and set(ids) == expected
