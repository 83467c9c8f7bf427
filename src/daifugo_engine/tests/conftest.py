"""
Shared fixtures for engine tests.
"""

import random

import pytest

from daifugo_engine.engine import DaifugoEngine
from daifugo_engine.shuffle import create_deck

DECK = {card.id: card for card in create_deck()}


@pytest.fixture
def make_engine():
    """Build a started engine with a seeded deal."""
    def _make(player_count=3, seed=7, rules=None):
        engine = DaifugoEngine(rules=rules, rng=random.Random(seed))
        for i in range(player_count):
            engine.add_player(f"P{i}")
        engine.start_game()
        return engine
    return _make


@pytest.fixture
def rig():
    """Replace every hand with the given card ids and set whose turn it is."""
    def _rig(engine, *hands, current=0):
        for player, hand in zip(engine.state.players, hands):
            player.hand = [DECK[card_id] for card_id in hand]
        engine.state.current_player_index = current
        return engine
    return _rig
