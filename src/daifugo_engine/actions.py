"""
Action models: the request side of the engine API.
"""

from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field, ValidationError

from .engine import DaifugoEngine
from .serialization import MatchSnapshot


class ActionType(str, Enum):
    """Inbound action types."""
    ADD_PLAYER = "add_player"
    REMOVE_PLAYER = "remove_player"
    START = "start"
    PLAY = "play"
    PASS = "pass"
    TRANSFER = "transfer"
    DISCARD = "discard"
    SKIP_EFFECT = "skip_effect"
    RETURN_TO_LOBBY = "return_to_lobby"


class BaseAction(BaseModel):
    """Base action model."""
    type: ActionType


class TurnAction(BaseAction):
    """Action taken on behalf of a seated player."""
    player_id: Optional[str] = None


class AddPlayerAction(BaseAction):
    type: ActionType = ActionType.ADD_PLAYER
    name: str = Field(..., min_length=1, max_length=30)


class RemovePlayerAction(BaseAction):
    type: ActionType = ActionType.REMOVE_PLAYER
    player_id: str = Field(..., min_length=1)


class StartAction(BaseAction):
    type: ActionType = ActionType.START


class PlayAction(TurnAction):
    type: ActionType = ActionType.PLAY
    cards: List[str] = Field(..., min_length=1, max_length=13)


class PassAction(TurnAction):
    type: ActionType = ActionType.PASS


class TransferAction(TurnAction):
    """Resolve a pending 7-transfer."""
    type: ActionType = ActionType.TRANSFER
    cards: List[str] = Field(..., min_length=1)


class DiscardAction(TurnAction):
    """Resolve a pending 10-discard."""
    type: ActionType = ActionType.DISCARD
    cards: List[str] = Field(..., min_length=1)


class SkipEffectAction(TurnAction):
    type: ActionType = ActionType.SKIP_EFFECT


class ReturnToLobbyAction(BaseAction):
    type: ActionType = ActionType.RETURN_TO_LOBBY


Action = Union[
    AddPlayerAction,
    RemovePlayerAction,
    StartAction,
    PlayAction,
    PassAction,
    TransferAction,
    DiscardAction,
    SkipEffectAction,
    ReturnToLobbyAction
]

ACTION_MODELS = {
    ActionType.ADD_PLAYER: AddPlayerAction,
    ActionType.REMOVE_PLAYER: RemovePlayerAction,
    ActionType.START: StartAction,
    ActionType.PLAY: PlayAction,
    ActionType.PASS: PassAction,
    ActionType.TRANSFER: TransferAction,
    ActionType.DISCARD: DiscardAction,
    ActionType.SKIP_EFFECT: SkipEffectAction,
    ActionType.RETURN_TO_LOBBY: ReturnToLobbyAction,
}


def parse_action(data: Dict[str, Any]) -> Action:
    """
    Parse raw action data into the matching action model.

    Args:
        data: Raw action data, e.g. decoded JSON

    Returns:
        Parsed action model

    Raises:
        ValueError: If the action type is unknown or the data is malformed
    """
    action_type = data.get("type")

    if not action_type:
        raise ValueError("Missing action type")

    try:
        action_type = ActionType(action_type)
    except ValueError:
        raise ValueError(f"Invalid action type: {action_type}")

    action_class = ACTION_MODELS[action_type]

    try:
        return action_class(**data)
    except ValidationError as e:
        raise ValueError(f"Invalid action data: {e}")


def apply_action(engine: DaifugoEngine, action: Action) -> MatchSnapshot:
    """
    Apply a parsed action to the engine.

    Returns:
        The snapshot after the action

    Raises:
        GameError: If the engine rejects the action
    """
    if isinstance(action, AddPlayerAction):
        engine.add_player(action.name)
        return engine.snapshot()
    elif isinstance(action, RemovePlayerAction):
        return engine.remove_player(action.player_id)
    elif isinstance(action, StartAction):
        return engine.start_game()
    elif isinstance(action, PlayAction):
        return engine.play_cards(action.cards, action.player_id)
    elif isinstance(action, PassAction):
        return engine.pass_turn(action.player_id)
    elif isinstance(action, TransferAction):
        return engine.resolve_transfer(action.cards, action.player_id)
    elif isinstance(action, DiscardAction):
        return engine.resolve_discard(action.cards, action.player_id)
    elif isinstance(action, SkipEffectAction):
        return engine.skip_pending_effect(action.player_id)
    elif isinstance(action, ReturnToLobbyAction):
        return engine.return_to_lobby()
    else:
        raise ValueError(f"Unhandled action type: {type(action)}")
