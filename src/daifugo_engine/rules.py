"""
Game rule configuration and validation.
"""

from typing import Optional

from pydantic import BaseModel, Field, field_validator

from .constants import MAX_PLAYERS, MIN_PLAYERS


class RuleConfig(BaseModel):
    """Configuration for game rules and settings."""

    min_players: int = Field(
        default=MIN_PLAYERS,
        ge=MIN_PLAYERS,
        le=MAX_PLAYERS,
        description="Minimum number of players required to start"
    )
    max_players: int = Field(
        default=MAX_PLAYERS,
        ge=MIN_PLAYERS,
        le=MAX_PLAYERS,
        description="Maximum number of players allowed"
    )
    seed: Optional[int] = Field(
        default=None,
        description="Seed for shuffling and leftover-card distribution"
    )
    enable_skip: bool = Field(default=True, description="5 skips as many players as fives played")
    enable_transfer: bool = Field(default=True, description="7 passes as many cards to the next seat")
    enable_clear: bool = Field(default=True, description="8 clears the field")
    enable_discard: bool = Field(default=True, description="10 discards as many cards")
    enable_reversal: bool = Field(default=True, description="J reverses strength until the field clears")
    enable_revolution: bool = Field(default=True, description="Four of a kind toggles revolution")
    enable_suit_lock: bool = Field(default=True, description="Consecutive same-suit plays lock the suit")
    enable_sequence_lock: bool = Field(default=True, description="Consecutive ranks lock the sequence")
    allow_skip_pending_effect: bool = Field(
        default=True,
        description="Whether a pending transfer or discard may be skipped"
    )

    @field_validator('max_players')
    @classmethod
    def validate_max_players(cls, v, info):
        """Validate maximum players doesn't go below minimum."""
        min_players = info.data.get('min_players', MIN_PLAYERS)
        if v < min_players:
            raise ValueError(f'max_players ({v}) must be >= min_players ({min_players})')
        return v

    def validate_player_count(self, player_count: int) -> bool:
        """Check if a player count is valid for this configuration."""
        return self.min_players <= player_count <= self.max_players


# Default configuration instance
default_rules = RuleConfig()


def create_rules(**overrides) -> RuleConfig:
    """Create a RuleConfig with optional overrides."""
    config_dict = default_rules.model_dump()
    config_dict.update(overrides)
    return RuleConfig(**config_dict)
