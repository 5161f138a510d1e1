"""
Game rule configuration and validation.
"""

import os
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from .constants import STALL_ADVANCE, STALL_DRAW, STALL_HOLD


class RuleConfig(BaseModel):
    """Configuration for game rules and settings."""

    reset_delay: float = Field(
        default=5.0,
        ge=0,
        le=60,
        description="Seconds between the game-over broadcast and the reset"
    )
    auto_rematch: bool = Field(
        default=True,
        description="Deal a new game to both seated players after a post-win reset"
    )
    stalled_pass_policy: str = Field(
        default=STALL_ADVANCE,
        description="What a double pass does when the deck is empty: hold, advance or draw"
    )
    seed: Optional[int] = Field(
        default=None,
        description="Seed for deterministic shuffling and starting-player choice"
    )

    @field_validator('stalled_pass_policy')
    @classmethod
    def validate_stalled_pass_policy(cls, v):
        """Validate the stalled double-pass policy name."""
        v = v.strip().lower()
        if v not in (STALL_HOLD, STALL_ADVANCE, STALL_DRAW):
            raise ValueError(f'stalled_pass_policy must be one of hold, advance, draw (got {v!r})')
        return v


# Default configuration instance
default_rules = RuleConfig()


def create_rules(**overrides) -> RuleConfig:
    """Create a RuleConfig with optional overrides."""
    config_dict = default_rules.model_dump()
    config_dict.update(overrides)
    return RuleConfig(**config_dict)


def rules_from_env() -> RuleConfig:
    """Build rules from DUEL_* environment variables."""
    overrides = {}
    if os.getenv("DUEL_RESET_DELAY"):
        overrides["reset_delay"] = float(os.getenv("DUEL_RESET_DELAY"))
    if os.getenv("DUEL_AUTO_REMATCH"):
        overrides["auto_rematch"] = os.getenv("DUEL_AUTO_REMATCH").lower() in ("1", "true", "yes")
    if os.getenv("DUEL_STALLED_PASS_POLICY"):
        overrides["stalled_pass_policy"] = os.getenv("DUEL_STALLED_PASS_POLICY")
    if os.getenv("DUEL_SEED"):
        overrides["seed"] = int(os.getenv("DUEL_SEED"))
    return create_rules(**overrides)
