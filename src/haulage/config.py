"""Configuration loading for logistics settings.

This module provides Pydantic-based configuration loading from environment
variables and .env files, plus the matching policy models that decide how
idle haulers are paired with requests.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Annotated, Literal

from pydantic import BaseModel, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class GreedyPolicy(BaseModel):
    """Single-sided greedy selection for low-capacity haulers."""

    kind: Literal["greedy"] = "greedy"


class StableMatchingPolicy(BaseModel):
    """Deferred-acceptance matching for high-capacity haulers.

    Attributes:
        max_rounds: Safety cap on proposals. Deferred acceptance always
            terminates within haulers * requests proposals, so the cap only
            matters for pathological inputs.
    """

    kind: Literal["stable"] = "stable"
    max_rounds: int = Field(default=100_000, ge=1)


MatchingPolicy = Annotated[GreedyPolicy | StableMatchingPolicy, Field(discriminator="kind")]


class LogisticsSettings(BaseSettings):
    """Tunable constants for the logistics core and the colony glue around it.

    Environment Variables (all prefixed with HAULAGE_):
        CARRY_THRESHOLD: Capacity at or above which a hauler counts as large
        SMALL_POLICY / LARGE_POLICY: JSON policy per capacity class,
            e.g. '{"kind": "greedy"}' to run every hauler greedily
        MIN_TRAVEL_TIME: Floor for travel time in value computations (ticks)
        RANGE_TO_PATH_HEURISTIC: Multiplier applied to distances before use as ETA
        REQUEST_TTL: Ticks a request survives without re-registration
        DROPPED_RESOURCE_THRESHOLD: Pile size that triggers a pickup request

    Example:
        >>> settings = LogisticsSettings()  # Loads from environment
        >>> settings = LogisticsSettings(carry_threshold=400)
    """

    model_config = SettingsConfigDict(
        env_prefix="HAULAGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Matching
    carry_threshold: int = Field(
        default=800,
        ge=1,
        description="Carry capacity at which a hauler switches to stable matching",
    )
    small_policy: MatchingPolicy = Field(default_factory=GreedyPolicy)
    large_policy: MatchingPolicy = Field(default_factory=StableMatchingPolicy)

    # Prediction
    min_travel_time: int = Field(
        default=1,
        ge=1,
        description="Travel time floor used when dividing by travel time",
    )
    range_to_path_heuristic: float = Field(
        default=1.1,
        ge=1.0,
        le=3.0,
        description="Multiplier turning oracle distance into an ETA estimate",
    )
    request_ttl: int = Field(
        default=0,
        ge=0,
        description="Ticks a request survives without being registered again",
    )

    # Producer/consumer glue
    dropped_resource_threshold: int = Field(default=200, ge=0)
    larva_output_threshold: float = Field(default=0.5, gt=0.0, le=1.0)
    output_threshold: float = Field(default=0.8, gt=0.0, le=1.0)
    transport_capacity_per_level: int = Field(default=200, ge=1)
    link_miner_capacity: int = Field(default=150, ge=0)

    # Transport demand estimate
    carry_capacity_per_part: int = Field(default=50, ge=1)
    larva_round_trip_scaling: float = Field(default=1.5, gt=0.0)
    round_trip_scaling: float = Field(default=1.75, gt=0.0)

    @model_validator(mode="after")
    def check_thresholds(self) -> LogisticsSettings:
        """Early-stage outputs should not wait longer than mature ones."""
        if self.larva_output_threshold > self.output_threshold:
            raise ValueError("larva_output_threshold must not exceed output_threshold")
        return self

    def select_policy(self, capacity: int) -> GreedyPolicy | StableMatchingPolicy:
        """Pick the matching policy for a hauler of the given carry capacity."""
        if capacity >= self.carry_threshold:
            return self.large_policy
        return self.small_policy

    def __repr__(self) -> str:
        return (
            f"LogisticsSettings("
            f"carry_threshold={self.carry_threshold}, "
            f"min_travel_time={self.min_travel_time}, "
            f"range_to_path={self.range_to_path_heuristic}, "
            f"request_ttl={self.request_ttl}"
            f")"
        )


@lru_cache
def get_settings() -> LogisticsSettings:
    """Get cached logistics settings.

    Loads configuration once and caches it for subsequent calls.
    To reload configuration, call get_settings.cache_clear() first.
    """
    settings = LogisticsSettings()
    logger.info("Loaded logistics settings: %r", settings)
    return settings
