"""
Configuration for the supply economy.

One EconomyConfig is built per simulation session and handed to every component
constructor. Precedence (lowest to highest):

    model defaults  <  YAML overlay  <  environment overrides

Usage:
    from supply_economy.config import load_config

    config = load_config()                   # defaults + $SUPPLY_ECONOMY_CONFIG_PATH
    config = load_config("economy.yaml")     # explicit overlay
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, Literal, Optional, Set, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, model_validator

logger = logging.getLogger(__name__)

CONFIG_PATH_ENV = "SUPPLY_ECONOMY_CONFIG_PATH"
SEED_ENV = "SUPPLY_ECONOMY_SEED"
LOG_LEVEL_ENV = "SUPPLY_ECONOMY_LOG_LEVEL"

# Sellable categories of the base game (vegetables, fruit, flowers, fish, animal
# products, artisan goods, forage, minerals...)
DEFAULT_VALID_CATEGORIES: Set[int] = {
    -2, -4, -5, -6, -12, -14, -15, -16, -23, -26, -27, -75, -79, -80, -81,
}


class LoggingSettings(BaseModel):
    level: str = "INFO"
    json_format: bool = Field(default=False, alias="json")
    destination: Literal["stdout", "stderr", "file"] = "stderr"
    filename: Optional[str] = None
    format: str = "%(asctime)s %(levelname)s %(name)s - %(message)s"

    model_config = ConfigDict(populate_by_name=True)


class EconomyConfig(BaseModel):
    """
    Tunables for supply generation, daily drift, price curve and replication.

    Supply is bounded to [min_supply, ceiling] where the ceiling is max_supply
    unless category_max_supply overrides it for the item's category.
    """

    min_supply: int = 0
    max_supply: int = 1000
    category_max_supply: Dict[int, int] = Field(default_factory=dict)
    std_dev_supply: float = Field(default=150.0, ge=0)

    min_delta: int = -30
    max_delta: int = 30
    std_dev_delta: float = Field(default=5.0, ge=0)

    # Price multiplier at max supply / at zero supply
    min_percentage: float = Field(default=0.2, ge=0)
    max_percentage: float = Field(default=1.3, ge=0)
    price_curve: Literal["linear"] = "linear"

    valid_categories: Set[int] = Field(default_factory=lambda: set(DEFAULT_VALID_CATEGORIES))

    seed: Optional[int] = None
    buffer_early_deltas: bool = True
    max_buffered_deltas: int = Field(default=1024, ge=1)
    state_key: str = "fse.economy"

    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    model_config = ConfigDict(extra="forbid")

    @model_validator(mode="after")
    def _check_ranges(self) -> "EconomyConfig":
        # The price curve divides by max_supply
        if self.max_supply <= 0:
            raise ValueError(f"max_supply must be positive, got {self.max_supply}")
        if self.min_supply >= self.max_supply:
            raise ValueError(
                f"min_supply ({self.min_supply}) must be below max_supply ({self.max_supply})"
            )
        if self.min_delta > self.max_delta:
            raise ValueError(
                f"min_delta ({self.min_delta}) must not exceed max_delta ({self.max_delta})"
            )
        if self.min_percentage > self.max_percentage:
            raise ValueError("min_percentage must not exceed max_percentage")
        for category, ceiling in self.category_max_supply.items():
            if ceiling <= self.min_supply:
                raise ValueError(
                    f"category {category} ceiling {ceiling} must be above min_supply"
                )
        return self

    @property
    def mean_supply(self) -> float:
        return (self.min_supply + self.max_supply) / 2

    @property
    def mean_delta(self) -> float:
        return (self.min_delta + self.max_delta) / 2

    def supply_ceiling(self, category: Optional[int] = None) -> int:
        """Upper supply bound for an item of the given category."""
        if category is not None and category in self.category_max_supply:
            return self.category_max_supply[category]
        return self.max_supply


def _read_overlay(path: Path) -> Dict[str, Any]:
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Config overlay {path} must contain a mapping, got {type(data).__name__}")
    return data


def load_config(path: Union[str, Path, None] = None) -> EconomyConfig:
    """
    Build an EconomyConfig from defaults, an optional YAML overlay and env overrides.

    Raises pydantic.ValidationError for invalid values and FileNotFoundError when an
    explicitly named overlay does not exist.
    """
    values: Dict[str, Any] = {}

    overlay_path = path or os.environ.get(CONFIG_PATH_ENV)
    if overlay_path:
        values.update(_read_overlay(Path(overlay_path)))
        logger.info("Loaded economy config overlay from %s", overlay_path)

    seed = os.environ.get(SEED_ENV)
    if seed:
        values["seed"] = int(seed)

    level = os.environ.get(LOG_LEVEL_ENV)
    if level:
        log_values = dict(values.get("logging") or {})
        log_values["level"] = level
        values["logging"] = log_values

    return EconomyConfig.model_validate(values)
