"""Configuration management for the quick switcher."""

from pathlib import Path
from typing import Optional
import yaml
from loguru import logger
from pydantic import BaseModel, Field, field_validator

from .matcher import MatchWeights
from .ranker import RankingWeights
from .recents import MAX_RECENTS, RECENT_DESTINATIONS_KEY


class RankingConfig(BaseModel):
    match_ratio_weight: float = 0.4
    consecutive_weight: float = 0.4
    length_weight: float = 0.2
    secondary_discount: float = 0.8
    recency_boost: float = 1.1

    @field_validator('match_ratio_weight', 'consecutive_weight', 'length_weight', 'secondary_discount')
    @classmethod
    def validate_unit_interval(cls, v: float) -> float:
        if not 0 <= v <= 1:
            raise ValueError("must be between 0 and 1")
        return v

    @field_validator('recency_boost')
    @classmethod
    def validate_boost(cls, v: float) -> float:
        if v < 1:
            raise ValueError("recency_boost must be at least 1")
        return v

    def to_weights(self) -> RankingWeights:
        return RankingWeights(
            match=MatchWeights(
                match_ratio=self.match_ratio_weight,
                consecutive=self.consecutive_weight,
                length=self.length_weight,
            ),
            secondary_discount=self.secondary_discount,
            recency_boost=self.recency_boost,
        )


class RecentsConfig(BaseModel):
    max_recents: int = MAX_RECENTS
    storage_key: str = RECENT_DESTINATIONS_KEY
    path: Path = Path.home() / ".local" / "share" / "quickswitch" / "recents.json"

    @field_validator('max_recents')
    @classmethod
    def validate_max_recents(cls, v: int) -> int:
        if v < 1:
            raise ValueError("max_recents must be at least 1")
        return v

    @field_validator('path')
    @classmethod
    def expand_path(cls, v: Path) -> Path:
        return Path(v).expanduser()


class LoggingConfig(BaseModel):
    level: str = "INFO"
    file: Optional[Path] = None
    rotation: str = "1 day"
    retention: str = "7 days"

    @field_validator('level')
    @classmethod
    def validate_level(cls, v: str) -> str:
        v = v.upper()
        if v not in {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return v


class SwitcherConfig(BaseModel):
    """Main configuration for the quick switcher."""

    ranking: RankingConfig = Field(default_factory=RankingConfig)
    recents: RecentsConfig = Field(default_factory=RecentsConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> "SwitcherConfig":
        """Load configuration from YAML file, or defaults if none exists."""
        if config_path is None:
            # Try default locations
            candidates = [
                Path("quickswitch.yaml"),
                Path.home() / ".config" / "quickswitch" / "config.yaml",
                Path("/etc/quickswitch/config.yaml"),
            ]
            for candidate in candidates:
                if candidate.exists():
                    config_path = candidate
                    break
            else:
                logger.debug("No config file found, using defaults")
                return cls()

        logger.info(f"Loading config from: {config_path}")
        with open(config_path, 'r') as f:
            data = yaml.safe_load(f)

        return cls(**(data or {}))

    def save(self, config_path: Path) -> None:
        """Save configuration to YAML file."""
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, 'w') as f:
            yaml.safe_dump(self.model_dump(mode="json"), f, default_flow_style=False)
