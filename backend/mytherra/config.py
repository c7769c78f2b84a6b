"""Configuration management using Pydantic Settings."""

import logging
from functools import lru_cache
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class SimulationConfig(BaseModel):
    """World clock and player bootstrap."""

    seed: int = 1337
    starting_year: int = 1
    player_id: str = "SINGLE_PLAYER"
    initial_favor: int = 100


class EconomyConfig(BaseModel):
    """Divine favor economy."""

    favor_per_tick: int = 10  # Passive income credited once per tick


class BettingConfig(BaseModel):
    """Betting market limits and pricing bounds."""

    min_odds: float = 1.0
    min_stake: int = 10
    max_stake: int = 1000  # Scaled by the confidence stake multiplier
    target_modifier_floor: float = 0.5
    target_modifier_ceiling: float = 2.5
    lock_timeout_seconds: float = 2.0
    default_list_limit: int = 20
    max_list_limit: int = 100
    config_file: str = "betting.yaml"  # Relative to data_dir, optional


class EvolutionConfig(BaseModel):
    """Tuning knobs for the yearly evolution processors."""

    # Regions
    region_prosperity_drift: float = 0.10  # Fraction of the gap closed per year
    chaos_decay: float = 0.05
    turmoil_chance_per_chaos: float = 0.002
    turmoil_chaos_gain: int = 15

    # Settlements
    decline_threshold: int = 25
    growth_factor: float = 0.10
    max_growth_rate: float = 0.15
    abandon_population: int = 10
    ruin_after_years: int = 5

    # Heroes
    chance_to_move: float = 0.30
    base_level_up_chance: float = 0.40
    level_up_difficulty: float = 0.85
    max_levels_per_year: int = 3
    max_level_up_chance: float = 0.90
    bond_chance: float = 0.15
    discovery_chance: float = 0.10
    base_life_expectancy: int = 70
    natural_death_chance: float = 0.20
    base_danger: float = 0.01


class SchedulerConfig(BaseModel):
    """Tick job scheduling."""

    tick_interval_seconds: int = 60


class ApiConfig(BaseModel):
    """HTTP server parameters."""

    host: str = "0.0.0.0"
    port: int = 8000
    allowed_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:3000", "http://localhost:5173"]
    )


class Settings(BaseSettings):
    """Main configuration class."""

    # Paths
    data_dir: Path = Path("data")

    # Observability
    logfire_token: str = ""
    environment: str = "development"

    # Nested configuration sections
    simulation: SimulationConfig = Field(default_factory=SimulationConfig)
    economy: EconomyConfig = Field(default_factory=EconomyConfig)
    betting: BettingConfig = Field(default_factory=BettingConfig)
    evolution: EvolutionConfig = Field(default_factory=EvolutionConfig)
    scheduler: SchedulerConfig = Field(default_factory=SchedulerConfig)
    api: ApiConfig = Field(default_factory=ApiConfig)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("data_dir", mode="after")
    @classmethod
    def resolve_data_dir(cls, v: Path) -> Path:
        """Resolve data directory to absolute path."""
        return v.resolve()

    @property
    def state_path(self) -> Path:
        return self.data_dir / "state.yaml"

    @property
    def betting_config_path(self) -> Path:
        return self.data_dir / self.betting.config_file

    def load_yaml_config(self) -> None:
        """Load and merge YAML configuration."""
        config_path = self.data_dir / "config.yaml"

        if not config_path.exists():
            logger.warning(
                f"Config file not found: {config_path}. "
                "Using defaults. Run 'python -m mytherra init' to create it."
            )
            return

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                yaml_config = yaml.safe_load(f)

            if not yaml_config:
                logger.warning(f"Empty config file: {config_path}")
                return

            for section_name in [
                "simulation",
                "economy",
                "betting",
                "evolution",
                "scheduler",
                "api",
            ]:
                if section_name in yaml_config:
                    section = getattr(self, section_name)
                    yaml_section = yaml_config[section_name]

                    section_dict = section.model_dump()
                    section_dict.update(yaml_section)

                    new_section = section.__class__(**section_dict)
                    setattr(self, section_name, new_section)

            logger.info(f"Loaded configuration from {config_path}")

        except yaml.YAMLError as e:
            logger.error(f"Failed to parse YAML config: {e}")
            raise
        except Exception as e:
            logger.error(f"Failed to load config: {e}")
            raise


@lru_cache()
def get_settings() -> Settings:
    """Get singleton Settings instance."""
    settings = Settings()
    settings.load_yaml_config()
    return settings
