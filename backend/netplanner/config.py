"""Configuration loader for Network Planner."""

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel
from pydantic_settings import BaseSettings, SettingsConfigDict


class PlacementConfig(BaseModel):
    """Box inside which freshly added nodes are dropped."""
    x_min: float = 100.0
    x_max: float = 500.0
    y_min: float = 100.0
    y_max: float = 400.0


class EditorConfig(BaseModel):
    min_distance: float = 150.0
    settle_passes: int = 1  # >1 iterates past the single reference sweep
    snap_to_grid: bool = True
    snap_grid: tuple[float, float] = (20.0, 20.0)
    default_connection_type: str = "ethernet"
    placement: PlacementConfig = PlacementConfig()


class LayoutConfig(BaseModel):
    columns: int = 4
    column_spacing: float = 250.0
    row_spacing: float = 200.0
    x_offset: float = 100.0
    y_offset: float = 100.0


class InventoryConfig(BaseModel):
    """Device inventory API the candidate panel is fed from."""

    url: str = ""
    token: str = ""
    timeout: float = 30.0
    online_minutes: int = 5
    idle_minutes: int = 30
    refresh_interval: int = 300  # seconds, 0 disables


class SnapshotConfig(BaseModel):
    backend: str = "file"  # file, redis or memory
    path: str = "../data/topologies.json"
    redis_key: str = "netplanner:topologies"
    autosave_key: str = "netplanner:autosave"
    autosave_interval: int = 30  # seconds, 0 disables


class AppConfig(BaseModel):
    editor: EditorConfig = EditorConfig()
    layout: LayoutConfig = LayoutConfig()
    inventory: InventoryConfig = InventoryConfig()
    snapshots: SnapshotConfig = SnapshotConfig()


class Settings(BaseSettings):
    """Environment-based settings."""

    model_config = SettingsConfigDict(
        env_prefix="NETPLANNER_",
        env_file=".env",
        env_file_encoding="utf-8",
    )

    redis_url: str = "redis://localhost:6379"
    dev_mode: bool = True
    config_path: str = "../config/config.yaml"


def resolve_path(path: str) -> Path:
    """Resolve a configured path relative to the backend directory."""
    resolved = Path(path)
    if not resolved.is_absolute():
        resolved = Path(__file__).parent.parent / path
    return resolved


def load_yaml_config(path: str) -> dict[str, Any]:
    """Load a YAML configuration file."""
    config_path = resolve_path(path)

    if not config_path.exists():
        return {}

    with open(config_path) as f:
        return yaml.safe_load(f) or {}


def get_config() -> AppConfig:
    """Load and return the application configuration."""
    settings = Settings()
    yaml_config = load_yaml_config(settings.config_path)
    return AppConfig(**yaml_config)


def get_settings() -> Settings:
    """Get environment settings."""
    return Settings()


# Singleton instance
settings = Settings()
