"""Configuration package for runtime settings and startup validation."""

from .engine import SegmentEngineConfig
from .settings import AppSettings, SettingsLoadError, config_load_database_url, config_load_settings

__all__ = [
	"AppSettings",
	"SegmentEngineConfig",
	"SettingsLoadError",
	"config_load_settings",
	"config_load_database_url",
]
