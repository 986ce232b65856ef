"""Configuration system."""

from coinview_core.config.loader import load_config
from coinview_core.config.schema import AppConfig

__all__ = ["AppConfig", "load_config"]
