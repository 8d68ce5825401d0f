"""Configuration for Verdict."""

from verdict.config.loader import load_config, save_config
from verdict.config.schema import VerdictConfig

__all__ = ["VerdictConfig", "load_config", "save_config"]
