"""Configuration module."""

from lutobot.core.config.loader import load_config
from lutobot.core.config.schema import Config

__all__ = ["Config", "load_config"]
