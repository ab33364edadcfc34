"""
Utility modules.

Common helpers for configuration loading, logging and unit conversion.
"""

from src.utils.config_loader import AppConfig, load_config, load_env
from src.utils.logging_config import setup_logging
from src.utils.units import to_grams, to_kilograms

__all__ = [
    "load_config",
    "load_env",
    "AppConfig",
    "setup_logging",
    "to_grams",
    "to_kilograms",
]
