"""Configuration module."""

from pharmapos.config.logging import bind_workflow, configure_logging, get_logger
from pharmapos.config.settings import Settings, get_settings, reset_settings

__all__ = [
    "Settings",
    "get_settings",
    "reset_settings",
    "bind_workflow",
    "configure_logging",
    "get_logger",
]
