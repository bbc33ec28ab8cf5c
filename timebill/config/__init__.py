"""
Configuration module for timebill.
"""
from .settings import (
    TimebillConfig,
    get_config,
    load_config,
    reload_config
)

__all__ = [
    'TimebillConfig',
    'get_config',
    'load_config',
    'reload_config'
]
