"""
Configuration package for citeresolve
"""

from .settings import DEFAULT_CONFIG, get_config

__all__ = ["DEFAULT_CONFIG", "get_config"]
