# (c) Copyright Datacraft, 2026
"""Configuration module for taskhub."""
from .settings import Settings, get_settings, reset_settings

__all__ = [
	'Settings',
	'get_settings',
	'reset_settings',
]
