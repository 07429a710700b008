# (c) Copyright Datacraft, 2026
"""Database models and operations for the decision audit log."""
from .orm import AccessDecisionLog
from .api import AccessDecisionDB

__all__ = [
	"AccessDecisionLog",
	"AccessDecisionDB",
]
