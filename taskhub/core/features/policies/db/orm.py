# (c) Copyright Datacraft, 2026
"""SQLAlchemy ORM models for the decision audit log."""
from datetime import datetime, timezone

from sqlalchemy import Column, String, Boolean, DateTime, Enum, JSON, Index
from uuid_extensions import uuid7str

from taskhub.core.db.base import Base
from ..engine import PolicyEffect


def _utcnow() -> datetime:
	return datetime.now(timezone.utc)


class AccessDecisionLog(Base):
	"""Audit record of one authorization decision."""
	__tablename__ = "access_decision_logs"

	id = Column(String(36), primary_key=True, default=uuid7str)
	timestamp = Column(DateTime(timezone=True), default=_utcnow, index=True)

	# Request context
	subject_id = Column(String(64), nullable=True)
	rule = Column(String(50), nullable=False)
	resource_type = Column(String(50), nullable=False)
	resource_id = Column(String(64), nullable=True)

	# Decision
	allowed = Column(Boolean, nullable=False)
	effect = Column(Enum(PolicyEffect), nullable=False)
	reason = Column(String(50), nullable=False)

	# Facts the decision was based on
	context_snapshot = Column(JSON, default=dict)

	__table_args__ = (
		Index("ix_access_decision_logs_subject_rule", "subject_id", "rule"),
		Index("ix_access_decision_logs_resource", "resource_type", "resource_id"),
	)
