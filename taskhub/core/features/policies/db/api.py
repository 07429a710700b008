# (c) Copyright Datacraft, 2026
"""Database operations for the decision audit log."""
from typing import Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from uuid_extensions import uuid7str

from .orm import AccessDecisionLog
from ..engine import PolicyDecision


class AccessDecisionDB:
	"""Database operations for decision audit records."""

	def __init__(self, session: AsyncSession):
		self.session = session

	async def log_decision(
		self,
		decision: PolicyDecision,
		subject_id: str | None,
		resource_type: str,
		resource_id: str | None,
		context_snapshot: dict | None = None,
	) -> AccessDecisionLog:
		"""Record a decision."""
		log = AccessDecisionLog(
			id=uuid7str(),
			subject_id=subject_id,
			rule=decision.rule,
			resource_type=resource_type,
			resource_id=resource_id,
			allowed=decision.allowed,
			effect=decision.effect,
			reason=decision.reason.value,
			context_snapshot=context_snapshot or {},
		)
		self.session.add(log)
		await self.session.flush()
		return log

	async def get_decisions(
		self,
		subject_id: str | None = None,
		resource_type: str | None = None,
		resource_id: str | None = None,
		allowed: bool | None = None,
		limit: int = 100,
		offset: int = 0,
	) -> Sequence[AccessDecisionLog]:
		"""Recent decisions, newest first, with optional filters."""
		query = select(AccessDecisionLog)
		if subject_id is not None:
			query = query.where(AccessDecisionLog.subject_id == subject_id)
		if resource_type is not None:
			query = query.where(AccessDecisionLog.resource_type == resource_type)
		if resource_id is not None:
			query = query.where(AccessDecisionLog.resource_id == resource_id)
		if allowed is not None:
			query = query.where(AccessDecisionLog.allowed == allowed)

		query = query.order_by(AccessDecisionLog.timestamp.desc()).limit(limit).offset(offset)
		result = await self.session.execute(query)
		return result.scalars().all()
