# (c) Copyright Datacraft, 2026
"""Policy service: resolve facts, evaluate, and enforce the outcome."""
import logging
from enum import Enum
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from taskhub.core.config import Settings, get_settings

from . import engine
from .context import ResourceContext, ResourceContextResolver, Stores
from .db import AccessDecisionDB
from .engine import DecisionReason, PolicyDecision
from .exceptions import (
	ForbiddenError, NotFoundError, UnauthenticatedError, UnavailableError,
)
from .models import Subject, Unauthenticated, as_id
from .normalizer import normalize
from .scope import ScopeDescriptor, scope_for

logger = logging.getLogger(__name__)


class ProjectAction(str, Enum):
	"""Actions checked against an existing project."""
	EDIT = "edit"
	DELETE = "delete"
	ADD_MEMBERS = "add_members"
	ARCHIVE = "archive"
	CREATE_TASK = "create_task"


class TaskAction(str, Enum):
	"""Actions checked against an existing task."""
	MODIFY = "modify"
	DELETE = "delete"


_NOT_FOUND_REASONS = (DecisionReason.RESOURCE_ABSENT, DecisionReason.PROJECT_INACTIVE)

# Lookups whose failure could have changed a denial with the given reason.
# Failures outside this set leave the denial standing.
_MEMBERSHIP_LOOKUPS = frozenset({"members", "project"})
_FAILURE_DEPENDENCIES = {
	DecisionReason.RESOURCE_ABSENT: frozenset({"project", "task", "user"}),
	DecisionReason.CREATOR_ABSENT: frozenset({"creator", "project"}),
	DecisionReason.NOT_MEMBER: _MEMBERSHIP_LOOKUPS,
	DecisionReason.DIVISION_UNSET: _MEMBERSHIP_LOOKUPS,
	DecisionReason.DIVISION_MISMATCH: _MEMBERSHIP_LOOKUPS,
	DecisionReason.HIERARCHY_NOT_GREATER: _MEMBERSHIP_LOOKUPS,
}


def failure_affects(decision: PolicyDecision, failures: dict) -> bool:
	"""Whether a failed lookup fed the clause that denied ``decision``."""
	if decision.allowed:
		return False
	dependencies = _FAILURE_DEPENDENCIES.get(decision.reason, frozenset())
	return not dependencies.isdisjoint(failures)


class PolicyService:
	"""
	High-level entry point for authorization decisions.

	Usage:
		service = PolicyService(stores, session)
		subject = await service.authenticate(user_id)
		await service.authorize_project(subject, project_id, ProjectAction.EDIT)

	Every ``authorize_*`` method returns the allowing PolicyDecision or
	raises one of the AccessError subclasses:

	- UnauthenticatedError before any policy is evaluated,
	- NotFoundError for a missing resource and for task creation in an
	  inactive project,
	- UnavailableError when a failed lookup left the engine without the
	  facts it needed,
	- ForbiddenError carrying the failing clause otherwise.
	"""

	def __init__(
		self,
		stores: Stores,
		session: AsyncSession | None = None,
		settings: Settings | None = None,
	):
		self.settings = settings or get_settings()
		self.session = session
		self.resolver = ResourceContextResolver(
			stores, timeout=self.settings.store_timeout_seconds,
		)

	async def authenticate(self, user_id: Any) -> Subject:
		"""Resolve the caller; raise when there is no such user."""
		subject = await self.resolver.resolve_subject(user_id)
		if not isinstance(subject, Subject):
			raise UnauthenticatedError()
		return subject

	async def authorize_project_creation(self, subject: Subject | Unauthenticated) -> PolicyDecision:
		self._require_subject(subject)
		decision = engine.can_create_project(subject)
		return await self._enforce(subject, decision, "project", None, ResourceContext())

	async def authorize_project(
		self,
		subject: Subject | Unauthenticated,
		project_id: Any,
		action: ProjectAction,
	) -> PolicyDecision:
		"""Check an action on an existing project."""
		self._require_subject(subject)
		action = ProjectAction(action)
		context = await self.resolver.for_project(
			project_id, with_members=action is ProjectAction.CREATE_TASK,
		)

		match action:
			case ProjectAction.EDIT | ProjectAction.DELETE:
				decision = engine.can_edit_project(subject, context.project, context.creator)
			case ProjectAction.ADD_MEMBERS:
				decision = engine.can_add_project_members(subject, context.project)
			case ProjectAction.ARCHIVE:
				decision = engine.can_archive_project(subject, context.project)
			case ProjectAction.CREATE_TASK:
				decision = engine.can_create_task(
					subject, context.project, context.facts_for(subject),
				)

		return await self._enforce(subject, decision, "project", as_id(project_id), context)

	async def authorize_member_removal(
		self,
		subject: Subject | Unauthenticated,
		project_id: Any,
		member_id: Any,
	) -> PolicyDecision:
		self._require_subject(subject)
		context = await self.resolver.for_project(project_id, with_members=False)
		decision = engine.can_remove_project_member(subject, context.project, member_id)
		return await self._enforce(subject, decision, "project", as_id(project_id), context)

	async def authorize_task_creation(
		self,
		subject: Subject | Unauthenticated,
		project_id: Any = None,
	) -> PolicyDecision:
		"""Check task creation; no project means a personal task."""
		self._require_subject(subject)
		if as_id(project_id) is None:
			decision = engine.can_create_task(subject, None)
			return await self._enforce(subject, decision, "task", None, ResourceContext())
		return await self.authorize_project(subject, project_id, ProjectAction.CREATE_TASK)

	async def authorize_task(
		self,
		subject: Subject | Unauthenticated,
		task_id: Any,
		action: TaskAction = TaskAction.MODIFY,
	) -> PolicyDecision:
		"""Modification and deletion share one rule."""
		self._require_subject(subject)
		logger.debug(f"Checking {TaskAction(action).value} on task {task_id}")
		context = await self.resolver.for_task(task_id)
		decision = engine.can_modify_task(
			subject, context.task, context.project, context.facts_for(subject),
		)
		return await self._enforce(subject, decision, "task", as_id(task_id), context)

	async def authorize_user_view(
		self,
		subject: Subject | Unauthenticated,
		target_id: Any,
	) -> PolicyDecision:
		self._require_subject(subject)
		target, failures = await self.resolver.resolve_user(target_id)
		decision = engine.can_view_resource(subject, target)
		context = ResourceContext(failures=failures)
		return await self._enforce(subject, decision, "user", as_id(target_id), context)

	def visibility_scope(self, subject: Subject | Unauthenticated) -> ScopeDescriptor:
		self._require_subject(subject)
		return scope_for(subject)

	async def visible_subordinates(self, subject: Subject | Unauthenticated) -> list[Subject]:
		"""Users below a manager in their division, re-checked against the view rule."""
		self._require_subject(subject)
		users = await self.resolver.list_subordinates(subject)
		visible = []
		for raw_user in users:
			candidate = normalize(raw_user)
			if isinstance(candidate, Subject) and engine.can_view_resource(subject, candidate):
				visible.append(candidate)
		return visible

	def _require_subject(self, subject: Any) -> None:
		if not isinstance(subject, Subject):
			raise UnauthenticatedError()

	async def _enforce(
		self,
		subject: Subject,
		decision: PolicyDecision,
		resource_type: str,
		resource_id: str | None,
		context: ResourceContext,
	) -> PolicyDecision:
		await self._audit(subject, decision, resource_type, resource_id, context)

		if decision.allowed:
			logger.debug(
				f"{decision.rule} allowed for {subject.id} on {resource_type} "
				f"{resource_id}: {decision.reason.value}"
			)
			return decision

		if decision.reason is DecisionReason.PROJECT_INACTIVE:
			raise NotFoundError("project", resource_id)
		if failure_affects(decision, context.failures):
			logger.error(
				f"{decision.rule} for {subject.id} on {resource_type} {resource_id} "
				f"could not be decided: lookups failed for {sorted(context.failures)}"
			)
			raise UnavailableError(failures=context.failures)
		if decision.reason in _NOT_FOUND_REASONS:
			raise NotFoundError(resource_type, resource_id)

		logger.warning(
			f"Access denied: {subject.id} attempted {decision.rule} on {resource_type} "
			f"{resource_id} ({decision.reason.value})"
		)
		raise ForbiddenError(decision)

	async def _audit(
		self,
		subject: Subject,
		decision: PolicyDecision,
		resource_type: str,
		resource_id: str | None,
		context: ResourceContext,
	) -> None:
		if self.session is None or not self.settings.decision_log_enabled:
			return
		if decision.allowed and not self.settings.log_allowed_decisions:
			return
		await AccessDecisionDB(self.session).log_decision(
			decision,
			subject_id=subject.id,
			resource_type=resource_type,
			resource_id=resource_id,
			context_snapshot={"subject": subject.to_dict(), **context.snapshot()},
		)
		await self.session.commit()

