# (c) Copyright Datacraft, 2026
"""
Resolution of the facts the policy engine needs.

The engine never fetches anything. This module gathers the subject, the
target resource, the project creator and the membership set from external
stores ahead of a policy call. Independent lookups run concurrently and a
failed lookup is replaced by ``ABSENT`` so the engine fails closed; the
failure itself is kept on the context so the boundary can report it as
unavailability instead of a denial.
"""
import asyncio
import logging
from collections.abc import Awaitable, Iterable
from dataclasses import dataclass, field
from typing import Any, Protocol

from .exceptions import UnavailableError
from .models import (
	ABSENT, Absent, Project, RelationshipFacts, Subject, Task, Unauthenticated,
	UNAUTHENTICATED, as_id, id_set,
)
from .normalizer import normalize

logger = logging.getLogger(__name__)


class UserStore(Protocol):
	async def get_by_id(self, user_id: str) -> Any | None: ...

	async def list_subordinates(self, hierarchy: int, division: str) -> list[Any]: ...


class ProjectStore(Protocol):
	async def get_by_id(self, project_id: str) -> Any | None: ...


class MembershipStore(Protocol):
	async def list_members(self, project_id: str) -> Iterable[Any]: ...


class TaskStore(Protocol):
	async def get_by_id(self, task_id: str) -> Any | None: ...


@dataclass
class Stores:
	"""The store collaborators the resolver reads from."""
	users: UserStore
	projects: ProjectStore
	memberships: MembershipStore
	tasks: TaskStore


@dataclass(frozen=True)
class ResourceContext:
	"""Resolved facts about one target resource."""
	project: Project | Absent | None = None
	task: Task | Absent | None = None
	creator: Subject | Absent = ABSENT
	members: frozenset[str] | Absent = ABSENT
	failures: dict[str, Exception] = field(default_factory=dict)

	@property
	def degraded(self) -> bool:
		return bool(self.failures)

	def facts_for(self, subject: Subject) -> RelationshipFacts:
		return RelationshipFacts.derive(
			subject,
			project=self.project,
			task=self.task,
			members=self.members,
			creator=self.creator,
		)

	def snapshot(self) -> dict:
		"""Serializable summary for audit records."""
		return {
			"project": self.project.id if isinstance(self.project, Project) else repr(self.project),
			"project_status": self.project.status.value if isinstance(self.project, Project) else None,
			"task": self.task.id if isinstance(self.task, Task) else repr(self.task),
			"creator": self.creator.to_dict() if isinstance(self.creator, Subject) else None,
			"member_count": len(self.members) if isinstance(self.members, frozenset) else None,
			"failures": sorted(self.failures),
		}


class ResourceContextResolver:
	"""Fetch subjects and resource facts from the stores."""

	def __init__(self, stores: Stores, timeout: float | None = None):
		self.stores = stores
		self.timeout = timeout

	async def resolve_subject(self, user_id: Any) -> Subject | Unauthenticated:
		"""
		Look up and normalize the calling user.

		A missing id or unknown user is unauthenticated; a store failure
		raises UnavailableError.
		"""
		user_id = as_id(user_id)
		if user_id is None:
			return UNAUTHENTICATED
		try:
			raw_user = await self._call(self.stores.users.get_by_id(user_id))
		except Exception as e:
			logger.error(f"User lookup failed for {user_id}: {e}")
			raise UnavailableError("User lookup failed", {"subject": e}) from e
		return normalize(raw_user)

	async def resolve_user(self, user_id: Any) -> tuple[Subject | Absent, dict[str, Exception]]:
		"""Look up another user as a policy target."""
		user_id = as_id(user_id)
		if user_id is None:
			return ABSENT, {}
		failures: dict[str, Exception] = {}
		raw_user = await self._fetch("user", self.stores.users.get_by_id(user_id), failures)
		return _as_subject(raw_user), failures

	async def for_project(self, project_id: Any, with_members: bool = True) -> ResourceContext:
		"""
		Resolve a project, its creator and, optionally, its members.

		The membership set only needs the project id, so it is fetched
		alongside the project and creator lookups; the creator lookup waits
		for the project record to name its creator.
		"""
		project_id = as_id(project_id)
		if project_id is None:
			return ResourceContext(project=ABSENT)

		failures: dict[str, Exception] = {}

		async def project_and_creator():
			raw_project = await self._fetch(
				"project", self.stores.projects.get_by_id(project_id), failures,
			)
			project = Project.from_record(raw_project)
			if not isinstance(project, Project) or project.creator_id is None:
				return project, ABSENT
			raw_creator = await self._fetch(
				"creator", self.stores.users.get_by_id(project.creator_id), failures,
			)
			return project, _as_subject(raw_creator)

		lookups = [project_and_creator()]
		if with_members:
			lookups.append(
				self._fetch("members", self.stores.memberships.list_members(project_id), failures)
			)
		(project, creator), *rest = await asyncio.gather(*lookups)
		raw_members = rest[0] if rest else ABSENT
		members = ABSENT if isinstance(raw_members, Absent) else id_set(raw_members)

		return ResourceContext(
			project=project,
			creator=creator,
			members=members,
			failures=failures,
		)

	async def for_task(self, task_id: Any) -> ResourceContext:
		"""Resolve a task and, for project tasks, its owning project's facts."""
		task_id = as_id(task_id)
		if task_id is None:
			return ResourceContext(task=ABSENT)

		failures: dict[str, Exception] = {}
		raw_task = await self._fetch("task", self.stores.tasks.get_by_id(task_id), failures)
		task = Task.from_record(raw_task)
		if not isinstance(task, Task) or task.is_personal:
			return ResourceContext(task=task, failures=failures)

		project_context = await self.for_project(task.project_id)
		return ResourceContext(
			project=project_context.project,
			task=task,
			creator=project_context.creator,
			members=project_context.members,
			failures={**failures, **project_context.failures},
		)

	async def list_subordinates(self, subject: Subject) -> list[Any]:
		"""Users a manager outranks in their division; empty for everyone else."""
		if not subject.is_manager or subject.division is None:
			return []
		try:
			users = await self._call(
				self.stores.users.list_subordinates(subject.hierarchy, subject.division)
			)
		except Exception as e:
			logger.error(f"Subordinate listing failed for {subject.id}: {e}")
			raise UnavailableError("User listing failed", {"subordinates": e}) from e
		return list(users or [])

	async def _fetch(self, name: str, call: Awaitable[Any], failures: dict[str, Exception]) -> Any:
		"""Await a store call; record a failure and return ABSENT instead of raising."""
		try:
			result = await self._call(call)
		except Exception as e:
			logger.warning(f"Lookup of {name} failed: {e!r}")
			failures[name] = e
			return ABSENT
		return ABSENT if result is None else result

	async def _call(self, call: Awaitable[Any]) -> Any:
		if self.timeout is None:
			return await call
		return await asyncio.wait_for(call, timeout=self.timeout)


def _as_subject(raw_user: Any) -> Subject | Absent:
	subject = normalize(raw_user) if not isinstance(raw_user, Absent) else ABSENT
	return subject if isinstance(subject, Subject) else ABSENT
