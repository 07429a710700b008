# (c) Copyright Datacraft, 2026
"""Value types consumed by the authorization policy engine."""
from dataclasses import dataclass, field
from enum import Enum
from collections.abc import Iterable, Mapping
from typing import Any


class RoleTier(str, Enum):
	"""Coarse role ordering: staff < manager < admin."""
	STAFF = "staff"
	MANAGER = "manager"
	ADMIN = "admin"

	@property
	def rank(self) -> int:
		return _TIER_RANKS[self]

	def __lt__(self, other):
		if not isinstance(other, RoleTier):
			return NotImplemented
		return self.rank < other.rank

	def __le__(self, other):
		if not isinstance(other, RoleTier):
			return NotImplemented
		return self.rank <= other.rank

	def __gt__(self, other):
		if not isinstance(other, RoleTier):
			return NotImplemented
		return self.rank > other.rank

	def __ge__(self, other):
		if not isinstance(other, RoleTier):
			return NotImplemented
		return self.rank >= other.rank


_TIER_RANKS = {
	RoleTier.STAFF: 1,
	RoleTier.MANAGER: 2,
	RoleTier.ADMIN: 3,
}


class ProjectStatus(str, Enum):
	"""Project lifecycle status."""
	ACTIVE = "active"
	HOLD = "hold"
	COMPLETED = "completed"
	ARCHIVED = "archived"


class Unauthenticated:
	"""Marker for a request without a resolvable subject."""
	_instance = None

	def __new__(cls):
		if cls._instance is None:
			cls._instance = super().__new__(cls)
		return cls._instance

	def __bool__(self) -> bool:
		return False

	def __repr__(self) -> str:
		return "UNAUTHENTICATED"


class Absent:
	"""Marker for a resource or fact the caller could not resolve."""
	_instance = None

	def __new__(cls):
		if cls._instance is None:
			cls._instance = super().__new__(cls)
		return cls._instance

	def __bool__(self) -> bool:
		return False

	def __repr__(self) -> str:
		return "ABSENT"


UNAUTHENTICATED = Unauthenticated()
ABSENT = Absent()


def as_id(value: Any) -> str | None:
	"""Coerce an opaque identifier to its canonical string form."""
	if value is None or isinstance(value, bool):
		return None
	text = str(value).strip()
	return text or None


@dataclass(frozen=True)
class Subject:
	"""A normalized user as seen by the policy engine."""
	id: str
	tier: RoleTier = RoleTier.STAFF
	hierarchy: int = 1
	division: str | None = None
	department: str | None = None
	role_label: str = RoleTier.STAFF.value

	@property
	def is_admin(self) -> bool:
		return self.tier is RoleTier.ADMIN

	@property
	def is_manager(self) -> bool:
		return self.tier is RoleTier.MANAGER

	def to_dict(self) -> dict:
		return {
			"id": self.id,
			"tier": self.tier.value,
			"hierarchy": self.hierarchy,
			"division": self.division,
			"department": self.department,
			"role_label": self.role_label,
		}


@dataclass(frozen=True)
class Project:
	"""Project facts relevant to authorization."""
	id: str
	creator_id: str | None
	status: ProjectStatus = ProjectStatus.ACTIVE

	@property
	def is_active(self) -> bool:
		return self.status is ProjectStatus.ACTIVE

	@classmethod
	def from_record(cls, record: Any) -> "Project | Absent":
		"""Build from a store record (mapping or object); ABSENT when unusable."""
		if record is None or isinstance(record, Absent):
			return ABSENT
		project_id = as_id(_read(record, "id"))
		if project_id is None:
			return ABSENT
		raw_status = _read(record, "status")
		try:
			status = ProjectStatus(str(raw_status).strip().lower())
		except ValueError:
			# unknown or missing statuses count as non-active
			status = ProjectStatus.ARCHIVED
		return cls(
			id=project_id,
			creator_id=as_id(_read(record, "creator_id")),
			status=status,
		)


@dataclass(frozen=True)
class Task:
	"""Task facts relevant to authorization."""
	id: str
	project_id: str | None = None
	parent_id: str | None = None
	assigned_to: frozenset[str] = field(default_factory=frozenset)

	@property
	def is_personal(self) -> bool:
		return self.project_id is None

	@classmethod
	def from_record(cls, record: Any) -> "Task | Absent":
		if record is None or isinstance(record, Absent):
			return ABSENT
		task_id = as_id(_read(record, "id"))
		if task_id is None:
			return ABSENT
		return cls(
			id=task_id,
			project_id=as_id(_read(record, "project_id")),
			parent_id=as_id(_read(record, "parent_id")),
			assigned_to=id_set(_read(record, "assigned_to")),
		)


@dataclass(frozen=True)
class RelationshipFacts:
	"""Per-request relationship facts between a subject and a resource."""
	is_creator: bool = False
	is_assignee: bool = False
	is_member: bool = False
	creator: "Subject | Absent" = ABSENT

	@classmethod
	def derive(
		cls,
		subject: Subject,
		project: "Project | Absent | None" = None,
		task: "Task | Absent | None" = None,
		members: "Iterable[Any] | Absent | None" = None,
		creator: "Subject | Absent | Unauthenticated | None" = None,
	) -> "RelationshipFacts":
		"""Compute facts from resolved inputs; unresolved inputs yield False."""
		is_creator = (
			isinstance(project, Project)
			and project.creator_id is not None
			and project.creator_id == subject.id
		)
		is_assignee = isinstance(task, Task) and subject.id in task.assigned_to
		is_member = (
			members is not None
			and not isinstance(members, Absent)
			and subject.id in id_set(members)
		)
		return cls(
			is_creator=is_creator,
			is_assignee=is_assignee,
			is_member=is_member,
			creator=creator if isinstance(creator, Subject) else ABSENT,
		)


def id_set(values: Any) -> frozenset[str]:
	"""Canonical id set from any iterable of ids; scalars are wrapped."""
	if values is None or isinstance(values, Absent):
		return frozenset()
	if isinstance(values, (str, bytes, int)):
		values = [values]
	ids = (as_id(v) for v in values)
	return frozenset(i for i in ids if i is not None)


def _read(record: Any, key: str) -> Any:
	if isinstance(record, Mapping):
		return record.get(key)
	return getattr(record, key, None)
