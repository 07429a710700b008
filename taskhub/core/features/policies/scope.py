# (c) Copyright Datacraft, 2026
"""
Visibility scopes for listing projects, tasks and users.

A scope is a declarative description of which resources a subject may
enumerate. The persistence layer turns it into a query; nothing here
touches a store.
"""
from dataclasses import dataclass
from typing import Any, ClassVar

from .models import RoleTier, Subject


@dataclass(frozen=True)
class ScopeDescriptor:
	"""Base class for the scope shapes."""
	kind: ClassVar[str] = ""

	def matches(self, owner: Subject, *, is_member: bool = False) -> bool:
		"""Whether a resource owned by ``owner`` falls inside this scope."""
		raise NotImplementedError

	def to_dict(self) -> dict:
		raise NotImplementedError


@dataclass(frozen=True)
class Unrestricted(ScopeDescriptor):
	"""Every resource."""
	kind: ClassVar[str] = "unrestricted"

	def matches(self, owner: Subject, *, is_member: bool = False) -> bool:
		return True

	def to_dict(self) -> dict:
		return {"kind": self.kind}


@dataclass(frozen=True)
class NoAccess(ScopeDescriptor):
	"""Nothing; used when the subject could not be resolved."""
	kind: ClassVar[str] = "no_access"

	def matches(self, owner: Subject, *, is_member: bool = False) -> bool:
		return False

	def to_dict(self) -> dict:
		return {"kind": self.kind}


@dataclass(frozen=True)
class OwnerOnly(ScopeDescriptor):
	"""Resources the subject owns, plus memberships when the flag is set."""
	subject_id: str
	include_memberships: bool = True
	kind: ClassVar[str] = "owner_only"

	def matches(self, owner: Subject, *, is_member: bool = False) -> bool:
		if owner.id == self.subject_id:
			return True
		return self.include_memberships and is_member

	def to_dict(self) -> dict:
		return {
			"kind": self.kind,
			"subject_id": self.subject_id,
			"include_memberships": self.include_memberships,
		}


@dataclass(frozen=True)
class DivisionBounded(ScopeDescriptor):
	"""
	Resources whose owner sits in ``division`` with a hierarchy strictly
	below ``hierarchy_less_than``.

	This is the mirror of the edit check: a manager sees exactly the owners
	they outrank. ``division`` and ``hierarchy_less_than`` alone describe
	that bound. ``subject_id`` and ``include_memberships`` extend it so a
	manager also lists the projects they created or belong to, the way the
	project listing has always worked; leave ``subject_id`` unset for the
	bare two-field bound.
	"""
	division: str
	hierarchy_less_than: int
	subject_id: str | None = None
	include_memberships: bool = True
	kind: ClassVar[str] = "division_bounded"

	def matches(self, owner: Subject, *, is_member: bool = False) -> bool:
		if self.subject_id is not None:
			if owner.id == self.subject_id:
				return True
			if self.include_memberships and is_member:
				return True
		return (
			owner.division is not None
			and owner.division == self.division
			and owner.hierarchy < self.hierarchy_less_than
		)

	def to_dict(self) -> dict:
		return {
			"kind": self.kind,
			"division": self.division,
			"hierarchy_less_than": self.hierarchy_less_than,
			"subject_id": self.subject_id,
			"include_memberships": self.include_memberships,
		}


def scope_for(subject: Any) -> ScopeDescriptor:
	"""Describe which resources ``subject`` may list."""
	if not isinstance(subject, Subject):
		return NoAccess()

	match subject.tier:
		case RoleTier.ADMIN:
			return Unrestricted()
		case RoleTier.MANAGER if subject.division is not None:
			return DivisionBounded(
				division=subject.division,
				hierarchy_less_than=subject.hierarchy,
				subject_id=subject.id,
			)
		case _:
			return OwnerOnly(subject_id=subject.id)
