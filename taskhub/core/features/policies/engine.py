# (c) Copyright Datacraft, 2026
"""
Policy evaluation engine for projects and tasks.

Every check is a pure function over normalized inputs and returns a
PolicyDecision. Rules are disjunctions of clauses evaluated in the order
admin -> assignee/creator -> member -> manager hierarchy -> deny. The order
only affects which clause is reported in ``reason``; the outcome is the
same for any order.

Callers pass ``UNAUTHENTICATED`` for a subject that could not be resolved
and ``ABSENT`` for resources or facts that could not be fetched. Both
always lead to a denial; nothing here raises for well-typed input.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any

from .models import (
	ABSENT, Absent, Project, RelationshipFacts, RoleTier, Subject, Task,
	Unauthenticated, as_id,
)


class PolicyEffect(str, Enum):
	"""Policy decision effect."""
	ALLOW = "allow"
	DENY = "deny"


class DecisionReason(str, Enum):
	"""Machine-readable name of the clause that decided the outcome."""
	# allow
	ADMIN = "admin"
	TIER = "tier"
	SELF = "self"
	CREATOR = "creator"
	ASSIGNEE = "assignee"
	MEMBER = "member"
	MANAGER_HIERARCHY = "manager_hierarchy"
	PERSONAL_TASK = "personal_task"
	DEPARTMENT_HIERARCHY = "department_hierarchy"
	# deny
	UNAUTHENTICATED = "unauthenticated"
	RESOURCE_ABSENT = "resource_absent"
	CREATOR_ABSENT = "creator_absent"
	PROJECT_INACTIVE = "project_inactive"
	INSUFFICIENT_TIER = "insufficient_tier"
	NOT_CREATOR = "not_creator"
	NOT_ASSIGNEE = "not_assignee"
	NOT_MEMBER = "not_member"
	DIVISION_UNSET = "division_unset"
	DIVISION_MISMATCH = "division_mismatch"
	HIERARCHY_NOT_GREATER = "hierarchy_not_greater"
	CANNOT_REMOVE_CREATOR = "cannot_remove_creator"
	DEPARTMENT_UNSET = "department_unset"


@dataclass(frozen=True)
class PolicyDecision:
	"""Result of a policy check."""
	allowed: bool
	effect: PolicyEffect
	reason: DecisionReason
	rule: str

	def __bool__(self) -> bool:
		return self.allowed

	def to_dict(self) -> dict:
		return {
			"allowed": self.allowed,
			"effect": self.effect.value,
			"reason": self.reason.value,
			"rule": self.rule,
		}


def allow(rule: str, reason: DecisionReason) -> PolicyDecision:
	return PolicyDecision(True, PolicyEffect.ALLOW, reason, rule)


def deny(rule: str, reason: DecisionReason) -> PolicyDecision:
	return PolicyDecision(False, PolicyEffect.DENY, reason, rule)


def same_division(subject: Subject, owner: Subject) -> bool:
	"""Exact division match; an unset division never matches anything."""
	if subject.division is None or owner.division is None:
		return False
	return subject.division == owner.division


def manager_clause(subject: Subject, owner: Any) -> DecisionReason:
	"""
	Evaluate "manager in the owner's division with a strictly higher rank".

	Returns MANAGER_HIERARCHY when the clause holds, otherwise the reason it
	failed.
	"""
	if subject.tier is not RoleTier.MANAGER:
		return DecisionReason.INSUFFICIENT_TIER
	if not isinstance(owner, Subject):
		return DecisionReason.CREATOR_ABSENT
	if subject.division is None or owner.division is None:
		return DecisionReason.DIVISION_UNSET
	if not same_division(subject, owner):
		return DecisionReason.DIVISION_MISMATCH
	if subject.hierarchy <= owner.hierarchy:
		return DecisionReason.HIERARCHY_NOT_GREATER
	return DecisionReason.MANAGER_HIERARCHY


def _facts(facts: Any) -> RelationshipFacts:
	# unresolved facts carry no relationship at all
	if isinstance(facts, RelationshipFacts):
		return facts
	return RelationshipFacts()


def _is_project_creator(subject: Subject, project: Any) -> bool:
	return (
		isinstance(project, Project)
		and project.creator_id is not None
		and project.creator_id == subject.id
	)


def can_create_project(subject: Subject | Unauthenticated) -> PolicyDecision:
	"""Managers and admins create projects."""
	rule = "create_project"
	if not isinstance(subject, Subject):
		return deny(rule, DecisionReason.UNAUTHENTICATED)
	if subject.is_admin:
		return allow(rule, DecisionReason.ADMIN)
	if subject.is_manager:
		return allow(rule, DecisionReason.TIER)
	return deny(rule, DecisionReason.INSUFFICIENT_TIER)


def can_edit_project(
	subject: Subject | Unauthenticated,
	project: Project | Absent,
	creator: Subject | Absent,
) -> PolicyDecision:
	"""
	Edit (and delete) a project.

	Allowed for admins, the project creator, and managers in the creator's
	division whose hierarchy is strictly greater than the creator's.
	"""
	rule = "edit_project"
	if not isinstance(subject, Subject):
		return deny(rule, DecisionReason.UNAUTHENTICATED)
	if not isinstance(project, Project):
		return deny(rule, DecisionReason.RESOURCE_ABSENT)
	if subject.is_admin:
		return allow(rule, DecisionReason.ADMIN)
	if _is_project_creator(subject, project):
		return allow(rule, DecisionReason.CREATOR)

	outcome = manager_clause(subject, creator)
	if outcome is DecisionReason.MANAGER_HIERARCHY:
		return allow(rule, outcome)
	if subject.is_manager:
		return deny(rule, outcome)
	return deny(rule, DecisionReason.NOT_CREATOR)


def can_add_project_members(
	subject: Subject | Unauthenticated,
	project: Project | Absent,
) -> PolicyDecision:
	"""Managers, admins and the project creator manage membership."""
	return _manage_project(subject, project, "add_project_members")


def can_archive_project(
	subject: Subject | Unauthenticated,
	project: Project | Absent,
) -> PolicyDecision:
	"""Archiving follows the membership-management rule."""
	return _manage_project(subject, project, "archive_project")


def can_remove_project_member(
	subject: Subject | Unauthenticated,
	project: Project | Absent,
	member_id: Any,
) -> PolicyDecision:
	"""Membership-management rule, except that the creator is never removable."""
	rule = "remove_project_member"
	decision = _manage_project(subject, project, rule)
	if not decision:
		return decision
	if as_id(member_id) == project.creator_id:
		return deny(rule, DecisionReason.CANNOT_REMOVE_CREATOR)
	return decision


def _manage_project(subject, project, rule: str) -> PolicyDecision:
	if not isinstance(subject, Subject):
		return deny(rule, DecisionReason.UNAUTHENTICATED)
	if not isinstance(project, Project):
		return deny(rule, DecisionReason.RESOURCE_ABSENT)
	if subject.is_admin:
		return allow(rule, DecisionReason.ADMIN)
	if subject.is_manager:
		return allow(rule, DecisionReason.TIER)
	if _is_project_creator(subject, project):
		return allow(rule, DecisionReason.CREATOR)
	return deny(rule, DecisionReason.NOT_CREATOR)


def can_create_task(
	subject: Subject | Unauthenticated,
	project: Project | Absent | None,
	facts: RelationshipFacts | Absent = ABSENT,
) -> PolicyDecision:
	"""
	Create a task, optionally inside a project.

	``project=None`` is a personal task and is always allowed. A project that
	is not active refuses task creation before any other clause is looked
	at, so not even its creator or an admin can add tasks to an archived
	project.
	"""
	rule = "create_task"
	if not isinstance(subject, Subject):
		return deny(rule, DecisionReason.UNAUTHENTICATED)
	if project is None:
		return allow(rule, DecisionReason.PERSONAL_TASK)
	if not isinstance(project, Project):
		return deny(rule, DecisionReason.RESOURCE_ABSENT)
	if not project.is_active:
		return deny(rule, DecisionReason.PROJECT_INACTIVE)
	if subject.is_admin:
		return allow(rule, DecisionReason.ADMIN)

	facts = _facts(facts)
	if facts.is_creator or _is_project_creator(subject, project):
		return allow(rule, DecisionReason.CREATOR)
	if facts.is_member:
		return allow(rule, DecisionReason.MEMBER)

	outcome = manager_clause(subject, facts.creator)
	if outcome is DecisionReason.MANAGER_HIERARCHY:
		return allow(rule, outcome)
	if subject.is_manager:
		return deny(rule, outcome)
	return deny(rule, DecisionReason.NOT_MEMBER)


def can_modify_task(
	subject: Subject | Unauthenticated,
	task: Task | Absent,
	project: Project | Absent | None = None,
	facts: RelationshipFacts | Absent = ABSENT,
) -> PolicyDecision:
	"""
	Modify or delete a task.

	Assignees always may. For project tasks the project creator, project
	members and higher-ranked managers of the creator's division may too.
	Personal tasks have no project, so only admins and assignees qualify.
	"""
	rule = "modify_task"
	if not isinstance(subject, Subject):
		return deny(rule, DecisionReason.UNAUTHENTICATED)
	if not isinstance(task, Task):
		return deny(rule, DecisionReason.RESOURCE_ABSENT)
	if subject.is_admin:
		return allow(rule, DecisionReason.ADMIN)

	facts = _facts(facts)
	if facts.is_assignee or subject.id in task.assigned_to:
		return allow(rule, DecisionReason.ASSIGNEE)
	if task.is_personal:
		return deny(rule, DecisionReason.NOT_ASSIGNEE)

	if facts.is_creator or _is_project_creator(subject, project):
		return allow(rule, DecisionReason.CREATOR)
	if facts.is_member:
		return allow(rule, DecisionReason.MEMBER)

	outcome = manager_clause(subject, facts.creator)
	if outcome is DecisionReason.MANAGER_HIERARCHY:
		return allow(rule, outcome)
	if subject.is_manager:
		return deny(rule, outcome)
	return deny(rule, DecisionReason.NOT_MEMBER)


def can_view_resource(
	subject: Subject | Unauthenticated,
	target: Subject | Absent | Unauthenticated,
) -> PolicyDecision:
	"""See another user's data: self, admins, and outranking division managers."""
	rule = "view_resource"
	if not isinstance(subject, Subject):
		return deny(rule, DecisionReason.UNAUTHENTICATED)
	if not isinstance(target, Subject):
		return deny(rule, DecisionReason.RESOURCE_ABSENT)
	if subject.is_admin:
		return allow(rule, DecisionReason.ADMIN)
	if subject.id == target.id:
		return allow(rule, DecisionReason.SELF)

	outcome = manager_clause(subject, target)
	if outcome is DecisionReason.MANAGER_HIERARCHY:
		return allow(rule, outcome)
	return deny(rule, outcome)
