# (c) Copyright Datacraft, 2026
"""
Department hierarchy scoping for report access.

Departments are dot-separated paths ("Eng", "Eng.Backend"). A parent
department covers itself and every descendant segment, but never a sibling
that merely shares a prefix ("Engineering" is not under "Eng"). This is a
separate mechanism from the exact-match division used by project and task
policies.
"""
import logging
from collections.abc import Iterable
from typing import Any

from .engine import DecisionReason, PolicyDecision, allow, deny
from .models import Subject
from .normalizer import normalize

logger = logging.getLogger(__name__)

SEPARATOR = "."
REPORT_ROLES = frozenset({"hr"})


def in_department_hierarchy(parent: str | None, department: str | None) -> bool:
	"""True when ``department`` is ``parent`` or one of its descendants."""
	if not isinstance(parent, str) or not isinstance(department, str):
		return False
	if not parent or not department:
		return False
	return department == parent or department.startswith(parent + SEPARATOR)


def filter_by_hierarchy(parent: str | None, candidates: Iterable[str | None]) -> list[str]:
	"""Keep the candidates that lie in ``parent``'s hierarchy, in input order."""
	return [c for c in candidates if in_department_hierarchy(parent, c)]


def can_generate_report(subject: Any) -> PolicyDecision:
	"""Only admins and HR staff generate reports."""
	rule = "generate_report"
	if not isinstance(subject, Subject):
		return deny(rule, DecisionReason.UNAUTHENTICATED)
	if subject.is_admin:
		return allow(rule, DecisionReason.ADMIN)
	if subject.role_label in REPORT_ROLES:
		if subject.department is None:
			return deny(rule, DecisionReason.DEPARTMENT_UNSET)
		return allow(rule, DecisionReason.DEPARTMENT_HIERARCHY)
	return deny(rule, DecisionReason.INSUFFICIENT_TIER)


def report_scope(subject: Any, users: Iterable[Any]) -> list[Any]:
	"""
	Users whose data ``subject`` may include in a report.

	Admins get every user. HR staff get the users inside their own
	department hierarchy; users without a department are left out. Anyone
	else gets nothing. The input records are returned unchanged.
	"""
	decision = can_generate_report(subject)
	if not decision:
		logger.debug(f"Report scope empty for {subject!r}: {decision.reason.value}")
		return []
	if decision.reason is DecisionReason.ADMIN:
		return list(users)

	scoped = []
	for user in users:
		member = normalize(user)
		if isinstance(member, Subject) and in_department_hierarchy(subject.department, member.department):
			scoped.append(user)
	return scoped
