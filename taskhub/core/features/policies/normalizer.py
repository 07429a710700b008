# (c) Copyright Datacraft, 2026
"""Turn raw user records into canonical subjects."""
import logging
from collections.abc import Mapping
from typing import Any

from .models import (
	RoleTier, Subject, Unauthenticated, UNAUTHENTICATED, as_id,
)

logger = logging.getLogger(__name__)

DEFAULT_HIERARCHY = 1


def normalize(raw_user: Any) -> Subject | Unauthenticated:
	"""
	Build a Subject from a raw user record.

	Accepts a mapping or any object exposing ``id``, ``role``, ``hierarchy``,
	``division`` and ``department``. Missing values fall back to least
	privilege: role ``staff``, hierarchy ``1``, division and department unset.
	A missing record, or one without an id, yields ``UNAUTHENTICATED``.
	Never raises.
	"""
	if raw_user is None or isinstance(raw_user, Unauthenticated):
		return UNAUTHENTICATED

	subject_id = as_id(_field(raw_user, "id"))
	if subject_id is None:
		logger.debug("User record without an id, treating as unauthenticated")
		return UNAUTHENTICATED

	role_label = _text(_field(raw_user, "role"))
	role_label = role_label.lower() if role_label else RoleTier.STAFF.value

	return Subject(
		id=subject_id,
		tier=normalize_tier(role_label),
		hierarchy=normalize_hierarchy(_field(raw_user, "hierarchy")),
		division=_text(_field(raw_user, "division")),
		department=_text(_field(raw_user, "department")),
		role_label=role_label,
	)


def normalize_tier(role: Any) -> RoleTier:
	"""Map a role string onto a tier; anything unknown is staff."""
	label = _text(role)
	if label is None:
		return RoleTier.STAFF
	try:
		return RoleTier(label.lower())
	except ValueError:
		return RoleTier.STAFF


def normalize_hierarchy(value: Any) -> int:
	"""Positive integer rank, defaulting to 1."""
	if value is None or isinstance(value, bool):
		return DEFAULT_HIERARCHY
	if isinstance(value, float):
		if not value.is_integer():
			return DEFAULT_HIERARCHY
		value = int(value)
	try:
		rank = int(value)
	except (TypeError, ValueError):
		return DEFAULT_HIERARCHY
	return rank if rank > 0 else DEFAULT_HIERARCHY


def _field(raw_user: Any, name: str) -> Any:
	if isinstance(raw_user, Mapping):
		return raw_user.get(name)
	return getattr(raw_user, name, None)


def _text(value: Any) -> str | None:
	"""Strip a string value; empty and non-string values are unset."""
	if not isinstance(value, str):
		return None
	value = value.strip()
	return value or None
