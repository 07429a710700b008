# (c) Copyright Datacraft, 2026
"""Pydantic schemas for the policy API."""
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from .engine import PolicyEffect


class RawUserSchema(BaseModel):
	"""A user record as stored; normalized before evaluation."""
	model_config = ConfigDict(extra="ignore")

	id: str | int | None = None
	role: str | None = None
	hierarchy: int | None = None
	division: str | None = None
	department: str | None = None


class ProjectSchema(BaseModel):
	model_config = ConfigDict(extra="ignore")

	id: str | int
	creator_id: str | int | None = None
	status: str | None = "active"


class TaskSchema(BaseModel):
	model_config = ConfigDict(extra="ignore")

	id: str | int
	project_id: str | int | None = None
	parent_id: str | int | None = None
	assigned_to: list[str | int] = Field(default_factory=list)


class EvaluateRequest(BaseModel):
	"""
	Explicit facts for a single policy check.

	``subject`` is the user being checked; a missing subject is evaluated as
	unauthenticated. ``creator`` is the project creator, ``target`` the user
	looked at by ``view_resource``. For ``create_task`` a missing project
	means a personal task; for every other check it means the project could
	not be found.
	"""
	model_config = ConfigDict(extra="forbid")

	check: Literal[
		"create_project",
		"edit_project",
		"add_project_members",
		"archive_project",
		"remove_project_member",
		"create_task",
		"modify_task",
		"view_resource",
		"generate_report",
	]
	subject: RawUserSchema | None = None
	creator: RawUserSchema | None = None
	target: RawUserSchema | None = None
	project: ProjectSchema | None = None
	task: TaskSchema | None = None
	members: list[str | int] = Field(default_factory=list)
	member_id: str | int | None = None


class DecisionResponse(BaseModel):
	"""Schema for a policy decision."""
	allowed: bool
	effect: PolicyEffect
	reason: str
	rule: str


class ScopeResponse(BaseModel):
	"""Declarative listing scope for the calling subject."""
	kind: Literal["unrestricted", "division_bounded", "owner_only", "no_access"]
	division: str | None = None
	hierarchy_less_than: int | None = None
	subject_id: str | None = None
	include_memberships: bool | None = None


class SubjectResponse(BaseModel):
	id: str
	tier: str
	hierarchy: int
	division: str | None
	department: str | None
	role_label: str


class ErrorResponse(BaseModel):
	"""Body of every access rejection."""
	detail: str
	code: str
	reason: str | None = None


class DecisionLogResponse(BaseModel):
	"""Schema for a decision audit record."""
	model_config = ConfigDict(from_attributes=True)

	id: str
	timestamp: datetime
	subject_id: str | None
	rule: str
	resource_type: str
	resource_id: str | None
	allowed: bool
	effect: PolicyEffect
	reason: str
