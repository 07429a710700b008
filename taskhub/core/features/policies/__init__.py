# (c) Copyright Datacraft, 2026
"""
Authorization policies for projects and tasks.

This module provides:
- Subject normalization with least-privilege defaults
- Pure policy checks combining role tier, division and hierarchy rank,
  and creator/assignee/member relationships
- Declarative visibility scopes for listing
- Department hierarchy scoping for reports
- A service that resolves facts concurrently and enforces decisions
"""
from .engine import (
	PolicyDecision, PolicyEffect, DecisionReason,
	can_create_project, can_edit_project, can_add_project_members,
	can_archive_project, can_remove_project_member,
	can_create_task, can_modify_task, can_view_resource,
)
from .models import (
	RoleTier, ProjectStatus, Subject, Project, Task, RelationshipFacts,
	Unauthenticated, Absent, UNAUTHENTICATED, ABSENT,
)
from .normalizer import normalize
from .scope import (
	ScopeDescriptor, Unrestricted, DivisionBounded, OwnerOnly, NoAccess, scope_for,
)
from .departments import (
	filter_by_hierarchy, in_department_hierarchy, can_generate_report, report_scope,
)
from .exceptions import (
	AccessError, UnauthenticatedError, NotFoundError, ForbiddenError, UnavailableError,
)
from .context import (
	Stores, UserStore, ProjectStore, MembershipStore, TaskStore,
	ResourceContext, ResourceContextResolver,
)
from .service import PolicyService, ProjectAction, TaskAction

__all__ = [
	# Engine
	"PolicyDecision",
	"PolicyEffect",
	"DecisionReason",
	"can_create_project",
	"can_edit_project",
	"can_add_project_members",
	"can_archive_project",
	"can_remove_project_member",
	"can_create_task",
	"can_modify_task",
	"can_view_resource",
	# Models
	"RoleTier",
	"ProjectStatus",
	"Subject",
	"Project",
	"Task",
	"RelationshipFacts",
	"Unauthenticated",
	"Absent",
	"UNAUTHENTICATED",
	"ABSENT",
	"normalize",
	# Scopes
	"ScopeDescriptor",
	"Unrestricted",
	"DivisionBounded",
	"OwnerOnly",
	"NoAccess",
	"scope_for",
	# Departments
	"filter_by_hierarchy",
	"in_department_hierarchy",
	"can_generate_report",
	"report_scope",
	# Errors
	"AccessError",
	"UnauthenticatedError",
	"NotFoundError",
	"ForbiddenError",
	"UnavailableError",
	# Resolution and service
	"Stores",
	"UserStore",
	"ProjectStore",
	"MembershipStore",
	"TaskStore",
	"ResourceContext",
	"ResourceContextResolver",
	"PolicyService",
	"ProjectAction",
	"TaskAction",
]
