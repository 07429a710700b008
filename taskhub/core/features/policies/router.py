# (c) Copyright Datacraft, 2026
"""FastAPI router for authorization checks."""
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from taskhub.core.db.engine import get_session

from . import engine
from .db import AccessDecisionDB
from .departments import can_generate_report
from .dependencies import get_current_subject, get_policy_service
from .engine import PolicyDecision
from .exceptions import ForbiddenError
from .models import ABSENT, Project, RelationshipFacts, Subject, Task
from .normalizer import normalize
from .service import PolicyService, ProjectAction, TaskAction
from .views import (
	DecisionLogResponse, DecisionResponse, ErrorResponse, EvaluateRequest,
	RawUserSchema, ScopeResponse, SubjectResponse,
)

router = APIRouter(
	prefix="/policies",
	tags=["policies"],
	responses={
		401: {"model": ErrorResponse},
		403: {"model": ErrorResponse},
		404: {"model": ErrorResponse},
		503: {"model": ErrorResponse},
	},
)

CurrentSubject = Annotated[Subject, Depends(get_current_subject)]
Service = Annotated[PolicyService, Depends(get_policy_service)]


# --- Evaluation of explicit facts ---

@router.post("/evaluate", response_model=DecisionResponse)
async def evaluate(data: EvaluateRequest, current_subject: CurrentSubject):
	"""Evaluate one check over the facts in the request body; never raises on deny."""
	subject = normalize(_dump(data.subject))
	creator = _subject_or_absent(data.creator)
	project = Project.from_record(_dump(data.project))
	task = Task.from_record(_dump(data.task))

	match data.check:
		case "create_project":
			decision = engine.can_create_project(subject)
		case "edit_project":
			decision = engine.can_edit_project(subject, project, creator)
		case "add_project_members":
			decision = engine.can_add_project_members(subject, project)
		case "archive_project":
			decision = engine.can_archive_project(subject, project)
		case "remove_project_member":
			decision = engine.can_remove_project_member(subject, project, data.member_id)
		case "create_task":
			target_project = None if data.project is None else project
			decision = engine.can_create_task(subject, target_project, _facts(subject, data, project, task, creator))
		case "modify_task":
			decision = engine.can_modify_task(subject, task, project, _facts(subject, data, project, task, creator))
		case "view_resource":
			decision = engine.can_view_resource(subject, _subject_or_absent(data.target))
		case "generate_report":
			decision = can_generate_report(subject)

	return _to_response(decision)


# --- Checks for the calling subject ---

@router.get("/me", response_model=SubjectResponse)
async def who_am_i(current_subject: CurrentSubject):
	return SubjectResponse(**current_subject.to_dict())


@router.get("/scope", response_model=ScopeResponse)
async def get_scope(current_subject: CurrentSubject, service: Service):
	"""Listing scope for the caller, for the persistence layer to apply."""
	return ScopeResponse(**service.visibility_scope(current_subject).to_dict())


@router.get("/subordinates", response_model=list[SubjectResponse])
async def list_subordinates(current_subject: CurrentSubject, service: Service):
	subordinates = await service.visible_subordinates(current_subject)
	return [SubjectResponse(**s.to_dict()) for s in subordinates]


@router.get("/projects/permissions/create", response_model=DecisionResponse)
async def check_project_creation(current_subject: CurrentSubject, service: Service):
	return _to_response(await service.authorize_project_creation(current_subject))


@router.get("/projects/{project_id}/permissions/{action}", response_model=DecisionResponse)
async def check_project_action(
	project_id: str,
	action: ProjectAction,
	current_subject: CurrentSubject,
	service: Service,
):
	decision = await service.authorize_project(current_subject, project_id, action)
	return _to_response(decision)


@router.get("/projects/{project_id}/members/{member_id}/permissions/remove", response_model=DecisionResponse)
async def check_member_removal(
	project_id: str,
	member_id: str,
	current_subject: CurrentSubject,
	service: Service,
):
	decision = await service.authorize_member_removal(current_subject, project_id, member_id)
	return _to_response(decision)


@router.get("/tasks/permissions/create", response_model=DecisionResponse)
async def check_task_creation(
	current_subject: CurrentSubject,
	service: Service,
	project_id: str | None = Query(None),
):
	decision = await service.authorize_task_creation(current_subject, project_id)
	return _to_response(decision)


@router.get("/tasks/{task_id}/permissions/{action}", response_model=DecisionResponse)
async def check_task_action(
	task_id: str,
	action: TaskAction,
	current_subject: CurrentSubject,
	service: Service,
):
	decision = await service.authorize_task(current_subject, task_id, action)
	return _to_response(decision)


@router.get("/users/{user_id}/permissions/view", response_model=DecisionResponse)
async def check_user_view(
	user_id: str,
	current_subject: CurrentSubject,
	service: Service,
):
	decision = await service.authorize_user_view(current_subject, user_id)
	return _to_response(decision)


# --- Decision audit ---

@router.get("/decisions", response_model=list[DecisionLogResponse])
async def list_decisions(
	current_subject: CurrentSubject,
	session: Annotated[AsyncSession | None, Depends(get_session)],
	subject_id: str | None = Query(None),
	resource_type: str | None = Query(None),
	allowed: bool | None = Query(None),
	limit: int = Query(50, ge=1, le=200),
	offset: int = Query(0, ge=0),
):
	"""Recent decisions; admins only."""
	if not current_subject.is_admin:
		raise ForbiddenError(engine.deny("list_decisions", engine.DecisionReason.INSUFFICIENT_TIER))
	if session is None:
		raise HTTPException(
			status_code=status.HTTP_501_NOT_IMPLEMENTED,
			detail="Decision audit database is not configured",
		)
	db = AccessDecisionDB(session)
	logs = await db.get_decisions(
		subject_id=subject_id,
		resource_type=resource_type,
		allowed=allowed,
		limit=limit,
		offset=offset,
	)
	return [DecisionLogResponse.model_validate(log) for log in logs]


def _dump(model) -> dict | None:
	return model.model_dump() if model is not None else None


def _subject_or_absent(raw: RawUserSchema | None):
	subject = normalize(_dump(raw))
	return subject if isinstance(subject, Subject) else ABSENT


def _facts(subject, data: EvaluateRequest, project, task, creator):
	if not isinstance(subject, Subject):
		return ABSENT
	return RelationshipFacts.derive(
		subject, project=project, task=task, members=data.members, creator=creator,
	)


def _to_response(decision: PolicyDecision) -> DecisionResponse:
	return DecisionResponse(
		allowed=decision.allowed,
		effect=decision.effect,
		reason=decision.reason.value,
		rule=decision.rule,
	)
