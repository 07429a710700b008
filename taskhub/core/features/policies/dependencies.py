# (c) Copyright Datacraft, 2026
"""FastAPI dependencies and error mapping for the policy boundary."""
import logging
from typing import Annotated

from fastapi import Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from taskhub.core.config import get_settings
from taskhub.core.db.engine import get_session

from .context import Stores
from .exceptions import AccessError, UnauthenticatedError, UnavailableError
from .models import Subject
from .service import PolicyService

logger = logging.getLogger(__name__)


def get_stores(request: Request) -> Stores:
	"""Stores are attached to ``app.state.stores`` by the deployment."""
	stores = getattr(request.app.state, "stores", None)
	if stores is None:
		raise UnavailableError("Authorization stores are not configured")
	return stores


def get_policy_service(
	stores: Annotated[Stores, Depends(get_stores)],
	session: Annotated[AsyncSession | None, Depends(get_session)],
) -> PolicyService:
	return PolicyService(stores, session)


async def get_current_subject(
	request: Request,
	service: Annotated[PolicyService, Depends(get_policy_service)],
) -> Subject:
	"""
	Resolve the caller from the identity header.

	Session and token validation happen upstream; this only turns the
	validated user id into a Subject. Unknown users are unauthenticated.
	"""
	user_id = request.headers.get(get_settings().user_id_header)
	if not user_id:
		raise UnauthenticatedError()
	return await service.authenticate(user_id)


async def access_error_handler(request: Request, exc: AccessError) -> JSONResponse:
	headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
	return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)
