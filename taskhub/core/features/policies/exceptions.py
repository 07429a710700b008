# (c) Copyright Datacraft, 2026
"""Access errors raised at the service boundary."""
from .engine import DecisionReason, PolicyDecision


class AccessError(Exception):
	"""Base class for authorization outcomes that stop a request."""
	status_code: int = 500
	code: str = "access_error"

	def __init__(self, detail: str, reason: DecisionReason | None = None):
		super().__init__(detail)
		self.detail = detail
		self.reason = reason

	def to_dict(self) -> dict:
		return {
			"detail": self.detail,
			"code": self.code,
			"reason": self.reason.value if self.reason else None,
		}


class UnauthenticatedError(AccessError):
	"""No resolvable subject."""
	status_code = 401
	code = "unauthenticated"

	def __init__(self, detail: str = "Authentication required"):
		super().__init__(detail, DecisionReason.UNAUTHENTICATED)


class NotFoundError(AccessError):
	"""
	Resource absent.

	Also raised for an inactive project targeted by task creation, with the
	same detail text, so archived projects are indistinguishable from
	missing ones.
	"""
	status_code = 404
	code = "not_found"

	def __init__(self, resource_type: str, resource_id: object = None):
		super().__init__(f"{resource_type.capitalize()} not found")
		self.resource_type = resource_type
		self.resource_id = resource_id


class ForbiddenError(AccessError):
	"""Subject and resource resolved, but no clause allows the action."""
	status_code = 403
	code = "forbidden"

	def __init__(self, decision: PolicyDecision, detail: str | None = None):
		super().__init__(detail or "Access denied", decision.reason)
		self.decision = decision


class UnavailableError(AccessError):
	"""A subject or resource lookup failed for infrastructural reasons."""
	status_code = 503
	code = "unavailable"

	def __init__(self, detail: str = "Authorization data unavailable", failures: dict | None = None):
		super().__init__(detail)
		self.failures = failures or {}
