"""Domain error taxonomy.

Services raise these; the api layer turns them into JSON responses using
`status` and `code`. Anything else that escapes a service is a bug or a storage
failure and is left to propagate as a 500.
"""

from decimal import Decimal


class EngineError(Exception):
	status = 400
	code = "engine_error"

	def __init__(self, message: str = ""):
		super().__init__(message or self.code)
		self.message = message or self.code

	def payload(self) -> dict:
		return {"error": self.code, "detail": self.message}


class ValidationFailed(EngineError):
	code = "validation_failed"

	def __init__(self, message: str = "", errors: list[str] | None = None):
		super().__init__(message or "; ".join(errors or []))
		self.errors = errors or []

	def payload(self) -> dict:
		data = super().payload()
		if self.errors:
			data["errors"] = self.errors
		return data


class NotAuthenticated(EngineError):
	status = 401
	code = "not_authenticated"


class InsufficientBalance(EngineError):
	"""
	Recoverable: the caller should prompt the user to top up.
	"""
	status = 402
	code = "insufficient_balance"

	def __init__(self, required: Decimal, available: Decimal):
		super().__init__(f"required {required:.2f}, available {available:.2f}")
		self.required = required
		self.available = available

	def payload(self) -> dict:
		data = super().payload()
		data["required"] = f"{self.required:.2f}"
		data["available"] = f"{self.available:.2f}"
		data["missing"] = f"{self.required - self.available:.2f}"
		return data


class PermissionDenied(EngineError):
	status = 403
	code = "permission_denied"


class NotEligible(EngineError):
	"""
	Safe to retry later (e.g. after more reading time).
	"""
	status = 403
	code = "not_eligible"


class IsAuthor(EngineError):
	status = 403
	code = "is_author"


class NotFound(EngineError):
	status = 404
	code = "not_found"


class InvalidPromoCode(EngineError):
	status = 404
	code = "invalid"


class InvalidState(EngineError):
	"""
	Transition not legal from the current status. Never retried automatically.
	"""
	status = 409
	code = "invalid_state"


class AlreadyCollected(EngineError):
	status = 409
	code = "already_collected"


class AlreadyUsedByUser(EngineError):
	status = 409
	code = "already_used_by_user"


class LimitReached(EngineError):
	status = 409
	code = "limit_reached"


class Expired(EngineError):
	status = 410
	code = "expired"
