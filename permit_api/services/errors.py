# This project was developed with assistance from AI tools.
"""Domain error taxonomy for the application lifecycle.

Services raise these; ``main.py`` renders them once as Problem Details.
Each class carries the HTTP status it maps to so the handler needs no
per-type branching.
"""


class PermitError(Exception):
    """Base class for every expected lifecycle failure."""

    status_code = 400
    error_code = "permit_error"

    def __init__(self, message: str, *, error_code: str | None = None):
        super().__init__(message)
        self.message = message
        if error_code is not None:
            self.error_code = error_code


class AuthorizationError(PermitError):
    """Actor may not perform the action on this entity in its current state."""

    status_code = 403

    def __init__(self, reason: str, message: str | None = None):
        super().__init__(message or f"Action not permitted ({reason})", error_code=reason)
        self.reason = reason


class ValidationError(PermitError):
    """Structurally invalid input. Carries every violation, not just the first."""

    status_code = 422
    error_code = "validation_failed"

    def __init__(self, errors: dict[str, str], message: str = "The given data was invalid."):
        super().__init__(message)
        self.errors = dict(errors)


class CompletenessError(ValidationError):
    """Submit-only: unmet mandatory requirements plus structural gaps."""

    error_code = "incomplete"

    def __init__(self, missing_requirement_ids: list[int], structural_errors: dict[str, str]):
        super().__init__(
            structural_errors,
            message="Application is incomplete and cannot be submitted.",
        )
        self.missing_requirement_ids = list(missing_requirement_ids)


class NotFoundError(PermitError):
    """Referenced entity does not exist (or is not attached where claimed)."""

    status_code = 404
    error_code = "not_found"


class BusinessRuleViolation(PermitError):
    """Authorized, well-formed request that breaks a domain rule."""

    status_code = 409
    error_code = "business_rule_violation"


class ExternalServiceError(PermitError):
    """A collaborator the engine depends on (license catalog) is unavailable."""

    status_code = 503
    error_code = "external_service_unavailable"

    def __init__(self, service: str, message: str):
        super().__init__(f"{service}: {message}")
        self.service = service
