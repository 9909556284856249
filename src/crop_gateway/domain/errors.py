"""Error taxonomy for the crop-session gateway.

Every error carries a stable machine-readable code, a human message and the
HTTP status it resolves to at the request boundary. Families mirror how a
client should react: fix the request, re-issue a session, or give up.
"""

from dataclasses import dataclass, field


@dataclass(eq=False)
class CropGatewayError(Exception):
    """Base class for errors surfaced to public callers."""

    message: str
    code: str = "ERROR"
    status_code: int = 500
    details: dict[str, object] = field(default_factory=dict)

    def __post_init__(self) -> None:
        super().__init__(self.message)

    def to_dict(self) -> dict[str, object]:
        """Serialize into the public error payload."""
        return {"error": self.message, "code": self.code, **self.details}


class ValidationError(CropGatewayError):
    """Malformed geometry or page number; fixable by the client."""


class CredentialError(CropGatewayError):
    """Missing, unknown or expired crop session."""


class QuotaError(CropGatewayError):
    """The crop session has no operations left."""


class NotFoundError(CropGatewayError):
    """A document or region does not exist for the caller."""


class ForbiddenError(CropGatewayError):
    """The session is valid but not allowed to perform this operation."""


class TenantMismatchError(ForbiddenError):
    """A session from one tenant was presented to another."""


def invalid_coordinates(reason: str) -> ValidationError:
    return ValidationError(reason, code="INVALID_COORDINATES", status_code=400)


def invalid_page_number(reason: str) -> ValidationError:
    return ValidationError(reason, code="INVALID_PAGE_NUMBER", status_code=400)


def tenant_required() -> ValidationError:
    return ValidationError(
        "Tenant context required", code="TENANT_REQUIRED", status_code=400
    )


def credential_required() -> CredentialError:
    return CredentialError(
        "X-Crop-Session header is required",
        code="CREDENTIAL_REQUIRED",
        status_code=401,
    )


def invalid_credential() -> CredentialError:
    return CredentialError(
        "Invalid crop session", code="INVALID_CREDENTIAL", status_code=401
    )


def credential_expired() -> CredentialError:
    return CredentialError(
        "Crop session expired", code="CREDENTIAL_EXPIRED", status_code=401
    )


def tenant_mismatch() -> TenantMismatchError:
    return TenantMismatchError(
        "Session does not belong to this tenant",
        code="TENANT_MISMATCH",
        status_code=403,
    )


def scope_mismatch() -> ForbiddenError:
    return ForbiddenError(
        "Session not authorized for this region",
        code="SCOPE_MISMATCH",
        status_code=403,
    )


def scoped_session_cannot_create() -> ForbiddenError:
    return ForbiddenError(
        "Session is scoped to an existing region and cannot create new ones",
        code="SCOPED_SESSION_CANNOT_CREATE",
        status_code=403,
    )


def region_document_mismatch() -> ForbiddenError:
    return ForbiddenError(
        "Region does not belong to the session document",
        code="REGION_DOCUMENT_MISMATCH",
        status_code=403,
    )


def quota_exhausted(limit: int, current: int) -> QuotaError:
    return QuotaError(
        f"Session operation limit reached (max {limit})",
        code="QUOTA_EXHAUSTED",
        status_code=429,
        details={"limit": limit, "current": current},
    )


def document_not_found() -> NotFoundError:
    return NotFoundError(
        "Document not found", code="DOCUMENT_NOT_FOUND", status_code=404
    )


def region_not_found() -> NotFoundError:
    return NotFoundError("Region not found", code="REGION_NOT_FOUND", status_code=404)
