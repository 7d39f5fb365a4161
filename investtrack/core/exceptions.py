class InvestTrackException(Exception):
    """Base exception for InvestTrack"""

    pass


class UnauthorizedException(InvestTrackException):
    """Raised when JWT validation or credential checks fail"""

    pass


class ForbiddenException(InvestTrackException):
    """Raised when the authenticated user lacks the required role"""

    pass


class NotFoundException(InvestTrackException):
    """Raised when resource not found"""

    pass


class ValidationException(InvestTrackException):
    """
    Raised for schema and business-rule validation errors.

    Carries every offending field, not just the first one, as a list of
    {"field": ..., "message": ...} dicts.
    """

    def __init__(self, message: str, fields: list[dict] | None = None):
        super().__init__(message)
        self.fields = fields or []


class DuplicateKeyException(InvestTrackException):
    """Raised when a unique constraint (name, email, mobile number, ...) is violated"""

    def __init__(self, field: str, message: str | None = None):
        super().__init__(message or f"A record with that {field} already exists")
        self.field = field


class InvalidOperationException(InvestTrackException):
    """Raised for semantically illegal requests (self-transfer, wrong firm type, ...)"""

    pass


class InvalidTypeException(InvalidOperationException):
    """Raised when a firm/member type tag is not a recognized variant"""

    pass


class UnsupportedMediaTypeException(InvalidOperationException):
    """Raised when an uploaded file's MIME type is not on the allow-list"""

    pass


class PayloadTooLargeException(InvalidOperationException):
    """Raised when an uploaded file exceeds the size cap"""

    pass


class ConflictException(InvestTrackException):
    """Raised when a write is rejected because the record changed underneath it"""

    pass


def error_fields(errors) -> list[dict]:
    """
    Flatten pydantic / FastAPI validation errors into {"field", "message"} dicts.

    Location prefixes added by FastAPI ("body") are dropped so the field name
    matches the payload key.
    """
    fields = []
    for error in errors:
        location = [str(part) for part in error.get("loc", ()) if part != "body"]
        fields.append({"field": ".".join(location) or "body", "message": error.get("msg", "")})
    return fields
