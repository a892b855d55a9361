"""Shared service error definitions."""
from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(slots=True)
class ServiceError(Exception):
    code: str
    message: str
    status_code: int = 400

    def __str__(self) -> str:  # noqa: D401 override
        return f"{self.code}: {self.message}"


@dataclass(frozen=True, slots=True)
class FieldError:
    """A single rejected field: leaf name, dotted path and reason."""

    field: str
    path: str
    reason: str

    def __str__(self) -> str:
        return f"{self.path} {self.reason}"


@dataclass(slots=True)
class PayloadValidationError(ServiceError):
    code: str = "ERR_VALIDATION"
    message: str = "Payload validation failed"
    status_code: int = 422
    errors: list[FieldError] = field(default_factory=list)

    @property
    def field(self) -> str | None:
        return self.errors[0].field if self.errors else None

    @property
    def reason(self) -> str | None:
        return self.errors[0].reason if self.errors else None


@dataclass(slots=True)
class MalformedPayloadError(ServiceError):
    code: str = "ERR_MALFORMED_INPUT"
    message: str = "Payload input is structurally invalid"
    status_code: int = 500


@dataclass(slots=True)
class PayloadDecodeError(ServiceError):
    code: str = "ERR_DECODE"
    message: str = "Payload TLV framing is invalid"
    status_code: int = 400


def err_validation(errors: list[FieldError]) -> PayloadValidationError:
    first = errors[0]
    return PayloadValidationError(message=str(first), errors=list(errors))


def err_malformed(message: str | None = None) -> MalformedPayloadError:
    return MalformedPayloadError(message=message or "Payload input is structurally invalid")


def err_decode(message: str | None = None) -> PayloadDecodeError:
    return PayloadDecodeError(message=message or "Payload TLV framing is invalid")
