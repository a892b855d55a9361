"""Payment payload validation services."""
from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Any, Mapping

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from ..registry import DEFAULT_REGISTRY, FieldRegistry
from ..schemas import PaymentRequest
from ..tlv import TLVItem, serialized_length
from . import templates
from .errors import FieldError, err_validation

logger = logging.getLogger("qrpay.validator")

MAX_TEMPLATE_LENGTH = 99


class RuleKind(str, enum.Enum):
    REQUIRED_WHEN_EQUALS = "required_when_equals"
    REQUIRED_WHEN_PRESENT = "required_when_present"
    MAX_JOINED_LENGTH = "max_joined_length"
    MAX_SERIALIZED_LENGTH = "max_serialized_length"


@dataclass(frozen=True, slots=True)
class Rule:
    """Cross-field rule descriptor.

    ``field`` is the field reported on failure. ``trigger`` and ``expected``
    drive the conditional kinds; ``limit`` bounds the joined raw length or
    the serialized TLV length of a nested template.
    """

    kind: RuleKind
    field: str
    reason: str
    trigger: str | None = None
    expected: Any = None
    limit: int | None = None


def default_rules(registry: FieldRegistry = DEFAULT_REGISTRY) -> tuple[Rule, ...]:
    return (
        Rule(
            kind=RuleKind.REQUIRED_WHEN_EQUALS,
            field="fixed_fee",
            trigger="convenience_indicator",
            expected=registry.convenience_fixed,
            reason="must be filled when convenience_indicator selects a fixed fee",
        ),
        Rule(
            kind=RuleKind.REQUIRED_WHEN_EQUALS,
            field="percentage_fee",
            trigger="convenience_indicator",
            expected=registry.convenience_percentage,
            reason="must be filled when convenience_indicator selects a percentage fee",
        ),
        Rule(
            kind=RuleKind.REQUIRED_WHEN_PRESENT,
            field="aggregator_id",
            trigger="merchant_account_33",
            reason="aggregator must be filled",
        ),
        Rule(kind=RuleKind.MAX_JOINED_LENGTH, field="merchant_account_32", limit=MAX_TEMPLATE_LENGTH, reason="field is too long"),
        Rule(kind=RuleKind.MAX_JOINED_LENGTH, field="merchant_account_33", limit=MAX_TEMPLATE_LENGTH, reason="field is too long"),
        Rule(kind=RuleKind.MAX_JOINED_LENGTH, field="additional_data", limit=MAX_TEMPLATE_LENGTH, reason="field is too long"),
        Rule(kind=RuleKind.MAX_SERIALIZED_LENGTH, field="merchant_account_32", limit=MAX_TEMPLATE_LENGTH, reason="encoded template is too long"),
        Rule(kind=RuleKind.MAX_SERIALIZED_LENGTH, field="merchant_account_33", limit=MAX_TEMPLATE_LENGTH, reason="encoded template is too long"),
        Rule(kind=RuleKind.MAX_SERIALIZED_LENGTH, field="additional_data", limit=MAX_TEMPLATE_LENGTH, reason="encoded template is too long"),
    )


def _as_text(value: Any) -> str:
    if isinstance(value, bool):
        return str(value).lower()
    return str(value)


def _is_filled(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, (str, dict, list)):
        return len(value) > 0
    return True


def _template_items(name: str, request: PaymentRequest, registry: FieldRegistry) -> list[TLVItem]:
    section = getattr(request, name)
    if section is None:
        return []
    data = section.model_dump()
    if name == "merchant_account_32":
        return templates.merchant_account_32(registry, data)
    if name == "merchant_account_33":
        if request.aggregator_id is None:
            return []
        return templates.merchant_account_33(registry, request.aggregator_id, data)
    if name == "additional_data":
        return templates.additional_data(registry, data)
    if name == "merchant_information_language":
        return templates.merchant_language(registry, data)
    raise ValueError(f"{name} is not a nested template")


def _evaluate(rule: Rule, request: PaymentRequest, registry: FieldRegistry) -> FieldError | None:
    value = getattr(request, rule.field)
    if rule.kind is RuleKind.REQUIRED_WHEN_EQUALS:
        failed = getattr(request, rule.trigger) == rule.expected and not _is_filled(value)
    elif rule.kind is RuleKind.REQUIRED_WHEN_PRESENT:
        failed = getattr(request, rule.trigger) is not None and not _is_filled(value)
    elif rule.kind is RuleKind.MAX_JOINED_LENGTH:
        values = value.model_dump(exclude_none=True).values() if value is not None else ()
        failed = sum(len(_as_text(item)) for item in values) > rule.limit
    elif rule.kind is RuleKind.MAX_SERIALIZED_LENGTH:
        failed = serialized_length(_template_items(rule.field, request, registry)) > rule.limit
    else:
        raise ValueError(f"Unknown rule kind: {rule.kind}")
    if failed:
        return FieldError(field=rule.field, path=rule.field, reason=rule.reason)
    return None


def _from_pydantic(exc: PydanticValidationError) -> list[FieldError]:
    errors = []
    for error in exc.errors():
        loc = [str(part) for part in error["loc"] if not isinstance(part, int)]
        path = ".".join(loc) or "payload"
        errors.append(FieldError(field=loc[-1] if loc else "payload", path=path, reason=error["msg"]))
    return errors


class PayloadValidator:
    """Check payment input before generation.

    Per-field rules are the constraints declared on :class:`PaymentRequest`;
    cross-field rules are :class:`Rule` descriptors evaluated after the
    per-field pass succeeds.
    """

    def __init__(self, registry: FieldRegistry = DEFAULT_REGISTRY, rules: tuple[Rule, ...] | None = None):
        self.registry = registry
        self.rules = rules if rules is not None else default_rules(registry)

    def collect_errors(self, data: Mapping[str, Any] | BaseModel) -> list[FieldError]:
        """Return every rejected field without raising."""

        if isinstance(data, BaseModel):
            data = data.model_dump()
        if not isinstance(data, Mapping):
            return [FieldError(field="payload", path="payload", reason="must be a mapping")]
        try:
            request = PaymentRequest.model_validate(data)
        except PydanticValidationError as exc:
            return _from_pydantic(exc)
        return [error for error in (_evaluate(rule, request, self.registry) for rule in self.rules) if error is not None]

    def validate(self, data: Any) -> Any:
        """Return ``data`` unchanged, or raise :class:`PayloadValidationError`."""

        errors = self.collect_errors(data)
        if errors:
            logger.info(
                "payload rejected",
                extra={"field": errors[0].path, "reason": errors[0].reason, "error_count": len(errors)},
            )
            raise err_validation(errors)
        return data


def validate(data: Any, registry: FieldRegistry = DEFAULT_REGISTRY) -> Any:
    return PayloadValidator(registry).validate(data)
