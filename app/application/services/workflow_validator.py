"""Workflow validator: static behavior config checks and object reference checks.

Config checkers return lists of errors and never raise. Only employer-detection
and invoice-mapping are validated in depth; other known types pass unchecked
and unknown types pass with a warning.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Protocol

from app.application.interfaces.repositories import IObjectStore
from app.domain.entities.workflow import WorkflowObjectRef
from app.domain.enums import BehaviorType, ClientSideBehaviorType, PaymentTerms
from app.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class ConfigError:
    """One field-level config problem."""

    field: str
    message: str


class _TypedConfig(Protocol):
    type: str
    config: dict[str, Any]


def _is_known_type(behavior_type: str) -> bool:
    return (
        behavior_type in BehaviorType.values()
        or behavior_type in ClientSideBehaviorType.values()
    )


def _require_non_empty_str(config: Mapping[str, Any], name: str, errors: list[ConfigError]) -> None:
    value = config.get(name)
    if not isinstance(value, str) or not value.strip():
        errors.append(ConfigError(name, "is required and must be a non-empty string"))


def _check_str_mapping(
    config: Mapping[str, Any], name: str, errors: list[ConfigError], *, required: bool
) -> None:
    if name not in config or config[name] is None:
        if required:
            errors.append(ConfigError(name, "is required"))
        return
    value = config[name]
    if not isinstance(value, dict):
        errors.append(ConfigError(name, "must be an object mapping strings to strings"))
        return
    for key, mapped in value.items():
        if not isinstance(key, str) or not isinstance(mapped, str):
            errors.append(ConfigError(f"{name}.{key}", "must map a string to a string"))


def _check_optional_bool(config: Mapping[str, Any], name: str, errors: list[ConfigError]) -> None:
    if config.get(name) is not None and not isinstance(config[name], bool):
        errors.append(ConfigError(name, "must be a boolean"))


def _check_payment_terms(config: Mapping[str, Any], errors: list[ConfigError]) -> None:
    terms = config.get("default_payment_terms")
    if terms is not None and terms not in PaymentTerms.values():
        errors.append(
            ConfigError(
                "default_payment_terms",
                f"must be one of {', '.join(PaymentTerms.values())}",
            )
        )


def _validate_employer_detection(config: Mapping[str, Any]) -> list[ConfigError]:
    errors: list[ConfigError] = []
    _require_non_empty_str(config, "employer_source_field", errors)
    _check_str_mapping(config, "crm_organization_mapping", errors, required=False)
    _check_optional_bool(config, "auto_fill_billing", errors)
    _check_payment_terms(config, errors)
    return errors


def _validate_invoice_mapping(config: Mapping[str, Any]) -> list[ConfigError]:
    errors: list[ConfigError] = []
    _require_non_empty_str(config, "organization_source_field", errors)
    _check_str_mapping(config, "organization_mapping", errors, required=True)
    _check_payment_terms(config, errors)
    _check_optional_bool(config, "require_mapping", errors)
    template_id = config.get("template_id")
    if template_id is not None and not isinstance(template_id, str):
        errors.append(ConfigError("template_id", "must be a string"))
    field_mapping = config.get("invoice_field_mapping")
    if field_mapping is not None and not isinstance(field_mapping, dict):
        errors.append(ConfigError("invoice_field_mapping", "must be an object"))
    return errors


_CHECKERS: dict[str, Callable[[Mapping[str, Any]], list[ConfigError]]] = {
    ClientSideBehaviorType.EMPLOYER_DETECTION.value: _validate_employer_detection,
    ClientSideBehaviorType.INVOICE_MAPPING.value: _validate_invoice_mapping,
}


def validate_behavior_config(behavior_type: str, config: Mapping[str, Any]) -> list[ConfigError]:
    """Return config errors for one behavior (empty when valid or unchecked)."""
    errors: list[ConfigError] = []
    condition = config.get("condition")
    if condition is not None and not isinstance(condition, str):
        errors.append(ConfigError("condition", "must be a string expression"))

    checker = _CHECKERS.get(behavior_type)
    if checker is not None:
        errors.extend(checker(config))
    elif not _is_known_type(behavior_type):
        logger.warning("No validation available for unknown behavior type: %s", behavior_type)
    return errors


def validate_workflow_config(behaviors: Iterable[_TypedConfig]) -> list[str]:
    """Validate every behavior; entries are formatted '<type>.<field>: <message>'."""
    messages: list[str] = []
    for behavior in behaviors:
        for error in validate_behavior_config(behavior.type, behavior.config or {}):
            messages.append(f"{behavior.type}.{error.field}: {error.message}")
    return messages


def find_unvalidated_behavior_types(behaviors: Iterable[_TypedConfig]) -> list[str]:
    """Return distinct behavior types unknown to the engine, in first-seen order."""
    seen: list[str] = []
    for behavior in behaviors:
        if not _is_known_type(behavior.type) and behavior.type not in seen:
            seen.append(behavior.type)
    return seen


async def validate_object_references(
    store: IObjectStore, objects: Sequence[WorkflowObjectRef]
) -> list[str]:
    """Check each reference exists with the declared type; collect every problem."""
    errors: list[str] = []
    for ref in objects:
        doc = await store.get(ref.object_id)
        if doc is None:
            errors.append(f"Object {ref.object_id} not found")
        elif doc.get("type") != ref.object_type:
            errors.append(
                f"Object {ref.object_id} is type {doc.get('type')}, expected {ref.object_type}"
            )
    return errors
