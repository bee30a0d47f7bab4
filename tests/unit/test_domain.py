"""Domain entity and exception tests."""

from app.domain.entities.template_set import TemplateSetEntity
from app.domain.entities.workflow import WorkflowEntity, WorkflowExecutionPolicy
from app.domain.exceptions import (
    AuthorizationException,
    InvalidObjectReferencesException,
    ResourceNotFoundException,
    ValidationException,
)


def test_validation_exception_details() -> None:
    exc = ValidationException("bad status", field="status")
    assert exc.error_code == "VALIDATION_ERROR"
    assert exc.to_dict() == {
        "error": "VALIDATION_ERROR",
        "message": "bad status",
        "details": {"field": "status"},
    }


def test_invalid_references_lists_every_error() -> None:
    exc = InvalidObjectReferencesException(["Object a not found", "Object b not found"])
    assert exc.message == "Invalid object references: Object a not found, Object b not found"


def test_authorization_message_names_permission() -> None:
    assert AuthorizationException("view_templates").message == (
        "Permission denied: view_templates required"
    )
    assert AuthorizationException().details == {}


def test_not_found_message() -> None:
    assert ResourceNotFoundException("workflow", "wf_9").message == "workflow not found: wf_9"


def test_execution_policy_short_name_and_continue() -> None:
    policy = WorkflowExecutionPolicy("registration_start", "rollback")
    assert policy.workflow_short_name == "registration"
    assert policy.continue_on_error is False
    assert WorkflowExecutionPolicy("checkout_start", "notify").continue_on_error is True


def test_workflow_document_round_trip(seed_workflow, make_behavior) -> None:
    doc = seed_workflow(
        "wf_1",
        behaviors=[
            make_behavior("b1", "create-contact", priority=2),
            make_behavior("b2", "create-ticket", enabled=False),
        ],
    )
    workflow = WorkflowEntity.from_document(doc)
    assert [b.id for b in workflow.enabled_behaviors()] == ["b1"]
    assert workflow.can_trigger_on("checkout_start")
    assert not workflow.can_trigger_on("registration_start")
    assert workflow.custom_properties() == doc["custom_properties"]


def test_template_set_version_inferred_from_entries() -> None:
    flexible = TemplateSetEntity.from_document(
        {
            "id": "ts_1",
            "custom_properties": {
                "templates": [
                    {"template_id": "tpl_b", "template_type": "ticket", "display_order": 2},
                    {"template_id": "tpl_a", "template_type": "ticket", "display_order": 1},
                ]
            },
        }
    )
    assert flexible.version == "2.0"
    assert flexible.flexible_templates() == {"ticket": "tpl_a"}

    legacy = TemplateSetEntity.from_document(
        {"id": "ts_2", "custom_properties": {"ticket_template_id": "tpl_t"}}
    )
    assert legacy.version == "1.0"
    assert legacy.legacy_templates() == {"ticket": "tpl_t"}
