"""ExecuteWorkflowUseCase unit tests: manual trigger, policies and audit."""

from unittest.mock import AsyncMock

import pytest

from app.application.dtos.behavior import BehaviorResult
from app.application.use_cases.workflows import ExecuteWorkflowUseCase
from app.domain.enums import BehaviorType
from app.domain.exceptions import AuthorizationException, ResourceNotFoundException


async def test_all_behaviors_succeed(execute_use_case, seed_workflow, make_behavior, audit) -> None:
    seed_workflow(
        "wf_1",
        name="Checkout",
        behaviors=[
            make_behavior("b1", "create-contact", priority=10),
            make_behavior("b2", "create-ticket", priority=5),
            make_behavior("b3", "send-confirmation-email", priority=1),
        ],
    )

    result = await execute_use_case.execute("sess_admin", "wf_1")

    assert result.success is True
    assert result.message == 'Workflow "Checkout" executed successfully. 3 of 3 behaviors completed.'
    assert [r.behavior_type for r in result.results] == [
        "create-contact",
        "create-ticket",
        "send-confirmation-email",
    ]
    assert result.execution_id is not None
    assert audit.actions[-1]["action_type"] == "workflow_executed"
    assert audit.actions[-1]["action_data"] == {
        "success": True,
        "behavior_count": 3,
        "total_behaviors": 3,
        "manual_trigger": True,
    }


async def test_continue_policy_runs_past_failure(
    execute_use_case, seed_workflow, make_behavior, actions
) -> None:
    actions[BehaviorType.CREATE_TICKET].result = BehaviorResult.failure("ticket quota reached")
    seed_workflow(
        "wf_1",
        error_handling="continue",
        behaviors=[
            make_behavior("b1", "create-contact", priority=10),
            make_behavior("b2", "create-ticket", priority=5),
            make_behavior("b3", "send-confirmation-email", priority=1),
        ],
    )

    result = await execute_use_case.execute("sess_admin", "wf_1")

    assert result.success is False
    assert result.message == "Workflow execution completed with errors. 3 of 3 behaviors completed."
    assert [r.success for r in result.results] == [True, False, True]


async def test_rollback_policy_stops_at_failure(
    execute_use_case, seed_workflow, make_behavior, actions
) -> None:
    actions[BehaviorType.CREATE_TICKET].result = BehaviorResult.failure("ticket quota reached")
    seed_workflow(
        "wf_1",
        error_handling="rollback",
        behaviors=[
            make_behavior("b1", "create-contact", priority=10),
            make_behavior("b2", "create-ticket", priority=5),
            make_behavior("b3", "send-confirmation-email", priority=1),
        ],
    )

    result = await execute_use_case.execute("sess_admin", "wf_1")

    assert (result.executed_count, result.total_count) == (2, 3)
    assert actions[BehaviorType.SEND_CONFIRMATION_EMAIL].requests == []
    # Earlier side effects are not compensated
    assert len(actions[BehaviorType.CREATE_CONTACT].requests) == 1


async def test_disabled_behaviors_are_not_run(
    execute_use_case, seed_workflow, make_behavior, actions
) -> None:
    seed_workflow(
        "wf_1",
        behaviors=[
            make_behavior("b1", "create-contact"),
            make_behavior("b2", "create-ticket", enabled=False),
        ],
    )
    result = await execute_use_case.execute("sess_admin", "wf_1")
    assert result.total_count == 1
    assert actions[BehaviorType.CREATE_TICKET].requests == []


async def test_seed_context(execute_use_case, seed_workflow, make_behavior, actions) -> None:
    seed_workflow(
        "wf_1",
        trigger_on="checkout_start",
        objects=[{"object_id": "prod_1", "object_type": "product", "role": "source"}],
        behaviors=[make_behavior("b1", "create-contact")],
    )

    await execute_use_case.execute("sess_admin", "wf_1", context_data={"email": "a@b.co"})

    request = actions[BehaviorType.CREATE_CONTACT].requests[0]
    context = request.context
    assert request.session_id == "sess_admin"
    assert context["workflow"] == "checkout"
    assert context["organization_id"] == "org_1"
    assert context["actor"] == {"type": "user", "id": "user_admin"}
    assert context["workflow_data"] == {"email": "a@b.co"}
    assert context["objects"] == [{"object_id": "prod_1", "object_type": "product", "role": "source"}]
    assert context["metadata"]["manual_trigger"] is True
    assert context["metadata"]["triggered_by"] == "user_admin"


async def test_runner_crash_is_reported_and_audited(
    store, access, audit, seed_workflow, make_behavior
) -> None:
    seed_workflow("wf_1", behaviors=[make_behavior("b1", "create-contact")])
    runner = AsyncMock()
    runner.execute_behaviors.side_effect = RuntimeError("store offline")
    use_case = ExecuteWorkflowUseCase(store, access, runner, audit)

    result = await use_case.execute("sess_admin", "wf_1")

    assert result.success is False
    assert result.error == "store offline"
    assert result.message == "Failed to execute workflow: store offline"
    assert audit.actions[-1]["action_type"] == "workflow_execution_failed"
    assert audit.actions[-1]["action_data"] == {"error": "store offline", "manual_trigger": True}


async def test_viewer_cannot_execute(execute_use_case, seed_workflow) -> None:
    seed_workflow("wf_1")
    with pytest.raises(AuthorizationException):
        await execute_use_case.execute("sess_viewer", "wf_1")


async def test_missing_workflow(execute_use_case, store) -> None:
    store.seed("tpl_1", type="template", organization_id="org_1")
    with pytest.raises(ResourceNotFoundException):
        await execute_use_case.execute("sess_admin", "tpl_1")
