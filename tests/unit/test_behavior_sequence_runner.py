"""BehaviorSequenceRunner unit tests: ordering, context threading, stop/continue, logging."""

from unittest.mock import AsyncMock

import pytest

from app.application.dtos.behavior import BehaviorResult, BehaviorStep
from app.application.services.behavior_executor import BehaviorExecutor
from app.application.services.behavior_sequence_runner import (
    BehaviorSequenceRunner,
    order_by_priority,
)
from app.domain.enums import BehaviorType


def test_order_by_priority_is_descending_and_stable() -> None:
    steps = [
        BehaviorStep("create-contact", priority=1),
        BehaviorStep("create-ticket", priority=5),
        BehaviorStep("generate-invoice", priority=1),
        BehaviorStep("calculate-pricing", priority=5),
    ]
    ordered = [s.type for s in order_by_priority(steps)]
    assert ordered == ["create-ticket", "calculate-pricing", "create-contact", "generate-invoice"]


async def test_behaviors_run_in_priority_order(actions, runner) -> None:
    steps = [
        BehaviorStep("send-confirmation-email", priority=1),
        BehaviorStep("create-contact", priority=10),
        BehaviorStep("create-ticket", priority=5),
    ]
    result = await runner.execute_behaviors("org_1", steps, {}, True)
    assert [r.behavior_type for r in result.results] == [
        "create-contact",
        "create-ticket",
        "send-confirmation-email",
    ]
    assert result.success is True
    assert result.executed_count == result.total_count == 3


async def test_successful_data_is_visible_to_later_behaviors(make_action) -> None:
    """Each behavior sees the context merged with earlier successful data."""
    contact = make_action(BehaviorResult(success=True, data={"contact_id": "c1"}))
    ticket = make_action(BehaviorResult(success=True, data={"ticket_id": "t1"}))
    email = make_action()
    runner = BehaviorSequenceRunner(
        BehaviorExecutor(
            {
                BehaviorType.CREATE_CONTACT: contact,
                BehaviorType.CREATE_TICKET: ticket,
                BehaviorType.SEND_CONFIRMATION_EMAIL: email,
            }
        )
    )
    context = {"organization_id": "org_1"}
    steps = [
        BehaviorStep("create-contact", priority=3),
        BehaviorStep("create-ticket", priority=2),
        BehaviorStep("send-confirmation-email", priority=1),
    ]

    result = await runner.execute_behaviors("org_1", steps, context, True)

    assert ticket.requests[0].context == {"organization_id": "org_1", "contact_id": "c1"}
    assert email.requests[0].context == {
        "organization_id": "org_1",
        "contact_id": "c1",
        "ticket_id": "t1",
    }
    assert result.final_context["ticket_id"] == "t1"
    assert context == {"organization_id": "org_1"}


async def test_failure_stops_sequence_when_not_continuing(make_action) -> None:
    """Rollback policy: nothing after the first failure runs."""
    later = make_action()
    runner = BehaviorSequenceRunner(
        BehaviorExecutor(
            {
                BehaviorType.CHECK_EVENT_CAPACITY: make_action(
                    BehaviorResult.failure("Event is sold out")
                ),
                BehaviorType.CREATE_TICKET: later,
            }
        )
    )
    steps = [
        BehaviorStep("check-event-capacity", priority=10),
        BehaviorStep("create-ticket", priority=1),
    ]
    result = await runner.execute_behaviors("org_1", steps, {}, False)

    assert result.success is False
    assert result.executed_count == 1
    assert result.total_count == 2
    assert later.requests == []


async def test_failure_does_not_stop_sequence_when_continuing(make_action) -> None:
    failing = make_action(BehaviorResult.failure("smtp down"))
    runner = BehaviorSequenceRunner(
        BehaviorExecutor(
            {
                BehaviorType.SEND_CONFIRMATION_EMAIL: failing,
                BehaviorType.UPDATE_STATISTICS: make_action(
                    BehaviorResult(success=True, data={"counted": True})
                ),
            }
        )
    )
    steps = [
        BehaviorStep("send-confirmation-email", priority=2),
        BehaviorStep("update-statistics", priority=1),
    ]
    result = await runner.execute_behaviors("org_1", steps, {}, True)

    assert result.success is False
    assert result.executed_count == 2
    assert [r.success for r in result.results] == [False, True]
    assert result.final_context == {"counted": True}


async def test_failed_behavior_data_is_not_merged(make_action) -> None:
    runner = BehaviorSequenceRunner(
        BehaviorExecutor(
            {
                BehaviorType.CREATE_CONTACT: make_action(
                    BehaviorResult(success=False, data={"partial": True}, error="boom")
                )
            }
        )
    )
    result = await runner.execute_behaviors(
        "org_1", [BehaviorStep("create-contact")], {"a": 1}, True
    )
    assert result.final_context == {"a": 1}


async def test_empty_sequence_succeeds(runner) -> None:
    result = await runner.execute_behaviors("org_1", [], {}, False)
    assert result.success is True
    assert result.executed_count == 0
    assert result.total_count == 0
    assert result.results == []


async def test_execution_log_written_for_workflow_runs(runner, execution_log_repo) -> None:
    steps = [BehaviorStep("create-contact", priority=2), BehaviorStep("launch-rocket", priority=1)]
    result = await runner.execute_behaviors(
        "org_1", steps, {}, True, workflow_id="wf_1", workflow_name="Checkout"
    )

    log = execution_log_repo.logs[result.execution_id]
    assert log.status == "failed"
    assert [line.message for line in log.logs] == [
        "Starting execution of 2 behaviors",
        "Executing behavior: create-contact",
        "Behavior create-contact completed",
        "Executing behavior: launch-rocket",
        "Behavior launch-rocket failed: Unknown behavior type: launch-rocket",
    ]
    assert log.result["executed_count"] == 2
    assert log.result["success"] is False


async def test_no_execution_log_without_workflow_identity(runner, execution_log_repo) -> None:
    result = await runner.execute_behaviors("org_1", [BehaviorStep("create-contact")], {}, True)
    assert result.execution_id is None
    assert execution_log_repo.logs == {}


async def test_log_write_failures_do_not_change_outcome(executor, make_log_repo) -> None:
    """Execution log is best effort: a failing log store never fails the run."""

    for method in ("create", "append_log", "complete"):
        runner = BehaviorSequenceRunner(executor, make_log_repo(fail_on=method))
        result = await runner.execute_behaviors(
            "org_1",
            [BehaviorStep("create-contact")],
            {},
            False,
            workflow_id="wf_1",
            workflow_name="Checkout",
        )
        assert result.success is True
        assert result.executed_count == 1


async def test_data_is_not_visible_to_behaviors_that_ran_earlier(make_action) -> None:
    """A lower-priority producer runs after its reader, so the reader never sees its data."""
    producer = make_action(BehaviorResult(success=True, data={"x": 1}))
    reader = make_action()
    runner = BehaviorSequenceRunner(
        BehaviorExecutor(
            {
                BehaviorType.CREATE_CONTACT: producer,
                BehaviorType.CREATE_TICKET: reader,
            }
        )
    )
    steps = [
        BehaviorStep("create-contact", priority=1),
        BehaviorStep("create-ticket", priority=5),
    ]

    result = await runner.execute_behaviors("org_1", steps, {}, True)

    assert "x" not in reader.requests[0].context
    assert result.final_context == {"x": 1}


async def test_non_mapping_data_is_recorded_but_not_merged(
    make_action, execution_log_repo
) -> None:
    later = make_action()
    runner = BehaviorSequenceRunner(
        BehaviorExecutor(
            {
                BehaviorType.CREATE_CONTACT: make_action(BehaviorResult(success=True, data="ok")),
                BehaviorType.CREATE_TICKET: later,
            }
        ),
        execution_log_repo,
    )
    steps = [
        BehaviorStep("create-contact", priority=2),
        BehaviorStep("create-ticket", priority=1),
    ]

    result = await runner.execute_behaviors(
        "org_1", steps, {"a": 1}, False, workflow_id="wf_1", workflow_name="Checkout"
    )

    assert result.success is True
    assert result.executed_count == 2
    assert later.requests[0].context == {"a": 1}
    log = execution_log_repo.logs[result.execution_id]
    assert log.status == "success"
    assert log.result["results"][0]["data"] == "ok"


async def test_execution_log_is_sealed_when_run_is_interrupted(execution_log_repo) -> None:
    executor = AsyncMock()
    executor.execute_behavior.side_effect = RuntimeError("executor crashed")
    runner = BehaviorSequenceRunner(executor, execution_log_repo)

    with pytest.raises(RuntimeError):
        await runner.execute_behaviors(
            "org_1",
            [BehaviorStep("create-contact")],
            {},
            True,
            workflow_id="wf_1",
            workflow_name="Checkout",
        )

    (log,) = execution_log_repo.logs.values()
    assert log.status == "failed"
    assert log.result["success"] is False
    assert log.result["executed_count"] == 0
