"""Tests for chimera.services.orchestrator — agent registry and task queue."""

import pytest

from chimera.api.middleware.error_handler import (
    AgentNotFoundError,
    InvalidStateError,
    TaskNotFoundError,
)
from chimera.services.orchestrator import AgentOrchestrator, update_metrics


@pytest.fixture
def orchestrator(session_factory):
    return AgentOrchestrator(session_factory)


# ── metrics ──────────────────────────────────────────────────────────────────


class TestUpdateMetrics:
    def test_success_then_failure(self):
        metrics = update_metrics({}, True, 100)
        assert metrics["tasks_completed"] == 1
        assert metrics["success_rate"] == 1
        assert metrics["average_execution_time"] == 100

        metrics = update_metrics(metrics, False)
        assert metrics["tasks_completed"] == 2
        assert metrics["error_count"] == 1
        assert metrics["success_rate"] == 0.5
        assert metrics["average_execution_time"] == 100

    def test_running_average_time(self):
        metrics = update_metrics(update_metrics({}, True, 100), True, 300)
        assert metrics["average_execution_time"] == 200


# ── agents ───────────────────────────────────────────────────────────────────


class TestAgents:
    def test_register_defaults(self, orchestrator):
        agent = orchestrator.register_agent("Reviewer", "code_review", ["code_review"])
        assert agent.status == "idle"
        assert agent.performance_metrics == {
            "tasks_completed": 0,
            "success_rate": 0,
            "average_execution_time": 0,
            "error_count": 0,
        }

    def test_list_filters(self, orchestrator):
        orchestrator.register_agent("A", "docs")
        b = orchestrator.register_agent("B", "testing")
        orchestrator.update_agent_status(b.id, "paused")
        assert [a.name for a in orchestrator.list_agents(type="docs")] == ["A"]
        assert [a.name for a in orchestrator.list_agents(status="paused")] == ["B"]

    def test_memory_shallow_merge(self, orchestrator):
        agent = orchestrator.register_agent("A", "docs")
        orchestrator.update_agent_memory(agent.id, {"a": 1, "nested": {"x": 1}})
        updated = orchestrator.update_agent_memory(agent.id, {"b": 2, "nested": {"y": 2}})
        assert updated.memory == {"a": 1, "b": 2, "nested": {"y": 2}}

    def test_unknown_agent(self, orchestrator):
        with pytest.raises(AgentNotFoundError):
            orchestrator.get_agent("missing")

    def test_unknown_status_rejected(self, orchestrator):
        agent = orchestrator.register_agent("A", "docs")
        with pytest.raises(InvalidStateError):
            orchestrator.update_agent_status(agent.id, "sleeping")

    def test_unregister_cancels_running_task(self, orchestrator):
        agent = orchestrator.register_agent("A", "docs")
        task = orchestrator.queue_task("Write", "docs")
        assert task.status == "running"

        stopped = orchestrator.unregister_agent(agent.id)
        assert stopped.status == "stopped"
        assert orchestrator.get_task(task.id).status == "cancelled"


# ── dispatch ─────────────────────────────────────────────────────────────────


class TestDispatch:
    def test_queued_task_waits_without_agents(self, orchestrator):
        task = orchestrator.queue_task("Write", "docs")
        assert task.status == "pending"
        assert [t.id for t in orchestrator.get_queue()] == [task.id]

    def test_queue_dispatches_to_idle_agent(self, orchestrator):
        agent = orchestrator.register_agent("A", "docs")
        task = orchestrator.queue_task("Write", "docs")
        assert task.status == "running"
        assert task.assigned_agent_id == agent.id
        assert task.started_at is not None
        assert orchestrator.get_agent(agent.id).status == "running"

    def test_priority_then_fifo(self, orchestrator):
        low = orchestrator.queue_task("low", "x", priority="low")
        first_high = orchestrator.queue_task("high-1", "x", priority="high")
        critical = orchestrator.queue_task("critical", "x", priority="critical")
        second_high = orchestrator.queue_task("high-2", "x", priority="high")

        assert [t.id for t in orchestrator.get_queue()] == [
            critical.id, first_high.id, second_high.id, low.id
        ]

        orchestrator.register_agent("A", "x")
        started = orchestrator.process_queue()
        assert [t.id for t in started] == [critical.id]

    def test_capability_match_preferred(self, orchestrator):
        generic = orchestrator.register_agent("Generic", "general")
        tester = orchestrator.register_agent("Tester", "qa", ["testing"])
        # Make both busy first so the queue fills up
        orchestrator.update_agent_status(generic.id, "paused")
        orchestrator.update_agent_status(tester.id, "paused")
        task = orchestrator.queue_task("Run tests", "testing")

        orchestrator.update_agent_status(generic.id, "idle")
        orchestrator.update_agent_status(tester.id, "idle")
        orchestrator.process_queue()
        assert orchestrator.get_task(task.id).assigned_agent_id == tester.id

    def test_type_match(self, orchestrator):
        orchestrator.register_agent("Generic", "general")
        docs = orchestrator.register_agent("Docs", "docs")
        task = orchestrator.queue_task("Write", "docs")
        assert task.assigned_agent_id == docs.id

    def test_fallback_to_first_idle(self, orchestrator):
        first = orchestrator.register_agent("First", "general")
        orchestrator.register_agent("Second", "general")
        task = orchestrator.queue_task("Anything", "unmatched")
        assert task.assigned_agent_id == first.id

    def test_one_task_per_agent_per_pass(self, orchestrator):
        orchestrator.queue_task("a", "x")
        orchestrator.queue_task("b", "x")
        orchestrator.register_agent("A", "x")
        assert len(orchestrator.process_queue()) == 1
        assert len(orchestrator.get_queue()) == 1

    def test_dependencies_block_until_completed(self, orchestrator):
        agent = orchestrator.register_agent("A", "x")
        parent = orchestrator.queue_task("parent", "x")
        child = orchestrator.queue_task("child", "x", dependencies=[parent.id])
        assert child.status == "pending"

        orchestrator.complete_task(parent.id, {"ok": True})
        child = orchestrator.get_task(child.id)
        assert child.status == "running"
        assert child.assigned_agent_id == agent.id

    def test_unknown_dependency_never_runs(self, orchestrator):
        orchestrator.register_agent("A", "x")
        task = orchestrator.queue_task("orphan", "x", dependencies=["missing"])
        assert task.status == "pending"


# ── state machine ────────────────────────────────────────────────────────────


class TestTaskStateMachine:
    def test_complete_records_duration_and_metrics(self, orchestrator):
        agent = orchestrator.register_agent("A", "x")
        task = orchestrator.queue_task("t", "x")

        done = orchestrator.complete_task(task.id, {"answer": 42})
        assert done.status == "completed"
        assert done.output_data == {"answer": 42}
        assert done.completed_at is not None
        assert done.actual_duration_ms >= 0

        agent = orchestrator.get_agent(agent.id)
        assert agent.status == "idle"
        assert agent.performance_metrics["tasks_completed"] == 1
        assert agent.performance_metrics["success_rate"] == 1

    def test_fail_sets_agent_error(self, orchestrator):
        agent = orchestrator.register_agent("A", "x")
        task = orchestrator.queue_task("t", "x")

        failed = orchestrator.fail_task(task.id, "boom")
        assert failed.status == "failed"
        assert failed.error_message == "boom"

        agent = orchestrator.get_agent(agent.id)
        assert agent.status == "error"
        assert agent.performance_metrics["error_count"] == 1
        assert agent.performance_metrics["success_rate"] == 0

    def test_complete_requires_running(self, orchestrator):
        task = orchestrator.queue_task("t", "x")
        with pytest.raises(InvalidStateError):
            orchestrator.complete_task(task.id)

    def test_fail_requires_running(self, orchestrator):
        task = orchestrator.queue_task("t", "x")
        with pytest.raises(InvalidStateError):
            orchestrator.fail_task(task.id, "nope")

    def test_cancel_pending(self, orchestrator):
        task = orchestrator.queue_task("t", "x")
        assert orchestrator.cancel_task(task.id).status == "cancelled"
        assert orchestrator.get_queue() == []

    def test_cancel_running_frees_agent_and_dispatches(self, orchestrator):
        agent = orchestrator.register_agent("A", "x")
        first = orchestrator.queue_task("first", "x")
        second = orchestrator.queue_task("second", "x")
        assert second.status == "pending"

        orchestrator.cancel_task(first.id)
        assert orchestrator.get_task(second.id).assigned_agent_id == agent.id
        assert orchestrator.get_agent(agent.id).status == "running"

    def test_cancel_finished_rejected(self, orchestrator):
        orchestrator.register_agent("A", "x")
        task = orchestrator.queue_task("t", "x")
        orchestrator.complete_task(task.id)
        with pytest.raises(InvalidStateError):
            orchestrator.cancel_task(task.id)

    def test_assign_requires_idle_agent(self, orchestrator):
        agent = orchestrator.register_agent("A", "x")
        orchestrator.update_agent_status(agent.id, "paused")
        task = orchestrator.queue_task("t", "x")
        with pytest.raises(InvalidStateError):
            orchestrator.assign_task(task.id, agent.id)

    def test_manual_assign_and_start(self, orchestrator):
        agent = orchestrator.register_agent("A", "x")
        orchestrator.update_agent_status(agent.id, "paused")
        task = orchestrator.queue_task("t", "x")
        orchestrator.update_agent_status(agent.id, "idle")

        assigned = orchestrator.assign_task(task.id, agent.id)
        assert assigned.status == "assigned"
        started = orchestrator.start_task(task.id)
        assert started.status == "running"

    def test_start_requires_assigned(self, orchestrator):
        task = orchestrator.queue_task("t", "x")
        with pytest.raises(InvalidStateError):
            orchestrator.start_task(task.id)

    def test_unknown_task(self, orchestrator):
        with pytest.raises(TaskNotFoundError):
            orchestrator.get_task("missing")

    def test_list_tasks_filters(self, orchestrator):
        agent = orchestrator.register_agent("A", "x")
        running = orchestrator.queue_task("a", "x")
        orchestrator.queue_task("b", "x")
        assert [t.id for t in orchestrator.list_tasks(agent_id=agent.id)] == [running.id]
        assert len(orchestrator.list_tasks(status="pending")) == 1
        assert len(orchestrator.list_tasks(limit=1)) == 1
