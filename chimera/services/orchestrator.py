"""
Agent Orchestrator - Registry of agents and a prioritised task queue.

RESPONSIBILITY:
- Register / unregister agents and track their status, memory and metrics
- Queue tasks and hand them to idle agents by priority and capability
- Drive the task state machine

TASK STATES:
    pending -> assigned -> running -> completed
                                   -> failed
    pending / assigned / running -> cancelled

All state lives in the database. Every public method opens its own
session, so the orchestrator can be shared across requests.
"""

import logging
import threading
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy.orm import Session

from chimera.api.middleware.error_handler import (
    AgentNotFoundError,
    InvalidStateError,
    TaskNotFoundError,
)
from chimera.models.db import Agent, Task, utcnow

logger = logging.getLogger(__name__)

PRIORITY_ORDER = {"critical": 4, "high": 3, "medium": 2, "low": 1}
AGENT_STATUSES = ("idle", "running", "paused", "error", "stopped")
CANCELLABLE = ("pending", "assigned", "running")


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite hands back naive datetimes
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _empty_metrics() -> Dict[str, Any]:
    return {
        "tasks_completed": 0,
        "success_rate": 0,
        "average_execution_time": 0,
        "error_count": 0,
    }


def update_metrics(metrics: Dict[str, Any], success: bool, duration_ms: Optional[int] = None) -> Dict[str, Any]:
    """
    Fold one finished task into an agent's running averages.

    `tasks_completed` counts both outcomes; success rate and execution time
    are running means over it.
    """
    metrics = {**_empty_metrics(), **(metrics or {})}
    metrics["tasks_completed"] += 1
    n = metrics["tasks_completed"]

    if success:
        metrics["success_rate"] = (metrics["success_rate"] * (n - 1) + 1) / n
    else:
        metrics["error_count"] += 1
        metrics["success_rate"] = (metrics["success_rate"] * (n - 1)) / n

    if duration_ms:
        metrics["average_execution_time"] = (metrics["average_execution_time"] * (n - 1) + duration_ms) / n

    return metrics


class AgentOrchestrator:
    """
    Coordinates agents and tasks.

    Usage:
        orchestrator = AgentOrchestrator(get_session_factory())
        agent = orchestrator.register_agent("Reviewer", "code_review", ["code_review"])
        task = orchestrator.queue_task("Review PR", "code_review", priority="high")
    """

    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory
        self._processing = threading.Lock()

    # -------------------------------------------------------------------------
    # Agents
    # -------------------------------------------------------------------------

    def register_agent(
        self,
        name: str,
        type: str,
        capabilities: Optional[List[str]] = None,
        configuration: Optional[Dict[str, Any]] = None,
        description: str = "",
    ) -> Agent:
        with self.session_factory() as session:
            agent = Agent(
                name=name,
                type=type,
                status="idle",
                capabilities=list(capabilities or []),
                configuration=dict(configuration or {}),
                memory={},
                description=description,
                performance_metrics=_empty_metrics(),
            )
            session.add(agent)
            session.commit()
            logger.info("Registered agent %s (%s)", agent.name, agent.id)
            return agent

    def get_agent(self, agent_id: str) -> Agent:
        with self.session_factory() as session:
            return self._load_agent(session, agent_id)

    def list_agents(self, status: Optional[str] = None, type: Optional[str] = None) -> List[Agent]:
        with self.session_factory() as session:
            query = session.query(Agent)
            if status:
                query = query.filter(Agent.status == status)
            if type:
                query = query.filter(Agent.type == type)
            return query.order_by(Agent.created_at).all()

    def unregister_agent(self, agent_id: str) -> Agent:
        """Cancel the agent's in-flight work, release its pending tasks and stop it."""
        with self.session_factory() as session:
            agent = self._load_agent(session, agent_id)
            now = utcnow()
            tasks = session.query(Task).filter(Task.assigned_agent_id == agent_id).all()
            for task in tasks:
                if task.status in ("assigned", "running"):
                    task.status = "cancelled"
                    task.updated_at = now
                elif task.status == "pending":
                    task.assigned_agent_id = None
                    task.updated_at = now

            self._set_agent_status(agent, "stopped")
            session.commit()
            logger.info("Unregistered agent %s", agent_id)
            return agent

    def update_agent_status(self, agent_id: str, status: str) -> Agent:
        if status not in AGENT_STATUSES:
            raise InvalidStateError(f"Unknown agent status: {status}")
        with self.session_factory() as session:
            agent = self._load_agent(session, agent_id)
            self._set_agent_status(agent, status)
            session.commit()
            return agent

    def update_agent_memory(self, agent_id: str, memory: Dict[str, Any]) -> Agent:
        """Shallow-merge `memory` into the agent's memory."""
        with self.session_factory() as session:
            agent = self._load_agent(session, agent_id)
            agent.memory = {**(agent.memory or {}), **memory}
            agent.updated_at = utcnow()
            session.commit()
            return agent

    # -------------------------------------------------------------------------
    # Tasks
    # -------------------------------------------------------------------------

    def queue_task(
        self,
        name: str,
        type: str,
        description: str = "",
        priority: str = "medium",
        dependencies: Optional[List[str]] = None,
        input_data: Optional[Dict[str, Any]] = None,
    ) -> Task:
        """Insert a pending task and try to dispatch the queue immediately."""
        if priority not in PRIORITY_ORDER:
            raise InvalidStateError(f"Unknown priority: {priority}")
        with self.session_factory() as session:
            task = Task(
                name=name,
                type=type,
                description=description,
                priority=priority,
                status="pending",
                dependencies=list(dependencies or []),
                input_data=dict(input_data or {}),
            )
            session.add(task)
            session.commit()
            task_id = task.id

        logger.info("Queued task %s (%s, %s)", task_id, type, priority)
        self.process_queue()
        return self.get_task(task_id)

    def get_task(self, task_id: str) -> Task:
        with self.session_factory() as session:
            return self._load_task(session, task_id)

    def list_tasks(
        self,
        status: Optional[str] = None,
        agent_id: Optional[str] = None,
        limit: int = 100,
    ) -> List[Task]:
        with self.session_factory() as session:
            query = session.query(Task)
            if status:
                query = query.filter(Task.status == status)
            if agent_id:
                query = query.filter(Task.assigned_agent_id == agent_id)
            return query.order_by(Task.created_at.desc()).limit(limit).all()

    def get_queue(self) -> List[Task]:
        """Pending tasks in dispatch order."""
        with self.session_factory() as session:
            return self._pending_tasks(session)

    def assign_task(self, task_id: str, agent_id: str) -> Task:
        with self.session_factory() as session:
            task = self._load_task(session, task_id)
            agent = self._load_agent(session, agent_id)
            self._assign(task, agent)
            session.commit()
            return task

    def start_task(self, task_id: str) -> Task:
        with self.session_factory() as session:
            task = self._load_task(session, task_id)
            self._start(session, task)
            session.commit()
            return task

    def complete_task(self, task_id: str, output_data: Optional[Dict[str, Any]] = None) -> Task:
        with self.session_factory() as session:
            task = self._load_task(session, task_id)
            if task.status != "running":
                raise InvalidStateError(f"Task {task_id} is {task.status}, not running")

            now = utcnow()
            started_at = _as_utc(task.started_at)
            duration_ms = int((now - started_at).total_seconds() * 1000) if started_at else None

            task.status = "completed"
            task.output_data = output_data
            task.completed_at = now
            task.updated_at = now
            task.actual_duration_ms = duration_ms

            agent = self._assigned_agent(session, task)
            if agent is not None:
                agent.performance_metrics = update_metrics(agent.performance_metrics, True, duration_ms)
                self._set_agent_status(agent, "idle")
            session.commit()

        logger.info("Task %s completed in %s ms", task_id, duration_ms)
        self.process_queue()
        return self.get_task(task_id)

    def fail_task(self, task_id: str, error_message: str) -> Task:
        with self.session_factory() as session:
            task = self._load_task(session, task_id)
            if task.status != "running":
                raise InvalidStateError(f"Task {task_id} is {task.status}, not running")

            task.status = "failed"
            task.error_message = error_message
            task.updated_at = utcnow()

            agent = self._assigned_agent(session, task)
            if agent is not None:
                agent.performance_metrics = update_metrics(agent.performance_metrics, False)
                self._set_agent_status(agent, "error")
            session.commit()

        logger.warning("Task %s failed: %s", task_id, error_message)
        return self.get_task(task_id)

    def cancel_task(self, task_id: str) -> Task:
        with self.session_factory() as session:
            task = self._load_task(session, task_id)
            if task.status not in CANCELLABLE:
                raise InvalidStateError(f"Task {task_id} is already {task.status}")

            was_busy = task.status in ("assigned", "running")
            task.status = "cancelled"
            task.updated_at = utcnow()

            if was_busy:
                agent = self._assigned_agent(session, task)
                if agent is not None and agent.status == "running":
                    self._set_agent_status(agent, "idle")
            session.commit()

        if was_busy:
            self.process_queue()
        return self.get_task(task_id)

    # -------------------------------------------------------------------------
    # Dispatch
    # -------------------------------------------------------------------------

    def process_queue(self) -> List[Task]:
        """
        Hand pending tasks to idle agents.

        Returns the tasks started in this pass. A call made while another
        pass is running returns immediately with an empty list.
        """
        if not self._processing.acquire(blocking=False):
            return []
        try:
            with self.session_factory() as session:
                available = (
                    session.query(Agent)
                    .filter(Agent.status == "idle")
                    .order_by(Agent.created_at)
                    .all()
                )
                if not available:
                    return []

                started = []
                for task in self._pending_tasks(session):
                    if not available:
                        break
                    if not self._dependencies_met(session, task):
                        continue
                    agent = self._find_suitable_agent(task, available)
                    self._assign(task, agent)
                    self._start(session, task)
                    available.remove(agent)
                    started.append(task)

                session.commit()
                if started:
                    logger.info("Dispatched %d task(s)", len(started))
                return started
        finally:
            self._processing.release()

    @staticmethod
    def _find_suitable_agent(task: Task, available: List[Agent]) -> Agent:
        for agent in available:
            if task.type in (agent.capabilities or []) or agent.type == task.type:
                return agent
        return available[0]

    @staticmethod
    def _dependencies_met(session: Session, task: Task) -> bool:
        deps = set(task.dependencies or [])
        if not deps:
            return True
        completed = (
            session.query(Task.id)
            .filter(Task.id.in_(deps), Task.status == "completed")
            .count()
        )
        return completed == len(deps)

    @staticmethod
    def _pending_tasks(session: Session) -> List[Task]:
        pending = session.query(Task).filter(Task.status == "pending").all()
        return sorted(
            pending,
            key=lambda t: (-PRIORITY_ORDER.get(t.priority, 0), _as_utc(t.created_at)),
        )

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _assign(self, task: Task, agent: Agent) -> None:
        if task.status != "pending":
            raise InvalidStateError(f"Task {task.id} is {task.status}, not pending")
        if agent.status != "idle":
            raise InvalidStateError(f"Agent {agent.id} is not available")
        task.assigned_agent_id = agent.id
        task.status = "assigned"
        task.updated_at = utcnow()

    def _start(self, session: Session, task: Task) -> None:
        if task.status != "assigned":
            raise InvalidStateError(f"Task {task.id} is {task.status}, not assigned")
        if not task.assigned_agent_id:
            raise InvalidStateError(f"Task {task.id} has no assigned agent")
        now = utcnow()
        task.status = "running"
        task.started_at = now
        task.updated_at = now
        agent = self._assigned_agent(session, task)
        if agent is not None:
            self._set_agent_status(agent, "running")

    @staticmethod
    def _set_agent_status(agent: Agent, status: str) -> None:
        now = utcnow()
        agent.status = status
        agent.updated_at = now
        agent.last_activity = now

    @staticmethod
    def _assigned_agent(session: Session, task: Task) -> Optional[Agent]:
        if not task.assigned_agent_id:
            return None
        return session.get(Agent, task.assigned_agent_id)

    @staticmethod
    def _load_agent(session: Session, agent_id: str) -> Agent:
        agent = session.get(Agent, agent_id)
        if agent is None:
            raise AgentNotFoundError(agent_id)
        return agent

    @staticmethod
    def _load_task(session: Session, task_id: str) -> Task:
        task = session.get(Task, task_id)
        if task is None:
            raise TaskNotFoundError(task_id)
        return task
