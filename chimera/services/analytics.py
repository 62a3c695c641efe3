"""
Analytics - Aggregate counters over agents, tasks and analyses.
"""

from typing import Any, Dict

from sqlalchemy import func
from sqlalchemy.orm import Session

from chimera.models.db import Agent, Repository, RepositoryAnalysis, Task


def _count_by(session: Session, column) -> Dict[str, int]:
    rows = session.query(column, func.count()).group_by(column).all()
    return {key: count for key, count in rows}


def get_overview(session: Session) -> Dict[str, Any]:
    """
    Counts by status / flow, task success rate and mean task duration.

    The success rate is completed / (completed + failed), or 0 when no
    task has finished yet.
    """
    tasks_by_status = _count_by(session, Task.status)
    completed = tasks_by_status.get("completed", 0)
    finished = completed + tasks_by_status.get("failed", 0)

    average_duration = (
        session.query(func.avg(Task.actual_duration_ms))
        .filter(Task.status == "completed", Task.actual_duration_ms.isnot(None))
        .scalar()
    )

    return {
        "agents_by_status": _count_by(session, Agent.status),
        "tasks_by_status": tasks_by_status,
        "task_success_rate": round(completed / finished, 4) if finished else 0.0,
        "average_task_duration_ms": float(average_duration) if average_duration is not None else None,
        "analyses_by_flow": _count_by(session, RepositoryAnalysis.flow),
        "repository_count": session.query(func.count(Repository.id)).scalar() or 0,
    }
