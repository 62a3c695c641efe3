"""
ORM Models - Relational tables backing repositories, analyses,
the agent orchestrator and the template marketplace.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from chimera.core.database import Base


def _uuid() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Repository(Base):
    __tablename__ = "repositories"

    id = Column(String(36), primary_key=True, default=_uuid)
    github_url = Column(String(512), unique=True, nullable=False)
    owner = Column(String(255), nullable=False)
    name = Column(String(255), nullable=False)
    full_name = Column(String(512), nullable=False)
    description = Column(Text)
    default_branch = Column(String(255))
    metadata_ = Column("metadata", JSON, default=dict)
    last_fetched = Column(DateTime(timezone=True))
    created_at = Column(DateTime(timezone=True), default=utcnow)

    analyses = relationship(
        "RepositoryAnalysis",
        back_populates="repository",
        cascade="all, delete-orphan",
        order_by="RepositoryAnalysis.created_at.desc()",
    )


class RepositoryAnalysis(Base):
    __tablename__ = "repository_analyses"

    id = Column(String(36), primary_key=True, default=_uuid)
    repository_id = Column(String(36), ForeignKey("repositories.id", ondelete="CASCADE"), nullable=False)
    flow = Column(String(50), nullable=False)
    input = Column(JSON, default=dict)
    output = Column(JSON)
    status = Column(String(20), nullable=False, default="completed")
    error = Column(Text)
    created_at = Column(DateTime(timezone=True), default=utcnow)

    repository = relationship("Repository", back_populates="analyses")


class Agent(Base):
    __tablename__ = "agents"

    id = Column(String(36), primary_key=True, default=_uuid)
    name = Column(String(100), nullable=False)
    type = Column(String(50), nullable=False)
    status = Column(String(20), nullable=False, default="idle")
    capabilities = Column(JSON, default=list)
    configuration = Column(JSON, default=dict)
    memory = Column(JSON, default=dict)
    description = Column(Text, default="")
    performance_metrics = Column(JSON, default=dict)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow)
    last_activity = Column(DateTime(timezone=True))


class Task(Base):
    __tablename__ = "tasks"

    id = Column(String(36), primary_key=True, default=_uuid)
    name = Column(String(255), nullable=False)
    description = Column(Text, default="")
    type = Column(String(50), nullable=False)
    status = Column(String(20), nullable=False, default="pending")
    priority = Column(String(20), nullable=False, default="medium")
    assigned_agent_id = Column(String(36), ForeignKey("agents.id", ondelete="SET NULL"))
    dependencies = Column(JSON, default=list)
    input_data = Column(JSON, default=dict)
    output_data = Column(JSON)
    error_message = Column(Text)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow)
    started_at = Column(DateTime(timezone=True))
    completed_at = Column(DateTime(timezone=True))
    actual_duration_ms = Column(Integer)


class AgentTemplate(Base):
    __tablename__ = "agent_templates"

    id = Column(String(36), primary_key=True, default=_uuid)
    name = Column(String(255), nullable=False)
    description = Column(Text, default="")
    category = Column(String(100), nullable=False)
    version = Column(String(20), default="1.0.0")
    author = Column(String(255), nullable=False)
    tags = Column(JSON, default=list)
    capabilities = Column(JSON, default=list)
    configuration = Column(JSON, default=dict)
    rating = Column(Float, default=0.0)
    rating_count = Column(Integer, default=0)
    download_count = Column(Integer, default=0)
    is_verified = Column(Boolean, default=False)
    is_featured = Column(Boolean, default=False)
    license = Column(String(50), default="MIT")
    repository_url = Column(String(512))
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow)

    installations = relationship("AgentInstallation", back_populates="template", cascade="all, delete-orphan")
    ratings = relationship("AgentRating", back_populates="template", cascade="all, delete-orphan")


class AgentInstallation(Base):
    __tablename__ = "agent_installations"

    id = Column(String(36), primary_key=True, default=_uuid)
    template_id = Column(String(36), ForeignKey("agent_templates.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(String(255), nullable=False)
    agent_id = Column(String(255), nullable=False)
    configuration_overrides = Column(JSON)
    status = Column(String(20), nullable=False, default="active")
    installed_at = Column(DateTime(timezone=True), default=utcnow)

    template = relationship("AgentTemplate", back_populates="installations")


class AgentRating(Base):
    __tablename__ = "agent_ratings"
    __table_args__ = (UniqueConstraint("template_id", "user_id", name="uq_rating_template_user"),)

    id = Column(String(36), primary_key=True, default=_uuid)
    template_id = Column(String(36), ForeignKey("agent_templates.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(String(255), nullable=False)
    rating = Column(Integer, nullable=False)
    review = Column(Text)
    created_at = Column(DateTime(timezone=True), default=utcnow)

    template = relationship("AgentTemplate", back_populates="ratings")
