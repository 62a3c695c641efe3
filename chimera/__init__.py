"""
ChimeraGPT
==========

A service that points LLM agents at GitHub repositories and lets you
orchestrate and share agents of your own.

Components:
- agents: Flow agents and the autonomous think / act / observe agents
- services: GitHub, LLM, web fetching, orchestrator, marketplace
- api: FastAPI endpoints
- models: Pydantic schemas and SQLAlchemy tables
- core: Configuration, database and dependencies
"""

__version__ = "1.0.0"
