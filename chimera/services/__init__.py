"""
Services Layer for ChimeraGPT
=============================

Services handle the core business logic and external integrations:

- GitHubClient: GitHub REST API (repository, tree, contents)
- RepoService: Fetches and caches repository bundles
- GeminiClient: Text, structured output and video generation
- AnalysisService: Runs repository flows and records each run
- AgentOrchestrator: Agent registry and prioritised task queue
- MarketplaceService: Agent templates, installations and ratings

DEPENDENCY FLOW:
----------------
    GitHubClient --> RepoService --+
                                   +--> AnalysisService
    GeminiClient --> flow agents --+
"""
