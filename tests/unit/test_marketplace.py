"""Tests for chimera.services.marketplace — templates, installs and ratings."""

import pytest
from sqlalchemy import event

from chimera.api.middleware.error_handler import (
    InstallationNotFoundError,
    InvalidStateError,
    TemplateNotFoundError,
)
from chimera.services.marketplace import MarketplaceService


@pytest.fixture
def service(db_session):
    return MarketplaceService(db_session)


@pytest.fixture
def seeded(service):
    alpha = service.create_template(
        name="Code Reviewer",
        description="Reviews pull requests",
        category="development",
        author="alice",
        tags=["review", "git"],
        is_verified=True,
    )
    beta = service.create_template(
        name="Doc Writer",
        description="Writes documentation",
        category="writing",
        author="bob",
        tags=["docs"],
        is_featured=True,
    )
    gamma = service.create_template(
        name="Test Bot",
        description="Generates unit tests",
        category="development",
        author="alice",
        tags=["testing", "git"],
    )
    return alpha, beta, gamma


# ── templates ────────────────────────────────────────────────────────────────


class TestTemplates:
    def test_create_defaults(self, service):
        template = service.create_template(name="X", category="misc", author="me")
        assert template.rating == 0
        assert template.rating_count == 0
        assert template.download_count == 0
        assert template.version == "1.0.0"

    def test_filter_category_and_author(self, service, seeded):
        templates, total = service.list_templates(category="development")
        assert total == 2
        templates, total = service.list_templates(author="bob")
        assert [t.name for t in templates] == ["Doc Writer"]

    def test_tag_overlap(self, service, seeded):
        templates, total = service.list_templates(tags=["docs", "testing"], sort_by="name", sort_order="asc")
        assert [t.name for t in templates] == ["Doc Writer", "Test Bot"]

    def test_flags(self, service, seeded):
        assert service.list_templates(verified_only=True)[1] == 1
        assert service.list_templates(featured_only=True)[0][0].name == "Doc Writer"

    def test_search_name_description_or_tag(self, service, seeded):
        assert service.list_templates(search="REVIEW")[1] == 1
        assert service.list_templates(search="documentation")[1] == 1
        assert {t.name for t in service.list_templates(search="git")[0]} == {"Code Reviewer", "Test Bot"}

    def test_paging_keeps_total(self, service, seeded):
        templates, total = service.list_templates(sort_by="name", sort_order="asc", limit=1, offset=1)
        assert total == 3
        assert [t.name for t in templates] == ["Doc Writer"]

    def test_plain_filters_paged_by_the_database(self, service, seeded, db_session):
        alpha, beta, gamma = seeded
        for template, downloads in ((alpha, 4), (beta, 9), (gamma, 7)):
            template.download_count = downloads
        db_session.commit()

        statements = []

        def record(conn, cursor, statement, parameters, context, executemany):
            statements.append(statement)

        engine = db_session.get_bind()
        event.listen(engine, "before_cursor_execute", record)
        try:
            templates, total = service.list_templates(
                category="development", sort_by="download_count", limit=1, offset=0
            )
        finally:
            event.remove(engine, "before_cursor_execute", record)

        assert total == 2
        assert [t.name for t in templates] == ["Test Bot"]
        assert any("LIMIT" in s and "ORDER BY" in s for s in statements)

    def test_name_sort_ignores_case(self, service, seeded):
        service.create_template(name="apprentice", category="misc", author="carol")
        templates, _ = service.list_templates(sort_by="name", sort_order="asc")
        assert [t.name for t in templates][:2] == ["apprentice", "Code Reviewer"]

    def test_bad_sort_field(self, service):
        with pytest.raises(InvalidStateError):
            service.list_templates(sort_by="secret")

    def test_update_touches_timestamp(self, service, seeded):
        alpha = seeded[0]
        before = alpha.updated_at
        updated = service.update_template(alpha.id, description="Reviews PRs", version="1.1.0")
        assert updated.description == "Reviews PRs"
        assert updated.version == "1.1.0"
        assert updated.updated_at != before

    def test_delete(self, service, seeded):
        service.delete_template(seeded[0].id)
        with pytest.raises(TemplateNotFoundError):
            service.get_template(seeded[0].id)

    def test_categories_sorted_distinct(self, service, seeded):
        assert service.get_categories() == ["development", "writing"]

    def test_search_templates(self, service, seeded):
        assert [t.name for t in service.search_templates("bot")] == ["Test Bot"]


# ── installations ────────────────────────────────────────────────────────────


class TestInstallations:
    def test_install_counts_download(self, service, seeded):
        alpha = seeded[0]
        installation = service.install_template(alpha.id, "user-1", "agent-1", {"model": "x"})
        assert installation.status == "active"
        assert installation.configuration_overrides == {"model": "x"}
        assert service.get_template(alpha.id).download_count == 1

    def test_uninstall(self, service, seeded):
        installation = service.install_template(seeded[0].id, "user-1", "agent-1")
        assert service.uninstall(installation.id).status == "inactive"

    def test_uninstall_unknown(self, service):
        with pytest.raises(InstallationNotFoundError):
            service.uninstall("missing")

    def test_install_unknown_template(self, service):
        with pytest.raises(TemplateNotFoundError):
            service.install_template("missing", "u", "a")

    def test_list_for_user(self, service, seeded):
        service.install_template(seeded[0].id, "user-1", "agent-1")
        service.install_template(seeded[1].id, "user-1", "agent-2")
        service.install_template(seeded[1].id, "user-2", "agent-3")
        assert len(service.list_installations("user-1")) == 2


# ── ratings ──────────────────────────────────────────────────────────────────


class TestRatings:
    def test_average_rounded(self, service, seeded):
        alpha = seeded[0]
        service.rate_template(alpha.id, "u1", 5)
        service.rate_template(alpha.id, "u2", 4)
        service.rate_template(alpha.id, "u3", 4)
        template = service.get_template(alpha.id)
        assert template.rating == 4.3
        assert template.rating_count == 3

    def test_one_rating_per_user(self, service, seeded):
        alpha = seeded[0]
        service.rate_template(alpha.id, "u1", 1, "meh")
        service.rate_template(alpha.id, "u1", 5, "great now")
        ratings = service.get_ratings(alpha.id)
        assert len(ratings) == 1
        assert ratings[0].review == "great now"
        assert service.get_template(alpha.id).rating == 5

    def test_rating_range(self, service, seeded):
        with pytest.raises(InvalidStateError):
            service.rate_template(seeded[0].id, "u1", 6)


# ── stats ────────────────────────────────────────────────────────────────────


class TestStats:
    def test_stats(self, service, seeded):
        alpha, beta, _ = seeded
        service.install_template(beta.id, "u", "a")
        service.install_template(beta.id, "u", "b")
        service.rate_template(alpha.id, "u", 5)

        stats = service.get_stats()
        assert stats["total_templates"] == 3
        assert stats["total_downloads"] == 2
        assert stats["featured_templates"] == 1
        assert stats["verified_templates"] == 1
        assert stats["categories"] == [
            {"name": "development", "count": 2},
            {"name": "writing", "count": 1},
        ]
        assert stats["top_rated"][0].id == alpha.id
        assert stats["most_downloaded"][0].id == beta.id
        assert len(stats["recent_templates"]) == 3
