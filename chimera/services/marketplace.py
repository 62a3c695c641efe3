"""
Marketplace Service - Agent templates, installations and ratings.

Plain filters, sorting and paging run in SQL. Tags live in a JSON column,
so a tag or search filter loads the filtered rows and finishes in Python.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from chimera.api.middleware.error_handler import (
    InstallationNotFoundError,
    InvalidStateError,
    TemplateNotFoundError,
)
from chimera.models.db import AgentInstallation, AgentRating, AgentTemplate, utcnow

logger = logging.getLogger(__name__)

SORT_FIELDS = ("rating", "download_count", "created_at", "name")
TOP_N = 5


def _matches_search(template: AgentTemplate, search: str) -> bool:
    needle = search.lower()
    return (
        needle in (template.name or "").lower()
        or needle in (template.description or "").lower()
        or search in (template.tags or [])
    )


def _sort_key(field: str):
    def key(template: AgentTemplate):
        value = getattr(template, field)
        if field == "name":
            return (value or "").lower()
        if field == "created_at":
            return value.isoformat() if value else ""
        return value or 0
    return key


class MarketplaceService:
    """Template marketplace bound to one database session."""

    def __init__(self, session: Session):
        self.session = session

    # -------------------------------------------------------------------------
    # Templates
    # -------------------------------------------------------------------------

    def list_templates(
        self,
        category: Optional[str] = None,
        tags: Optional[List[str]] = None,
        author: Optional[str] = None,
        verified_only: bool = False,
        featured_only: bool = False,
        search: Optional[str] = None,
        sort_by: str = "rating",
        sort_order: str = "desc",
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> Tuple[List[AgentTemplate], int]:
        """
        Filter, sort and page templates.

        Returns:
            (page of templates, total matching before paging)
        """
        if sort_by not in SORT_FIELDS:
            raise InvalidStateError(f"Cannot sort by {sort_by}")

        query = self.session.query(AgentTemplate)
        if category:
            query = query.filter(AgentTemplate.category == category)
        if author:
            query = query.filter(AgentTemplate.author == author)
        if verified_only:
            query = query.filter(AgentTemplate.is_verified.is_(True))
        if featured_only:
            query = query.filter(AgentTemplate.is_featured.is_(True))

        if not tags and not search:
            return self._page_in_sql(query, sort_by, sort_order, limit, offset)

        templates = query.all()
        if tags:
            wanted = set(tags)
            templates = [t for t in templates if wanted & set(t.tags or [])]
        if search:
            templates = [t for t in templates if _matches_search(t, search)]

        templates.sort(key=_sort_key(sort_by), reverse=(sort_order != "asc"))
        total = len(templates)

        end = offset + limit if limit is not None else None
        return templates[offset:end], total

    @staticmethod
    def _page_in_sql(
        query,
        sort_by: str,
        sort_order: str,
        limit: Optional[int],
        offset: int,
    ) -> Tuple[List[AgentTemplate], int]:
        total = query.order_by(None).count()

        column = getattr(AgentTemplate, sort_by)
        if sort_by == "name":
            column = func.lower(column)
        order = column.asc() if sort_order == "asc" else column.desc()
        query = query.order_by(order, AgentTemplate.id).offset(offset)
        if limit is not None:
            query = query.limit(limit)
        return query.all(), total

    def get_template(self, template_id: str) -> AgentTemplate:
        template = self.session.get(AgentTemplate, template_id)
        if template is None:
            raise TemplateNotFoundError(template_id)
        return template

    def create_template(self, **fields: Any) -> AgentTemplate:
        template = AgentTemplate(**fields, rating=0.0, rating_count=0, download_count=0)
        self.session.add(template)
        self.session.commit()
        logger.info("Created template %s (%s)", template.name, template.id)
        return template

    def update_template(self, template_id: str, **updates: Any) -> AgentTemplate:
        template = self.get_template(template_id)
        for field, value in updates.items():
            if value is not None:
                setattr(template, field, value)
        template.updated_at = utcnow()
        self.session.commit()
        return template

    def delete_template(self, template_id: str) -> None:
        template = self.get_template(template_id)
        self.session.delete(template)
        self.session.commit()

    def search_templates(self, query: str, limit: int = 10) -> List[AgentTemplate]:
        templates, _ = self.list_templates(search=query, sort_by="rating", limit=limit)
        return templates

    def get_categories(self) -> List[str]:
        rows = self.session.query(AgentTemplate.category).distinct().all()
        return sorted(row[0] for row in rows if row[0])

    # -------------------------------------------------------------------------
    # Installations
    # -------------------------------------------------------------------------

    def install_template(
        self,
        template_id: str,
        user_id: str,
        agent_id: str,
        configuration_overrides: Optional[Dict[str, Any]] = None,
    ) -> AgentInstallation:
        template = self.get_template(template_id)
        installation = AgentInstallation(
            template_id=template.id,
            user_id=user_id,
            agent_id=agent_id,
            configuration_overrides=configuration_overrides,
            status="active",
        )
        template.download_count = (template.download_count or 0) + 1
        self.session.add(installation)
        self.session.commit()
        return installation

    def uninstall(self, installation_id: str) -> AgentInstallation:
        installation = self.session.get(AgentInstallation, installation_id)
        if installation is None:
            raise InstallationNotFoundError(installation_id)
        installation.status = "inactive"
        self.session.commit()
        return installation

    def list_installations(self, user_id: str) -> List[AgentInstallation]:
        return (
            self.session.query(AgentInstallation)
            .filter(AgentInstallation.user_id == user_id)
            .order_by(AgentInstallation.installed_at.desc())
            .all()
        )

    # -------------------------------------------------------------------------
    # Ratings
    # -------------------------------------------------------------------------

    def rate_template(
        self,
        template_id: str,
        user_id: str,
        rating: int,
        review: Optional[str] = None,
    ) -> AgentRating:
        """Create or replace the user's rating and refresh the template average."""
        if not 1 <= rating <= 5:
            raise InvalidStateError("Rating must be between 1 and 5")
        template = self.get_template(template_id)

        record = (
            self.session.query(AgentRating)
            .filter(AgentRating.template_id == template_id, AgentRating.user_id == user_id)
            .first()
        )
        if record is None:
            record = AgentRating(template_id=template_id, user_id=user_id)
            self.session.add(record)
        record.rating = rating
        record.review = review
        self.session.flush()

        average, count = (
            self.session.query(func.avg(AgentRating.rating), func.count(AgentRating.id))
            .filter(AgentRating.template_id == template_id)
            .one()
        )
        template.rating = round(float(average or 0), 1)
        template.rating_count = count
        self.session.commit()
        return record

    def get_ratings(self, template_id: str) -> List[AgentRating]:
        self.get_template(template_id)
        return (
            self.session.query(AgentRating)
            .filter(AgentRating.template_id == template_id)
            .order_by(AgentRating.created_at.desc())
            .all()
        )

    # -------------------------------------------------------------------------
    # Stats
    # -------------------------------------------------------------------------

    def get_stats(self) -> Dict[str, Any]:
        templates = self.session.query(AgentTemplate).all()

        categories: Dict[str, int] = {}
        for t in templates:
            categories[t.category] = categories.get(t.category, 0) + 1

        def top(field: str) -> List[AgentTemplate]:
            return sorted(templates, key=_sort_key(field), reverse=True)[:TOP_N]

        return {
            "total_templates": len(templates),
            "total_downloads": sum(t.download_count or 0 for t in templates),
            "featured_templates": sum(1 for t in templates if t.is_featured),
            "verified_templates": sum(1 for t in templates if t.is_verified),
            "categories": [{"name": name, "count": count} for name, count in sorted(categories.items())],
            "top_rated": top("rating"),
            "most_downloaded": top("download_count"),
            "recent_templates": top("created_at"),
        }
