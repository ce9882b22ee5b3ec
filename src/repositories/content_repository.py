import math
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Tuple

from sqlalchemy import desc, func, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from ..exceptions import PersistenceError, ValidationError
from ..news.categories import parse_category
from ..news.models.news_article import NewsArticle
from ..news.models.tech_tip import TechTip

IDENTITY_FIELDS = ("title", "source", "category")


class EntityKind(str, Enum):
    ARTICLE = "article"
    TIP = "tip"

    @property
    def model(self):
        return NewsArticle if self is EntityKind.ARTICLE else TechTip

    @property
    def mutable_fields(self) -> Tuple[str, ...]:
        if self is EntityKind.ARTICLE:
            return ("description", "url", "published_at")
        return ("content", "url", "author")

    @property
    def order_column(self):
        return NewsArticle.published_at if self is EntityKind.ARTICLE else TechTip.created_at


@dataclass
class Page:
    items: List[Any]
    total: int
    page: int
    page_size: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.page_size)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class ContentRepository:
    """
    Store for articles and tips keyed by (title, source, category).

    Writes go through a single INSERT ... ON CONFLICT statement so that the
    unique constraint, not the caller, serializes concurrent writes to one key.
    """

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def upsert(self, kind: EntityKind, record: Dict[str, Any]):
        values = self._prepare(kind, record)
        model = kind.model

        with self.session_factory() as db:
            try:
                insert = self._insert_for(db)
                stmt = insert(model).values(**values)
                stmt = stmt.on_conflict_do_update(
                    index_elements=list(IDENTITY_FIELDS),
                    set_={name: stmt.excluded[name] for name in (*kind.mutable_fields, "updated_at")},
                )
                db.execute(stmt)
                db.commit()

                return db.execute(
                    select(model).filter_by(**{name: values[name] for name in IDENTITY_FIELDS})
                ).scalar_one()
            except SQLAlchemyError as e:
                db.rollback()
                raise PersistenceError(f"Failed to upsert {kind.value} '{values['title']}': {e}") from e

    def find(self, kind: EntityKind, category, page: int, page_size: int) -> Page:
        category = parse_category(category)
        if page < 1 or page_size < 1:
            raise ValidationError("page and page_size must be positive integers")

        model = kind.model
        with self.session_factory() as db:
            try:
                total = db.query(func.count(model.id)).filter(model.category == category.value).scalar()
                items = (
                    db.query(model)
                    .filter(model.category == category.value)
                    .order_by(desc(kind.order_column), desc(model.id))
                    .offset((page - 1) * page_size)
                    .limit(page_size)
                    .all()
                )
            except SQLAlchemyError as e:
                raise PersistenceError(f"Failed to query {kind.value}s for {category.value}: {e}") from e

        return Page(items=items, total=total or 0, page=page, page_size=page_size)

    def count(self, kind: EntityKind, category) -> int:
        category = parse_category(category)
        model = kind.model
        with self.session_factory() as db:
            try:
                return db.query(func.count(model.id)).filter(model.category == category.value).scalar() or 0
            except SQLAlchemyError as e:
                raise PersistenceError(f"Failed to count {kind.value}s: {e}") from e

    def category_counts(self, kind: EntityKind) -> Dict[str, int]:
        model = kind.model
        with self.session_factory() as db:
            try:
                rows = db.query(model.category, func.count(model.id)).group_by(model.category).all()
            except SQLAlchemyError as e:
                raise PersistenceError(f"Failed to count {kind.value}s: {e}") from e
        return {category: total for category, total in rows}

    def _prepare(self, kind: EntityKind, record: Dict[str, Any]) -> Dict[str, Any]:
        title = (record.get("title") or "").strip()
        if not title:
            raise PersistenceError(f"Refusing to store {kind.value} without a title")

        now = _utcnow()
        values = {
            "title": title,
            "source": record.get("source"),
            "category": parse_category(record.get("category")).value,
            "created_at": now,
            "updated_at": now,
        }
        for name in kind.mutable_fields:
            values[name] = record.get(name)
        return values

    @staticmethod
    def _insert_for(db):
        dialect = db.get_bind().dialect.name
        if dialect == "postgresql":
            return postgresql.insert
        if dialect == "sqlite":
            return sqlite.insert
        raise PersistenceError(f"Upsert is not supported on '{dialect}' databases")
