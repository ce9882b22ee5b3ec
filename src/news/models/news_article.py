from sqlalchemy import Column, Integer, String, Text, DateTime, Index, UniqueConstraint
from sqlalchemy.sql import func

from ...core.database import Base


class NewsArticle(Base):
    """
    News article pulled from the structured news provider.
    One row per (title, source, category); re-ingestion updates the row in place.
    """
    __tablename__ = "news_articles"
    __table_args__ = (
        UniqueConstraint("title", "source", "category", name="uq_news_articles_title_source_category"),
        Index("idx_news_articles_category_published_at", "category", "published_at"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)

    # Identity
    title = Column(String(500), nullable=False)
    source = Column(String(200), nullable=False)
    category = Column(String(20), nullable=False)

    description = Column(Text)
    url = Column(String(1000), nullable=False)

    # Timestamps
    published_at = Column(DateTime)
    created_at = Column(DateTime, nullable=False, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<NewsArticle(id={self.id}, title='{self.title[:50]}...', source='{self.source}')>"
