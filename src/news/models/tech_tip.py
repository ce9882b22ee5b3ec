from sqlalchemy import Column, Integer, String, Text, DateTime, Index, UniqueConstraint
from sqlalchemy.sql import func

from ...core.database import Base


class TechTip(Base):
    """Community-authored tip scraped from the tips site."""
    __tablename__ = "tech_tips"
    __table_args__ = (
        UniqueConstraint("title", "source", "category", name="uq_tech_tips_title_source_category"),
        Index("idx_tech_tips_category_created_at", "category", "created_at"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)

    title = Column(String(500), nullable=False)
    source = Column(String(200), nullable=False)
    category = Column(String(20), nullable=False)

    content = Column(Text)
    url = Column(String(1000), nullable=False)
    author = Column(String(200))

    created_at = Column(DateTime, nullable=False, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<TechTip(id={self.id}, title='{self.title[:50]}...', author='{self.author}')>"
