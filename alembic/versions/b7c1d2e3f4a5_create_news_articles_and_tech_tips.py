"""create_news_articles_and_tech_tips

Revision ID: b7c1d2e3f4a5
Revises:
Create Date: 2026-10-17 09:12:44.310512

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'b7c1d2e3f4a5'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create news_articles and tech_tips, unique per (title, source, category)."""
    op.create_table('news_articles',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('title', sa.String(length=500), nullable=False),
        sa.Column('source', sa.String(length=200), nullable=False),
        sa.Column('category', sa.String(length=20), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('url', sa.String(length=1000), nullable=False),
        sa.Column('published_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('title', 'source', 'category', name='uq_news_articles_title_source_category')
    )
    op.create_index('idx_news_articles_category_published_at', 'news_articles', ['category', 'published_at'])

    op.create_table('tech_tips',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('title', sa.String(length=500), nullable=False),
        sa.Column('source', sa.String(length=200), nullable=False),
        sa.Column('category', sa.String(length=20), nullable=False),
        sa.Column('content', sa.Text(), nullable=True),
        sa.Column('url', sa.String(length=1000), nullable=False),
        sa.Column('author', sa.String(length=200), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('title', 'source', 'category', name='uq_tech_tips_title_source_category')
    )
    op.create_index('idx_tech_tips_category_created_at', 'tech_tips', ['category', 'created_at'])


def downgrade() -> None:
    """Drop tech_tips and news_articles."""
    op.drop_index('idx_tech_tips_category_created_at', 'tech_tips')
    op.drop_table('tech_tips')
    op.drop_index('idx_news_articles_category_published_at', 'news_articles')
    op.drop_table('news_articles')
