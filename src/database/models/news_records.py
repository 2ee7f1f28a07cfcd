"""
SQLAlchemy Models for the news records

Tables:
1. companies - canonical companies with aliases and ticker
2. news_articles - processed articles, one company each
3. social_contents - generated posts, one per (article, platform)
"""

from sqlalchemy import (
    Column, String, DateTime, Integer, Text, JSON, ForeignKey, Index, UniqueConstraint
)

from src.database.models.base import Base
from src.utils.time_utils import utc_now


# ============================================================================
# 1. COMPANIES TABLE
# ============================================================================
class Company(Base):
    """
    Canonical company.

    Name uniqueness is case-insensitive and enforced by the repository.
    """
    __tablename__ = "companies"

    # ids are assigned by the repository (max + 1)
    id = Column(Integer, primary_key=True, autoincrement=False)
    name = Column(String(255), nullable=False, index=True, comment="Canonical name")
    aliases = Column(JSON, nullable=False, default=list, comment="Alternative spellings")
    ticker = Column(String(20), nullable=True, index=True)

    created_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)

    def __repr__(self):
        return f"<Company(id={self.id}, name={self.name}, ticker={self.ticker})>"


# ============================================================================
# 2. NEWS ARTICLES TABLE
# ============================================================================
class NewsArticle(Base):
    __tablename__ = "news_articles"

    id = Column(Integer, primary_key=True, autoincrement=False)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False, index=True)
    title = Column(String(512), nullable=False)
    content = Column(Text, nullable=False, default="")
    highlights = Column(JSON, nullable=False, default=list, comment="Ordered highlight dicts")
    source_url = Column(String(1024), nullable=False, unique=True)
    source_name = Column(String(255), nullable=False, default="")
    published_at = Column(DateTime(timezone=True), nullable=False)
    fetched_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)

    __table_args__ = (
        Index('idx_news_articles_company_published', 'company_id', 'published_at'),
    )

    def __repr__(self):
        return f"<NewsArticle(id={self.id}, company_id={self.company_id}, title={self.title[:40]!r})>"


# ============================================================================
# 3. SOCIAL CONTENTS TABLE
# ============================================================================
class SocialContent(Base):
    __tablename__ = "social_contents"

    id = Column(Integer, primary_key=True, autoincrement=False)
    article_id = Column(Integer, ForeignKey("news_articles.id"), nullable=False, index=True)
    platform = Column(String(20), nullable=False)
    content = Column(Text, nullable=False)
    hashtags = Column(JSON, nullable=False, default=list)
    character_count = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)

    __table_args__ = (
        UniqueConstraint('article_id', 'platform', name='uq_social_contents_article_platform'),
    )

    def __repr__(self):
        return f"<SocialContent(id={self.id}, article_id={self.article_id}, platform={self.platform})>"
