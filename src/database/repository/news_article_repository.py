from typing import List, Optional, Sequence

from sqlalchemy import select

from src.content_generation.schemas.highlights import Highlight
from src.database.models.news_records import NewsArticle
from src.database.models.record_schemas import NewsArticleCreate, NewsArticleSchema
from src.database.repository.base_repository import BaseRepository


class NewsArticleRepository(BaseRepository[NewsArticle, NewsArticleSchema]):
    """Repository for processed news articles. source_url is unique."""
    model = NewsArticle
    schema = NewsArticleSchema

    async def find_by_source_url(self, source_url: str) -> Optional[NewsArticleSchema]:
        with self.db.session_scope() as session:
            stmt = select(NewsArticle).where(NewsArticle.source_url == source_url)
            return self._to_schema(session.execute(stmt).scalars().first())

    async def find_by_company(self, company_id: int, limit: Optional[int] = None) -> List[NewsArticleSchema]:
        """Newest first."""
        with self.db.session_scope() as session:
            stmt = (
                select(NewsArticle)
                .where(NewsArticle.company_id == company_id)
                .order_by(NewsArticle.published_at.desc(), NewsArticle.id.desc())
            )
            if limit:
                stmt = stmt.limit(limit)
            return [self._to_schema(row) for row in session.execute(stmt).scalars().all()]

    async def find_recent(self, limit: int = 20) -> List[NewsArticleSchema]:
        with self.db.session_scope() as session:
            stmt = select(NewsArticle).order_by(NewsArticle.published_at.desc(), NewsArticle.id.desc()).limit(limit)
            return [self._to_schema(row) for row in session.execute(stmt).scalars().all()]

    async def create_many_skip_existing(self, records: Sequence[NewsArticleCreate]) -> List[NewsArticleSchema]:
        """
        Persist only records whose source_url is not stored yet.

        Repeated URLs inside ``records`` keep their first occurrence.

        Returns:
            The newly created records
        """
        if not records:
            return []

        urls = [r.source_url for r in records]
        with self.db.session_scope() as session:
            stmt = select(NewsArticle.source_url).where(NewsArticle.source_url.in_(urls))
            existing = set(session.execute(stmt).scalars().all())

        fresh: List[NewsArticleCreate] = []
        for record in records:
            if record.source_url in existing:
                continue
            existing.add(record.source_url)
            fresh.append(record)

        skipped = len(records) - len(fresh)
        if skipped:
            self.logger.info(f"[Repository] Skipped {skipped} articles already stored")
        return await self.create_many(fresh)

    async def update_highlights(self, article_id: int, highlights: Sequence[Highlight]) -> Optional[NewsArticleSchema]:
        return await self.update(
            article_id,
            {"highlights": [h.model_dump(mode="json") for h in highlights]},
        )
