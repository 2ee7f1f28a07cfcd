from typing import List, Optional

from sqlalchemy import select

from src.content_generation.schemas.social import SocialPlatform
from src.database.models.news_records import SocialContent
from src.database.models.record_schemas import SocialContentCreate, SocialContentSchema
from src.database.repository.base_repository import BaseRepository


class SocialContentRepository(BaseRepository[SocialContent, SocialContentSchema]):
    """Repository for generated posts, keyed by (article_id, platform)."""
    model = SocialContent
    schema = SocialContentSchema

    async def find_by_article(self, article_id: int) -> List[SocialContentSchema]:
        return await self.find_by(article_id=article_id)

    async def find_by_article_and_platform(
        self, article_id: int, platform: SocialPlatform
    ) -> Optional[SocialContentSchema]:
        with self.db.session_scope() as session:
            stmt = select(SocialContent).where(
                SocialContent.article_id == article_id,
                SocialContent.platform == SocialPlatform(platform).value,
            )
            return self._to_schema(session.execute(stmt).scalars().first())

    async def upsert(self, payload: SocialContentCreate) -> SocialContentSchema:
        """Replace the post stored for the same article and platform, or create it."""
        existing = await self.find_by_article_and_platform(payload.article_id, payload.platform)
        if existing is None:
            return await self.create(payload)
        return await self.update(existing.id, {
            "content": payload.content,
            "hashtags": list(payload.hashtags),
            "character_count": payload.character_count,
        })
