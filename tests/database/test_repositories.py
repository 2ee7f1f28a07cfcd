"""
Tests for the company, article and social content repositories
against in-memory SQLite
"""

from datetime import datetime, timedelta, timezone

import pytest

from src.content_generation.schemas.social import SocialPlatform
from src.core.exceptions import ValidationError
from src.database.models.record_schemas import CompanyCreate, NewsArticleCreate, SocialContentCreate
from tests.conftest import make_highlights

BASE_TIME = datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
async def company(company_repository):
    return await company_repository.create(CompanyCreate(name="Apple", aliases=["Apple Computer"], ticker="AAPL"))


def article_record(company_id, index, hours_ago=0):
    return NewsArticleCreate(
        company_id=company_id,
        title=f"Apple story {index}",
        content="Body",
        source_url=f"https://e.com/{index}",
        source_name="Reuters",
        published_at=BASE_TIME - timedelta(hours=hours_ago),
    )


# ============================================================================
# COMPANY REPOSITORY
# ============================================================================

class TestCompanyRepository:

    @pytest.mark.asyncio
    async def test_create_assigns_sequential_ids(self, company_repository):
        first = await company_repository.create(CompanyCreate(name="Apple"))
        second = await company_repository.create(CompanyCreate(name="Microsoft"))

        assert (first.id, second.id) == (1, 2)
        assert first.created_at.tzinfo is not None

    @pytest.mark.asyncio
    async def test_id_after_delete_is_max_plus_one(self, company_repository):
        await company_repository.create(CompanyCreate(name="Apple"))
        second = await company_repository.create(CompanyCreate(name="Microsoft"))
        await company_repository.delete(1)

        third = await company_repository.create(CompanyCreate(name="Nvidia"))

        assert third.id == second.id + 1

    @pytest.mark.asyncio
    async def test_duplicate_name_rejected_case_insensitively(self, company_repository, company):
        with pytest.raises(ValidationError):
            await company_repository.create(CompanyCreate(name="APPLE"))

    @pytest.mark.asyncio
    async def test_lookups(self, company_repository, company):
        assert (await company_repository.find_by_name("apple")).id == company.id
        assert (await company_repository.find_by_ticker("aapl")).id == company.id
        assert (await company_repository.find_by_alias("apple computer")).id == company.id
        assert await company_repository.find_by_name("Microsoft") is None
        assert await company_repository.find_by_id(99) is None

    @pytest.mark.asyncio
    async def test_update(self, company_repository, company):
        updated = await company_repository.update(company.id, {"aliases": ["Apple Computer", "AAPL Inc"]})

        assert updated.aliases == ["Apple Computer", "AAPL Inc"]
        assert updated.updated_at >= company.updated_at
        assert await company_repository.update(99, {"ticker": "X"}) is None

    @pytest.mark.asyncio
    async def test_delete_and_count(self, company_repository, company):
        assert await company_repository.count() == 1
        assert await company_repository.delete(company.id)
        assert not await company_repository.delete(company.id)
        assert await company_repository.count() == 0


# ============================================================================
# NEWS ARTICLE REPOSITORY
# ============================================================================

class TestNewsArticleRepository:

    @pytest.mark.asyncio
    async def test_find_by_company_newest_first(self, article_repository, company):
        await article_repository.create_many([
            article_record(company.id, 1, hours_ago=5),
            article_record(company.id, 2, hours_ago=1),
            article_record(company.id, 3, hours_ago=3),
        ])

        articles = await article_repository.find_by_company(company.id)
        limited = await article_repository.find_by_company(company.id, limit=2)

        assert [a.title for a in articles] == ["Apple story 2", "Apple story 3", "Apple story 1"]
        assert [a.title for a in limited] == ["Apple story 2", "Apple story 3"]
        assert articles[0].published_at == BASE_TIME - timedelta(hours=1)

    @pytest.mark.asyncio
    async def test_create_many_skip_existing(self, article_repository, company):
        await article_repository.create(article_record(company.id, 1))

        created = await article_repository.create_many_skip_existing([
            article_record(company.id, 1),
            article_record(company.id, 2),
            article_record(company.id, 2),
        ])

        assert [a.source_url for a in created] == ["https://e.com/2"]
        assert await article_repository.count() == 2
        assert (await article_repository.find_by_source_url("https://e.com/2")).id == 2

    @pytest.mark.asyncio
    async def test_create_many_skip_existing_empty(self, article_repository):
        assert await article_repository.create_many_skip_existing([]) == []

    @pytest.mark.asyncio
    async def test_update_highlights_round_trips(self, article_repository, company):
        article = await article_repository.create(article_record(company.id, 1))

        updated = await article_repository.update_highlights(article.id, make_highlights())

        assert updated.highlights == make_highlights()
        assert (await article_repository.find_by_id(article.id)).highlights == make_highlights()

    @pytest.mark.asyncio
    async def test_find_recent(self, article_repository, company):
        await article_repository.create_many([article_record(company.id, i, hours_ago=i) for i in range(1, 5)])

        recent = await article_repository.find_recent(limit=2)

        assert [a.title for a in recent] == ["Apple story 1", "Apple story 2"]


# ============================================================================
# SOCIAL CONTENT REPOSITORY
# ============================================================================

class TestSocialContentRepository:

    @pytest.fixture
    async def article(self, article_repository, company):
        return await article_repository.create(article_record(company.id, 1))

    @pytest.mark.asyncio
    async def test_upsert_replaces_per_platform(self, social_repository, article):
        first = await social_repository.upsert(SocialContentCreate(
            article_id=article.id, platform=SocialPlatform.TWITTER, content="First", hashtags=["#Apple"], character_count=13,
        ))
        second = await social_repository.upsert(SocialContentCreate(
            article_id=article.id, platform=SocialPlatform.TWITTER, content="Second", hashtags=[], character_count=7,
        ))
        await social_repository.upsert(SocialContentCreate(
            article_id=article.id, platform=SocialPlatform.LINKEDIN, content="Post", character_count=5,
        ))

        assert second.id == first.id
        assert second.content == "Second"
        assert second.hashtags == []

        stored = await social_repository.find_by_article(article.id)
        assert len(stored) == 2
        assert {s.platform for s in stored} == {SocialPlatform.TWITTER, SocialPlatform.LINKEDIN}

    @pytest.mark.asyncio
    async def test_find_by_article_and_platform(self, social_repository, article):
        assert await social_repository.find_by_article_and_platform(article.id, SocialPlatform.FACEBOOK) is None
