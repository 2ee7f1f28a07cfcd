from src.database.session_manager import SessionManager
from src.database.repository.company_repository import CompanyRepository
from src.database.repository.news_article_repository import NewsArticleRepository
from src.database.repository.social_content_repository import SocialContentRepository


# Export public API
__all__ = [
    'SessionManager',
    'CompanyRepository',
    'NewsArticleRepository',
    'SocialContentRepository',
]
