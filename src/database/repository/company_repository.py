from typing import Optional

from sqlalchemy import func, select

from src.core.exceptions import ValidationError
from src.database.models.news_records import Company
from src.database.models.record_schemas import CompanyCreate, CompanySchema
from src.database.repository.base_repository import BaseRepository


class CompanyRepository(BaseRepository[Company, CompanySchema]):
    """
    Repository for Company records

    Lookups by name, ticker and alias are case-insensitive.
    """
    model = Company
    schema = CompanySchema

    async def find_by_name(self, name: str) -> Optional[CompanySchema]:
        with self.db.session_scope() as session:
            stmt = select(Company).where(func.lower(Company.name) == name.strip().lower())
            return self._to_schema(session.execute(stmt).scalars().first())

    async def find_by_ticker(self, ticker: str) -> Optional[CompanySchema]:
        with self.db.session_scope() as session:
            stmt = select(Company).where(func.upper(Company.ticker) == ticker.strip().upper())
            return self._to_schema(session.execute(stmt).scalars().first())

    async def find_by_alias(self, alias: str) -> Optional[CompanySchema]:
        wanted = alias.strip().lower()
        for company in await self.find_all():
            if any(a.lower() == wanted for a in company.aliases):
                return company
        return None

    async def create(self, payload: CompanyCreate) -> CompanySchema:
        """Insert a company; a case-insensitive duplicate name is rejected."""
        if await self.find_by_name(payload.name):
            raise ValidationError("name", [f"company '{payload.name}' already exists"])
        return await super().create(payload)
