"""
Generic repository over one SQLAlchemy model.

Methods are async so callers on the event loop share one calling
convention; the sessions themselves are synchronous and short-lived.
Absence is a normal ``None`` result, never an error.
"""

from datetime import datetime
from typing import Any, Dict, Generic, Iterable, List, Optional, Type, TypeVar, Union

from pydantic import BaseModel
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from src.database.session_manager import SessionManager
from src.utils.time_utils import utc_now
from src.utils.logger.custom_logging import LoggerMixin

ModelT = TypeVar("ModelT")
SchemaT = TypeVar("SchemaT", bound=BaseModel)


class BaseRepository(LoggerMixin, Generic[ModelT, SchemaT]):
    model: Type[ModelT]
    schema: Type[SchemaT]

    def __init__(self, session_manager: SessionManager):
        super().__init__()
        self.db = session_manager

    # ========================================================================
    # CONVERSION
    # ========================================================================

    def _to_schema(self, row: Optional[ModelT]) -> Optional[SchemaT]:
        if row is None:
            return None
        return self.schema.model_validate(row)

    @staticmethod
    def _to_row_data(payload: Union[BaseModel, Dict[str, Any]]) -> Dict[str, Any]:
        """JSON-safe column values; datetimes are kept as objects."""
        if isinstance(payload, BaseModel):
            data = payload.model_dump(mode="json")
            for key, value in payload:
                if isinstance(value, datetime):
                    data[key] = value
            return data
        return dict(payload)

    def _next_id(self, session: Session) -> int:
        current = session.execute(select(func.max(self.model.id))).scalar()
        return (current or 0) + 1

    # ========================================================================
    # READ
    # ========================================================================

    async def find_by_id(self, record_id: int) -> Optional[SchemaT]:
        with self.db.session_scope() as session:
            return self._to_schema(session.get(self.model, record_id))

    async def find_all(self) -> List[SchemaT]:
        with self.db.session_scope() as session:
            rows = session.execute(select(self.model).order_by(self.model.id)).scalars().all()
            return [self._to_schema(row) for row in rows]

    async def find_by(self, **filters) -> List[SchemaT]:
        """Exact-match filter on column values."""
        with self.db.session_scope() as session:
            stmt = select(self.model).filter_by(**filters).order_by(self.model.id)
            return [self._to_schema(row) for row in session.execute(stmt).scalars().all()]

    # ========================================================================
    # WRITE
    # ========================================================================

    async def create(self, payload: Union[BaseModel, Dict[str, Any]]) -> SchemaT:
        """Insert one record; id = max existing id + 1 (or 1)."""
        with self.db.session_scope() as session:
            row = self.model(id=self._next_id(session), **self._to_row_data(payload))
            session.add(row)
            session.flush()
            created = self._to_schema(row)

        self.logger.debug(f"[Repository] Created {self.model.__name__} id={created.id}")
        return created

    async def create_many(self, payloads: Iterable[Union[BaseModel, Dict[str, Any]]]) -> List[SchemaT]:
        created: List[SchemaT] = []
        with self.db.session_scope() as session:
            next_id = self._next_id(session)
            for payload in payloads:
                row = self.model(id=next_id, **self._to_row_data(payload))
                session.add(row)
                session.flush()
                created.append(self._to_schema(row))
                next_id += 1

        if created:
            self.logger.info(f"[Repository] Created {len(created)} {self.model.__name__} records")
        return created

    async def update(self, record_id: int, changes: Dict[str, Any]) -> Optional[SchemaT]:
        """Apply ``changes`` to an existing record. None when it does not exist."""
        with self.db.session_scope() as session:
            row = session.get(self.model, record_id)
            if row is None:
                return None
            for key, value in changes.items():
                if key == "id" or not hasattr(self.model, key):
                    continue
                setattr(row, key, value)
            if hasattr(self.model, "updated_at") and "updated_at" not in changes:
                row.updated_at = utc_now()
            session.flush()
            return self._to_schema(row)

    async def delete(self, record_id: int) -> bool:
        with self.db.session_scope() as session:
            row = session.get(self.model, record_id)
            if row is None:
                return False
            session.delete(row)
            return True

    async def count(self) -> int:
        with self.db.session_scope() as session:
            return session.execute(select(func.count()).select_from(self.model)).scalar() or 0
