"""
City Repository Implementation

Repository for city database operations with filtering and name search.
"""

from typing import List, Optional, Dict, Any, Type, Tuple
from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from destinations.core.exceptions import BaseApplicationException, DuplicateCityException
from destinations.repositories.base_repository import (
    BaseRepository,
    is_primary_key_violation,
    is_unique_violation,
)
from destinations.models.city import City


class CityRepository(BaseRepository[City]):
    """Repository for city database operations."""

    @property
    def model(self) -> Type[City]:
        return City

    def translate_integrity_error(
        self, exc: IntegrityError, data: Dict[str, Any]
    ) -> BaseApplicationException:
        if is_primary_key_violation(exc, self.model.__tablename__):
            return super().translate_integrity_error(exc, data)
        if is_unique_violation(exc):
            return DuplicateCityException(
                name=data.get("name"),
                country_code=data.get("country_code"),
            )
        return super().translate_integrity_error(exc, data)

    def _search_query(
        self,
        query,
        country_code: Optional[str] = None,
        currency: Optional[str] = None,
        search: Optional[str] = None,
    ):
        if country_code:
            query = query.where(self.model.country_code == country_code.strip().upper())
        if currency:
            query = query.where(self.model.currency == currency.strip().upper())
        if search:
            search_term = f"%{search.strip().lower()}%"
            query = query.where(func.lower(self.model.name).like(search_term))
        return query

    async def search_cities(
        self,
        country_code: Optional[str] = None,
        currency: Optional[str] = None,
        search: Optional[str] = None,
        skip: int = 0,
        limit: int = 20,
    ) -> Tuple[List[City], int]:
        """
        Filtered, name-ordered page of cities.

        Returns:
            Tuple[List[City], int]: Cities on the page and total match count
        """
        async with self.get_session() as session:
            try:
                count_query = self._search_query(
                    select(func.count(self.model.id)), country_code, currency, search
                )
                total = (await session.execute(count_query)).scalar() or 0

                query = self._search_query(select(self.model), country_code, currency, search)
                query = query.order_by(self.model.name, self.model.id).offset(skip).limit(limit)
                result = await session.execute(query)
                return list(result.scalars().all()), total
            except SQLAlchemyError as e:
                raise self._database_error("search", e) from e
