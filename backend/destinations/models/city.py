"""
City Database Model

SQLAlchemy 2.0 model for destination cities.
"""

from typing import TYPE_CHECKING, List, Dict, Any
import uuid

from sqlalchemy import String, Index, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from destinations.core.database import Base

if TYPE_CHECKING:
    from destinations.models.season import Season


class City(Base):
    """
    Destination city.

    A city is identified by its (name, country_code) pair and owns the
    seasonal travel windows defined for it.
    """

    __tablename__ = "cities"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    country_code: Mapped[str] = mapped_column(String(2), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False)

    # Seasons are removed by the database's ON DELETE CASCADE
    seasons: Mapped[List["Season"]] = relationship(
        back_populates="city",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        UniqueConstraint('name', 'country_code', name='uq_city_name_country'),
        Index('idx_city_country_code', 'country_code'),
        Index('idx_city_currency', 'currency'),
    )

    def __repr__(self) -> str:
        return f"<City(id={self.id}, name='{self.name}', country_code='{self.country_code}')>"

    def to_dict(self) -> Dict[str, Any]:
        """Bare representation used for responses and fingerprints."""
        return {
            "id": self.id,
            "name": self.name,
            "country_code": self.country_code,
            "currency": self.currency,
        }
