"""
Season Database Model

SQLAlchemy 2.0 model for the seasonal travel windows of a city.
"""

from typing import TYPE_CHECKING, Dict, Any
import uuid

from sqlalchemy import String, Integer, ForeignKey, CheckConstraint, Index, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from destinations.core.database import Base

if TYPE_CHECKING:
    from destinations.models.city import City

SEASON_NAMES = ("peak", "shoulder", "off")


class Season(Base):
    """
    Travel season of a city.

    A city holds at most one entry per season label. Month ranges may wrap
    around the year end (e.g. November to February).
    """

    __tablename__ = "seasons"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    city_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("cities.id", ondelete="CASCADE"),
        nullable=False,
    )
    season_name: Mapped[str] = mapped_column(String(16), nullable=False)
    start_month: Mapped[int] = mapped_column(Integer, nullable=False)
    end_month: Mapped[int] = mapped_column(Integer, nullable=False)

    city: Mapped["City"] = relationship(back_populates="seasons")

    __table_args__ = (
        UniqueConstraint('city_id', 'season_name', name='uq_season_city_name'),
        CheckConstraint(
            "season_name IN ('peak', 'shoulder', 'off')",
            name='ck_season_name_valid'
        ),
        CheckConstraint('start_month BETWEEN 1 AND 12', name='ck_season_start_month_range'),
        CheckConstraint('end_month BETWEEN 1 AND 12', name='ck_season_end_month_range'),
        Index('idx_season_city_start', 'city_id', 'start_month'),
    )

    def __repr__(self) -> str:
        return f"<Season(id={self.id}, city_id={self.city_id}, season_name='{self.season_name}')>"

    def to_dict(self) -> Dict[str, Any]:
        """Bare representation used for responses and fingerprints."""
        return {
            "id": self.id,
            "city_id": self.city_id,
            "season_name": self.season_name,
            "start_month": self.start_month,
            "end_month": self.end_month,
        }
