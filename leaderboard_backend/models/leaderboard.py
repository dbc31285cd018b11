"""
Leaderboard, category and run models
"""

import enum
import uuid

from sqlalchemy import (
    BigInteger,
    Column,
    Date,
    Enum,
    ForeignKey,
    Index,
    Integer,
    Interval,
    String,
    Text,
    Uuid,
    text,
)
from sqlalchemy.orm import relationship

from leaderboard_backend.core.database import Base, UTCDateTime

# SQLite only autoincrements INTEGER PRIMARY KEY columns
BigId = BigInteger().with_variant(Integer, "sqlite")

LIVE_ROWS = text("deleted_at IS NULL")


class SortDirection(enum.Enum):
    """Whether lower or higher metrics rank first"""
    ASCENDING = "ascending"
    DESCENDING = "descending"


class RunType(enum.Enum):
    """Metric a category is ranked on"""
    TIME = "time"
    SCORE = "score"


class Leaderboard(Base):
    """A game, holding a collection of categories"""
    __tablename__ = "leaderboards"

    id = Column(BigId, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False)
    slug = Column(String(80), nullable=False)
    info = Column(Text, nullable=False, default="", server_default="")

    created_at = Column(UTCDateTime, nullable=False)
    updated_at = Column(UTCDateTime, nullable=True)
    deleted_at = Column(UTCDateTime, nullable=True)

    categories = relationship("Category", back_populates="leaderboard", order_by="Category.id")

    __table_args__ = (
        Index(
            "ix_leaderboards_slug_live",
            "slug",
            unique=True,
            postgresql_where=LIVE_ROWS,
            sqlite_where=LIVE_ROWS,
        ),
    )


class Category(Base):
    """A ruleset within a leaderboard that runs are submitted to"""
    __tablename__ = "categories"

    id = Column(BigId, primary_key=True, autoincrement=True)
    leaderboard_id = Column(BigId, ForeignKey("leaderboards.id"), nullable=False, index=True)
    name = Column(String, nullable=False)
    slug = Column(String(80), nullable=False)
    info = Column(Text, nullable=False, default="", server_default="")
    sort_direction = Column(Enum(SortDirection, name="sort_direction"), nullable=False)
    type = Column(Enum(RunType, name="run_type"), nullable=False)

    created_at = Column(UTCDateTime, nullable=False)
    updated_at = Column(UTCDateTime, nullable=True)
    deleted_at = Column(UTCDateTime, nullable=True)

    leaderboard = relationship("Leaderboard", back_populates="categories")
    runs = relationship("Run", back_populates="category")

    __table_args__ = (
        Index(
            "ix_categories_leaderboard_slug_live",
            "leaderboard_id",
            "slug",
            unique=True,
            postgresql_where=LIVE_ROWS,
            sqlite_where=LIVE_ROWS,
        ),
    )


class Run(Base):
    """A single submission to a category"""
    __tablename__ = "runs"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    category_id = Column(BigId, ForeignKey("categories.id"), nullable=False, index=True)
    user_id = Column(Uuid, ForeignKey("users.id"), nullable=False, index=True)
    info = Column(Text, nullable=False, default="", server_default="")
    played_on = Column(Date, nullable=False)

    # Exactly one of these is set, matching the category's run type
    time = Column(Interval, nullable=True)
    score = Column(BigInteger, nullable=True)

    created_at = Column(UTCDateTime, nullable=False)
    updated_at = Column(UTCDateTime, nullable=True)
    deleted_at = Column(UTCDateTime, nullable=True)

    category = relationship("Category", back_populates="runs")
    user = relationship("User", back_populates="runs")
