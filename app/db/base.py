"""Base class for all database models."""

from sqlalchemy import Column, Integer
from sqlalchemy.orm import DeclarativeBase, declared_attr


class Base(DeclarativeBase):
    """Base class for all models."""

    @declared_attr
    def __tablename__(cls) -> str:
        """Generate table name automatically."""
        return cls.__name__.lower() + "s"

    # Integer surrogate keys; jobs are addressed by positive integer ids
    id = Column(Integer, primary_key=True, autoincrement=True, index=True)
