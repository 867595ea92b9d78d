"""Flat key/value settings model."""

from sqlalchemy import Column, String, Text

from speedreader.database import Base


class Setting(Base):
    """SQLAlchemy model for persisted user preferences."""

    __tablename__ = "settings"

    key = Column(String(255), primary_key=True)
    value = Column(Text, nullable=False)
