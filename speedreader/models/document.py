"""Document model; owned by the library, read by the speed-reading core."""

from datetime import UTC, datetime
import uuid

from sqlalchemy import Column, DateTime, Enum as SAEnum, Integer, String
from sqlalchemy.orm import relationship

from speedreader.database import Base
from speedreader.models.enums import FileType


class Document(Base):
    """SQLAlchemy model for imported documents."""

    __tablename__ = "documents"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    uri = Column(String(1024), nullable=False)
    name = Column(String(500), nullable=False)
    file_type = Column(SAEnum(FileType), nullable=False, default=FileType.PDF)
    page_count = Column(Integer, nullable=False, default=0)
    last_read_page = Column(Integer, nullable=False, default=1)

    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(UTC))
    last_opened_at = Column(DateTime(timezone=True), nullable=True)

    progress = relationship(
        "ReadingProgressRecord",
        back_populates="document",
        cascade="all, delete-orphan",
        passive_deletes=True,
        uselist=False,
    )
    text_cache = relationship(
        "ExtractedTextCache",
        back_populates="document",
        cascade="all, delete-orphan",
        passive_deletes=True,
        uselist=False,
    )
    token_chunks = relationship(
        "TokenChunk",
        back_populates="document",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
