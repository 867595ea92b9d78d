"""Reading progress model, one row per document."""

from sqlalchemy import BigInteger, Column, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from speedreader.database import Base


class ReadingProgressRecord(Base):
    """SQLAlchemy model for resumable RSVP reading positions."""

    __tablename__ = "reading_progress"

    id = Column(Integer, primary_key=True, autoincrement=True)
    doc_id = Column(
        String(36),
        ForeignKey("documents.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        index=True,
    )

    current_token_index = Column(Integer, nullable=False, default=0)
    current_page_num = Column(Integer, nullable=False, default=1)
    snippet = Column(Text, nullable=True)
    total_words_read = Column(Integer, nullable=False, default=0)

    # Epoch milliseconds
    session_start_time = Column(BigInteger, nullable=True)
    last_update_time = Column(BigInteger, nullable=True)

    document = relationship("Document", back_populates="progress")
