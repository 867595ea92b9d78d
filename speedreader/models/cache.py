"""Token cache models: metadata row plus chunked token payload."""

from sqlalchemy import (
    BigInteger,
    Column,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from speedreader.database import Base


class ExtractedTextCache(Base):
    """SQLAlchemy model for token cache metadata."""

    __tablename__ = "extracted_text_cache"

    id = Column(Integer, primary_key=True, autoincrement=True)
    doc_id = Column(
        String(36),
        ForeignKey("documents.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        index=True,
    )

    total_tokens = Column(Integer, nullable=False)
    total_pages = Column(Integer, nullable=False)
    cache_date = Column(BigInteger, nullable=False)  # epoch milliseconds
    file_hash = Column(String(128), nullable=False)
    tokenizer_version = Column(String(32), nullable=True)  # NULL on rows cached before versioning

    document = relationship("Document", back_populates="text_cache")


class TokenChunk(Base):
    """SQLAlchemy model for one page of a cached token stream."""

    __tablename__ = "token_chunks"

    id = Column(Integer, primary_key=True, autoincrement=True)
    doc_id = Column(
        String(36),
        ForeignKey("documents.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    chunk_index = Column(Integer, nullable=False)
    tokens = Column(Text, nullable=False)  # JSON array
    token_count = Column(Integer, nullable=False)

    document = relationship("Document", back_populates="token_chunks")

    __table_args__ = (UniqueConstraint("doc_id", "chunk_index", name="uq_token_chunks_doc_chunk"),)
