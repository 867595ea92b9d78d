"""Pydantic schemas for RSVP tokens."""

from pydantic import BaseModel, ConfigDict, Field

from speedreader.models.enums import TokenType


class SourceRef(BaseModel):
    """Back-reference from a token into the original document."""

    model_config = ConfigDict(frozen=True)

    page_num: int = Field(..., ge=0)
    line_index: int = Field(..., ge=0)
    word_index_on_line: int = Field(..., ge=0)
    word_index_in_page: int = Field(..., ge=0)
    word_index_in_doc: int = Field(..., ge=0)


class Token(BaseModel):
    """A single displayable RSVP unit with its precomputed ORP split.

    Attributes:
        id: Deterministic identifier ``{doc_id}-p{page}-w{word_index_in_doc}``.
        text: Raw text as it appeared, punctuation attached.
        type: Token classification.
        source_ref: Position of the token in the source document.
        orp_index: Index of the highlighted character in ``text``.
        orp_char: The highlighted character.
        left_part: Text before the ORP character.
        right_part: Text after the ORP character.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    text: str
    type: TokenType
    source_ref: SourceRef
    orp_index: int = Field(..., ge=0)
    orp_char: str
    left_part: str
    right_part: str

    @property
    def page_num(self) -> int:
        return self.source_ref.page_num


class CachedTokens(BaseModel):
    """A token stream reassembled from the cache."""

    doc_id: str
    tokens: list[Token]
    total_tokens: int
    total_pages: int
    cache_date: int
    file_hash: str
