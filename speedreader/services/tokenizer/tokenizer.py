"""
Token stream generation for RSVP reading.

This module turns extracted page text into the ordered, classified token
stream consumed by the playback engine and the token cache.

Pipeline stages per page:
1. Validate the page at the extractor boundary
2. Walk geometrically ordered lines (or the page text as a single line)
3. Split each line on whitespace runs and classify every part
4. Drop whitespace parts and compute the ORP split for the rest
5. Assign source references and deterministic ids

Example usage:
    >>> tokens = generate_token_stream({1: {"text": "The cat sat.", "lines": []}}, "doc")
    >>> [token.text for token in tokens]
    ['The', 'cat', 'sat.']
"""

from dataclasses import dataclass
from typing import Iterable, List, Mapping, Optional, Sequence, Union

from pydantic import ValidationError

from speedreader.exceptions import ExtractionError
from speedreader.models.enums import TokenType
from speedreader.schemas.extraction import ExtractedDocument, ExtractedLine, ExtractedPage
from speedreader.schemas.token import SourceRef, Token

from .orp import ORPCalculator
from .text_utils import classify_token, split_on_whitespace

# Types that advance word indices
COUNTED_TOKEN_TYPES = frozenset({TokenType.WORD, TokenType.NUMBER})

PageInput = Union[ExtractedPage, Mapping]
PagesInput = Union[ExtractedDocument, Mapping[int, PageInput]]


def generate_token_id(doc_id: str, page_num: int, word_index: int, extra: int = 0) -> str:
    """
    Build a deterministic token id.

    Word and number tokens use ``{doc_id}-p{page}-w{index}``. Punctuation or
    other tokens that share an index with the following word get an
    ``-x{n}`` suffix so ids stay unique.
    """
    token_id = f"{doc_id}-p{page_num}-w{word_index}"
    if extra:
        token_id += f"-x{extra}"
    return token_id


@dataclass
class _Counters:
    """Running word indices while a stream is generated."""

    in_doc: int = 0
    in_page: int = 0
    on_line: int = 0
    uncounted_run: int = 0


class TokenStreamBuilder:
    """
    Build token streams from extracted pages.

    The builder holds no state between calls; identical input always yields
    identical output.

    Example usage:
        >>> builder = TokenStreamBuilder()
        >>> tokens = builder.build({1: {"lines": [{"lineIndex": 0, "text": "Hi there"}]}}, "42")
        >>> tokens[1].id
        '42-p1-w1'
    """

    def __init__(self, orp_calculator: Optional[ORPCalculator] = None) -> None:
        self._orp_calculator = orp_calculator or ORPCalculator()

    def build(self, pages: PagesInput, doc_id: str) -> List[Token]:
        """
        Generate the complete token stream for a document.

        Args:
            pages: Mapping of page number to page data, or an ExtractedDocument.
            doc_id: Document identifier used in token ids.

        Returns:
            Tokens in reading order, whitespace excluded.

        Raises:
            ExtractionError: If a page does not match the extractor schema.
        """
        if isinstance(pages, ExtractedDocument):
            pages = pages.pages

        tokens: List[Token] = []
        counters = _Counters()

        for page_num in sorted(pages, key=int):
            page = self._validate_page(int(page_num), pages[page_num])
            counters.in_page = 0
            counters.uncounted_run = 0

            if page.lines:
                for line in sorted(page.lines, key=lambda line: line.line_index):
                    counters.on_line = 0
                    tokens.extend(
                        self._tokenize_line(doc_id, int(page_num), line, counters)
                    )
            elif page.text:
                # Fallback: the whole page is one line and word_index_on_line
                # tracks word_index_in_page.
                counters.on_line = 0
                tokens.extend(
                    self._tokenize_line(
                        doc_id,
                        int(page_num),
                        ExtractedLine(line_index=0, text=page.text),
                        counters,
                    )
                )

        return tokens

    def _tokenize_line(
        self,
        doc_id: str,
        page_num: int,
        line: ExtractedLine,
        counters: _Counters,
    ) -> Iterable[Token]:
        for part in split_on_whitespace(line.text):
            token_type = classify_token(part)
            if token_type == TokenType.WHITESPACE:
                continue

            counted = token_type in COUNTED_TOKEN_TYPES
            if counted:
                counters.uncounted_run = 0
            else:
                counters.uncounted_run += 1

            split = self._orp_calculator.split_for_display(part)
            yield Token(
                id=generate_token_id(
                    doc_id, page_num, counters.in_doc, counters.uncounted_run
                ),
                text=part,
                type=token_type,
                source_ref=SourceRef(
                    page_num=page_num,
                    line_index=line.line_index,
                    word_index_on_line=counters.on_line,
                    word_index_in_page=counters.in_page,
                    word_index_in_doc=counters.in_doc,
                ),
                orp_index=split.orp_index,
                orp_char=split.orp_char,
                left_part=split.left_part,
                right_part=split.right_part,
            )

            if counted:
                counters.on_line += 1
                counters.in_page += 1
                counters.in_doc += 1

    def _validate_page(self, page_num: int, page: PageInput) -> ExtractedPage:
        if isinstance(page, ExtractedPage):
            return page
        try:
            return ExtractedPage.model_validate(page)
        except ValidationError as exc:
            raise ExtractionError(f"Malformed extracted page {page_num}: {exc}") from exc


def generate_token_stream(pages: PagesInput, doc_id: str) -> List[Token]:
    """
    Tokenize extracted pages using the default builder.

    Args:
        pages: Mapping of page number to page data, or an ExtractedDocument.
        doc_id: Document identifier.

    Returns:
        The displayable token stream.
    """
    return TokenStreamBuilder().build(pages, str(doc_id))


def tokenize_text(text: str) -> List[tuple[str, TokenType]]:
    """
    Split text into classified parts, whitespace runs included.

    Example:
        >>> tokenize_text("Hi, you")
        [('Hi,', <TokenType.WORD: 'word'>), (' ', <TokenType.WHITESPACE: 'whitespace'>), ('you', <TokenType.WORD: 'word'>)]
    """
    return [(part, classify_token(part)) for part in split_on_whitespace(text)]


def get_context_snippet(tokens: Sequence[Token], index: int, count: int = 3) -> str:
    """Return the text of ``count`` tokens either side of ``index``."""
    start = max(0, index - count)
    end = min(len(tokens), index + count + 1)
    return " ".join(token.text for token in tokens[start:end])


def should_apply_orp(token: Token) -> bool:
    """Only multi-character words are ORP-aligned in the display."""
    return token.type == TokenType.WORD and len(token.text) > 1


def count_words(tokens: Iterable[Token]) -> int:
    """Count word and number tokens."""
    return sum(1 for token in tokens if token.type in COUNTED_TOKEN_TYPES)


def find_first_token_on_page(tokens: Sequence[Token], page_num: int) -> int:
    """
    Find the index of the first token on or after ``page_num``.

    Returns 0 for an empty stream and the last index when no token is that
    far into the document.
    """
    if not tokens:
        return 0
    for index, token in enumerate(tokens):
        if token.source_ref.page_num >= page_num:
            return index
    return len(tokens) - 1
