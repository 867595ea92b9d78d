"""Shared fixtures: in-memory database, fake clock, manual ticker, stub extractor."""

import asyncio

import pytest

from speedreader.config import Settings
from speedreader.database import create_db_engine, create_session_factory, init_db
from speedreader.models import Document, FileType
from speedreader.schemas.extraction import ExtractedDocument, ExtractedLine, ExtractedPage
from speedreader.services.tokenizer import generate_token_stream

DOC_ID = "doc-1"


class FakeClock:
    """Millisecond clock advanced by hand."""

    def __init__(self, now: float = 0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> float:
        self.now += ms
        return self.now


class ManualTicker:
    """Ticker that only fires when a test calls ``fire()``."""

    def __init__(self):
        self.callback = None
        self.start_count = 0
        self.stop_count = 0

    @property
    def running(self) -> bool:
        return self.callback is not None

    def start(self, callback) -> None:
        self.callback = callback
        self.start_count += 1

    def stop(self) -> None:
        self.callback = None
        self.stop_count += 1

    def fire(self):
        if self.callback is None:
            return None
        return self.callback()


class StubExtractor:
    """Extractor returning a fixed document, optionally gated or failing."""

    def __init__(self, document=None, error: Exception | None = None):
        self.document = document
        self.error = error
        self.calls = 0
        self.gate: asyncio.Event | None = None

    async def extract(self, source, on_page=None):
        self.calls += 1
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        if on_page is not None and isinstance(self.document, ExtractedDocument):
            for page_num in sorted(self.document.pages):
                on_page(page_num, self.document.total_pages)
        return self.document


def make_document(*pages: str) -> ExtractedDocument:
    """Build an extracted document with one line per newline on each page."""
    return ExtractedDocument(
        total_pages=len(pages),
        pages={
            page_num: ExtractedPage(
                text=text,
                lines=[
                    ExtractedLine(line_index=index, text=line)
                    for index, line in enumerate(text.split("\n"))
                ],
            )
            for page_num, text in enumerate(pages, start=1)
        },
    )


def make_tokens(count: int, words_per_page: int = 10, doc_id: str = DOC_ID):
    """Build a stream of ``count`` plain word tokens."""
    pages = []
    words = [f"word{index}" for index in range(count)]
    for start in range(0, count, words_per_page):
        pages.append(" ".join(words[start:start + words_per_page]))
    return generate_token_stream(make_document(*pages), doc_id)


@pytest.fixture
def settings():
    """Settings isolated from the environment and any .env file."""
    return Settings(_env_file=None, database_url="sqlite://")


@pytest.fixture
def db_engine(settings):
    engine = create_db_engine(settings.database_url)
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return create_session_factory(db_engine)


@pytest.fixture
def document(session_factory):
    """A document row for progress and cache rows to reference."""
    with session_factory() as session, session.begin():
        session.add(
            Document(
                id=DOC_ID,
                uri="file:///library/book.txt",
                name="book.txt",
                file_type=FileType.TEXT,
                page_count=2,
            )
        )
    return DOC_ID


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def ticker():
    return ManualTicker()


@pytest.fixture
def two_page_document():
    return make_document("The cat sat.", "It slept well.")
