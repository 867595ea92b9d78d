"""Pydantic schema for the engine -> UI boundary."""

from pydantic import BaseModel

from speedreader.models.enums import PlaybackState
from speedreader.schemas.token import Token


class EngineSnapshot(BaseModel):
    """Read-only view of the playback engine after a mutation."""

    state: PlaybackState
    is_playing: bool
    is_paused: bool
    finished: bool
    doc_id: str | None
    current_token: Token | None
    current_token_index: int
    current_page_num: int
    total_tokens: int
    target_wpm: int
    current_wpm: float
    progress_percent: float
    time_remaining_label: str
    error: str | None = None
