"""Flat key/value store for user preferences."""

import logging
from typing import Optional

from sqlalchemy.orm import sessionmaker

from speedreader.models.setting import Setting

logger = logging.getLogger(__name__)

TARGET_WPM_KEY = "rsvp.target_wpm"


class SettingsStore:
    """String key/value settings backed by the ``settings`` table."""

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        with self._session_factory() as session:
            record = session.get(Setting, key)
            return record.value if record is not None else default

    def set(self, key: str, value: str) -> None:
        with self._session_factory() as session, session.begin():
            record = session.get(Setting, key)
            if record is None:
                session.add(Setting(key=key, value=value))
            else:
                record.value = value

    def get_int(self, key: str, default: Optional[int] = None) -> Optional[int]:
        """Read an integer setting; unparseable values fall back to ``default``."""
        raw = self.get(key)
        if raw is None:
            return default
        try:
            return int(raw)
        except ValueError:
            logger.warning("Ignoring non-integer value %r for setting %s", raw, key)
            return default

    def set_int(self, key: str, value: int) -> None:
        self.set(key, str(int(value)))
