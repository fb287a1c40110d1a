import logging
import os
import tempfile
from pathlib import Path
from typing import Optional, Union

from pydantic import ValidationError

from ..models.session import SessionRecord
from .auth_exceptions import CorruptSessionError

logger = logging.getLogger(__name__)


class SessionPersister:
    """Single-record session file that survives process restarts"""

    def __init__(self, session_path: Union[str, Path]):
        self.session_path = Path(session_path)

    def _read(self) -> Optional[SessionRecord]:
        try:
            raw = self.session_path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            raise CorruptSessionError(f"Unreadable session file: {e}") from e

        try:
            return SessionRecord.from_json(raw)
        except ValidationError as e:
            raise CorruptSessionError(f"Invalid session file: {e.error_count()} error(s)") from e

    def load(self) -> Optional[SessionRecord]:
        """Read the saved session; corrupt content is cleared and reported as absent"""
        try:
            return self._read()
        except CorruptSessionError as e:
            logger.warning(f"{e}; clearing saved session")
            self.clear()
            return None

    def save(self, record: SessionRecord):
        """Overwrite the saved session (temp file + rename, so readers never see half a write)"""
        self.session_path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(
            prefix=".session-", suffix=".tmp", dir=str(self.session_path.parent)
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(record.to_json())
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self.session_path)
        except BaseException:
            try:
                os.unlink(tmp_path)
            except FileNotFoundError:
                pass
            raise
        logger.info(f"Session saved for user: {record.user.email}")

    def clear(self):
        """Remove the saved session if there is one"""
        try:
            self.session_path.unlink()
            logger.info("Session cleared")
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.error(f"Error clearing session: {e}")
