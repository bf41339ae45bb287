"""
Fund State Store
Durable JSON record of the dual-pool fund
"""

import logging
import os
import tempfile
from pathlib import Path
from typing import Union

from pydantic import ValidationError

from market_sentinel.domain.errors import PersistenceError
from market_sentinel.domain.models import FundState
from market_sentinel.domain.schemas.fund import FundStateRecord

logger = logging.getLogger(__name__)


class JsonFundStateStore:
    """
    Single-file fund state store.

    Every save rewrites the whole record (temp file + rename), never
    patches it in place. Blocking I/O; callers offload to a thread.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def load(self) -> FundState:
        """
        Load state from disk

        Returns:
            Stored FundState, or an empty (uninitialized) FundState if the
            file does not exist

        Raises:
            PersistenceError: file unreadable or not a valid record
        """
        if not self.path.exists():
            logger.info("No fund state at %s, starting fresh", self.path)
            return FundState()

        try:
            raw = self.path.read_text(encoding="utf-8")
            record = FundStateRecord.model_validate_json(raw)
        except (OSError, ValidationError) as exc:
            raise PersistenceError(f"Failed to load fund state from {self.path}: {exc}") from exc

        return record.to_state()

    def save(self, state: FundState) -> None:
        """
        Write the full state to disk

        Raises:
            PersistenceError: write failed
        """
        try:
            payload = FundStateRecord.from_state(state).model_dump_json(indent=2)
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(payload)
                    f.flush()
                    os.fsync(f.fileno())
                os.replace(tmp_name, self.path)
            except BaseException:
                if os.path.exists(tmp_name):
                    os.unlink(tmp_name)
                raise
        except (OSError, ValidationError) as exc:
            raise PersistenceError(f"Failed to save fund state to {self.path}: {exc}") from exc
