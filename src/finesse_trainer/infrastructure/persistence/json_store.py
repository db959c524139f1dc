"""
JSON Progress Repository: infrastructure adapter for a progress file on disk.

Implements ProgressRepository. Stored data that cannot be read or validated is
replaced by empty progress; saves are best-effort and never raise.
"""

import logging
import os
import tempfile
from pathlib import Path

from pydantic import ValidationError

from finesse_trainer.domain.models import LearningProgress
from finesse_trainer.domain.ports import ProgressRepository

from .schema import ProgressPayload

logger = logging.getLogger(__name__)


class JsonProgressRepository(ProgressRepository):
    """Stores the durable subset of LearningProgress as a single JSON document."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def load(self) -> LearningProgress:
        if not self.path.exists():
            return LearningProgress()

        try:
            text = self.path.read_text(encoding="utf-8")
            payload = ProgressPayload.model_validate_json(text)
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Could not read progress from {self.path}: {e}")
            return LearningProgress()
        except ValidationError as e:
            logger.warning(
                f"Stored progress in {self.path} is invalid ({e.error_count()} errors); "
                "starting fresh"
            )
            return LearningProgress()

        return payload.to_domain()

    def save(self, progress: LearningProgress) -> None:
        data = ProgressPayload.from_domain(progress).to_json()
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            # Write-then-rename so a crash never leaves a truncated file
            fd, tmp_name = tempfile.mkstemp(
                dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(data)
                os.replace(tmp_name, self.path)
            except OSError:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            logger.warning(f"Failed to save progress to {self.path}: {e}")

    def clear(self) -> None:
        try:
            self.path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning(f"Failed to remove {self.path}: {e}")
