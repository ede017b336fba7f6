"""Practice progress for signed-in users.

Tracks per-character attempts and best accuracy, completed lessons, and
a daily practice streak. Progress is only recorded for authenticated
sessions; guests can practise freely but nothing is kept.
"""

from __future__ import annotations

import logging
import os
from datetime import date, datetime, timedelta, timezone
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError

from writeoutloud.session.manager import SessionManager

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CharacterProgress(BaseModel):
    character_id: str
    attempts: int = 0
    best_accuracy: float = 0.0
    last_practiced: datetime = Field(default_factory=_utcnow)


class UserProgress(BaseModel):
    """All practice progress belonging to one user."""

    character_progress: dict[str, CharacterProgress] = Field(default_factory=dict)
    streak_days: int = 0
    last_active_date: date | None = None
    completed_lessons: set[str] = Field(default_factory=set)

    def record_attempt(
        self, character_id: str, accuracy: float, now: datetime | None = None
    ) -> CharacterProgress:
        """Record one tracing attempt and advance the streak.

        Raises:
            ValueError: If accuracy is outside [0, 1].
        """
        if not 0.0 <= accuracy <= 1.0:
            raise ValueError(f"accuracy must be between 0 and 1, got {accuracy}")
        now = now or _utcnow()

        entry = self.character_progress.get(character_id)
        if entry is None:
            entry = CharacterProgress(
                character_id=character_id, attempts=1, best_accuracy=accuracy, last_practiced=now
            )
        else:
            entry = entry.model_copy(
                update={
                    "attempts": entry.attempts + 1,
                    "best_accuracy": max(entry.best_accuracy, accuracy),
                    "last_practiced": now,
                }
            )
        self.character_progress[character_id] = entry
        self._update_streak(now.date())
        return entry

    def complete_lesson(self, lesson_id: str) -> None:
        self.completed_lessons.add(lesson_id)

    def _update_streak(self, today: date) -> None:
        last = self.last_active_date
        if last == today:
            return
        if last is not None and last == today - timedelta(days=1):
            self.streak_days += 1
        else:
            self.streak_days = 1
        self.last_active_date = today


class ProgressBook(BaseModel):
    users: dict[str, UserProgress] = Field(default_factory=dict)


class ProgressStore:
    """JSON-file storage of progress keyed by user id."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._book = self._read()

    def _read(self) -> ProgressBook:
        if not self._path.exists():
            return ProgressBook()
        try:
            return ProgressBook.model_validate_json(self._path.read_text(encoding="utf-8"))
        except (OSError, ValidationError, ValueError) as exc:
            logger.warning("Could not read progress from %s: %s", self._path, exc)
            return ProgressBook()

    def get(self, user_id: str) -> UserProgress:
        progress = self._book.users.get(user_id)
        if progress is None:
            progress = UserProgress()
            self._book.users[user_id] = progress
        return progress

    def seed(self, user_id: str, progress: UserProgress) -> bool:
        """Store fixture progress for a user who has none yet.

        Returns True when the progress was stored.
        """
        if user_id in self._book.users:
            return False
        self._book.users[user_id] = progress
        self.save()
        logger.info("Seeded fixture progress for %s", user_id)
        return True

    def save(self) -> None:
        tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(self._book.model_dump_json(indent=2), encoding="utf-8")
            os.replace(tmp_path, self._path)
        except OSError as exc:
            logger.warning("Could not persist progress to %s: %s", self._path, exc)


def load_progress_fixtures(path: str | Path, now: datetime | None = None) -> dict[str, UserProgress]:
    """Read the ``progress`` section of a fixtures YAML file.

    Character entries give ``days_ago`` instead of a timestamp; it is
    resolved against ``now``. The user counts as active on ``now``'s date.
    A missing file yields no progress.
    """
    path = Path(path)
    if not path.exists():
        return {}
    with open(path) as fh:
        data = yaml.safe_load(fh) or {}
    now = now or _utcnow()

    seeded: dict[str, UserProgress] = {}
    for user_id, entry in (data.get("progress") or {}).items():
        characters = {}
        for item in entry.get("characters", []):
            practiced = now - timedelta(days=item.get("days_ago", 0))
            characters[item["character_id"]] = CharacterProgress(
                character_id=item["character_id"],
                attempts=item.get("attempts", 0),
                best_accuracy=item.get("best_accuracy", 0.0),
                last_practiced=practiced,
            )
        seeded[str(user_id)] = UserProgress(
            character_progress=characters,
            streak_days=entry.get("streak_days", 0),
            last_active_date=now.date(),
            completed_lessons=set(entry.get("completed_lessons", [])),
        )
    return seeded


class ProgressService:
    """Records practice results for whoever is signed in."""

    def __init__(self, session_manager: SessionManager, store: ProgressStore) -> None:
        self._sessions = session_manager
        self._store = store

    def current(self) -> UserProgress | None:
        identity = self._sessions.identity
        if identity is None:
            return None
        return self._store.get(identity.user_id)

    def record_attempt(
        self, character_id: str, accuracy: float, now: datetime | None = None
    ) -> CharacterProgress | None:
        progress = self.current()
        if progress is None:
            return None
        entry = progress.record_attempt(character_id, accuracy, now)
        self._store.save()
        return entry

    def complete_lesson(self, lesson_id: str) -> UserProgress | None:
        progress = self.current()
        if progress is None:
            return None
        progress.complete_lesson(lesson_id)
        self._store.save()
        return progress
