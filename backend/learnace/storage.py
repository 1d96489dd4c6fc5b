from __future__ import annotations
import json
import logging
from typing import Any, Callable, Dict, List, Optional, Protocol

from pydantic import ValidationError
from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from .db import SessionLocal
from .models import StoredValue
from .schemas import QuizEntry, User, UserSettings


logger = logging.getLogger(__name__)

QUIZ_STORAGE_KEY = "elearning_quiz_data"
USER_STORAGE_KEY = "elearning_user_data"

# Settings live under their own flat string keys, as the browser client wrote them
THEME_KEY = "theme"
NOTIFICATIONS_KEY = "notifications"
EMAIL_UPDATES_KEY = "emailUpdates"
AUTO_ANALYSIS_KEY = "autoAnalysis"


class KeyValueStore(Protocol):
	def get(self, key: str) -> Optional[str]: ...

	def set(self, key: str, value: str) -> None: ...

	def delete(self, key: str) -> None: ...

	def keys(self) -> List[str]: ...

	def clear(self) -> None: ...


class MemoryStore:
	def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
		self._data: Dict[str, str] = dict(initial or {})

	def get(self, key: str) -> Optional[str]:
		return self._data.get(key)

	def set(self, key: str, value: str) -> None:
		self._data[key] = value

	def delete(self, key: str) -> None:
		self._data.pop(key, None)

	def keys(self) -> List[str]:
		return list(self._data)

	def clear(self) -> None:
		self._data.clear()


class SqlStore:
	"""Key-value store on the `local_storage` table, one session per call."""

	def __init__(self, session_factory: Callable[[], Session]) -> None:
		self._session_factory = session_factory

	def get(self, key: str) -> Optional[str]:
		with self._session_factory() as db:
			row = db.get(StoredValue, key)
			return row.value if row is not None else None

	def set(self, key: str, value: str) -> None:
		with self._session_factory() as db:
			db.merge(StoredValue(key=key, value=value))
			db.commit()

	def delete(self, key: str) -> None:
		with self._session_factory() as db:
			db.execute(delete(StoredValue).where(StoredValue.key == key))
			db.commit()

	def keys(self) -> List[str]:
		with self._session_factory() as db:
			return list(db.scalars(select(StoredValue.key)).all())

	def clear(self) -> None:
		with self._session_factory() as db:
			db.execute(delete(StoredValue))
			db.commit()


def _enabled_unless_false(raw: Optional[str]) -> bool:
	return raw != "false"


def _enabled_only_if_true(raw: Optional[str]) -> bool:
	return raw == "true"


class LocalStorage:
	def __init__(self, store: KeyValueStore) -> None:
		self.store = store

	# ---- quiz entries ----

	def _read_raw_entries(self) -> List[Any]:
		raw = self.store.get(QUIZ_STORAGE_KEY)
		if not raw:
			return []
		try:
			items = json.loads(raw)
		except ValueError:
			logger.exception("Error parsing quiz entries")
			return []
		if not isinstance(items, list):
			logger.warning("Quiz entries are not a list; treating store as empty")
			return []
		return items

	def get_quiz_entries(self) -> List[QuizEntry]:
		entries: List[QuizEntry] = []
		for item in self._read_raw_entries():
			try:
				entries.append(QuizEntry.model_validate(item))
			except ValidationError as e:
				logger.warning("Skipping unreadable quiz entry: %s", e)
		return entries

	def save_quiz_entry(self, entry: QuizEntry) -> None:
		# Writes go through the raw list; items that fail validation stay stored
		items = self._read_raw_entries()
		items.append(entry.model_dump(mode="json", by_alias=True, exclude_none=True))
		self.store.set(QUIZ_STORAGE_KEY, json.dumps(items))

	def delete_quiz_entry(self, entry_id: str) -> None:
		items = self._read_raw_entries()
		remaining = [item for item in items if not (isinstance(item, dict) and item.get("id") == entry_id)]
		if len(remaining) != len(items):
			self.store.set(QUIZ_STORAGE_KEY, json.dumps(remaining))

	# ---- user session ----

	def save_user(self, user: User) -> None:
		self.store.set(USER_STORAGE_KEY, user.model_dump_json(by_alias=True))

	def get_user(self) -> Optional[User]:
		raw = self.store.get(USER_STORAGE_KEY)
		if not raw:
			return None
		try:
			return User.model_validate_json(raw)
		except ValidationError:
			logger.exception("Error parsing user data")
			return None

	def logout_user(self) -> None:
		self.store.delete(USER_STORAGE_KEY)

	# ---- settings ----

	def get_settings(self) -> UserSettings:
		theme = self.store.get(THEME_KEY)
		return UserSettings(
			theme="dark" if theme == "dark" else "light",
			notifications=_enabled_unless_false(self.store.get(NOTIFICATIONS_KEY)),
			email_updates=_enabled_only_if_true(self.store.get(EMAIL_UPDATES_KEY)),
			auto_analysis=_enabled_unless_false(self.store.get(AUTO_ANALYSIS_KEY)),
		)

	def save_settings(
		self,
		*,
		theme: Optional[str] = None,
		notifications: Optional[bool] = None,
		email_updates: Optional[bool] = None,
		auto_analysis: Optional[bool] = None,
	) -> UserSettings:
		if theme is not None:
			if theme not in ("light", "dark"):
				raise ValueError("theme must be 'light' or 'dark'")
			self.store.set(THEME_KEY, theme)
		for key, value in (
			(NOTIFICATIONS_KEY, notifications),
			(EMAIL_UPDATES_KEY, email_updates),
			(AUTO_ANALYSIS_KEY, auto_analysis),
		):
			if value is not None:
				self.store.set(key, "true" if value else "false")
		return self.get_settings()

	def clear_all(self) -> None:
		self.store.clear()


def get_storage() -> LocalStorage:
	return LocalStorage(SqlStore(SessionLocal))
