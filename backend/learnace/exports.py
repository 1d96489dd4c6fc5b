from __future__ import annotations
import csv
import io
import json
from datetime import date
from typing import Iterable, Optional

from .schemas import QuizEntry, UserSettings


CSV_HEADERS = ["Date", "Score (%)", "Weak Areas"]


def _format_score(score: float) -> str:
	# 85.0 -> "85", 85.5 -> "85.5"
	return str(int(score)) if float(score).is_integer() else str(score)


def entries_to_csv(entries: Iterable[QuizEntry]) -> str:
	buf = io.StringIO()
	writer = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator="\n")
	writer.writerow(CSV_HEADERS)
	for entry in entries:
		writer.writerow([entry.date, _format_score(entry.score), "; ".join(entry.weak_areas)])
	return buf.getvalue().rstrip("\n")


def export_document(username: Optional[str], entries: Iterable[QuizEntry], settings: UserSettings) -> str:
	data = {
		"username": username,
		"quizEntries": [e.model_dump(mode="json", by_alias=True, exclude_none=True) for e in entries],
		"settings": settings.model_dump(by_alias=True),
	}
	return json.dumps(data, indent=2)


def csv_filename(today: Optional[date] = None) -> str:
	return f"quiz-tracker-{(today or date.today()).isoformat()}.csv"


def json_filename(username: Optional[str], today: Optional[date] = None) -> str:
	return f"learn-ace-data-{username or 'guest'}-{(today or date.today()).isoformat()}.json"
