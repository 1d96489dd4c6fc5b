import json
from datetime import date

from learnace.exports import csv_filename, entries_to_csv, export_document, json_filename
from learnace.schemas import QuizEntry, UserSettings


def _entry(entry_id, score, weak_areas):
	return QuizEntry(id=entry_id, date="2024-03-01", score=score, weak_areas=weak_areas, created_at="2024-03-01T10:00:00.000Z")


def test_csv_quotes_every_field():
	csv_text = entries_to_csv([_entry("a", 85, ["Trig", "Stats"]), _entry("b", 62.5, [])])
	assert csv_text.split("\n") == [
		'"Date","Score (%)","Weak Areas"',
		'"2024-03-01","85","Trig; Stats"',
		'"2024-03-01","62.5",""',
	]


def test_csv_escapes_embedded_quotes():
	csv_text = entries_to_csv([_entry("a", 40, ['The "Hard" Bits'])])
	assert csv_text.split("\n")[1] == '"2024-03-01","40","The ""Hard"" Bits"'


def test_json_export_document():
	doc = json.loads(export_document("maya", [_entry("a", 85, ["Trig"])], UserSettings(theme="dark")))
	assert doc["username"] == "maya"
	assert doc["quizEntries"][0]["weakAreas"] == ["Trig"]
	assert "questionScores" not in doc["quizEntries"][0]
	assert doc["settings"] == {"theme": "dark", "notifications": True, "emailUpdates": False, "autoAnalysis": True}


def test_filenames_include_date():
	today = date(2024, 6, 9)
	assert csv_filename(today) == "quiz-tracker-2024-06-09.csv"
	assert json_filename("maya", today) == "learn-ace-data-maya-2024-06-09.json"
	assert json_filename(None, today) == "learn-ace-data-guest-2024-06-09.json"
