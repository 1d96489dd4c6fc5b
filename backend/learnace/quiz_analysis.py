"""
Quiz scoring helpers
====================

Pure functions behind quiz entry and the weak-area dashboard:

- parse_question_scores: "Topic|scored/total" lines -> QuestionScore list
- detect_weak_areas / normalize_weak_areas: the two weak-area sources
- calculate_weak_area_summary: per-topic frequency and average score
- build_quiz_entry: validate a submitted quiz and pick its weak areas
- summarize_quizzes: totals, average and latest entry for the dashboard
"""

from __future__ import annotations

import math
import random
import re
import secrets
import string
import time
from datetime import date, datetime, timezone
from typing import Dict, Iterable, List, Optional, Union

from .schemas import QuestionScore, QuizEntry, QuizSummary, WeakAreaSummary


WEAK_AREA_THRESHOLD = 50
TOP_WEAK_AREAS = 5

_SCORE_LINE = re.compile(r"([^|]+)\|([0-9]+)/([0-9]+)")
_SPLIT_TOPICS = re.compile(r"[,;]")
_ID_ALPHABET = string.digits + string.ascii_lowercase

MOTIVATIONAL_QUOTES: List[str] = [
	"Keep learning! Every expert was once a beginner.",
	"Progress, not perfection. You're improving every day!",
	"Knowledge is the best investment you can make.",
	"Small steps lead to big achievements!",
	"Every mistake is a stepping stone to success.",
	"Learning never exhausts the mind - Leonardo da Vinci",
	"The more you learn, the more you grow!",
	"Excellence is a continuous process, not an accident.",
]


class QuizValidationError(ValueError):
	"""Raised when a submitted quiz cannot be recorded."""


def parse_question_scores(text: str) -> List[QuestionScore]:
	"""Parse one "Topic|scored/total" claim per line.

	Lines that do not match exactly, have a zero total, or claim more marks
	than available are dropped without error.
	"""
	if not text or not text.strip():
		return []
	scores: List[QuestionScore] = []
	for line in text.strip().split("\n"):
		match = _SCORE_LINE.fullmatch(line.strip())
		if not match:
			continue
		topic, scored, total = match.group(1).strip(), int(match.group(2)), int(match.group(3))
		if total <= 0 or scored > total:
			continue
		scores.append(QuestionScore(topic=topic, scored=scored, total=total))
	return scores


def detect_weak_areas(question_scores: Iterable[QuestionScore]) -> List[str]:
	return [qs.topic for qs in question_scores if qs.percentage < WEAK_AREA_THRESHOLD]


def _title_case(topic: str) -> str:
	return " ".join(word[:1].upper() + word[1:] for word in topic.split(" "))


def normalize_weak_areas(raw_topics: Iterable[str]) -> List[str]:
	tokens: List[str] = []
	for raw in raw_topics:
		for part in _SPLIT_TOPICS.split(raw.strip().lower()):
			part = part.strip()
			if part:
				tokens.append(part)
	unique = dict.fromkeys(tokens)
	return [_title_case(topic) for topic in unique]


def calculate_weak_area_summary(entries: Iterable[QuizEntry]) -> List[WeakAreaSummary]:
	"""Fold an entry history into per-topic frequency and average score.

	Each weak-area occurrence borrows the percentage of the first question
	score in the same entry whose topic overlaps it by case-insensitive
	substring, in either direction.
	"""
	counts: Dict[str, int] = {}
	matched: Dict[str, List[int]] = {}
	for entry in entries:
		for area in entry.weak_areas:
			counts[area] = counts.get(area, 0) + 1
			bucket = matched.setdefault(area, [])
			area_l = area.lower()
			for qs in entry.question_scores or []:
				topic_l = qs.topic.lower()
				if area_l in topic_l or topic_l in area_l:
					bucket.append(qs.percentage)
					break

	summaries = [
		WeakAreaSummary(
			topic=topic,
			frequency=count,
			average_score=_rounded_mean(matched[topic]),
		)
		for topic, count in counts.items()
	]
	# sorted() is stable, so ties keep first-encounter order
	return sorted(summaries, key=lambda s: s.frequency, reverse=True)


def _rounded_mean(values: List[int]) -> int:
	if not values:
		return 0
	return int(math.floor(sum(values) / len(values) + 0.5))


def _new_entry_id() -> str:
	suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(9))
	return f"quiz_{int(time.time() * 1000)}_{suffix}"


def _utc_timestamp() -> str:
	return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def build_quiz_entry(
	score: Union[str, float, int, None],
	*,
	quiz_date: Optional[str] = None,
	question_scores_text: str = "",
	manual_weak_areas: str = "",
) -> QuizEntry:
	try:
		score_value = float(score)  # type: ignore[arg-type]
	except (TypeError, ValueError):
		score_value = math.nan
	if not math.isfinite(score_value) or score_value < 0 or score_value > 100:
		raise QuizValidationError("Please enter a score between 0 and 100")

	if quiz_date:
		try:
			date.fromisoformat(quiz_date.strip())
		except ValueError:
			raise QuizValidationError("Date must be a calendar date (YYYY-MM-DD)")
		entry_date = quiz_date.strip()
	else:
		entry_date = date.today().isoformat()

	question_scores = parse_question_scores(question_scores_text or "")
	if question_scores:
		weak_areas = detect_weak_areas(question_scores)
	elif manual_weak_areas and manual_weak_areas.strip():
		weak_areas = normalize_weak_areas(manual_weak_areas.split(","))
	else:
		weak_areas = []

	return QuizEntry(
		id=_new_entry_id(),
		date=entry_date,
		score=score_value,
		weak_areas=weak_areas,
		question_scores=question_scores or None,
		created_at=_utc_timestamp(),
	)


def get_random_quote() -> str:
	return random.choice(MOTIVATIONAL_QUOTES)


def summarize_quizzes(entries: Iterable[QuizEntry], *, top: int = TOP_WEAK_AREAS) -> QuizSummary:
	"""Dashboard overview: quiz count, mean score to one decimal, latest entry, top weak areas."""
	history = list(entries)
	if not history:
		return QuizSummary(total_quizzes=0, average_score=0.0)
	mean = sum(e.score for e in history) / len(history)
	return QuizSummary(
		total_quizzes=len(history),
		average_score=math.floor(mean * 10 + 0.5) / 10,
		latest_entry=history[-1],
		top_weak_areas=calculate_weak_area_summary(history)[:top],
	)
