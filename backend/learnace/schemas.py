from __future__ import annotations
import math
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator
from pydantic.alias_generators import to_camel


def percent_of(scored: float, total: float) -> int:
	"""Whole-number percentage with halves rounded up (12.5 -> 13)."""
	return int(math.floor(scored / total * 100 + 0.5))


class CamelModel(BaseModel):
	# Stored and served JSON keeps the client's camelCase keys
	model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class QuestionScore(CamelModel):
	topic: str
	scored: int = Field(ge=0)
	total: int = Field(gt=0)

	@model_validator(mode="after")
	def _scored_within_total(self) -> "QuestionScore":
		if self.scored > self.total:
			raise ValueError("scored cannot exceed total")
		return self

	@computed_field  # type: ignore[prop-decorator]
	@property
	def percentage(self) -> int:
		return percent_of(self.scored, self.total)


class QuizEntry(CamelModel):
	id: str
	date: str
	score: float = Field(ge=0, le=100)
	weak_areas: List[str] = Field(default_factory=list)
	question_scores: Optional[List[QuestionScore]] = None
	created_at: str


class WeakAreaSummary(CamelModel):
	topic: str
	frequency: int
	average_score: int


class User(CamelModel):
	username: str
	is_logged_in: bool = True


class UserSettings(CamelModel):
	theme: Literal["light", "dark"] = "light"
	notifications: bool = True
	email_updates: bool = False
	auto_analysis: bool = True


class AnalysisResult(CamelModel):
	success: bool
	question_scores: List[QuestionScore] = Field(default_factory=list)
	overall_score: Optional[float] = None
	weak_areas: List[str] = Field(default_factory=list)
	error: Optional[str] = None


class QuizSummary(CamelModel):
	total_quizzes: int
	average_score: float
	latest_entry: Optional[QuizEntry] = None
	top_weak_areas: List[WeakAreaSummary] = Field(default_factory=list)
