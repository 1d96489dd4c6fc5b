from __future__ import annotations
from typing import List, Optional, Union

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from ..quiz_analysis import (
	QuizValidationError,
	build_quiz_entry,
	calculate_weak_area_summary,
	detect_weak_areas,
	get_random_quote,
	parse_question_scores,
	summarize_quizzes,
)
from ..schemas import CamelModel, QuestionScore, QuizEntry, QuizSummary, WeakAreaSummary
from ..storage import LocalStorage, get_storage


router = APIRouter(prefix="/api", tags=["quizzes"])


class CreateQuizRequest(CamelModel):
	score: Union[float, str, None] = None
	date: Optional[str] = None
	# Raw "Topic|scored/total" lines, one per question
	question_scores: str = ""
	# Comma-separated topics, only used when no question scores parse
	weak_areas: str = ""


class ParseScoresRequest(BaseModel):
	text: str = ""


class ParseScoresResponse(CamelModel):
	question_scores: List[QuestionScore] = Field(default_factory=list)
	weak_areas: List[str] = Field(default_factory=list)


@router.get("/quizzes", response_model=List[QuizEntry], response_model_exclude_none=True)
async def list_quizzes(storage: LocalStorage = Depends(get_storage)):
	return storage.get_quiz_entries()


@router.post("/quizzes", response_model=QuizEntry, response_model_exclude_none=True, status_code=201)
async def create_quiz(req: CreateQuizRequest, storage: LocalStorage = Depends(get_storage)):
	try:
		entry = build_quiz_entry(
			req.score,
			quiz_date=req.date,
			question_scores_text=req.question_scores,
			manual_weak_areas=req.weak_areas,
		)
	except QuizValidationError as e:
		raise HTTPException(status_code=400, detail=str(e))
	storage.save_quiz_entry(entry)
	return entry


@router.delete("/quizzes/{entry_id}", status_code=204)
async def delete_quiz(entry_id: str, storage: LocalStorage = Depends(get_storage)):
	storage.delete_quiz_entry(entry_id)


@router.get("/weak-areas", response_model=List[WeakAreaSummary])
async def weak_area_summary(storage: LocalStorage = Depends(get_storage)):
	return calculate_weak_area_summary(storage.get_quiz_entries())


@router.get("/summary", response_model=QuizSummary, response_model_exclude_none=True)
async def quiz_summary(storage: LocalStorage = Depends(get_storage)):
	return summarize_quizzes(storage.get_quiz_entries())


@router.post("/question-scores/parse", response_model=ParseScoresResponse)
async def parse_scores(req: ParseScoresRequest):
	scores = parse_question_scores(req.text)
	return ParseScoresResponse(question_scores=scores, weak_areas=detect_weak_areas(scores))


@router.get("/quote")
async def quote():
	return {"quote": get_random_quote()}
