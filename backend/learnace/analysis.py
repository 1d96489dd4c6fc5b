"""
Exam paper analysis
===================

Forwards a photo of a marked exam paper to Gemini and maps the structured
reply onto AnalysisResult.

Failure policy is chosen per deployment with ANALYSIS_DEMO_FALLBACK:
- off (default): every failure is returned as {success: false, error}
- on: every failure is masked by the fixed demo payload
"""

from __future__ import annotations

import base64
import json
import logging
import math
import re
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from .gemini_client import GeminiClient
from .schemas import AnalysisResult, QuestionScore
from .settings import settings


logger = logging.getLogger(__name__)

MISSING_KEY_ERROR = "Gemini API key not configured"
SERVICE_DISABLED_ERROR = (
	"Gemini API is not enabled. Please enable the Generative Language API in your "
	"Google Cloud Console, or turn on the demo analysis fallback."
)
GENERIC_ERROR = "Failed to analyze the exam paper"

ANALYSIS_PROMPT = """Analyze this marked exam paper and extract the following information:
1. Question topics and their scores (scored/total)
2. Overall percentage if visible
3. Weak areas (topics with less than 50% score)

Return the data in this exact JSON format:
{
  "questionScores": [
    {
      "topic": "Topic Name",
      "scored": number,
      "total": number,
      "percentage": number
    }
  ],
  "overallScore": number,
  "weakAreas": ["topic1", "topic2"]
}

Focus on extracting actual scores from the marked paper. Look for marks like "3/5", "7/10", etc."""

RESPONSE_SCHEMA: Dict[str, Any] = {
	"type": "object",
	"properties": {
		"questionScores": {
			"type": "array",
			"items": {
				"type": "object",
				"properties": {
					"topic": {"type": "string"},
					"scored": {"type": "number"},
					"total": {"type": "number"},
					"percentage": {"type": "number"},
				},
				"required": ["topic", "scored", "total", "percentage"],
			},
		},
		"overallScore": {"type": "number"},
		"weakAreas": {"type": "array", "items": {"type": "string"}},
	},
	"required": ["questionScores", "weakAreas"],
}


def demo_result() -> AnalysisResult:
	return AnalysisResult(
		success=True,
		question_scores=[
			QuestionScore(topic="Algebra", scored=7, total=10),
			QuestionScore(topic="Trigonometry", scored=3, total=8),
			QuestionScore(topic="Calculus", scored=6, total=12),
			QuestionScore(topic="Statistics", scored=2, total=5),
		],
		overall_score=52,
		weak_areas=["Trigonometry", "Statistics"],
	)


def _failure(message: str, use_demo: bool) -> AnalysisResult:
	if use_demo:
		logger.info("Providing demo analysis data in place of error: %s", message)
		return demo_result()
	return AnalysisResult(success=False, error=message)


def _extract_json_object(text: str) -> Dict[str, Any]:
	try:
		data = json.loads(text)
	except ValueError:
		data = None
		code_block = re.search(r"```(?:json)?\s*([\s\S]*?)\s*```", text)
		if code_block:
			try:
				data = json.loads(code_block.group(1))
			except ValueError:
				pass
		if data is None:
			first = text.find("{")
			last = text.rfind("}")
			if first != -1 and last > first:
				try:
					data = json.loads(text[first : last + 1])
				except ValueError:
					pass
	if not isinstance(data, dict):
		raise ValueError("Gemini did not return a JSON object")
	return data


def _as_int(value: Any) -> int:
	if isinstance(value, bool):
		raise TypeError("boolean is not a mark")
	return int(math.floor(float(value) + 0.5))


def _normalize_question_scores(items: Any) -> List[QuestionScore]:
	scores: List[QuestionScore] = []
	if not isinstance(items, list):
		return scores
	for item in items:
		if not isinstance(item, dict):
			continue
		topic = item.get("topic")
		if not isinstance(topic, str) or not topic.strip():
			continue
		try:
			# Upstream percentages are discarded and re-derived from the marks
			scores.append(QuestionScore(topic=topic.strip(), scored=_as_int(item.get("scored")), total=_as_int(item.get("total"))))
		except (TypeError, ValueError, OverflowError, ValidationError):
			logger.debug("Dropping unusable question score from Gemini: %r", item)
	return scores


def normalize_analysis(data: Dict[str, Any]) -> AnalysisResult:
	overall = data.get("overallScore")
	if isinstance(overall, bool) or not isinstance(overall, (int, float)):
		overall = None
	weak_areas = data.get("weakAreas")
	if not isinstance(weak_areas, list):
		weak_areas = []
	return AnalysisResult(
		success=True,
		question_scores=_normalize_question_scores(data.get("questionScores")),
		overall_score=overall,
		weak_areas=[w.strip() for w in weak_areas if isinstance(w, str) and w.strip()],
	)


async def analyze_exam_paper(
	image_bytes: bytes,
	mime_type: str = "image/jpeg",
	*,
	client: Optional[GeminiClient] = None,
	demo_fallback: Optional[bool] = None,
) -> AnalysisResult:
	use_demo = settings.analysis_demo_fallback if demo_fallback is None else demo_fallback
	owns_client = client is None
	if client is None:
		try:
			client = GeminiClient()
		except ValueError:
			logger.warning("Exam analysis requested but %s", MISSING_KEY_ERROR)
			return _failure(MISSING_KEY_ERROR, use_demo)

	parts = [
		{"inline_data": {"mime_type": mime_type, "data": base64.b64encode(image_bytes).decode("ascii")}},
		{"text": ANALYSIS_PROMPT},
	]
	try:
		raw = await client.generate_multimodal(
			parts,
			generation_config={"responseMimeType": "application/json", "responseSchema": RESPONSE_SCHEMA},
		)
		return normalize_analysis(_extract_json_object(raw))
	except Exception as e:
		logger.exception("Error analyzing exam paper with Gemini")
		if "SERVICE_DISABLED" in str(e):
			return _failure(SERVICE_DISABLED_ERROR, use_demo)
		return _failure(GENERIC_ERROR, use_demo)
	finally:
		if owns_client:
			await client.aclose()
