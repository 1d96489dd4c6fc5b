from __future__ import annotations
import logging
from io import BytesIO
from typing import Optional

from fastapi import APIRouter, File, HTTPException, UploadFile
from fastapi.responses import JSONResponse
from PIL import Image, UnidentifiedImageError

from ..analysis import analyze_exam_paper
from ..schemas import AnalysisResult
from ..settings import settings


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["analysis"])

ALLOWED_CONTENT_TYPES = {"image/jpeg", "image/png"}
_MIME_BY_FORMAT = {"JPEG": "image/jpeg", "PNG": "image/png"}


def _sniff_mime_type(content: bytes) -> Optional[str]:
	try:
		with Image.open(BytesIO(content)) as img:
			return _MIME_BY_FORMAT.get(img.format or "")
	except (UnidentifiedImageError, OSError):
		return None


@router.post("/analyze-exam", response_model=AnalysisResult, response_model_exclude_none=True)
async def analyze_exam(image: Optional[UploadFile] = File(None)):
	if image is None:
		raise HTTPException(status_code=400, detail="No image file provided")
	if (image.content_type or "").lower() not in ALLOWED_CONTENT_TYPES:
		raise HTTPException(status_code=400, detail="Invalid file type. Please upload a JPG or PNG image.")
	limit = settings.max_upload_bytes
	content = await image.read(limit + 1)
	if len(content) > limit:
		raise HTTPException(status_code=400, detail=f"Image exceeds the {limit // (1024 * 1024)}MB upload limit")
	mime_type = _sniff_mime_type(content)
	if mime_type is None:
		raise HTTPException(status_code=400, detail="Invalid file type. Please upload a JPG or PNG image.")
	try:
		return await analyze_exam_paper(content, mime_type)
	except Exception:
		logger.exception("Error in /api/analyze-exam")
		return JSONResponse(
			status_code=500,
			content={"success": False, "error": "Internal server error during analysis"},
		)
