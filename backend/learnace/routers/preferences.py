from __future__ import annotations
from typing import Literal, Optional

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from ..exports import csv_filename, entries_to_csv, export_document, json_filename
from ..schemas import CamelModel, UserSettings
from ..storage import LocalStorage, get_storage


router = APIRouter(prefix="/api", tags=["preferences"])


class UpdateSettingsRequest(CamelModel):
	theme: Optional[Literal["light", "dark"]] = None
	notifications: Optional[bool] = None
	email_updates: Optional[bool] = None
	auto_analysis: Optional[bool] = None


def _attachment(body: str, media_type: str, filename: str) -> Response:
	return Response(
		content=body,
		media_type=media_type,
		headers={"Content-Disposition": f'attachment; filename="{filename}"'},
	)


@router.get("/settings", response_model=UserSettings)
async def get_settings(storage: LocalStorage = Depends(get_storage)):
	return storage.get_settings()


@router.put("/settings", response_model=UserSettings)
async def update_settings(req: UpdateSettingsRequest, storage: LocalStorage = Depends(get_storage)):
	return storage.save_settings(
		theme=req.theme,
		notifications=req.notifications,
		email_updates=req.email_updates,
		auto_analysis=req.auto_analysis,
	)


@router.get("/export/csv")
async def export_csv(storage: LocalStorage = Depends(get_storage)):
	return _attachment(entries_to_csv(storage.get_quiz_entries()), "text/csv", csv_filename())


@router.get("/export/json")
async def export_json(storage: LocalStorage = Depends(get_storage)):
	user = storage.get_user()
	username = user.username if user else None
	body = export_document(username, storage.get_quiz_entries(), storage.get_settings())
	return _attachment(body, "application/json", json_filename(username))


@router.delete("/account", status_code=204)
async def delete_account(storage: LocalStorage = Depends(get_storage)):
	storage.clear_all()
