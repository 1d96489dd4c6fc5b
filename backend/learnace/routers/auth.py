from typing import Optional

from fastapi import APIRouter, HTTPException, Depends
from pydantic import BaseModel

from ..schemas import User
from ..storage import LocalStorage, get_storage

router = APIRouter(prefix="/api", tags=["auth"])


class CredentialsRequest(BaseModel):
	username: Optional[str] = None
	password: Optional[str] = None


class AuthResponse(BaseModel):
	success: bool = True
	user: User


def _start_session(req: Optional[CredentialsRequest], storage: LocalStorage) -> AuthResponse:
	username = (req.username if req else None) or ""
	password = (req.password if req else None) or ""
	if not username or not password:
		raise HTTPException(status_code=400, detail="Username and password required")
	# Credentials are not verified; any non-empty pair opens a session, stored as given
	user = User(username=username, is_logged_in=True)
	storage.save_user(user)
	return AuthResponse(user=user)


@router.post("/login", response_model=AuthResponse)
async def login(req: Optional[CredentialsRequest] = None, storage: LocalStorage = Depends(get_storage)):
	return _start_session(req, storage)


@router.post("/signup", response_model=AuthResponse)
async def signup(req: Optional[CredentialsRequest] = None, storage: LocalStorage = Depends(get_storage)):
	return _start_session(req, storage)


@router.post("/logout", status_code=204)
async def logout(storage: LocalStorage = Depends(get_storage)):
	storage.logout_user()


def get_current_user(storage: LocalStorage = Depends(get_storage)) -> User:
	user = storage.get_user()
	if user is None or not user.is_logged_in:
		raise HTTPException(status_code=404, detail="No active session")
	return user


@router.get("/user", response_model=User)
async def me(user: User = Depends(get_current_user)):
	return user
