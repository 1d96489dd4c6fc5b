import logging

from fastapi import FastAPI
from fastapi.responses import RedirectResponse

from .db import Base, engine
from .settings import settings
from .routers import health
from .routers import analyze
from .routers import auth
from .routers import quizzes
from .routers import preferences

logging.basicConfig(level=settings.log_level.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")

app = FastAPI(title="Learn Ace API")
app.include_router(health.router)
app.include_router(analyze.router)
app.include_router(auth.router)
app.include_router(quizzes.router)
app.include_router(preferences.router)

@app.get("/", include_in_schema=False)
async def redirect_root_to_docs():
	return RedirectResponse(url="/docs")

@app.get("/info")
def root():
	return {"status": "ok", "gemini_configured": bool(settings.gemini_api_key)}

@app.on_event("startup")
async def startup_event():
	# Initialize DB schema for the local key-value store
	Base.metadata.create_all(bind=engine)
