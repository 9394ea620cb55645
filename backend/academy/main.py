from fastapi import FastAPI

from .db import Base, engine, SessionLocal
from .cleanup import purge_expired_report_tokens
from .logger import get_logger
from .settings import settings
from .routers import auth
from .routers.auth import seed_staff_user
from .routers import surveys
from .routers import analyses
from .routers import enrollments
from .routers import reports
import asyncio
from typing import Set

log = get_logger("main")

app = FastAPI(title="Academy Intake API")
app.include_router(auth.router)
app.include_router(surveys.router)
app.include_router(analyses.router)
app.include_router(enrollments.router)
app.include_router(reports.router)


@app.get("/health")
def health():
	return {"status": "ok"}


@app.get("/info")
def root():
	return {
		"status": "ok",
		"gemini_configured": bool(settings.gemini_api_key),
		"report_valid_days": settings.report_token_valid_days,
	}


def _seed_accounts() -> None:
	db = SessionLocal()
	try:
		seed_staff_user(db)
	finally:
		db.close()


def _purge_tokens() -> None:
	db = SessionLocal()
	try:
		removed = purge_expired_report_tokens(db)
		if removed:
			log.info("Purged %d expired report tokens", removed)
	except Exception:
		log.exception("Report token purge failed")
	finally:
		db.close()


# The loop only keeps a weak reference to tasks
_background_tasks: Set[asyncio.Task] = set()


async def _cleanup_watcher():
	# Run once at startup, then daily
	while True:
		_purge_tokens()
		await asyncio.sleep(24 * 60 * 60)


@app.on_event("startup")
async def startup_event():
	Base.metadata.create_all(bind=engine)
	_seed_accounts()
	start_cleanup_watcher()


def start_cleanup_watcher() -> asyncio.Task:
	task = asyncio.create_task(_cleanup_watcher())
	_background_tasks.add(task)
	task.add_done_callback(_background_tasks.discard)
	return task


@app.on_event("shutdown")
async def shutdown_event():
	for task in list(_background_tasks):
		task.cancel()
