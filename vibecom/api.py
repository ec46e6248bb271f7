from __future__ import annotations

import shutil
import time
from pathlib import Path
from uuid import uuid4

from fastapi import FastAPI, HTTPException, Header, UploadFile, File, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from loguru import logger

from . import storage
from .config import get_media_root
from .logging_setup import setup_logging
from .services.exceptions import ServiceError
from .services.auth import require_auth
from .services.helpers import club_to_dict, event_to_dict
from .services import stats as stats_service
from .routes.users import router as users_router
from .routes.clubs import router as clubs_router
from .routes.events import router as events_router
from .routes.invitations import router as invitations_router
from .routes.applications import router as applications_router

setup_logging()

MEDIA_ROOT = get_media_root()
MEDIA_URL_PREFIX = "/static/media"
IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif"}
MEDIA_ROOT.mkdir(parents=True, exist_ok=True)

# ensure cached documents do not leak across reloads
storage.invalidate_cache()

app = FastAPI(title="vibecom")
app.mount(MEDIA_URL_PREFIX, StaticFiles(directory=MEDIA_ROOT), name="media")


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    elapsed = (time.perf_counter() - start) * 1000
    logger.debug(f"{request.method} {request.url.path} -> {response.status_code} ({elapsed:.1f} ms)")
    return response


@app.exception_handler(RequestValidationError)
def validation_exception_handler(request, exc):
    return JSONResponse(status_code=400, content={"detail": jsonable_encoder(exc.errors())})


@app.exception_handler(ServiceError)
def service_error_handler(request, exc: ServiceError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(storage.DocumentNotFound)
def document_not_found_handler(request, exc: storage.DocumentNotFound):
    # a document vanished between the service's check and its write
    return JSONResponse(status_code=404, content={"detail": str(exc)})


app.include_router(users_router)
app.include_router(clubs_router)
app.include_router(events_router)
app.include_router(invitations_router)
app.include_router(applications_router)


@app.post("/upload/image", tags=["upload"])
async def upload_image(file: UploadFile = File(...), authorization: str | None = Header(None)):
    """Store an image and return the URL to use as photo, logo or event image."""
    require_auth(authorization)
    ext = Path(file.filename or "").suffix.lower()
    if ext not in IMAGE_EXTENSIONS:
        raise HTTPException(status_code=400, detail="Unsupported image format")

    new_filename = f"{uuid4().hex}{ext}"
    save_path = MEDIA_ROOT / new_filename
    try:
        with open(save_path, "wb") as buffer:
            shutil.copyfileobj(file.file, buffer)
    except OSError as e:
        logger.error(f"upload to {save_path} failed: {e}")
        raise HTTPException(status_code=500, detail="Upload failed")
    return {"url": f"{MEDIA_URL_PREFIX}/{new_filename}"}


@app.get("/home", tags=["home"])
def home_api():
    data = stats_service.home()
    return {
        "featured_events": [event_to_dict(e) for e in data["featured_events"]],
        "popular_clubs": [club_to_dict(c) for c in data["popular_clubs"]],
        "upcoming_events": [event_to_dict(e) for e in data["upcoming_events"]],
    }


@app.get("/admin/stats", tags=["admin"])
def admin_stats_api(authorization: str | None = Header(None)):
    uid = require_auth(authorization)
    return stats_service.admin_stats(uid)
