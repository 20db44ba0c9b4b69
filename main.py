import os
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from fastapi.staticfiles import StaticFiles

from socialcard import storage
from socialcard.errors import InvalidRequestError
from socialcard.models import ErrorResponse, OutputMode, RenderRequest, RenderUrlResponse
from socialcard.pipeline import font_urls, missing_font_files, render_social_image

# --- Environment & Config ---
FONT_DIR = os.getenv("FONT_DIR", "./fonts")
FONT_BASE_URL = os.getenv("FONT_BASE_URL", "")
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]


# --- Startup Checks ---
def check_font_setup() -> None:
    """Fail unless FONT_BASE_URL is set or FONT_DIR holds every font file."""
    if FONT_BASE_URL:
        print(f"[startup] fonts from {FONT_BASE_URL}")
        return
    missing = missing_font_files(FONT_DIR)
    if missing:
        message = (
            f"[startup] fonts missing from FONT_DIR {FONT_DIR}: {', '.join(missing)}. "
            "Copy them there (see fonts/README.md) or set FONT_BASE_URL."
        )
        print(message, file=sys.stderr)
        raise RuntimeError(message)
    print(f"[startup] fonts served from {FONT_DIR}")


@asynccontextmanager
async def lifespan(_: FastAPI):
    check_font_setup()
    yield


# --- App Init ---
app = FastAPI(title="socialcard", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Fonts are fetched over HTTP like any other asset. When FONT_BASE_URL is not
# set they are requested from this app under /fonts, served from FONT_DIR.
if os.path.isdir(FONT_DIR):
    app.mount("/fonts", StaticFiles(directory=FONT_DIR), name="fonts")
else:
    print(f"[startup] FONT_DIR {FONT_DIR} not found; fonts must come from FONT_BASE_URL.")

# Images stored by the local storage backend in url mode.
if storage.STORAGE_BACKEND == "local" and os.path.isdir(storage.IMAGE_LIBRARY_DIR):
    app.mount("/image_library", StaticFiles(directory=storage.IMAGE_LIBRARY_DIR), name="image_library")

print(f"[startup] storage backend: {storage.STORAGE_BACKEND}")


# --- Middleware ---
@app.middleware("http")
async def add_cache_control_header(request: Request, call_next):
    response = await call_next(request)
    if request.url.path.startswith("/image_library/"):
        response.headers["Cache-Control"] = "public, max-age=604800, immutable"
    return response


# --- Render Endpoint ---
@app.post("/render")
async def render_endpoint(request: Request):
    """Render a 1080x1080 social image from a title, message and background.

    Body: ``{"title", "message", "backgroundUrl", "mode"?, "layout"?}``.
    Returns PNG bytes when ``mode`` is ``binary`` (the default) or
    ``{"url": ...}`` when it is ``url``. Validation problems answer 400,
    every other failure 500, both as ``{"error": message}``.
    """
    try:
        payload = await request.json()
        render_request = RenderRequest.from_payload(payload)
        urls = font_urls(FONT_BASE_URL or str(request.base_url) + "fonts/")
        result = await render_social_image(render_request, urls)
    except InvalidRequestError as e:
        return JSONResponse(status_code=400, content=ErrorResponse(error=str(e)).model_dump())
    except Exception as e:
        print(f"[render] failed: {e}", file=sys.stderr)
        return JSONResponse(status_code=500, content=ErrorResponse(error=str(e) or "Unknown error").model_dump())

    if render_request.mode is OutputMode.URL:
        return JSONResponse(status_code=200, content=RenderUrlResponse(url=result.url).model_dump())
    return Response(
        content=result.content,
        media_type=result.media_type,
        headers={"Cache-Control": "no-store"},
    )
