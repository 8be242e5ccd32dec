"""FastAPI application entry point."""

import logging
from pathlib import Path

from dotenv import load_dotenv

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import FileResponse, HTMLResponse, JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

# Load environment variables from .env file
load_dotenv()

from app import models  # noqa: F401
from app.api.routes import router
from app.core.config import settings
from app.core.errors import AppError, NotFoundError
from app.db.init_db import init_db

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)
logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}

LOCAL_DEV_HTML = """<!DOCTYPE html>
<html lang="ko">
  <head>
    <meta charset="UTF-8" />
    <meta name="viewport" content="width=device-width, initial-scale=1.0" />
    <title>맛집 지도 - Matzip Map</title>
  </head>
  <body>
    <div id="root">
      <h1>로컬 개발 모드</h1>
      <p>빌드된 SPA가 없습니다. STATIC_DIR 에 index.html 을 배치하세요.</p>
    </div>
  </body>
</html>"""

app = FastAPI(title=settings.project_name)


@app.middleware("http")
async def cors_middleware(request: Request, call_next) -> Response:
    """Answer preflights and attach CORS headers to every response."""
    if request.method == "OPTIONS":
        return Response(status_code=200, headers=CORS_HEADERS)
    try:
        response = await call_next(request)
    except Exception as exc:  # noqa: BLE001
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        response = JSONResponse(status_code=500, content={"error": str(exc) or "Internal Server Error"})
    response.headers.update(CORS_HEADERS)
    return response


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s (%s)", request.method, request.url.path, exc.error, exc.details)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = "; ".join(
        f"{'.'.join(str(part) for part in err.get('loc', ()))}: {err.get('msg')}" for err in exc.errors()
    )
    return JSONResponse(status_code=400, content={"error": "Invalid request", "details": details})


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})


app.include_router(router, prefix=settings.api_prefix)


@app.on_event("startup")
def on_startup() -> None:
    """Initialize database artifacts."""
    init_db()


@app.get("/health", tags=["health"])
async def health() -> dict[str, str]:
    """Health check endpoint for Docker."""
    return {"status": "healthy"}


@app.get("/{full_path:path}", include_in_schema=False)
def spa(full_path: str) -> Response:
    """Serve the built SPA; extensionless misses fall back to index.html."""
    api_root = settings.api_prefix.strip("/")
    if full_path == api_root or full_path.startswith(f"{api_root}/"):
        raise NotFoundError("Not Found")

    static_dir = Path(settings.static_dir).resolve()
    index = static_dir / "index.html"
    if not index.is_file():
        return HTMLResponse(LOCAL_DEV_HTML)

    if full_path:
        candidate = (static_dir / full_path).resolve()
        if candidate.is_file() and static_dir in candidate.parents:
            return FileResponse(candidate)
    if "." not in full_path.rsplit("/", 1)[-1]:
        return FileResponse(index)
    raise NotFoundError("Not Found")
