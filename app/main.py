from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from app.api.error_handling import register_exception_handlers
from app.api.v1.auth import router as auth_router
from app.core.config import settings
from app.core.logging import configure_logging, set_correlation_id

configure_logging(settings.LOG_LEVEL, settings.LOG_JSON)

app = FastAPI(title=settings.APP_NAME, version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def correlation_id(request: Request, call_next):
    cid = set_correlation_id(request.headers.get("x-request-id"))
    response = await call_next(request)
    response.headers["X-Request-ID"] = cid
    return response


register_exception_handlers(app)

app.include_router(auth_router)


@app.get("/health")
async def health():
    return {
        "status": "healthy",
        "timestamp": datetime.now(tz=timezone.utc).isoformat(),
        "service": settings.APP_NAME,
    }
