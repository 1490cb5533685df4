from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
import logging
import time
from orbit_core.config import Settings
from orbit_core.db import Base, engine
from orbit_core.jobs import build_runner
from orbit_core.logging_config import configure_logging
from orbit_core.push import PushDispatcher
from .routes import admin, auth, push, reports, sync

logger = logging.getLogger("orbit_api")

configure_logging()
Settings().load_backend_env()
settings = Settings()
dispatcher = PushDispatcher(settings)
runner = build_runner(settings, dispatcher=dispatcher)

app = FastAPI(title="Orbit API", version="0.1.0")
app.state.dispatcher = dispatcher

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(GZipMiddleware, minimum_size=1000)


@app.middleware("http")
async def request_logger(request, call_next):  # type: ignore
    start = time.time()
    path = request.url.path
    if path.startswith("/health"):
        return await call_next(request)
    response = await call_next(request)
    duration_ms = int((time.time() - start) * 1000)
    logger.info("http %s %s -> %s (%dms)", request.method, path, response.status_code, duration_ms)
    return response


app.include_router(auth.router)
app.include_router(sync.router)
app.include_router(admin.router)
app.include_router(push.router)
app.include_router(reports.router)


@app.on_event("startup")
async def on_startup():
    Base.metadata.create_all(bind=engine)
    if not settings.push_enabled:
        logger.warning("api.push disabled: VAPID_PUBLIC_KEY/VAPID_PRIVATE_KEY not set")
    if settings.jobs_enabled:
        runner.start()
    logger.info("api.start version=%s", app.version)


@app.on_event("shutdown")
async def on_shutdown():
    runner.stop()
    logger.info("api.stop")


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.get("/api/health")
async def api_health():
    return {
        "backend": "ok",
        "jobs": "running" if runner.is_running() else "stopped",
        "push": "enabled" if dispatcher.enabled else "disabled",
        "version": app.version,
    }

__all__ = ["app", "dispatcher", "runner", "settings"]
