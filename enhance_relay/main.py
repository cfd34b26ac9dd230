# enhance_relay/main.py
# FastAPI application entry point

from contextlib import asynccontextmanager
import asyncio
from datetime import datetime, timezone
import logging

import uvicorn
from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse, PlainTextResponse

from .config import PUBLIC_DIR, Settings, settings as default_settings
from .errors import RelayError
from .logging_config import configure_logging
from .orchestrator import EnhancementOrchestrator
from .provider import Provider, ReplicateProvider
from .schemas import EnhanceAccepted, EnhanceRequest, JobOut
from .store import JobStore

logger = logging.getLogger(__name__)

OPENAPI_DOC = PUBLIC_DIR / "openapi.json"
PLUGIN_MANIFEST = PUBLIC_DIR / ".well-known" / "ai-plugin.json"


def get_orchestrator(request: Request) -> EnhancementOrchestrator:
    return request.app.state.orchestrator


def _static_json(path, name: str) -> FileResponse:
    if not path.is_file():
        logger.error("Static document missing: %s", path)
        raise RelayError(f"Cannot read {name}", status_code=500)
    # FileResponse skips the body for HEAD but keeps Content-Length
    return FileResponse(path, media_type="application/json")


def create_app(settings: Settings | None = None, provider: Provider | None = None) -> FastAPI:
    settings = settings or default_settings
    store = JobStore()
    orchestrator = EnhancementOrchestrator(
        store=store,
        provider=provider or ReplicateProvider(settings),
        retention_seconds=settings.JOB_RETENTION_SECONDS,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(settings.LOG_LEVEL)
        logger.info("[Replicate] model: %s  endpoint: %s", settings.REPLICATE_MODEL, settings.REPLICATE_ENDPOINT)
        if not settings.REPLICATE_API_TOKEN:
            logger.warning("REPLICATE_API_TOKEN is not set; enhancement jobs will fail")
        yield
        if orchestrator.pending:
            logger.info("Waiting up to %ss for %d running job(s)", settings.SHUTDOWN_TIMEOUT, orchestrator.pending)
            try:
                await asyncio.wait_for(orchestrator.drain(), timeout=settings.SHUTDOWN_TIMEOUT)
            except asyncio.TimeoutError:
                logger.warning("Shutdown timeout reached; abandoning %d job(s)", orchestrator.pending)
        store.close()

    # openapi_url=None: /openapi.json is the hand-written document in public/
    app = FastAPI(title="Image Enhance Relay", version="1.0.0", openapi_url=None, lifespan=lifespan)
    app.state.store = store
    app.state.orchestrator = orchestrator

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RelayError)
    async def relay_error_handler(request: Request, exc: RelayError):
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        detail = errors[0].get("msg", "invalid value") if errors else "invalid value"
        return JSONResponse(status_code=400, content={"error": f"Invalid request body: {detail}"})

    @app.get("/", response_class=PlainTextResponse)
    def root():
        return "Image Enhance relay is running."

    @app.get("/health")
    def health():
        return {"ok": True, "time": datetime.now(timezone.utc).isoformat()}

    # Job creation; answers before Replicate is done
    @app.post("/enhance", response_model=EnhanceAccepted, status_code=202)
    async def create_enhance_job(
        body: EnhanceRequest,
        orchestrator: EnhancementOrchestrator = Depends(get_orchestrator),
    ):
        job = orchestrator.submit(body)
        return EnhanceAccepted.from_job(job)

    # Job status by id
    @app.get("/enhance/{job_id}", response_model=JobOut, response_model_exclude_none=True)
    async def get_enhance_job(
        job_id: str,
        orchestrator: EnhancementOrchestrator = Depends(get_orchestrator),
    ):
        return JobOut.from_job(orchestrator.poll(job_id))

    @app.api_route("/openapi.json", methods=["GET", "HEAD"], include_in_schema=False)
    def openapi_document():
        return _static_json(OPENAPI_DOC, "openapi.json")

    @app.api_route("/.well-known/ai-plugin.json", methods=["GET", "HEAD"], include_in_schema=False)
    def plugin_manifest():
        return _static_json(PLUGIN_MANIFEST, "ai-plugin.json")

    return app


app = create_app()


def run() -> None:
    uvicorn.run(
        "enhance_relay.main:app",
        host=default_settings.HOST,
        port=default_settings.PORT,
        log_level=default_settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    run()
