import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from equipmaint.api.routes import equipment, schedules, spare_parts, work_orders
from equipmaint.config.settings import get_settings
from equipmaint.exceptions import MaintenanceError
from equipmaint.models.database import get_engine, init_db

logger = logging.getLogger("equipmaint.api")
settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting equipmaint API")
    engine = get_engine()
    init_db(engine)
    yield
    logger.info("Shutting down equipmaint API")


app = FastAPI(
    title=f"{settings.app_name} API",
    debug=settings.debug,
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.time()
    response = await call_next(request)
    elapsed = time.time() - start
    logger.info(
        "%s %s %d %.3fs",
        request.method,
        request.url.path,
        response.status_code,
        elapsed,
    )
    return response


@app.exception_handler(MaintenanceError)
async def maintenance_error_handler(request: Request, exc: MaintenanceError):
    logger.info("%s %s rejected: %s", request.method, request.url.path, exc.code)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


app.include_router(work_orders.router, prefix="/api/v1")
app.include_router(spare_parts.router, prefix="/api/v1")
app.include_router(schedules.router, prefix="/api/v1")
app.include_router(equipment.router, prefix="/api/v1")


@app.get("/api/v1/health")
def health():
    """Root-level health check."""
    return {"status": "ok", "service": "equipmaint"}
