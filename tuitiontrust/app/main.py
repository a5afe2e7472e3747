import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tuitiontrust.app.api.routes.donations import router as donations_router
from tuitiontrust.app.api.routes.schools import router as schools_router
from tuitiontrust.app.api.routes.system import router as system_router
from tuitiontrust.app.api.routes.treasury import router as treasury_router
from tuitiontrust.app.config import get_settings
from tuitiontrust.app.errors import install_error_handlers


logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def _cors_origins() -> list[str]:
    raw = os.getenv("CORS_ALLOW_ORIGINS")
    if raw is None:
        origins = ["http://localhost:3000", "http://127.0.0.1:3000"]
    else:
        origins = [origin.strip() for origin in raw.split(",") if origin.strip()]
    if not origins:
        raise RuntimeError("CORS_ALLOW_ORIGINS must not be empty.")
    return origins


# Malformed settings fail here, at process start, rather than mid-request.
settings = get_settings()
if not settings.treasury_address:
    logger.warning("TREASURY_ADDRESS is not set; ledger routes will answer 500 until it is.")

app = FastAPI(title="TuitionTrust API", version="0.1.0")

install_error_handlers(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins(),
    allow_credentials=False,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)

app.include_router(system_router)
app.include_router(donations_router)
app.include_router(treasury_router)
app.include_router(schools_router)
