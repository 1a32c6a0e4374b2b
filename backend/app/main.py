import logging

from fastapi import FastAPI

from backend.app.api.errors import register_exception_handlers
from backend.app.api.v1.router import router as v1_router
from backend.app.config import settings

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
)

app = FastAPI(title="Clinic Stock API", version="0.1.0")
register_exception_handlers(app)
app.include_router(v1_router, prefix="/v1")
