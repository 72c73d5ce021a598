# recipe_gallery/app/main.py
from __future__ import annotations
import logging
import sys
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from recipe_gallery.app.config import settings
from recipe_gallery.app.domain.errors import StorageConfigurationError
from recipe_gallery.app.routers.gallery import router as gallery_router
from recipe_gallery.services.errors import GeminiConfigurationError

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)

logger = logging.getLogger(__name__)

app = FastAPI(title="Recipe Gallery API", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.FRONTEND_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(gallery_router)


@app.exception_handler(StorageConfigurationError)
async def storage_unavailable(request: Request, exc: StorageConfigurationError) -> JSONResponse:
    logger.error("Failed to initialize storage: %s", exc)
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"error": "Storage service unavailable"},
    )


@app.exception_handler(GeminiConfigurationError)
async def inference_unavailable(request: Request, exc: GeminiConfigurationError) -> JSONResponse:
    logger.error("Failed to initialize recipe inference: %s", exc)
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"error": "Inference service unavailable"},
    )


@app.get("/health")
def health():
    return {"ok": True}
