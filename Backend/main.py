from fastapi import FastAPI

import config
from routers.hashing import router as hashing_router
import logging

# disable timestamps, the log collector adds the ingestion time
logging.basicConfig(level=config.LOG_LEVEL, format="%(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Image Hash API",
    description="Perceptual image hashing for near-duplicate detection",
    version="1.0.0"
)


# -------------------------------------
# Startup
# -------------------------------------
@app.on_event("startup")
async def startup_event():
    logger.info(
        "Image hash service started: hash_size=%d default_algo=%s",
        config.HASH_SIZE, config.DEFAULT_HASH_ALGO.value,
    )
    if not config.BUCKET_NAME:
        logger.warning("BUCKET_NAME is not set, /api/hash/ requests will fail until it is configured")


# -------------------------------------
# ROUTERS
# -------------------------------------
app.include_router(hashing_router)


# -------------------------------------
# Root Endpoint
# -------------------------------------
@app.get("/")
async def root():
    return {
        "message": "Image Hash API",
        "endpoints": {
            "Hash S3 object": "/api/hash/",
            "Hash upload": "/api/hash/upload",
            "Compare hashes": "/api/hash/compare",
            "Algorithms": "/api/hash/algorithms",
        }
    }

#--------------Health Check Endpoint----------------
@app.get("/health")
async def health_check():
    return {"status": "ok"}
