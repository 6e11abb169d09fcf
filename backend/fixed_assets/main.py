import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from fixed_assets.api import depreciation
from fixed_assets.db.database import init_db
from fixed_assets.utils.config_loader import get_cors_origins, get_log_level

logging.basicConfig(
    level=get_log_level(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


app = FastAPI(
    title="Fixed Asset Depreciation API",
    description="Monthly depreciation posting for fixed assets",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(depreciation.router, prefix="/api/depreciation", tags=["depreciation"])


@app.get("/health")
def health_check():
    return {"status": "ok", "version": "0.1.0"}
