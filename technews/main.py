from contextlib import asynccontextmanager

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from technews.api import rpc
from technews.config import CORS_ORIGINS, LOG_LEVEL, ROOT_PATH, SERVER_HOST, SERVER_PORT
from technews.core.errors import register_exception_handlers
from technews.db import sa as db_sa


logger = logging.getLogger("technews")


@asynccontextmanager
async def lifespan(app: FastAPI):
    await db_sa.init_sa_engine()
    # Schema is created in place; tables that already exist are left alone
    await db_sa.create_tables()
    logger.info("Database ready", extra={"event": "db_ready"})
    try:
        yield
    finally:
        await db_sa.close_sa_engine()


app = FastAPI(
    title="Tech News",
    lifespan=lifespan,
    root_path=ROOT_PATH,
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials="*" not in CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)
register_exception_handlers(app)
app.include_router(rpc.router)


@app.get("/health", tags=["system"])
async def health_check():
    return {"status": "ok"}


# Basic logging configuration (can be overridden by server config)
logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
logging.getLogger("aiosqlite").setLevel(logging.WARNING)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("technews.main:app", host=SERVER_HOST, port=SERVER_PORT)
