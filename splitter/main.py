"""FastAPI app entrypoint."""
import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from splitter.database import engine, Base
from splitter.routers import calculate, sync
from splitter.services.currency import CurrencyNormalizer
from splitter.services.rate_cache import RateCache
from splitter.services.rate_source import HTTPRateSource
from splitter.services.session_store import SessionStore

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

Base.metadata.create_all(bind=engine)

_origins_env = os.getenv("ALLOWED_ORIGINS", "")
allowed_origins = [o.strip() for o in _origins_env.split(",") if o.strip()] if _origins_env else ["*"]

app = FastAPI(
    title="Bill Splitter API",
    description="Split shared bills across currencies and work out who pays whom.",
    version="1.0.0",
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Shared for the lifetime of the process.
app.state.normalizer = CurrencyNormalizer(RateCache(), HTTPRateSource())
app.state.session_store = SessionStore()

app.include_router(calculate.router, prefix="/api")
app.include_router(sync.router, prefix="/api")


@app.get("/")
def root():
    return {"message": "Bill Splitter API", "docs": "/docs"}


@app.get("/api")
def health_check():
    return {"status": "healthy", "message": "Backend is running!"}
