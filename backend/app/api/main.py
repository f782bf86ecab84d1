"""
ReadTrack FastAPI Application Main
"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from app.db.sqlite import initialise_db, close_db_connection
from app.api.routes import books, progress, reader
from app.core.config import settings
from app.services.reading_session import reading_sessions

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

initialise_db()

@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    # readers left open still get their final flush
    await reading_sessions.close_all()
    close_db_connection()

app = FastAPI(
    title="ReadTrack API",
    description="ReadTrack API",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(books.router, prefix="/api/books", tags=["Books"])
app.include_router(progress.router, prefix="/api/progress", tags=["Reading Progress"])
app.include_router(reader.router, prefix="/api/reader", tags=["Reader"])
