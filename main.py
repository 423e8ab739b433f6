from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from pathlib import Path
import logging

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from db.database import create_db_and_tables, dispose_engine, get_async_session
from api.dependencies import limiter
from api.routes import photos, users
from core.config import settings
from core.errors import register_error_handlers

# Configure logging
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)

# Set specific log levels
logging.getLogger("uvicorn.access").setLevel(logging.WARNING)  # Reduce noise from access logs
logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)  # Reduce SQL query logs

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await create_db_and_tables()
    logger.info(f"PhotoSpot API started (rate limiting {'on' if settings.RATE_LIMIT_ENABLED else 'off'})")
    yield
    await dispose_engine()


app = FastAPI(
    title="PhotoSpot API",
    description="Photo location map with location blurring and role-based visibility",
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type"],
)

app.state.limiter = limiter
register_error_handlers(app)

# Uploaded images are served from /files/photos/<name>
Path(settings.UPLOAD_DIR).mkdir(parents=True, exist_ok=True)
app.mount("/files", StaticFiles(directory=settings.UPLOAD_DIR), name="files")

app.include_router(photos.router)
app.include_router(users.router)


@app.get("/")
async def root():
    return {"message": "PhotoSpot API", "status": "running"}


@app.get("/health")
async def health(db: AsyncSession = Depends(get_async_session)):
    try:
        await db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error(f"Health check failed: {type(e).__name__}")
        return JSONResponse({"status": "unhealthy"}, status_code=503)
    return {"status": "healthy"}
