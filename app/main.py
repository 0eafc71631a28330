from fastapi import FastAPI
from contextlib import asynccontextmanager
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
import logging
from app import config
from app.database import engine, Base
from app.errors import register_exception_handlers
from app.routes import alerts, auth, cameras, realtime, siren, stream, test_stream, users

# Import all models to ensure they are registered with SQLAlchemy
from app.db.models import User, Store, Camera, Alert, SirenLog

logger = logging.getLogger(__name__)

# Configure logging to show API requests
logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logging.getLogger("uvicorn.access").setLevel(logging.INFO)
logging.getLogger("fastapi").setLevel(logging.INFO)

@asynccontextmanager
async def lifespan(app: FastAPI):
    # Only create tables automatically in dev, not production
    if config.ENV != "production":
        logger.info("Development mode: creating tables if they don't exist")
        Base.metadata.create_all(bind=engine)
        from app.init_db import seed
        seed()
    if not config.IOT_DEVICE_SECRET:
        logger.warning("IOT_DEVICE_SECRET is not set; siren controllers cannot poll their status")
    logger.warning("Detection webhook signatures are not verified; keep /api/alerts/webhook on a private network")
    yield
    logger.info("Store Guard API shutting down")

app = FastAPI(
    title="Store Guard API",
    description="Store security monitoring: cameras, threat alerts, sirens and police notification",
    version="1.0.0",
    lifespan=lifespan
)

# CORS configuration
origins = [
    config.FRONTEND_URL,
    "http://localhost:3000",
    "http://localhost:3001",
    "http://127.0.0.1:3000",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(auth.router)
app.include_router(users.router)
app.include_router(alerts.router)
app.include_router(cameras.router)
app.include_router(siren.router)
app.include_router(stream.router)
app.include_router(test_stream.router)
app.include_router(realtime.router)

@app.get("/health")
def health():
    """Health check endpoint for Docker health checks"""
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return {"status": "healthy", "database": "connected"}
    except Exception as e:
        logger.error(f"Health check failed: {e}")
        return {"status": "unhealthy", "database": "disconnected", "error": str(e)}
