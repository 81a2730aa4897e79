import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from . import __version__, config
from .database import Base, SessionLocal, engine
from .errors import register_error_handlers
from .routers import auth, diagnosis, diseases, weather
from .seed import seed_catalog

logger = logging.getLogger(__name__)


def configure_logging(level: str = config.LOG_LEVEL) -> None:
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Create tables, then seed the catalog on an empty database
    Base.metadata.create_all(bind=engine)
    if config.SEED_CATALOG:
        db = SessionLocal()
        try:
            seed_catalog(db)
        finally:
            db.close()
    logger.info("AgriHealth API %s started (%s)", __version__, config.APP_ENV)
    yield


app = FastAPI(title="AgriHealth API", version=__version__, lifespan=lifespan)

# CORS for the mobile client and local dev
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

if not config.S3_BUCKET:
    os.makedirs(config.IMAGES_DIR, exist_ok=True)
    app.mount("/static/images", StaticFiles(directory=config.IMAGES_DIR), name="images")


@app.get("/health")
def health_check():
    return {"status": "Server is running"}


app.include_router(auth.router, prefix="/api/auth", tags=["Authentication"])
app.include_router(diagnosis.router, prefix="/api/diagnosis", tags=["Diagnosis"])
app.include_router(diseases.router, prefix="/api/diseases", tags=["Diseases"])
app.include_router(weather.router, prefix="/api/weather", tags=["Weather"])


def run():
    import uvicorn

    configure_logging()
    uvicorn.run(
        "agrihealth.main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "3000")),
        reload=not config.IS_PRODUCTION,
    )


if __name__ == "__main__":
    run()
