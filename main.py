from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from dotenv import load_dotenv

load_dotenv()

# Import all route modules
from api.routes import applications, dashboard, health, quality
from utils.logger import get_logger, setup_logging
from core.config import get_settings
from core.database import db_manager, initialize_database

settings = get_settings()
setup_logging(settings.log_level)

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting datamart-dashboard-backend")
    settings.validate()

    # Initialize database
    initialize_database(settings)

    yield
    db_manager.dispose()
    logger.info("Shutting down datamart-dashboard-backend")


app = FastAPI(
    title="Datamart Dashboard Backend",
    description="Portfolio, architecture and application health indicators over the code analysis datamart",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(dashboard.router, prefix="/api", tags=["executive"])
app.include_router(quality.router, prefix="/api", tags=["quality"])
app.include_router(applications.router, prefix="/api", tags=["applications"])
app.include_router(health.router, prefix="/api", tags=["status"])


@app.get("/health")
async def health_check():
    return {"status": "healthy", "service": "datamart-dashboard-backend"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
