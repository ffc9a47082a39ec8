from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import logging

from app.core.config import settings
from app.core.errors import register_exception_handlers
from app.db.dynamo import DynamoDatabase
from app.routers import auth, expenses, health, insights
from app.utils.narrator import GeminiTextGenerator

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: open the shared DynamoDB handle and the Gemini client
    logger.info("Connecting to DynamoDB...")
    app.state.db = DynamoDatabase.from_settings(settings)
    app.state.text_generator = GeminiTextGenerator.from_settings(settings)
    yield
    # Shutdown
    logger.info("Closing DynamoDB connection...")
    app.state.db.close()


app = FastAPI(
    title=settings.PROJECT_NAME,
    debug=settings.DEBUG,
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
    max_age=3600,
)

register_exception_handlers(app)


# Root endpoint
@app.get("/")
def root():
    return {"message": settings.PROJECT_NAME}


# Register routers
app.include_router(health.router, prefix=f"{settings.API_PREFIX}", tags=["Health"])  # /api/v1/health
app.include_router(auth.router, prefix=f"{settings.API_PREFIX}/auth", tags=["Auth"])
app.include_router(expenses.router, prefix=f"{settings.API_PREFIX}/expenses", tags=["Expenses"])
app.include_router(insights.router, prefix=f"{settings.API_PREFIX}/insights", tags=["Insights"])
