from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from trendscope.api.deps import error_response
from trendscope.api.routes import assistant, research, search, videos
from trendscope.config import settings
from trendscope.services.logger import logger

VALIDATION_MESSAGES = {
    "/api/ai-assistant": "Messages array required",
    "/api/research-mind": "Paper data is required",
    "/api/youtube-research": "Query is required",
    "/api/semantic-search": "Missing query or content array",
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("TrendScope API starting")
    yield
    logger.info("TrendScope API stopped")


app = FastAPI(
    title="TrendScope",
    description="Tech content aggregation with a streaming AI assistant and ResearchMind analysis",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routes
app.include_router(assistant.router)
app.include_router(research.router)
app.include_router(videos.router)
app.include_router(search.router)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    message = VALIDATION_MESSAGES.get(request.url.path, "Invalid request body")
    return error_response(message, 400)


@app.get("/api/health")
async def health():
    return {"status": "ok", "service": "trendscope"}
