from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.config.settings import API_TITLE, CORS_ORIGINS, FLIGHTS_SEARCH_URL, OLLAMA_MODEL
from src.api.endpoints import router
from src.utils.logger import get_logger

logger = get_logger(__name__)

app = FastAPI(title=API_TITLE)

# Add CORS middleware for browser clients
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API endpoints
app.include_router(router)


@app.on_event("startup")
async def startup_event():
    # Proxy credentials are checked on the first search, not here.
    logger.info(f"{API_TITLE} started")
    logger.info(f"Provider: {FLIGHTS_SEARCH_URL}")
    logger.info(f"Extraction model: {OLLAMA_MODEL}")


@app.get("/health")
def health_check():
    return {"status": "healthy"}
