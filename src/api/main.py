# clinical question trends api
# stateless fastapi app: classify questions, aggregate them by period, detect trends

import logging
import sys
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

sys.path.insert(0, str(Path(__file__).parent.parent.parent / "configs"))
import config

from api.routers import classify, trends

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Clinical Question Trends API",
    description="Rule-based classification of clinical questions, per-period distributions and trend detection",
    version="0.1.0",
)

# cors: allow dashboard frontends
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.settings.API_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# register routers
app.include_router(classify.router)
app.include_router(trends.router)


@app.get("/health")
async def health_check():
    """basic health check endpoint"""
    return {"status": "ok", "service": "clinical-question-trends-api"}
