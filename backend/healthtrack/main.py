import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from healthtrack.config import settings
from healthtrack.routers import analysis

logging.basicConfig(level=settings.LOG_LEVEL)

app = FastAPI(title="Health Tracker Analytics", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.FRONTEND_URL],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(analysis.router, prefix="/api")


@app.get("/api/health")
def health_check():
    return {"status": "ok"}
