"""
FastAPI application factory for the course access service.
"""

from fastapi import FastAPI

from course_access.api import router
from course_access.config import configure_logging


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(title="Course Access")
    app.include_router(router)

    @app.get("/health")
    def health() -> dict:
        return {"status": "ok"}

    return app
