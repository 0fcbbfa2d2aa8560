import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Depends, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from config import settings
from database import Database, get_db
from logging_config import setup_logging
from routers import books

logger = logging.getLogger(__name__)


async def request_validation_handler(request: Request, exc: RequestValidationError):
    # malformed bodies are reported as 400, not 422
    errors = [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg", "")}
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": "Invalid request payload", "errors": jsonable_encoder(errors)},
    )


def create_app(database: Database | None = None) -> FastAPI:
    setup_logging()
    if database is None:
        database = Database(settings.DATABASE_URL, echo=settings.DB_ECHO)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup logic
        logger.info("Starting up book-service...")
        database.connect()
        database.auto_migrate()
        yield
        # Shutdown logic
        logger.info("Shutting down book-service...")
        database.dispose()

    app = FastAPI(
        title="Bookstore Book Service",
        description="CRUD API for books",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.database = database

    app.add_exception_handler(RequestValidationError, request_validation_handler)

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.time()
        response = await call_next(request)
        duration_ms = (time.time() - start) * 1000
        logger.info(
            "%s %s -> %s (%.2f ms) ip=%s",
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
            request.client.host if request.client else "unknown",
        )
        return response

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allow_origins or ["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Health check endpoint
    @app.get("/health", tags=["System"])
    def health_check(db: Session = Depends(get_db)):
        try:
            db.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            logger.error(f"Health check failed: {e}")
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail={"status": "degraded", "service": "book-service", "database": "unhealthy"},
            )
        return {"status": "healthy", "service": "book-service", "database": "connected"}

    app.include_router(books.router)
    return app


if __name__ == "__main__":
    import uvicorn
    # equivalent to: uvicorn main:create_app --factory
    uvicorn.run("main:create_app", factory=True, host=settings.HOST, port=settings.PORT)
