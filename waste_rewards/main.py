import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from .config import settings
from .db import create_db_and_tables
from .exceptions import LedgerError, UpstreamError
from .routers import auth, collect, leaderboard, notifications, reports, rewards
from .services.verification import close_verifier

log = logging.getLogger(__name__)


def configure_logging(level: str = settings.LOG_LEVEL) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    create_db_and_tables()
    yield
    close_verifier()


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)

    app.include_router(auth.router, prefix="/auth", tags=["auth"])
    app.include_router(rewards.router, prefix="/rewards", tags=["rewards"])
    app.include_router(reports.router, prefix="/reports", tags=["reports"])
    app.include_router(collect.router, prefix="/collect", tags=["collect"])
    app.include_router(notifications.router, prefix="/notifications", tags=["notifications"])
    app.include_router(leaderboard.router, prefix="/leaderboard", tags=["leaderboard"])

    @app.exception_handler(LedgerError)
    async def ledger_error_handler(request: Request, exc: LedgerError):
        if isinstance(exc, UpstreamError):
            log.error("Upstream failure on %s: %s", request.url.path, exc.message)
            return JSONResponse(status_code=exc.status_code, content={"detail": "Service temporarily unavailable. Please try again."})
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})

    @app.exception_handler(SQLAlchemyError)
    async def database_error_handler(request: Request, exc: SQLAlchemyError):
        log.exception("Database error on %s", request.url.path, exc_info=exc)
        return JSONResponse(status_code=500, content={"detail": "Something went wrong. Please try again."})

    @app.get("/")
    def root():
        return {"app": settings.APP_NAME}

    return app


app = create_app()
