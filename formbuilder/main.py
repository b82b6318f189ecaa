from fastapi import Depends, FastAPI, HTTPException, APIRouter, Request, status
from sqlalchemy import text
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from contextlib import asynccontextmanager
from typing import Optional

from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
import logging

from .config import Settings, settings as default_settings
from .database import create_engine_from_settings, create_session_maker, get_async_db, init_db, close_db
from .exceptions import (
    ClientError,
    FormBuilderException,
    UnauthorizedException,
    client_error_from_validation,
)
from .logging_config import setup_logging
from .auth.api import router as auth_router
from .forms.api import router as forms_router
from .responses.api import router as responses_router
from .stats.api import router as stats_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if app.state.settings.create_tables:
        await init_db(app.state.engine)
    yield
    await close_db(app.state.engine)


def register_exception_handlers(app: FastAPI):

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        error = client_error_from_validation(exc.errors())
        logger.warning(f"Validation error for {request.method} {request.url.path}: {error.errors}")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"message": error.message, "errors": error.errors},
        )

    @app.exception_handler(FormBuilderException)
    async def domain_exception_handler(request: Request, exc: FormBuilderException):
        if isinstance(exc, ClientError):
            content = {"message": exc.message, "errors": exc.errors}
        else:
            content = {"detail": exc.message}
        headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, UnauthorizedException) else None
        return JSONResponse(status_code=exc.status_code, content=content, headers=headers)

    @app.exception_handler(SQLAlchemyError)
    async def database_exception_handler(request: Request, exc: SQLAlchemyError):
        logger.exception(f"Database error on {request.method} {request.url.path}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Internal server error"},
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Internal server error"},
        )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Builds the application. The engine and session factory live on
    ``app.state`` from here until shutdown; request handlers reach them
    only through dependencies.
    """
    settings = settings or default_settings
    setup_logging(settings.log_level)

    app = FastAPI(
        title="Feedback Form Builder",
        description="Build feedback forms, publish them and collect responses",
        version="1.0.0",
        debug=settings.debug,
        lifespan=lifespan
    )
    app.state.settings = settings
    app.state.engine = create_engine_from_settings(settings)
    app.state.session_maker = create_session_maker(app.state.engine)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        max_age=200
    )

    api_router = APIRouter(prefix="/api")
    api_router.include_router(auth_router, tags=["Auth"])
    api_router.include_router(forms_router, tags=["Forms"])
    api_router.include_router(responses_router, tags=["Responses"])
    api_router.include_router(stats_router, tags=["Statistics"])
    app.include_router(api_router)

    register_exception_handlers(app)

    @app.get("/")
    async def root():
        return {"message": "Welcome to the feedback form builder API"}

    @app.get("/health")
    async def health_check(db: AsyncSession = Depends(get_async_db)):
        try:
            await db.execute(text("SELECT 1"))
        except OperationalError:
            raise HTTPException(
                status_code=500, detail="Database connection failed"
            )

        return {
            "status": "ok",
            "database": "connected"
        }

    return app


app = create_app()
