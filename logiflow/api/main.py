import logging

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from logiflow import __version__
from logiflow.core.config import get_settings
from logiflow.core.logger import setup_from_settings
from logiflow.core.approval import (
    AlreadyDecidedError,
    ApprovalError,
    ConflictError,
    NoActionableStepError,
    NotFoundError,
    NoWorkflowConfiguredError,
    UnauthorizedError,
)
from logiflow.api.routers import approvals, health

settings = get_settings()
setup_from_settings(settings)
logger = logging.getLogger(__name__)

ERROR_STATUS = {
    NotFoundError: status.HTTP_404_NOT_FOUND,
    NoWorkflowConfiguredError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    NoActionableStepError: status.HTTP_400_BAD_REQUEST,
    UnauthorizedError: status.HTTP_403_FORBIDDEN,
    ConflictError: status.HTTP_409_CONFLICT,
    AlreadyDecidedError: status.HTTP_409_CONFLICT,
}

app = FastAPI(
    title=settings.app_name,
    description="Multi-level approval workflow engine for logistics documents",
    version=__version__,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.debug else [],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ApprovalError)
async def approval_error_handler(request: Request, exc: ApprovalError):
    status_code = ERROR_STATUS.get(type(exc), status.HTTP_400_BAD_REQUEST)
    content = {"detail": str(exc), "code": exc.code}
    if isinstance(exc, UnauthorizedError):
        content["required_role"] = exc.required_role
    logger.info("%s %s -> %d %s", request.method, request.url.path, status_code, exc.code)
    return JSONResponse(status_code=status_code, content=content)


# Include routers
app.include_router(health.router)
app.include_router(approvals.router, prefix="/api")


@app.get("/")
async def root():
    return {
        "name": settings.app_name,
        "version": __version__,
        "docs": "/docs" if settings.debug else None,
    }
