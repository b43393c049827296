"""Entry point for the KVFS service."""

import uvicorn
import time
import uuid
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from common.logging_config import setup_component_logging, setup_logging
from kvfs import config
from kvfs.routes import fs_router
from kvfs.exceptions import (
    KVFSException,
    InvalidArgumentError,
    UnauthorizedError,
    NotFoundError,
    IsDirectoryError,
    NotDirectoryError,
    ConflictError,
    DirectoryNotEmptyError,
    CorruptMetadataError,
    StoreError,
    MetadataUpdateError,
)

logger = setup_logging('kvfs')
setup_component_logging(['common'])

app = FastAPI(
    title="KVFS",
    description="Chunked file system emulation over a size-limited key-value store",
    version="1.0.0"
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """
    Middleware to log all HTTP requests and responses.
    """
    request_id = str(uuid.uuid4())
    request.state.request_id = request_id

    start_time = time.time()

    logger.info(
        f"Request started: {request.method} {request.url.path} [request_id={request_id}]"
    )

    response = await call_next(request)

    duration = time.time() - start_time

    logger.info(
        f"Request completed: {request.method} {request.url.path} "
        f"status={response.status_code} duration={duration:.3f}s [request_id={request_id}]"
    )

    response.headers["X-Request-ID"] = request_id

    return response


@app.on_event("startup")
async def startup_event():
    logger.info("KVFS service starting up...")
    logger.info(
        f"Store backend: {config.STORE_BACKEND} "
        f"(list_resolve_types={config.LIST_RESOLVE_TYPES}, store_concurrency={config.STORE_MAX_CONCURRENCY})"
    )
    if config.STORE_BACKEND == "hpkv" and not (config.HPKV_API_KEY and config.HPKV_API_URL):
        logger.info("No default HPKV credentials configured; requests must send them as headers")


def _client_error(request: Request, exc: Exception, status_code: int, code: str, label: str) -> JSONResponse:
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.warning(
        f"{label}: {exc} [request_id={request_id}] path={request.url.path}"
    )
    return JSONResponse(
        status_code=status_code,
        content={"detail": str(exc), "code": code}
    )


def _server_error(request: Request, exc: Exception, status_code: int, code: str, label: str) -> JSONResponse:
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.error(
        f"{label}: {exc} [request_id={request_id}] path={request.url.path}",
        exc_info=True
    )
    return JSONResponse(
        status_code=status_code,
        content={"detail": str(exc), "code": code}
    )


@app.exception_handler(InvalidArgumentError)
async def invalid_argument_handler(request: Request, exc: InvalidArgumentError):
    return _client_error(request, exc, status.HTTP_400_BAD_REQUEST, "INVALID_ARGUMENT", "Invalid argument error")


@app.exception_handler(UnauthorizedError)
async def unauthorized_handler(request: Request, exc: UnauthorizedError):
    return _client_error(request, exc, status.HTTP_401_UNAUTHORIZED, "UNAUTHORIZED", "Unauthorized error")


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return _client_error(request, exc, status.HTTP_404_NOT_FOUND, "NOT_FOUND", "Not found error")


@app.exception_handler(IsDirectoryError)
async def is_directory_handler(request: Request, exc: IsDirectoryError):
    return _client_error(request, exc, status.HTTP_400_BAD_REQUEST, "IS_A_DIRECTORY", "Is a directory error")


@app.exception_handler(NotDirectoryError)
async def not_directory_handler(request: Request, exc: NotDirectoryError):
    return _client_error(request, exc, status.HTTP_400_BAD_REQUEST, "NOT_A_DIRECTORY", "Not a directory error")


@app.exception_handler(ConflictError)
async def conflict_handler(request: Request, exc: ConflictError):
    return _client_error(request, exc, status.HTTP_409_CONFLICT, "CONFLICT", "Conflict error")


@app.exception_handler(DirectoryNotEmptyError)
async def directory_not_empty_handler(request: Request, exc: DirectoryNotEmptyError):
    return _client_error(request, exc, status.HTTP_400_BAD_REQUEST, "DIRECTORY_NOT_EMPTY", "Directory not empty error")


@app.exception_handler(CorruptMetadataError)
async def corrupt_metadata_handler(request: Request, exc: CorruptMetadataError):
    return _server_error(request, exc, status.HTTP_500_INTERNAL_SERVER_ERROR, "CORRUPT_METADATA", "Corrupt metadata error")


@app.exception_handler(MetadataUpdateError)
async def metadata_update_handler(request: Request, exc: MetadataUpdateError):
    return _server_error(request, exc, status.HTTP_502_BAD_GATEWAY, "METADATA_UPDATE_FAILED", "Metadata update error")


@app.exception_handler(StoreError)
async def store_error_handler(request: Request, exc: StoreError):
    return _server_error(request, exc, status.HTTP_502_BAD_GATEWAY, "STORE_ERROR", "Store error")


@app.exception_handler(KVFSException)
async def kvfs_exception_handler(request: Request, exc: KVFSException):
    return _server_error(request, exc, status.HTTP_500_INTERNAL_SERVER_ERROR, "INTERNAL_ERROR", "KVFS exception")


app.include_router(fs_router)


@app.get("/")
async def root():
    """
    Root endpoint for health check.
    """
    return {"message": "KVFS API", "status": "running"}


@app.get("/health")
async def health_check():
    """
    Health check endpoint for Docker healthcheck.
    Returns 200 if service is alive.
    """
    return {"status": "healthy", "service": "kvfs", "backend": config.STORE_BACKEND}


def main() -> None:
    """
    Start the FastAPI server with uvicorn.
    """
    uvicorn.run(
        "kvfs.main:app",
        host=config.KVFS_HOST,
        port=config.KVFS_PORT,
    )


if __name__ == "__main__":
    main()
