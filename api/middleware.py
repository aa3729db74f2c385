"""
Middleware for the price research API.
Provides CORS, request logging and last-resort error handling.
"""

import time
from typing import Callable

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.middleware.cors import CORSMiddleware

from utils import api_logger, config_manager, NotFoundError, ValidationError, create_error_response


class LoggingMiddleware(BaseHTTPMiddleware):
    """Logs every request with its status and elapsed time"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.time()
        api_logger.debug(f"[API] {request.method} {request.url}")

        try:
            response = await call_next(request)

            process_time = time.time() - start_time
            api_logger.info(f"[API] {request.method} {request.url} - {response.status_code} - {process_time:.3f}s")
            response.headers["X-Process-Time"] = f"{process_time:.3f}"
            return response

        except Exception as e:
            process_time = time.time() - start_time
            api_logger.error(f"[API] {request.method} {request.url} - ERROR - {process_time:.3f}s - {str(e)}")
            raise


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Turns errors that escape a route into JSON responses"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            return await call_next(request)

        except NotFoundError as e:
            return JSONResponse(status_code=404, content={"detail": e.message, **create_error_response(e)})

        except ValidationError as e:
            api_logger.warning(f"[API] Validation error: {str(e)}")
            return JSONResponse(status_code=400, content={"detail": e.message, **create_error_response(e)})

        except Exception as e:
            api_logger.error(f"[API] Unexpected error: {str(e)}", exc_info=True)
            return JSONResponse(status_code=500, content={"detail": "Internal Server Error"})


def setup_cors(app):
    """Configure CORS"""
    cors_origins = config_manager.get_api_config().cors_origins

    if "*" in cors_origins:
        api_logger.debug("[CORS] Allowing any origin")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials="*" not in cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )


def setup_middleware(app):
    """Install all middleware"""
    setup_cors(app)

    # the last one added runs first
    app.add_middleware(ErrorHandlingMiddleware)
    app.add_middleware(LoggingMiddleware)
