"""Request audit logging middleware."""
import json
from datetime import datetime
from typing import Callable, Optional

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from billharmony.utils.logger import bind_request_context, clear_request_context, get_logger
from billharmony.utils.sanitize import create_audit_identifier, extract_and_hash_fields

logger = get_logger(__name__)

# Bodies above this size are identified by their first MAX_BODY_SIZE bytes
MAX_BODY_SIZE = 1024 * 1024


class AuditMiddleware(BaseHTTPMiddleware):
    """
    Log every API request and response.

    Request bodies carry household income, family size and location, so
    they are never logged as-is. Each body is reduced to a salted hash that
    identifies it, plus salted hashes of the individual sensitive fields.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = datetime.now()
        clear_request_context()
        bind_request_context(method=request.method, path=request.url.path)

        request_identifier: Optional[str] = None
        hashed_fields: dict = {}

        if request.method in ("POST", "PUT", "PATCH"):
            try:
                body = await request.body()
                truncated = len(body) > MAX_BODY_SIZE
                if truncated:
                    logger.warning(
                        "Request body exceeds maximum size, truncating",
                        body_size=len(body),
                        max_size=MAX_BODY_SIZE,
                    )
                    body = body[:MAX_BODY_SIZE]

                request_identifier = create_audit_identifier(body)

                if not truncated and body:
                    try:
                        payload = json.loads(body.decode("utf-8"))
                        if isinstance(payload, dict):
                            hashed_fields = extract_and_hash_fields(payload)
                    except (json.JSONDecodeError, UnicodeDecodeError):
                        logger.debug("Request body is not JSON, skipping field hashing")
            except RuntimeError as e:
                logger.warning("Failed to read request body for audit", error=str(e))

        log_data = {
            "client_ip": request.client.host if request.client else None,
        }
        if request_identifier:
            log_data["request_identifier"] = request_identifier
        if hashed_fields:
            log_data["request_hashed_fields"] = hashed_fields
        logger.info("API request", **log_data)

        response = await call_next(request)

        duration = (datetime.now() - start_time).total_seconds()
        logger.info(
            "API response",
            status_code=response.status_code,
            duration=duration,
        )
        clear_request_context()
        return response
