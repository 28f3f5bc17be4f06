import json
import logging
import time
import uuid
from typing import Callable

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger("skin_cancer_api")
handler = logging.StreamHandler()
handler.setFormatter(logging.Formatter("%(message)s"))
logger.addHandler(handler)
logger.setLevel(logging.INFO)


class JsonLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: Callable):
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id
        start_time = time.time()

        # тело запроса не читаем: это multipart с картинкой
        content_length = request.headers.get("content-length")

        response = await call_next(request)

        response_body = None
        if response.headers.get("content-type", "").startswith("application/json"):
            body_chunks = []
            async for chunk in response.body_iterator:
                body_chunks.append(chunk)
            response_body_bytes = b"".join(body_chunks)

            async def async_iterator(data: bytes):
                yield data

            response.body_iterator = async_iterator(response_body_bytes)

            try:
                response_body = json.loads(response_body_bytes.decode("utf-8"))
            except (UnicodeDecodeError, json.JSONDecodeError):
                response_body = str(response_body_bytes)

        duration_ms = (time.time() - start_time) * 1000

        log_data = {
            "timestamp": time.strftime("%Y-%m-%dT%H:%M:%S", time.gmtime()),
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
            "status_code": response.status_code,
            "duration_ms": round(duration_ms, 2),
            "request_content_type": request.headers.get("content-type"),
            "request_content_length": (
                int(content_length)
                if content_length and content_length.isdigit()
                else None
            ),
            "response_body": response_body,
        }

        logger.info(json.dumps(log_data))

        response.headers["X-Request-ID"] = request_id
        return response
