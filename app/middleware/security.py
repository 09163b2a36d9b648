from fastapi.responses import JSONResponse
import re
from typing import Pattern
import logging

logger = logging.getLogger(__name__)

class SecurityMiddleware:
    """Rejects multipart requests with oversized or malformed Content-Type headers."""

    def __init__(self, app):
        self.app = app
        # RFC 2046 boundary characters, at most 70 of them
        self.boundary_pattern: Pattern = re.compile(r'^[a-zA-Z0-9\'()+_,-./:=? ]{1,70}$')
        self.max_content_type_length = 256

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            return await self.app(scope, receive, send)

        error = self.validate_content_type(self._header(scope, b"content-type"))
        if error:
            logger.warning(f"Rejected request to {scope.get('path')}: {error}")
            response = JSONResponse(status_code=400, content={"detail": error})
            return await response(scope, receive, send)

        return await self.app(scope, receive, send)

    @staticmethod
    def _header(scope, name: bytes) -> str:
        for key, value in scope.get("headers", []):
            if key.lower() == name:
                return value.decode("latin-1")
        return ""

    def validate_content_type(self, content_type: str) -> str | None:
        if not content_type:
            return None

        if len(content_type) > self.max_content_type_length:
            return "Content-Type header too long"

        if content_type.startswith('multipart/form-data'):
            if 'boundary=' not in content_type:
                return "Invalid Content-Type format"
            boundary = content_type.split('boundary=')[-1].split(';')[0].strip().strip('"')
            if not self.boundary_pattern.match(boundary):
                return "Invalid multipart boundary"

        return None
