"""Middleware for the diagnostics server"""
import time
from typing import Dict, List, Optional
from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.types import ASGIApp, Receive, Scope, Send
from ..environment.detection import url_hostname
from ..logging_config import get_logger
from ..utils.request import header_to_server_var, reset_server_vars, set_server_vars


logger = get_logger(__name__)


def build_server_vars(scope: Scope, software: str) -> Dict[str, str]:
    """Build CGI-style server vars for an HTTP request scope"""
    values = {
        "SERVER_SOFTWARE": software,
        "REQUEST_METHOD": scope.get("method", ""),
        "REQUEST_URI": scope.get("path", ""),
        "QUERY_STRING": scope.get("query_string", b"").decode("latin-1"),
        "SERVER_PROTOCOL": f"HTTP/{scope.get('http_version', '1.1')}",
    }

    server = scope.get("server")
    if server:
        values["SERVER_ADDR"] = str(server[0])
        if server[1] is not None:
            values["SERVER_PORT"] = str(server[1])

    client = scope.get("client")
    if client:
        values["REMOTE_ADDR"] = str(client[0])

    for name, value in scope.get("headers", []):
        values[header_to_server_var(name.decode("latin-1"))] = value.decode("latin-1")

    return values


def is_trusted_host(host: str, trusted_hosts: List[str]) -> bool:
    """Check a Host header against trusted names, ignoring the port.

    A trusted name matches itself and its subdomains.
    """
    hostname = url_hostname(host)
    if not hostname:
        return False
    for trusted in trusted_hosts:
        trusted = trusted.strip().lower()
        if hostname == trusted or hostname.endswith("." + trusted):
            return True
    return False


class ServerVarsMiddleware:
    """Publish request metadata as server vars for the duration of the request"""

    def __init__(self, app: ASGIApp, software: str = ""):
        self.app = app
        self.software = software

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        token = set_server_vars(build_server_vars(scope, self.software))
        try:
            await self.app(scope, receive, send)
        finally:
            reset_server_vars(token)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Middleware to add security headers to responses"""

    def __init__(self, app, trusted_hosts: Optional[List[str]] = None):
        super().__init__(app)
        self.trusted_hosts = trusted_hosts or []

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        """Reject untrusted hosts and add security headers"""
        if self.trusted_hosts and request.client:
            host = request.headers.get("host", "")
            if host and not is_trusted_host(host, self.trusted_hosts):
                logger.warning(
                    "Untrusted host access attempt",
                    host=host,
                    client_ip=request.client.host,
                    event_type="security_violation"
                )
                return JSONResponse({"detail": "Forbidden: Untrusted host"}, status_code=403)

        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Cache-Control"] = "no-store"

        # Remove server version information
        if "server" in response.headers:
            del response.headers["server"]

        return response


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware to log HTTP requests"""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        """Log HTTP requests"""
        start_time = time.time()

        try:
            response = await call_next(request)
        except Exception as e:
            process_time = time.time() - start_time
            logger.error(
                "HTTP request failed",
                method=request.method,
                url=str(request.url),
                error=str(e),
                process_time_seconds=round(process_time, 3),
                client_ip=request.client.host if request.client else None,
                event_type="http_request_error",
                exc_info=True
            )
            raise

        process_time = time.time() - start_time
        logger.info(
            "HTTP request completed",
            method=request.method,
            url=str(request.url),
            status_code=response.status_code,
            process_time_seconds=round(process_time, 3),
            client_ip=request.client.host if request.client else None,
            event_type="http_request_complete"
        )

        response.headers["X-Process-Time"] = str(round(process_time, 3))
        return response
