"""FastAPI diagnostics server setup and routes"""
import time
from typing import Any, Dict
from fastapi import FastAPI
from .. import __version__
from ..config import Config
from ..logging_config import get_logger
from ..report import (
    build_report,
    environment_report,
    runtime_report,
    server_report,
    system_report
)
from .middleware import (
    RequestLoggingMiddleware,
    SecurityHeadersMiddleware,
    ServerVarsMiddleware
)


logger = get_logger(__name__)


class DiagnosticsServer:
    """FastAPI server exposing the runtime, environment, server and system report"""

    def __init__(self, config: Config):
        self.config = config
        self.app = FastAPI(
            title="Server Utils Diagnostics",
            version=__version__,
            docs_url=None,  # Disable docs for security
            redoc_url=None,  # Disable redoc for security
            openapi_url=None  # Disable OpenAPI schema for security
        )
        self.app.state.start_time = time.time()
        self.request_count = 0

        self._setup_middleware()
        self._setup_routes()

    def _setup_middleware(self):
        """Setup middleware (last added is executed first)"""
        self.app.add_middleware(ServerVarsMiddleware, software=self.config.server_software)

        if self.config.enable_request_logging:
            self.app.add_middleware(RequestLoggingMiddleware)

        self.app.add_middleware(
            SecurityHeadersMiddleware,
            trusted_hosts=self.config.trusted_hosts
        )

    def _setup_routes(self):
        """Setup FastAPI routes"""

        @self.app.get('/health')
        def health_check() -> Dict[str, Any]:
            """Health check endpoint"""
            return {
                "status": "healthy",
                "uptime_seconds": round(time.time() - self.app.state.start_time, 1),
                "requests_served": self.request_count,
            }

        @self.app.get('/status')
        def get_status() -> Dict[str, Any]:
            """Full report of every query group"""
            self.request_count += 1
            report = build_report()
            logger.debug(
                "Status report built",
                environment=report["environment"]["type"],
                server=report["server"]["type"],
                event_type="status_report"
            )
            return {
                "service": {
                    "version": __version__,
                    "uptime_seconds": round(time.time() - self.app.state.start_time, 1),
                },
                **report
            }

        @self.app.get('/runtime')
        def get_runtime() -> Dict[str, Any]:
            self.request_count += 1
            return runtime_report()

        @self.app.get('/environment')
        def get_environment() -> Dict[str, Any]:
            self.request_count += 1
            return environment_report()

        @self.app.get('/server')
        def get_server() -> Dict[str, Any]:
            self.request_count += 1
            return server_report()

        @self.app.get('/system')
        def get_system() -> Dict[str, Any]:
            self.request_count += 1
            return system_report()

    def get_app(self) -> FastAPI:
        """Get the FastAPI application"""
        return self.app
