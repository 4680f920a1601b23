#!/usr/bin/env python3
"""Main entry point for the diagnostics server"""
import sys
import uvicorn
from .app.server import DiagnosticsServer
from .config import get_config
from .logging_config import setup_structured_logging, get_logger, log_server_startup, log_error


def main():
    """Main application entry point"""
    try:
        config = get_config()

        setup_structured_logging(config)
        logger = get_logger(__name__)

        log_server_startup(logger, config)

        server = DiagnosticsServer(config)
        app = server.get_app()

        uvicorn.run(
            app,
            host=config.diagnostics_host,
            port=config.diagnostics_port,
            log_config=None  # We handle logging ourselves
        )

    except Exception as e:
        logger = get_logger(__name__)
        log_error(logger, e, {"component": "main", "phase": "startup"})
        sys.exit(1)


if __name__ == '__main__':
    main()
