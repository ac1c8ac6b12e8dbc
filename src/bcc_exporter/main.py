import argparse
import sys
from typing import Optional

import uvicorn
from fastapi import FastAPI

from . import __version__
from .api.routes import router, profiling_error_handler
from .profiling import ProfilingError, ProfilingSession
from .profiling.validate import tool_report
from .utils.config import Settings, get_settings
from .utils.logger import get_logger

log = get_logger("Main")


def make_app(settings: Optional[Settings] = None, session: Optional[ProfilingSession] = None):
    settings = settings or get_settings()
    app = FastAPI(title="bcc-exporter", version=__version__)
    app.state.settings = settings
    app.state.session = session or ProfilingSession(settings)
    app.include_router(router)
    app.add_exception_handler(ProfilingError, profiling_error_handler)
    return app


# Create the app instance for uvicorn
app = make_app()


def check_deps() -> int:
    missing = 0
    for name, path in tool_report().items():
        if path:
            print(f"✓ {name} found: {path}")
        else:
            print(f"✗ {name} not found")
            missing += 1
    return 1 if missing else 0


def _cli(argv=None):
    settings = get_settings()
    p = argparse.ArgumentParser(prog="bcc-exporter", description="Serve CPU profiles of local processes over HTTP")
    p.add_argument("--host", default=settings.host, help="Address to bind")
    p.add_argument("--port", type=int, default=settings.port, help="Port to listen on")
    p.add_argument("--password", default=settings.password,
                   help="Password for basic authentication (optional)")
    p.add_argument("--check-deps", action="store_true", help="Check for the external profiling tools and exit")
    args = p.parse_args(argv)

    if args.check_deps:
        return check_deps()

    settings = settings.model_copy(update={"host": args.host, "port": args.port, "password": args.password})

    log.info(f"Listening on {settings.host}:{settings.port}...")
    if settings.password:
        log.info("Basic authentication enabled")
    uvicorn.run(make_app(settings), host=settings.host, port=settings.port)
    return 0


if __name__ == "__main__":
    sys.exit(_cli())
