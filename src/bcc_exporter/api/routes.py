# api/routes.py
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse, Response

from .. import __version__
from ..profiling import ProfilingError, parse_request, stream_artifact
from ..schemas import ProfileFormat
from ..utils.logger import get_logger
from .auth import require_auth

log = get_logger("API")

router = APIRouter()


@router.get("/healthz")
async def health_check():
    log.info("Health check request received")
    return {
        "status": "healthy",
        "service": "bcc-exporter",
        "version": __version__,
    }


def _profile(request: Request, fmt: ProfileFormat, pid, seconds, test) -> Response:
    settings = request.app.state.settings
    profile_request = parse_request(pid, seconds, test, fmt, settings.max_seconds)
    artifact = request.app.state.session.run(profile_request)
    return stream_artifact(artifact, settings.stream_chunk_size)


# Plain def: FastAPI runs these in its threadpool, so the blocking
# subprocess wait never stalls the event loop.
@router.get("/debug/pprof/profile", dependencies=[Depends(require_auth)])
def pprof_profile(
    request: Request,
    pid: Optional[str] = None,
    seconds: Optional[str] = None,
    test: Optional[str] = None,
):
    return _profile(request, ProfileFormat.PPROF, pid, seconds, test)


@router.get("/debug/folded/profile", dependencies=[Depends(require_auth)])
def folded_profile(
    request: Request,
    pid: Optional[str] = None,
    seconds: Optional[str] = None,
    test: Optional[str] = None,
):
    return _profile(request, ProfileFormat.FOLDED, pid, seconds, test)


async def profiling_error_handler(request: Request, exc: ProfilingError):
    log.error(f"{request.url.path} failed with {exc.status_code} ({type(exc).__name__}): {exc}")
    return PlainTextResponse(str(exc), status_code=exc.status_code)
