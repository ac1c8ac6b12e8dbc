# profiling/stream.py
from typing import BinaryIO, Iterator

from fastapi.responses import Response, StreamingResponse
from starlette.background import BackgroundTask

from ..schemas import Artifact
from ..utils.logger import get_logger
from .errors import WorkspaceError

log = get_logger("Streamer")


def _headers(artifact: Artifact) -> dict:
    headers = {}
    if artifact.filename:
        headers["Content-Disposition"] = f"attachment; filename={artifact.filename}"
    return headers


def _iter_file(fh: BinaryIO, artifact: Artifact, chunk_size: int) -> Iterator[bytes]:
    # Headers are already on the wire by the time this runs, so a read error
    # can only be logged.
    sent = 0
    try:
        while True:
            chunk = fh.read(chunk_size)
            if not chunk:
                break
            sent += len(chunk)
            yield chunk
        log.info(f"Streamed {sent} bytes from {artifact.path.name}")
    except OSError as e:
        log.error(f"Failed to stream {artifact.path}: {e} ({sent} bytes sent)")
    finally:
        _close(fh, artifact)


def _close(fh: BinaryIO, artifact: Artifact) -> None:
    fh.close()
    if artifact.workspace is not None:
        artifact.workspace.release()


def stream_artifact(artifact: Artifact, chunk_size: int = 64 * 1024) -> Response:
    """Build the response for a finished artifact.

    File artifacts are opened here, before any header is produced, then read
    in chunks while the response body is sent. The owning workspace is
    released after the last chunk, or by the background task if the body
    was never consumed.
    """
    if not artifact.is_file:
        return Response(artifact.data or b"", media_type=artifact.media_type, headers=_headers(artifact))

    try:
        fh = open(artifact.path, "rb")
    except OSError as e:
        if artifact.workspace is not None:
            artifact.workspace.release()
        raise WorkspaceError(f"Failed to open {artifact.path.name}: {e}")

    return StreamingResponse(
        _iter_file(fh, artifact, chunk_size),
        media_type=artifact.media_type,
        headers=_headers(artifact),
        background=BackgroundTask(_close, fh, artifact),
    )
