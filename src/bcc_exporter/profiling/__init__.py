from .errors import ProfilingError
from .session import ProfilingSession
from .stream import stream_artifact
from .validate import parse_request

__all__ = ["ProfilingError", "ProfilingSession", "stream_artifact", "parse_request"]
