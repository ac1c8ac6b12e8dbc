# profiling/errors.py
from typing import Optional


class ProfilingError(Exception):
    """Base for every failure a profiling session reports to the caller."""
    status_code = 500
    prefix = ""

    def __init__(self, message: str, stderr: Optional[str] = None):
        self.stderr = stderr
        super().__init__(f"{self.prefix}{message}")


# 4xx: the caller can fix these
class InvalidRequest(ProfilingError):
    status_code = 400

class InvalidPID(ProfilingError):
    status_code = 400
    prefix = "Invalid PID: "

class PermissionDenied(ProfilingError):
    status_code = 403

class ProcessVanished(ProfilingError):
    status_code = 400

class NoSamplesCollected(ProfilingError):
    """Tool ran cleanly but recorded nothing; the target was idle."""
    status_code = 400

class NoSamplesInCapture(NoSamplesCollected):
    pass


# 5xx: tools and environment
class ToolUnavailable(ProfilingError):
    status_code = 500
    prefix = "Required tools not available: "

class WorkspaceError(ProfilingError):
    status_code = 500

class ToolFailed(ProfilingError):
    """A tool exited non-zero for a reason we could not classify."""
    status_code = 500

    def __init__(self, message: str, stderr: Optional[str] = None):
        if stderr is not None:
            message = f"{message}\nStderr: {stderr}"
        super().__init__(message, stderr)

class CaptureFailed(ToolFailed):
    pass

class ConversionFailed(ToolFailed):
    pass

class ProfilerFailed(ToolFailed):
    pass
