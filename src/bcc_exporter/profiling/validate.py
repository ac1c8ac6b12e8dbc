# profiling/validate.py
import os
import pathlib
import re
import shutil
from typing import Callable, Dict, Optional, Sequence, Tuple

from ..schemas import ProfileFormat, ProfileRequest
from .errors import InvalidRequest, InvalidPID, ToolUnavailable

_RX_INT = re.compile(r"[+-]?[0-9]+")
_RX_PID = re.compile(r"[0-9]+")

MAX_SECONDS = 300

# (executable, install hint)
PERF_TOOLS: Sequence[Tuple[str, str]] = (
    ("perf", "sudo apt-get install linux-perf"),
    ("pprof", "go install github.com/google/pprof@latest"),
)
BCC_TOOLS: Sequence[Tuple[str, str]] = (
    ("profile-bpfcc", "sudo apt-get install bpfcc-tools"),
)
INSTALL_HINTS: Dict[str, str] = dict((*PERF_TOOLS, *BCC_TOOLS, ("sudo", "apt-get install sudo")))


def parse_request(
    pid: Optional[str],
    seconds: Optional[str],
    test: Optional[str] = None,
    fmt: ProfileFormat = ProfileFormat.FOLDED,
    max_seconds: int = MAX_SECONDS,
) -> ProfileRequest:
    """Turn raw query values into a ProfileRequest or raise InvalidRequest."""
    if not pid or not seconds:
        raise InvalidRequest("Missing pid or seconds")

    if not _RX_INT.fullmatch(seconds):
        raise InvalidRequest(f"Invalid seconds: {seconds!r} is not a number")
    duration = int(seconds)
    if duration < 1 or duration > max_seconds:
        raise InvalidRequest(f"Invalid seconds: {duration} must be between 1 and {max_seconds}")

    return ProfileRequest(pid=pid, seconds=duration, format=fmt, test_mode=(test == "true"))


def validate_pid(pid: str, proc_root: str = "/proc") -> None:
    """Check that pid is numeric and that <proc_root>/<pid> is there to inspect."""
    if not _RX_PID.fullmatch(pid or ""):
        raise InvalidPID(f"invalid PID format: {pid}")

    try:
        os.stat(pathlib.Path(proc_root) / pid)
    except FileNotFoundError:
        raise InvalidPID(f"process with PID {pid} does not exist")
    except OSError as e:
        raise InvalidPID(f"cannot access process {pid}: {e}")


def check_required_tools(
    tools: Sequence[Tuple[str, str]],
    which: Callable[[str], Optional[str]] = shutil.which,
) -> Dict[str, str]:
    """Resolve every tool on PATH, failing on the first one missing.

    Returns a mapping of tool name to resolved path.
    """
    resolved = {}
    for name, hint in tools:
        path = which(name)
        if path is None:
            raise ToolUnavailable(f"{name} tool not found. Install with: {hint}")
        resolved[name] = path
    return resolved


def tool_report(which: Callable[[str], Optional[str]] = shutil.which) -> Dict[str, Optional[str]]:
    """Resolution status of every tool either pipeline may call."""
    return {name: which(name) for name, _ in (*PERF_TOOLS, *BCC_TOOLS)}
