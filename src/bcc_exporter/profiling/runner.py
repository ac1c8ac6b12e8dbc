# profiling/runner.py
import shlex
import subprocess
from typing import Callable, List

from ..schemas import SubprocessOutcome
from ..utils.logger import get_logger
from .errors import ToolUnavailable
from .validate import INSTALL_HINTS

log = get_logger("Runner")

Runner = Callable[..., subprocess.CompletedProcess]


def run_tool(cmd: List[str], runner: Runner = subprocess.run) -> SubprocessOutcome:
    """Run one external tool to completion, capturing stdout and stderr.

    No timeout is applied: every tool we call is bounded by the requested
    duration already.
    """
    log.info(f"Running command: {' '.join(shlex.quote(c) for c in cmd)}")
    try:
        res = runner(cmd, capture_output=True)
    except FileNotFoundError as e:
        hint = INSTALL_HINTS.get(cmd[0])
        message = f"{cmd[0]} could not be executed: {e}"
        raise ToolUnavailable(f"{message}. Install with: {hint}" if hint else message)

    stdout = res.stdout or b""
    stderr = res.stderr.decode(errors="replace") if isinstance(res.stderr, bytes) else (res.stderr or "")
    outcome = SubprocessOutcome(returncode=res.returncode, stdout=stdout, stderr=stderr)

    log.info(f"{cmd[0]} exited with return code: {outcome.returncode}")
    if not outcome.ok:
        log.error(f"{cmd[0]} stderr: {stderr}")
    return outcome
