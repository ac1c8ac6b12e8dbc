# profiling/bcc.py
import subprocess

from ..schemas import Artifact, ProfileRequest, TEXT_PLAIN
from ..utils.logger import get_logger
from .errors import ProfilerFailed
from .runner import Runner, run_tool

log = get_logger("FoldedPipeline")


class FoldedPipeline:
    """profile-bpfcc in folded mode; its stdout is the artifact."""

    def __init__(self, frequency: int = 999, use_sudo: bool = True, runner: Runner = subprocess.run):
        self.frequency = frequency
        self.use_sudo = use_sudo
        self.runner = runner

    def command(self, request: ProfileRequest):
        cmd = [
            "profile-bpfcc",
            "-p", request.pid,
            "-F", str(self.frequency),
            "-f",                       # folded output
            str(request.seconds),       # duration is positional
        ]
        return ["sudo"] + cmd if self.use_sudo else cmd

    def run(self, request: ProfileRequest) -> Artifact:
        log.info(f"Starting profile-bpfcc for PID {request.pid}, duration {request.seconds} seconds")
        res = run_tool(self.command(request), self.runner)
        if not res.ok:
            raise ProfilerFailed(f"Profiler failed: exit status {res.returncode}", stderr=res.stderr)
        log.info(f"Collected {len(res.stdout)} bytes of folded stacks for PID {request.pid}")
        return Artifact(media_type=TEXT_PLAIN, data=res.stdout)
