# profiling/session.py
import contextlib
import shutil
import subprocess
from typing import Callable, Optional

from ..schemas import Artifact, ProfileFormat, ProfileRequest, OCTET_STREAM, TEXT_PLAIN
from ..utils.config import Settings
from ..utils.logger import get_logger
from .bcc import FoldedPipeline
from .mock import generate_mock_profile
from .perf import PerfPipeline
from .runner import Runner
from .validate import PERF_TOOLS, check_required_tools, validate_pid
from .workspace import Workspace

log = get_logger("Session")


class ProfilingSession:
    """Runs one profiling request end to end and returns its artifact.

    Holds only configuration and the injected collaborators, so one
    instance serves concurrent requests.
    """

    def __init__(
        self,
        settings: Settings,
        runner: Runner = subprocess.run,
        which: Callable[[str], Optional[str]] = shutil.which,
    ):
        self.settings = settings
        self.which = which
        self.perf = PerfPipeline(settings.sample_frequency, runner)
        self.folded = FoldedPipeline(settings.sample_frequency, settings.use_sudo, runner)

    def run(self, request: ProfileRequest) -> Artifact:
        log.info(f"Profile request: pid={request.pid} seconds={request.seconds} "
                 f"format={request.format.value} test={request.test_mode}")

        if request.test_mode:
            return self.mock(request)

        validate_pid(request.pid, self.settings.proc_root)

        if request.format is ProfileFormat.FOLDED:
            return self.folded.run(request)
        return self.run_perf(request)

    def mock(self, request: ProfileRequest) -> Artifact:
        body = generate_mock_profile(request.pid, request.seconds).encode()
        media_type = OCTET_STREAM if request.format is ProfileFormat.PPROF else TEXT_PLAIN
        return Artifact(media_type=media_type, data=body)

    def run_perf(self, request: ProfileRequest) -> Artifact:
        check_required_tools(PERF_TOOLS, self.which)

        workspace = Workspace(self.settings.workspace_prefix)
        with contextlib.ExitStack() as stack:
            workspace.acquire()
            stack.callback(workspace.release)
            artifact = self.perf.run(request, workspace)
            # the streamer releases the workspace once the file is sent
            stack.pop_all()
        log.info(f"Profile ready for PID {request.pid}: {artifact.filename}")
        return artifact
