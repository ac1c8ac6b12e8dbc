# profiling/perf.py
"""perf record → pprof -proto, producing a gzipped pprof protobuf.

Sampling and symbolization live in two separate tools, so a session runs
them back to back against one workspace and classifies failures per stage.
"""
import pathlib
import subprocess
from typing import Optional

from ..schemas import Artifact, ProfileRequest, OCTET_STREAM
from ..utils.logger import get_logger
from .classify import StderrClassifier, capture_classifier, conversion_classifier
from .errors import CaptureFailed, ConversionFailed, NoSamplesCollected, ProfilingError
from .runner import Runner, run_tool
from .workspace import Workspace

log = get_logger("PerfPipeline")

PERF_DATA = "perf.data"
PPROF_OUT = "profile.pb.gz"


def _check_output(path: pathlib.Path, missing: type, what: str, stderr: str = "") -> None:
    """Output file must exist and hold at least one byte."""
    try:
        size = path.stat().st_size
    except FileNotFoundError:
        raise missing(f"{what} file was not created", stderr=stderr)
    if size == 0:
        raise NoSamplesCollected(f"{what} file is empty - no samples collected")


class PerfPipeline:
    def __init__(
        self,
        frequency: int = 999,
        runner: Runner = subprocess.run,
        capture: Optional[StderrClassifier] = None,
        conversion: Optional[StderrClassifier] = None,
    ):
        self.frequency = frequency
        self.runner = runner
        self.capture = capture or capture_classifier()
        self.conversion = conversion or conversion_classifier()

    def capture_cmd(self, request: ProfileRequest, out: pathlib.Path):
        return [
            "perf", "record", "-g",
            "--pid", request.pid,
            "-F", str(self.frequency),
            "-o", str(out),
            "--", "sleep", str(request.seconds),
        ]

    def convert_cmd(self, src: pathlib.Path, out: pathlib.Path):
        return ["pprof", "-proto", "-output", str(out), str(src)]

    def run(self, request: ProfileRequest, workspace: Workspace) -> Artifact:
        """Run both stages inside an already acquired workspace.

        The caller keeps ownership of the workspace; on success the returned
        artifact points at a file inside it.
        """
        root = workspace.acquire()
        perf_data = root / PERF_DATA
        pprof_out = root / PPROF_OUT

        log.info(f"Starting perf record for PID {request.pid}, duration {request.seconds} seconds")
        res = run_tool(self.capture_cmd(request, perf_data), self.runner)
        if not res.ok:
            raise self._classified(self.capture, res, request)
        _check_output(perf_data, CaptureFailed, PERF_DATA, res.stderr)

        log.info("Converting perf.data to pprof format")
        res = run_tool(self.convert_cmd(perf_data, pprof_out), self.runner)
        if not res.ok:
            raise self._classified(self.conversion, res, request)
        _check_output(pprof_out, ConversionFailed, "pprof", res.stderr)

        return Artifact(
            media_type=OCTET_STREAM,
            path=pprof_out,
            filename=f"profile-{request.pid}-{request.seconds}.pb.gz",
            workspace=workspace,
        )

    @staticmethod
    def _classified(classifier: StderrClassifier, res, request: ProfileRequest) -> ProfilingError:
        err = classifier.build_error(res.stderr, pid=request.pid, returncode=res.returncode)
        log.warning(f"{type(err).__name__}: {err}")
        return err
