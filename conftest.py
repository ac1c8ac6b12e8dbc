import os
import pathlib
import subprocess

import pytest

# keep test runs from writing log files; must happen before bcc_exporter is imported
os.environ.setdefault("BCC_EXPORTER_LOG_DIR", "")

_OUTPUT_FLAG = {"perf": "-o", "pprof": "-output"}


class FakeRunner:
    """Stands in for subprocess.run.

    results maps a tool name to (returncode, stdout, stderr); outputs maps a
    tool name to the bytes it writes to its output file (None writes nothing).
    """

    def __init__(self, results=None, outputs=None):
        self.results = results or {}
        self.outputs = {"perf": b"PERFILE2", "pprof": b"\x1f\x8bprofile"}
        self.outputs.update(outputs or {})
        self.calls = []
        self.dirs = []

    def __call__(self, cmd, capture_output=False, **kwargs):
        self.calls.append(list(cmd))
        tool = cmd[1] if cmd[0] == "sudo" else cmd[0]
        flag = _OUTPUT_FLAG.get(tool)
        if flag:
            out = pathlib.Path(cmd[cmd.index(flag) + 1])
            self.dirs.append(out.parent)
            if self.outputs.get(tool) is not None:
                out.write_bytes(self.outputs[tool])
        rc, stdout, stderr = self.results.get(tool, (0, b"", b""))
        return subprocess.CompletedProcess(cmd, rc, stdout, stderr)

    @property
    def tools(self):
        return [c[1] if c[0] == "sudo" else c[0] for c in self.calls]


def all_tools(name):
    return f"/usr/bin/{name}"


def no_tools(name):
    return None


@pytest.fixture
def runner():
    return FakeRunner()


@pytest.fixture
def proc_root(tmp_path):
    """Fake /proc holding a single live process, 4242."""
    root = tmp_path / "proc"
    (root / "4242").mkdir(parents=True)
    return root


@pytest.fixture
def ws():
    from bcc_exporter.profiling.workspace import Workspace

    workspace = Workspace()
    yield workspace
    workspace.release()
