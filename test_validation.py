import base64
import os

import pytest

from bcc_exporter.profiling.classify import Rule, StderrClassifier, capture_classifier, conversion_classifier
from bcc_exporter.profiling.errors import (
    CaptureFailed, ConversionFailed, InvalidPID, InvalidRequest, NoSamplesInCapture,
    PermissionDenied, ProcessVanished, ToolUnavailable,
)
from bcc_exporter.profiling.validate import (
    BCC_TOOLS, PERF_TOOLS, check_required_tools, parse_request, tool_report, validate_pid,
)
from bcc_exporter.schemas import ProfileFormat

from conftest import all_tools, no_tools


# --------------------------------------------------------------------------- #
# parse_request
# --------------------------------------------------------------------------- #
def test_parse_request_valid():
    req = parse_request("1234", "30", None, ProfileFormat.PPROF)
    assert req.pid == "1234"
    assert req.seconds == 30
    assert req.format is ProfileFormat.PPROF
    assert req.test_mode is False


def test_parse_request_test_flag_only_exact_true():
    assert parse_request("1", "5", "true").test_mode is True
    assert parse_request("1", "5", "1").test_mode is False
    assert parse_request("1", "5", "TRUE").test_mode is False


@pytest.mark.parametrize("pid,seconds", [(None, "5"), ("1234", None), (None, None), ("", "5"), ("1234", "")])
def test_parse_request_missing(pid, seconds):
    with pytest.raises(InvalidRequest, match="Missing pid or seconds"):
        parse_request(pid, seconds)


@pytest.mark.parametrize("seconds", ["abc", "1.5", "5s", " 5", "1_0"])
def test_parse_request_not_a_number(seconds):
    with pytest.raises(InvalidRequest, match="not a number"):
        parse_request("1234", seconds)


@pytest.mark.parametrize("seconds", ["0", "-1", "301", "500"])
def test_parse_request_out_of_range(seconds):
    with pytest.raises(InvalidRequest, match="must be between 1 and 300"):
        parse_request("1234", seconds)


@pytest.mark.parametrize("seconds", ["1", "300"])
def test_parse_request_bounds_inclusive(seconds):
    assert parse_request("1234", seconds).seconds == int(seconds)


def test_parse_request_custom_limit():
    with pytest.raises(InvalidRequest, match="between 1 and 60"):
        parse_request("1234", "61", max_seconds=60)


def test_request_is_immutable():
    req = parse_request("1234", "5")
    with pytest.raises(Exception):
        req.seconds = 10


# --------------------------------------------------------------------------- #
# validate_pid
# --------------------------------------------------------------------------- #
def test_validate_pid_existing(proc_root):
    validate_pid("4242", str(proc_root))


def test_validate_pid_real_init():
    if not os.path.isdir("/proc/1"):
        pytest.skip("no /proc on this system")
    validate_pid("1")


@pytest.mark.parametrize("pid", ["abc", "", "-1", "12a", "../1"])
def test_validate_pid_malformed(pid, proc_root):
    with pytest.raises(InvalidPID, match="invalid PID format"):
        validate_pid(pid, str(proc_root))


def test_validate_pid_missing(proc_root):
    with pytest.raises(InvalidPID, match="does not exist") as exc:
        validate_pid("999999", str(proc_root))
    assert str(exc.value).startswith("Invalid PID: ")


def test_validate_pid_inaccessible(proc_root, monkeypatch):
    def denied(path):
        raise PermissionError(13, "Permission denied")

    monkeypatch.setattr(os, "stat", denied)
    with pytest.raises(InvalidPID, match="cannot access process 4242"):
        validate_pid("4242", str(proc_root))


# --------------------------------------------------------------------------- #
# tool checks
# --------------------------------------------------------------------------- #
def test_check_required_tools_all_present():
    assert check_required_tools(PERF_TOOLS, all_tools) == {"perf": "/usr/bin/perf", "pprof": "/usr/bin/pprof"}


def test_check_required_tools_names_first_missing():
    with pytest.raises(ToolUnavailable) as exc:
        check_required_tools(PERF_TOOLS, no_tools)
    assert "perf tool not found" in str(exc.value)
    assert "apt-get install linux-perf" in str(exc.value)


def test_check_required_tools_missing_pprof():
    which = lambda name: None if name == "pprof" else f"/usr/bin/{name}"
    with pytest.raises(ToolUnavailable, match="pprof tool not found.*go install"):
        check_required_tools(PERF_TOOLS, which)


def test_tool_report_lists_every_tool():
    report = tool_report(lambda name: "/x" if name == "perf" else None)
    assert report == {"perf": "/x", "pprof": None, "profile-bpfcc": None}
    assert [name for name, _ in BCC_TOOLS] == ["profile-bpfcc"]


# --------------------------------------------------------------------------- #
# stderr classification
# --------------------------------------------------------------------------- #
def test_capture_classifier():
    c = capture_classifier()
    assert c.classify("Error: Permission denied (perf_event_paranoid)") is PermissionDenied
    assert c.classify("failed to attach: No such process") is ProcessVanished
    assert c.classify("segfault") is CaptureFailed


def test_conversion_classifier():
    c = conversion_classifier()
    assert c.classify("parsing profile: no samples") is NoSamplesInCapture
    assert c.classify("open perf.data: permission denied") is PermissionDenied
    assert c.classify("unrecognized profile format") is ConversionFailed


def test_classifier_first_rule_wins():
    c = StderrClassifier(
        [Rule("alpha", PermissionDenied, "first"), Rule("beta", ProcessVanished, "second")],
        CaptureFailed, "fallback",
    )
    assert c.classify("beta then alpha") is PermissionDenied


def test_build_error_formats_message_and_keeps_stderr():
    err = capture_classifier().build_error("kaboom", pid="7", returncode=3)
    assert isinstance(err, CaptureFailed)
    assert err.status_code == 500
    assert err.stderr == "kaboom"
    assert "perf record failed: exit status 3" in str(err)
    assert "Stderr: kaboom" in str(err)

    err = capture_classifier().build_error("No such process", pid="7", returncode=1)
    assert str(err) == "Process with PID 7 not found or exited during profiling"
    assert err.status_code == 400


# --------------------------------------------------------------------------- #
# Basic auth header parsing
# --------------------------------------------------------------------------- #
def test_basic_credentials_parsing():
    from bcc_exporter.api.auth import basic_credentials

    token = base64.b64encode("admin:pä:ss".encode("utf-8")).decode()
    assert basic_credentials(f"Basic {token}") == (b"admin", "pä:ss".encode("utf-8"))
    assert basic_credentials(None) is None
    assert basic_credentials("Bearer abc") is None
    assert basic_credentials("Basic !!!notbase64") is None
    assert basic_credentials("Basic " + base64.b64encode(b"nocolon").decode()) is None
