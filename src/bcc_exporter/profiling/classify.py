# profiling/classify.py
"""Map a failed tool's stderr onto a ProfilingError.

Tool wording changes between versions, so the matching lives in plain
rule tables that the pipelines are handed rather than in the pipelines.
"""
from typing import NamedTuple, Sequence, Type

from .errors import (
    ProfilingError, PermissionDenied, ProcessVanished, NoSamplesInCapture,
    CaptureFailed, ConversionFailed,
)


class Rule(NamedTuple):
    pattern: str
    error: Type[ProfilingError]
    message: str


class StderrClassifier:
    """Ordered (pattern, error) rules with a fallback error class.

    The first rule whose pattern occurs in stderr wins. Matching ignores case.
    Messages are format strings; keyword context passed to ``build_error``
    is substituted into them.
    """

    def __init__(self, rules: Sequence[Rule], fallback: Type[ProfilingError], fallback_message: str):
        self.rules = list(rules)
        self.fallback = fallback
        self.fallback_message = fallback_message

    def match(self, stderr: str):
        haystack = stderr.lower()
        for rule in self.rules:
            if rule.pattern.lower() in haystack:
                return rule
        return None

    def classify(self, stderr: str) -> Type[ProfilingError]:
        rule = self.match(stderr)
        return rule.error if rule else self.fallback

    def build_error(self, stderr: str, **context) -> ProfilingError:
        rule = self.match(stderr)
        if rule is None:
            return self.fallback(self.fallback_message.format(**context), stderr=stderr)
        return rule.error(rule.message.format(**context), stderr=stderr)


CAPTURE_RULES = [
    Rule("permission denied", PermissionDenied,
         "Permission denied: perf requires elevated privileges. "
         "Run with sudo or adjust perf_event_paranoid settings."),
    Rule("no such process", ProcessVanished,
         "Process with PID {pid} not found or exited during profiling"),
]

CONVERSION_RULES = [
    Rule("no samples", NoSamplesInCapture,
         "No samples found in perf.data - process may have been idle during profiling"),
    Rule("permission denied", PermissionDenied,
         "Permission denied accessing perf.data file"),
]


def capture_classifier() -> StderrClassifier:
    return StderrClassifier(CAPTURE_RULES, CaptureFailed, "perf record failed: exit status {returncode}")


def conversion_classifier() -> StderrClassifier:
    return StderrClassifier(CONVERSION_RULES, ConversionFailed, "pprof conversion failed: exit status {returncode}")
