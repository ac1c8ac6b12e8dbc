"""
bcc_exporter.schemas  •  Request and artifact contracts
------------------------------------------------------
These classes are the interface between the HTTP layer and the profiling
session.  A ProfileRequest is only ever built by the validator, so every
instance holds in-range values.
"""
from __future__ import annotations

import pathlib
from dataclasses import dataclass
from enum import Enum
from typing import Optional, TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

if TYPE_CHECKING:
    from ..profiling.workspace import Workspace

# --------------------------------------------------------------------------- #
# 🔸 Enumerations
# --------------------------------------------------------------------------- #
class ProfileFormat(str, Enum):
    PPROF  = "pprof"        # perf record + pprof -proto, binary
    FOLDED = "folded"       # profile-bpfcc -f, text


OCTET_STREAM = "application/octet-stream"
TEXT_PLAIN   = "text/plain"


# --------------------------------------------------------------------------- #
# 🔸 Inbound
# --------------------------------------------------------------------------- #
class ProfileRequest(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    pid: str                     = Field(..., examples=["1234"])
    seconds: int                 = Field(..., ge=1, examples=[30])
    format: ProfileFormat        = Field(default=ProfileFormat.FOLDED)
    test_mode: bool              = False


# --------------------------------------------------------------------------- #
# 🔸 Subprocess results and produced artifacts
# --------------------------------------------------------------------------- #
class SubprocessOutcome(BaseModel):
    model_config = ConfigDict(frozen=True)

    returncode: int
    stdout: bytes = b""
    stderr: str   = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0


@dataclass
class Artifact:
    """A finished profile, either buffered bytes or a file inside a workspace.

    When ``path`` is set the artifact belongs to ``workspace``; whoever
    consumes the file must release the workspace once it is done reading.
    """
    media_type: str
    data: Optional[bytes] = None
    path: Optional[pathlib.Path] = None
    filename: Optional[str] = None
    workspace: Optional["Workspace"] = None

    @property
    def is_file(self) -> bool:
        return self.path is not None
