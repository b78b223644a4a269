from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional
from typing_extensions import Protocol, runtime_checkable

# ---------- Host contract ----------

@runtime_checkable
class T(Protocol):
    """Reports when failures occur.

    fail() marks the test failed and lets execution continue (relaxed mode).
    fail_now() marks the test failed and aborts it (strict mode).
    """
    def fail(self) -> None: ...
    def fail_now(self) -> None: ...

class FailNow(AssertionError):
    """Raised by host adapters to abort the current test."""

# ---------- Source model ----------

@dataclass(frozen=True)
class ArgSource:
    text: str
    literal: bool = False

@dataclass(frozen=True)
class CallSite:
    line: int
    method: str
    args: List[ArgSource] = field(default_factory=list)
    binding: Optional[str] = None  # assignment that last bound args[0], if a bare name

    def arg_names(self) -> List[str]:
        return [arg.text for arg in self.args]

@dataclass(frozen=True)
class SourceIndex:
    path: str
    calls: Dict[int, CallSite] = field(default_factory=dict)
    comments: Dict[int, str] = field(default_factory=dict)
    ok: bool = True

    def __repr__(self) -> str:
        state = "ok" if self.ok else "unavailable"
        return f"SourceIndex({self.path!r}, {state}, calls={len(self.calls)}, comments={len(self.comments)})"
