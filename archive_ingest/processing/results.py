"""Structured phase outcomes."""

from dataclasses import dataclass, field


@dataclass
class FailedItem:
    item: str
    reason: str


@dataclass
class PhaseResult:
    """What one phase invocation did.

    ``succeeded`` holds item identifiers (relative paths, conversation IDs,
    chunk IDs), ``failed`` holds one FailedItem per non-fatal failure and
    ``counts`` the summary numbers returned to callers.
    """
    phase: str
    succeeded: list = field(default_factory=list)
    failed: list = field(default_factory=list)
    counts: dict = field(default_factory=dict)
    timed_out: bool = False

    def fail(self, item: str, reason: str):
        self.failed.append(FailedItem(item=item, reason=reason))

    def summary(self) -> dict:
        """Counts plus failures, as stored in import stats and returned to callers."""
        return {
            **self.counts,
            "failed": [{"item": f.item, "reason": f.reason} for f in self.failed],
            "timed_out": self.timed_out,
        }

    def to_dict(self) -> dict:
        return {"success": True, "phase": self.phase, **self.summary()}
