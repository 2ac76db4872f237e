"""Decide whether a migrated-from branch may be deleted."""

from __future__ import annotations

from .models import BranchProtection, SafetyInputs, SafetyStatus

OPEN_PULL_REQUESTS_REASON = "open pull requests still target source branch"
BRANCH_PROTECTED_REASON = "source branch is protected"
PROTECTION_UNKNOWN_REASON = "source branch protection status unknown"
WORKFLOW_MENTIONS_REASON = "workflow files still reference source branch"


class SafetyEvaluator:
    """Turn :class:`SafetyInputs` into a :class:`SafetyStatus`.

    Each gate is independent and contributes at most one reason.
    """

    def evaluate(self, inputs: SafetyInputs) -> SafetyStatus:
        """Collect the blocking reasons for ``inputs``."""
        reasons: list[str] = []
        if inputs.open_pull_request_count > 0:
            reasons.append(OPEN_PULL_REQUESTS_REASON)
        if inputs.branch_protection is BranchProtection.PROTECTED:
            reasons.append(BRANCH_PROTECTED_REASON)
        elif inputs.branch_protection is BranchProtection.UNKNOWN:
            reasons.append(PROTECTION_UNKNOWN_REASON)
        if inputs.workflow_mentions:
            reasons.append(WORKFLOW_MENTIONS_REASON)
        return SafetyStatus(blocking_reasons=tuple(reasons))
