"""
Results - Outcome tracking for a transform run.

RuleOutcome records what happened for one rule; TransformResult bundles the
serialized HTML with every outcome and the timing of the run.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from .errors import MutationFailure, SelectorResolutionFailure
from .rules import TransformationRule


@dataclass
class RuleOutcome:
    """
    What one rule did during an apply phase.

    Attributes:
        rule: The rule that was applied
        matched: Number of selector matches (duplicates counted)
        applied: Number of mutate calls that completed
        failures: Mutation failures, one per failing node match
        selector_error: Set when a selector was rejected; no mutations ran
    """

    rule: TransformationRule
    matched: int = 0
    applied: int = 0
    failures: List[MutationFailure] = field(default_factory=list)
    selector_error: Optional[SelectorResolutionFailure] = None

    @property
    def ok(self) -> bool:
        """True if every match was mutated without error."""
        return self.selector_error is None and not self.failures


@dataclass
class TransformResult:
    """
    Serialized output of transform() plus per-rule outcomes.

    Failures here never aborted the run: mutation failures are isolated per
    node and selector failures per rule.
    """

    html: str
    outcomes: List[RuleOutcome] = field(default_factory=list)
    duration_ms: float = 0.0

    @property
    def mutation_count(self) -> int:
        """Total mutate calls that completed."""
        return sum(o.applied for o in self.outcomes)

    @property
    def failures(self) -> List[Exception]:
        """Every selector and mutation failure, in rule order."""
        collected: List[Exception] = []
        for outcome in self.outcomes:
            if outcome.selector_error is not None:
                collected.append(outcome.selector_error)
            collected.extend(outcome.failures)
        return collected

    @property
    def failure_count(self) -> int:
        return len(self.failures)

    @property
    def success(self) -> bool:
        """True if no rule recorded a failure."""
        return all(o.ok for o in self.outcomes)

    def describe(self) -> str:
        """Generate human-readable summary."""
        status = "SUCCESS" if self.success else "PARTIAL"
        lines = [
            f"TransformResult: {status}",
            f"  Rules: {len(self.outcomes)}",
            f"  Mutations: {self.mutation_count}",
            f"  Duration: {self.duration_ms:.1f}ms",
        ]
        failures = self.failures
        if failures:
            lines.append(f"  Failures: {len(failures)}")
            for error in failures[:5]:
                lines.append(f"    - {error}")
            if len(failures) > 5:
                lines.append(f"    ... and {len(failures) - 5} more")
        return "\n".join(lines)
