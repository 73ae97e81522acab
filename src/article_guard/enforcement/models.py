"""Data models for the article enforcement pipeline."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from enum import Enum
from typing import Any


class Severity(str, Enum):
    """Severity tier of a regulated-term rule, strongest first."""

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]

    def at_least(self, other: "Severity") -> bool:
        return self.rank >= other.rank

    @classmethod
    def parse(cls, value: "str | Severity") -> "Severity":
        """Accept a Severity or its case-insensitive name."""
        if isinstance(value, Severity):
            return value
        try:
            return cls(value.strip().lower())
        except ValueError:
            names = ", ".join(s.value for s in cls)
            raise ValueError(
                f"Unknown severity '{value}' (expected one of: {names})"
            ) from None


_SEVERITY_RANK = {
    Severity.CRITICAL: 4,
    Severity.HIGH: 3,
    Severity.MEDIUM: 2,
    Severity.LOW: 1,
}


@dataclass(frozen=True)
class Violation:
    """A regulated expression found in one field of an article.

    Attributes:
        field_path: Where the match was found (e.g. "faqs[2].answer").
        matched_text: The exact text the rule pattern matched.
        severity: Tier of the rule that matched.
        category: Rule category (e.g. "disease_treatment").
        context_sentence: The sentence-like unit containing the match.
        raw_score_impact: Deduction configured on the rule (negative).
        effective_score_impact: Deduction after mitigating context is applied.
        suggestion: How to fix it.
        rationale: Why the expression is regulated, with the law cited.
        law: Key of the law the rule comes from (e.g. "health_promotion").
    """

    field_path: str
    matched_text: str
    severity: Severity
    category: str
    context_sentence: str
    raw_score_impact: float
    effective_score_impact: float
    suggestion: str = ""
    rationale: str = ""
    law: str = ""

    @property
    def mitigated(self) -> bool:
        return self.effective_score_impact != self.raw_score_impact

    @property
    def rule(self) -> str:
        return f"compliance:{self.category}"

    @property
    def message(self) -> str:
        note = " (mitigated by approved phrasing)" if self.mitigated else ""
        return f"Regulated expression '{self.matched_text}'{note}: {self.rationale}"


@dataclass(frozen=True)
class Finding:
    """A single issue reported by a non-compliance checker.

    Attributes:
        rule: Category of finding (e.g. "structure:missing_field").
        severity: "error" fails the check; "warning" only deducts.
        message: Human-readable explanation of what's wrong.
        field_path: The field the finding refers to, if any.
        suggestion: How to fix it.
    """

    rule: str
    severity: str  # "error" or "warning"
    message: str
    field_path: str = ""
    suggestion: str = ""


def freeze(value: Any) -> Any:
    """Read-only copy of nested mappings and lists."""
    if isinstance(value, Mapping):
        return MappingProxyType({k: freeze(v) for k, v in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(freeze(v) for v in value)
    return value


@dataclass(frozen=True)
class CheckResult:
    """Outcome of one checker over one article.

    Findings are stored as a tuple and details as a read-only mapping,
    whatever the checker passed in.
    """

    category: str
    passed: bool
    score: float
    max_score: float
    findings: tuple[Any, ...] = ()
    details: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "findings", tuple(self.findings))
        object.__setattr__(self, "details", freeze(self.details))

    @property
    def issue_count(self) -> int:
        return len(self.findings)


@dataclass(frozen=True)
class CompositeReport:
    """Final, immutable verdict for one article."""

    document_id: str
    category_scores: Mapping[str, float]
    results: Mapping[str, CheckResult]
    total_score: float
    grade: str
    status: str  # "pass", "warn", "fail"
    recommendations: tuple[str, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "category_scores", MappingProxyType(dict(self.category_scores)))
        object.__setattr__(self, "results", MappingProxyType(dict(self.results)))
        object.__setattr__(self, "recommendations", tuple(self.recommendations))

    @property
    def max_scores(self) -> dict[str, float]:
        return {name: r.max_score for name, r in self.results.items()}


@dataclass
class Change:
    """One substitution made by the remediation pass."""

    field_path: str
    severity: Severity
    original: str
    replacement: str
    rationale: str


@dataclass
class RemediationResult:
    """A rewritten article plus every substitution that produced it."""

    original_document: dict[str, Any]
    fixed_document: dict[str, Any]
    changes: list[Change] = field(default_factory=list)

    @property
    def change_count(self) -> int:
        return len(self.changes)

    @property
    def changed_fields(self) -> list[str]:
        seen: dict[str, None] = {}
        for change in self.changes:
            seen.setdefault(change.field_path, None)
        return list(seen)


@dataclass
class BatchFailure:
    """A document the batch could not validate."""

    name: str
    error_type: str
    message: str


@dataclass
class BatchSummary:
    """Distribution summary over a batch of articles."""

    total: int
    grade_histogram: dict[str, int]
    pass_rate: float
    critical_issue_count: int
    average_score: float
    per_document: list[CompositeReport] = field(default_factory=list)
    failures: list[BatchFailure] = field(default_factory=list)
