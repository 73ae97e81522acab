"""
Pydantic response models -- the JSON shapes `article-guard check --json`
and `article-guard fix --json` print.

Built from the enforcement dataclasses with the from_* constructors; the
dataclasses stay the source of truth.
"""

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, Field

from .enforcement.models import (
    BatchFailure,
    BatchSummary,
    Change,
    CheckResult,
    CompositeReport,
    RemediationResult,
    Violation,
)


def _plain(value: Any) -> Any:
    """Mutable JSON-ready copy of the read-only mappings and tuples in details."""
    if isinstance(value, Mapping):
        return {k: _plain(v) for k, v in value.items()}
    if isinstance(value, tuple):
        return [_plain(v) for v in value]
    return value


# =============================================================================
# CHECK RESULTS
# =============================================================================


class FindingResponse(BaseModel):
    """One finding or compliance violation."""

    rule: str
    severity: str
    message: str
    field_path: str = ""
    suggestion: str = ""
    context_sentence: str | None = None
    effective_score_impact: float | None = None
    law: str | None = None

    @classmethod
    def from_finding(cls, finding: Any) -> "FindingResponse":
        if isinstance(finding, Violation):
            return cls(
                rule=finding.rule,
                severity=finding.severity.value,
                message=finding.message,
                field_path=finding.field_path,
                suggestion=finding.suggestion,
                context_sentence=finding.context_sentence,
                effective_score_impact=finding.effective_score_impact,
                law=finding.law or None,
            )
        return cls(
            rule=finding.rule,
            severity=finding.severity,
            message=finding.message,
            field_path=finding.field_path,
            suggestion=finding.suggestion,
        )


class CheckResultResponse(BaseModel):
    """One category's outcome."""

    category: str
    passed: bool
    score: float
    max_score: float
    findings: list[FindingResponse] = Field(default_factory=list)
    details: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_result(cls, result: CheckResult) -> "CheckResultResponse":
        return cls(
            category=result.category,
            passed=result.passed,
            score=result.score,
            max_score=result.max_score,
            findings=[FindingResponse.from_finding(f) for f in result.findings],
            details=_plain(result.details),
        )


class ReportResponse(BaseModel):
    """Composite verdict for one article."""

    document_id: str
    total_score: float
    grade: str
    status: str
    category_scores: dict[str, float] = Field(default_factory=dict)
    results: list[CheckResultResponse] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)

    @classmethod
    def from_report(cls, report: CompositeReport) -> "ReportResponse":
        return cls(
            document_id=report.document_id,
            total_score=report.total_score,
            grade=report.grade,
            status=report.status,
            category_scores=dict(report.category_scores),
            results=[CheckResultResponse.from_result(r) for r in report.results.values()],
            recommendations=list(report.recommendations),
        )


# =============================================================================
# BATCH SUMMARY
# =============================================================================


class FailureResponse(BaseModel):
    name: str
    error_type: str
    message: str

    @classmethod
    def from_failure(cls, failure: BatchFailure) -> "FailureResponse":
        return cls(name=failure.name, error_type=failure.error_type, message=failure.message)


class BatchSummaryResponse(BaseModel):
    """Distribution summary over a batch."""

    total: int
    grade_histogram: dict[str, int] = Field(default_factory=dict)
    pass_rate: float = 0.0
    critical_issue_count: int = 0
    average_score: float = 0.0
    per_document: list[ReportResponse] = Field(default_factory=list)
    failures: list[FailureResponse] = Field(default_factory=list)

    @classmethod
    def from_summary(cls, summary: BatchSummary) -> "BatchSummaryResponse":
        return cls(
            total=summary.total,
            grade_histogram=summary.grade_histogram,
            pass_rate=summary.pass_rate,
            critical_issue_count=summary.critical_issue_count,
            average_score=summary.average_score,
            per_document=[ReportResponse.from_report(r) for r in summary.per_document],
            failures=[FailureResponse.from_failure(f) for f in summary.failures],
        )


# =============================================================================
# REMEDIATION
# =============================================================================


class ChangeResponse(BaseModel):
    field_path: str
    severity: str
    original: str
    replacement: str
    rationale: str

    @classmethod
    def from_change(cls, change: Change) -> "ChangeResponse":
        return cls(
            field_path=change.field_path,
            severity=change.severity.value,
            original=change.original,
            replacement=change.replacement,
            rationale=change.rationale,
        )


class RemediationResponse(BaseModel):
    """Rewritten article plus the substitutions made."""

    change_count: int
    changed_fields: list[str] = Field(default_factory=list)
    changes: list[ChangeResponse] = Field(default_factory=list)
    fixed_document: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_result(cls, result: RemediationResult) -> "RemediationResponse":
        return cls(
            change_count=result.change_count,
            changed_fields=result.changed_fields,
            changes=[ChangeResponse.from_change(c) for c in result.changes],
            fixed_document=result.fixed_document,
        )
