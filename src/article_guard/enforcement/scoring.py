"""
Score aggregation -- combines checker results into one CompositeReport.

Grade table (evaluated highest first):
  S: >= 90   A: >= 80   B: >= 70   C: >= 60   D: below 60

Status is a coarser cut of the same total:
  pass: >= 80   warn: >= 60   fail: below 60
"""

import logging

from .models import CheckResult, CompositeReport

logger = logging.getLogger(__name__)

GRADE_THRESHOLDS: list[tuple[float, str]] = [
    (90, "S"),
    (80, "A"),
    (70, "B"),
    (60, "C"),
]
LOWEST_GRADE = "D"
GRADES = [grade for _, grade in GRADE_THRESHOLDS] + [LOWEST_GRADE]

STATUS_THRESHOLDS: list[tuple[float, str]] = [
    (80, "pass"),
    (60, "warn"),
]
LOWEST_STATUS = "fail"

CATEGORY_ORDER = ("structural", "compliance", "length", "citation", "evidence", "language")

RECOMMENDATIONS = {
    "structural": "Fill in the missing required fields and add items to short lists.",
    "compliance": "Rewrite regulated health claims; run `article-guard fix` to apply approved phrasing.",
    "length": "Adjust section lengths to the configured ranges and expand the article body.",
    "citation": "Add at least five valid https references, preferably from PubMed or government sources.",
    "evidence": "Set a recognized evidence level (S, A, B, C or D).",
    "language": "Translate untranslated foreign-language passages.",
}
READY_MESSAGE = "All checks passed. The article is ready to publish."


def grade_for(total: float) -> str:
    for threshold, grade in GRADE_THRESHOLDS:
        if total >= threshold:
            return grade
    return LOWEST_GRADE


def status_for(total: float) -> str:
    for threshold, status in STATUS_THRESHOLDS:
        if total >= threshold:
            return status
    return LOWEST_STATUS


def build_recommendations(results: dict[str, CheckResult]) -> tuple[str, ...]:
    """One sentence per failing category, in fixed order; else the ready message."""
    ordered = [name for name in CATEGORY_ORDER if name in results]
    ordered += [name for name in results if name not in CATEGORY_ORDER]

    recommendations = []
    for name in ordered:
        result = results[name]
        if not result.passed or result.issue_count:
            recommendations.append(
                RECOMMENDATIONS.get(name, f"Resolve the {name} findings.")
            )
    return tuple(recommendations) or (READY_MESSAGE,)


def aggregate(document_id: str, results: list[CheckResult]) -> CompositeReport:
    """Sum bounded category scores and grade the total."""
    by_category = {r.category: r for r in results}
    category_scores = {
        name: min(max(r.score, 0.0), r.max_score) for name, r in by_category.items()
    }
    total = round(min(max(sum(category_scores.values()), 0.0), 100.0), 2)

    report = CompositeReport(
        document_id=document_id,
        category_scores=category_scores,
        results=by_category,
        total_score=total,
        grade=grade_for(total),
        status=status_for(total),
        recommendations=build_recommendations(by_category),
    )
    logger.debug(f"[Scoring] {document_id}: {total} ({report.grade}, {report.status})")
    return report
