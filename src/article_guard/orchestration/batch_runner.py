"""
Batch runner -- validates many articles and summarizes the distribution.

Each source is loaded once and validated. A document that cannot be loaded
or is not a valid article (ParseError, InputError, OSError) is recorded in
`failures`; the rest of the batch continues. Anything else, including
RuleRegistryError, propagates.

With concurrency > 1 documents are processed in parallel under a
semaphore. Reports always come back in input order.
"""

import asyncio
import logging
from typing import Any, Iterable

from ..enforcement.errors import InputError, ParseError
from ..enforcement.models import (
    BatchFailure,
    BatchSummary,
    CompositeReport,
    Severity,
    Violation,
)
from ..enforcement.pipeline import ArticleValidator
from ..enforcement.scoring import GRADES
from .sources import DocumentSource, InMemorySource

logger = logging.getLogger(__name__)

RECOVERABLE_ERRORS = (ParseError, InputError, OSError)


async def run_batch(
    sources: Iterable[DocumentSource],
    validator: ArticleValidator | None = None,
    concurrency: int = 1,
) -> BatchSummary:
    """Validate every source and build a BatchSummary.

    Usage:
        summary = await run_batch(expand_paths(["articles/"]), concurrency=4)
        print(summary.grade_histogram, summary.pass_rate)
    """
    sources = list(sources)
    validator = validator or ArticleValidator()
    logger.info(f"[Batch] Validating {len(sources)} documents (concurrency={concurrency})")

    if concurrency > 1:
        semaphore = asyncio.Semaphore(concurrency)

        async def bounded(source: DocumentSource) -> CompositeReport | BatchFailure:
            async with semaphore:
                return await _process(source, validator)

        outcomes = await asyncio.gather(*[bounded(s) for s in sources])
    else:
        outcomes = [await _process(s, validator) for s in sources]

    summary = summarize(outcomes)
    logger.info(
        f"[Batch] Done: {len(summary.per_document)} validated, "
        f"{len(summary.failures)} failed, pass rate {summary.pass_rate:.0%}"
    )
    return summary


def run_batch_sync(
    documents: Iterable[Any], validator: ArticleValidator | None = None
) -> BatchSummary:
    """Blocking wrapper for in-memory articles."""
    sources = [InMemorySource(doc) for doc in documents]
    return asyncio.run(run_batch(sources, validator))


async def _process(
    source: DocumentSource, validator: ArticleValidator
) -> CompositeReport | BatchFailure:
    try:
        document = await source.load()
        return validator.validate(document)
    except RECOVERABLE_ERRORS as e:
        logger.warning(f"[Batch] {source.name} failed: {type(e).__name__}: {e}")
        return BatchFailure(name=source.name, error_type=type(e).__name__, message=str(e))


def summarize(outcomes: list[CompositeReport | BatchFailure]) -> BatchSummary:
    """Histogram, pass rate and critical count over validated documents."""
    reports = [o for o in outcomes if isinstance(o, CompositeReport)]
    failures = [o for o in outcomes if isinstance(o, BatchFailure)]

    histogram = {grade: 0 for grade in GRADES}
    for report in reports:
        histogram[report.grade] = histogram.get(report.grade, 0) + 1

    passes = sum(1 for r in reports if r.status == "pass")
    critical = sum(_critical_count(r) for r in reports)
    average = round(sum(r.total_score for r in reports) / len(reports), 2) if reports else 0.0

    return BatchSummary(
        total=len(outcomes),
        grade_histogram=histogram,
        pass_rate=passes / len(reports) if reports else 0.0,
        critical_issue_count=critical,
        average_score=average,
        per_document=reports,
        failures=failures,
    )


def _critical_count(report: CompositeReport) -> int:
    compliance = report.results.get("compliance")
    if compliance is None:
        return 0
    return sum(
        1
        for v in compliance.findings
        if isinstance(v, Violation) and v.severity == Severity.CRITICAL
    )
