"""
ArticleValidator -- runs all six checkers and grades the article.

Runs StructureChecker -> ComplianceChecker -> LengthChecker ->
CitationValidator -> EvidenceLevelChecker -> LanguageChecker on each
article, then aggregates the results into an immutable CompositeReport.

The document is checked for traversability before any checker runs, so an
unusable input raises InputError without producing partial results.
"""

import logging
from typing import Any

from .citation_validator import CitationValidator
from .compliance_checker import ComplianceChecker
from .config import ValidatorConfig
from .evidence_levels import EvidenceLevelChecker
from .language_checker import LanguageChecker
from .length_checker import LengthChecker
from .models import CompositeReport, RemediationResult, Severity
from .registry import RuleRegistry, build_default_registry
from .remediation import Remediator
from .scoring import aggregate
from .structure_checker import StructureChecker
from .walker import ensure_document, to_node

logger = logging.getLogger(__name__)

UNKNOWN_DOCUMENT = "<unknown>"


def document_id_for(document: dict[str, Any]) -> str:
    """Slug (plain or {"current": ...}), else name, else a placeholder."""
    slug = document.get("slug")
    if isinstance(slug, dict):
        slug = slug.get("current")
    if isinstance(slug, str) and slug.strip():
        return slug.strip()
    name = document.get("name")
    if isinstance(name, str) and name.strip():
        return name.strip()
    return UNKNOWN_DOCUMENT


class ArticleValidator:
    """Bundles one registry and config with the checkers built from them.

    Usage:
        validator = ArticleValidator()
        report = validator.validate(article)
        print(report.total_score, report.grade, report.status)
    """

    def __init__(
        self,
        registry: RuleRegistry | None = None,
        config: ValidatorConfig | None = None,
    ):
        self.registry = registry or build_default_registry()
        self.config = config or ValidatorConfig()
        self.structure = StructureChecker(self.config)
        self.compliance = ComplianceChecker(self.registry, self.config)
        self.length = LengthChecker(self.config)
        self.citation = CitationValidator(self.registry, self.config)
        self.evidence = EvidenceLevelChecker(self.registry, self.config)
        self.language = LanguageChecker(self.config)

    def validate(self, document: Any, document_id: str | None = None) -> CompositeReport:
        """Run every checker on the document and grade it."""
        ensure_document(document)
        node = to_node(document)
        doc_id = document_id or document_id_for(document)

        # Text scanners share the node; the others read fields directly.
        results = [
            self.structure.check(document),
            self.compliance.check(node),
            self.length.check(document),
            self.citation.check(document),
            self.evidence.check(document),
            self.language.check(node),
        ]
        report = aggregate(doc_id, results)

        failed = [r.category for r in results if not r.passed]
        logger.info(
            f"[Validator] {doc_id}: {report.total_score} "
            f"grade={report.grade} status={report.status}"
            + (f" failed={','.join(failed)}" if failed else "")
        )
        return report

    def remediate(
        self, document: Any, severity_threshold: Severity | str | None = None
    ) -> RemediationResult:
        threshold = (
            Severity.parse(severity_threshold)
            if severity_threshold is not None
            else self.config.remediation_threshold
        )
        return Remediator(self.registry, self.config, threshold).remediate(document)


def validate(
    document: Any,
    registry: RuleRegistry | None = None,
    config: ValidatorConfig | None = None,
) -> CompositeReport:
    """Validate one article with a throwaway ArticleValidator."""
    return ArticleValidator(registry, config).validate(document)


def remediate(
    document: Any,
    severity_threshold: Severity | str = Severity.LOW,
    registry: RuleRegistry | None = None,
    config: ValidatorConfig | None = None,
) -> RemediationResult:
    """Rewrite regulated terms at or above `severity_threshold`."""
    return ArticleValidator(registry, config).remediate(document, severity_threshold)
