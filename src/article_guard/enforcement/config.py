"""
Validator configuration -- field requirements, length ranges and thresholds.

Defaults describe a supplement ingredient article. Every checker reads its
settings from one ValidatorConfig, so a project can tighten or relax rules
without touching checker code.

Configuration via environment (ValidatorConfig.from_env):
    ARTICLE_GUARD_MIN_SEVERITY        Lowest compliance tier reported (default: low)
    ARTICLE_GUARD_FIX_SEVERITY        Lowest tier the fixer rewrites (default: low)
    ARTICLE_GUARD_DEDUPE_REFERENCES   Count identical reference URLs once (default: false)
    ARTICLE_GUARD_LAWS                Comma-separated law keys to check (default: all)
    ARTICLE_GUARD_IGNORE_CATEGORIES   Comma-separated rule categories to skip
"""

import logging
import os
from dataclasses import dataclass, field

from .models import Severity

logger = logging.getLogger(__name__)

# Fields holding identifiers, romanized names or URLs are never scanned for
# regulated terms or foreign-language text.
DEFAULT_EXCLUDED_FIELDS = frozenset({
    "_id", "_type", "_rev", "_key", "_ref", "_createdAt", "_updatedAt",
    "nameEn", "slug", "references", "evidenceLevel", "url",
})


@dataclass(frozen=True)
class LengthRange:
    """Inclusive character-count bounds; None means unbounded."""

    min: int | None = None
    max: int | None = None


@dataclass(frozen=True)
class ArrayLengthRule:
    """Length bounds for the items of an array field.

    `item` applies to string items; `fields` applies to sub-fields of
    object items (e.g. a FAQ's question and answer).
    """

    item: LengthRange | None = None
    fields: dict[str, LengthRange] = field(default_factory=dict)


@dataclass
class ValidatorConfig:
    """Configuration for one validation run."""

    category_max: dict[str, float] = field(default_factory=lambda: {
        "structural": 25,
        "compliance": 20,
        "length": 20,
        "citation": 15,
        "evidence": 10,
        "language": 10,
    })

    # Structural
    required_fields: tuple[str, ...] = (
        "name", "nameEn", "slug", "category", "description", "evidenceLevel",
    )
    min_array_items: dict[str, int] = field(default_factory=lambda: {
        "benefits": 5,
        "faqs": 5,
        "references": 5,
        "foodSources": 3,
        "interactions": 3,
    })
    structural_deduction: float = 5

    # Compliance / remediation
    min_severity: Severity = Severity.LOW
    remediation_threshold: Severity = Severity.LOW
    compliance_exclude: frozenset[str] = DEFAULT_EXCLUDED_FIELDS
    sentence_fallback_length: int = 100
    compliance_laws: tuple[str, ...] = ()  # empty means every law
    ignore_categories: tuple[str, ...] = ()

    # Length
    length_fields: dict[str, LengthRange] = field(default_factory=lambda: {
        "description": LengthRange(500, 1000),
        "recommendedDosage": LengthRange(150, 800),
        "sideEffects": LengthRange(100, 800),
    })
    length_array_fields: dict[str, ArrayLengthRule] = field(default_factory=lambda: {
        "benefits": ArrayLengthRule(item=LengthRange(30, 300)),
        "faqs": ArrayLengthRule(fields={
            "question": LengthRange(10, 100),
            "answer": LengthRange(150, 1000),
        }),
    })
    aggregate_min_length: int = 2000
    length_error_deduction: float = 5
    length_warning_deduction: float = 2

    # Citation
    references_field: str = "references"
    min_references: int = 5
    dedupe_references: bool = False

    # Evidence
    evidence_field: str = "evidenceLevel"

    # Language
    language_exclude: frozenset[str] = DEFAULT_EXCLUDED_FIELDS
    foreign_run_min_words: int = 5
    preview_length: int = 50

    def max_for(self, category: str) -> float:
        return self.category_max[category]

    @classmethod
    def lenient(cls) -> "ValidatorConfig":
        """Report critical-tier compliance violations only."""
        return cls(min_severity=Severity.CRITICAL)

    @classmethod
    def from_env(cls) -> "ValidatorConfig":
        """Build a config, applying overrides from the environment."""
        config = cls()
        min_severity = os.environ.get("ARTICLE_GUARD_MIN_SEVERITY", "").strip()
        if min_severity:
            config.min_severity = Severity.parse(min_severity)
        fix_severity = os.environ.get("ARTICLE_GUARD_FIX_SEVERITY", "").strip()
        if fix_severity:
            config.remediation_threshold = Severity.parse(fix_severity)
        dedupe = os.environ.get("ARTICLE_GUARD_DEDUPE_REFERENCES", "").lower()
        if dedupe:
            config.dedupe_references = dedupe in ("true", "1", "yes")
        laws = _split(os.environ.get("ARTICLE_GUARD_LAWS", ""))
        if laws:
            config.compliance_laws = laws
        ignored = _split(os.environ.get("ARTICLE_GUARD_IGNORE_CATEGORIES", ""))
        if ignored:
            config.ignore_categories = ignored
        logger.debug(
            f"[Config] min_severity={config.min_severity.value} "
            f"fix_severity={config.remediation_threshold.value} "
            f"dedupe_references={config.dedupe_references} "
            f"laws={','.join(config.compliance_laws) or 'all'}"
        )
        return config


def _split(value: str) -> tuple[str, ...]:
    return tuple(part.strip() for part in value.split(",") if part.strip())
