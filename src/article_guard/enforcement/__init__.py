"""
Article Enforcement Pipeline -- scores supplement articles and rewrites regulated claims.

Components:
  - RuleRegistry: Regulated-term tiers, trusted citation domains, evidence levels
  - walker: Tagged-union document traversal yielding (field_path, text) pairs
  - StructureChecker: Required fields and minimum list sizes
  - ComplianceChecker: Regulated health-claim terms by law, with mitigating context
  - LengthChecker: Glyph-count ranges per field plus an aggregate minimum
  - CitationValidator: Reference URL validity, https and source trust
  - EvidenceLevelChecker: S/A/B/C/D evidence grade
  - LanguageChecker: Untranslated foreign-language passages
  - Remediator: Idempotent rewrite of regulated terms
  - ArticleValidator: Runs all checkers and grades the article
"""

from .config import ValidatorConfig
from .errors import (
    ArticleGuardError,
    DocumentTooDeep,
    InputError,
    ParseError,
    RuleRegistryError,
)
from .models import (
    BatchFailure,
    BatchSummary,
    Change,
    CheckResult,
    CompositeReport,
    Finding,
    RemediationResult,
    Severity,
    Violation,
)
from .pipeline import ArticleValidator, remediate, validate
from .registry import LAW_NAMES, RuleRegistry, build_default_registry

__all__ = [
    "ArticleGuardError",
    "ArticleValidator",
    "BatchFailure",
    "BatchSummary",
    "Change",
    "CheckResult",
    "CompositeReport",
    "DocumentTooDeep",
    "Finding",
    "InputError",
    "LAW_NAMES",
    "ParseError",
    "RemediationResult",
    "RuleRegistry",
    "RuleRegistryError",
    "Severity",
    "ValidatorConfig",
    "Violation",
    "build_default_registry",
    "remediate",
    "validate",
]
