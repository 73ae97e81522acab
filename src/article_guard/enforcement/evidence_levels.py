"""
EvidenceLevelChecker -- scores the article's declared evidence grade.

Five evidence levels (strongest to weakest):
  S: multiple large RCTs or meta-analyses      10
  A: well-designed RCTs                         8
  B: limited RCTs or observational studies      6
  C: animal studies or small pilots             4
  D: anecdotal or theoretical support           2

The label is stripped and upper-cased before lookup. A missing or unknown
label scores 0 and fails.
"""

import logging
from typing import Any

from .config import ValidatorConfig
from .models import CheckResult, Finding
from .registry import RuleRegistry

logger = logging.getLogger(__name__)


class EvidenceLevelChecker:
    """Maps the evidence label to a score.

    Usage:
        checker = EvidenceLevelChecker(build_default_registry())
        result = checker.check({"evidenceLevel": " a "})
        # result.score == 8, result.details["level"] == "A"
    """

    category = "evidence"

    def __init__(self, registry: RuleRegistry, config: ValidatorConfig | None = None):
        self._registry = registry
        self._config = config or ValidatorConfig()

    def check(self, document: dict[str, Any]) -> CheckResult:
        field_name = self._config.evidence_field
        max_score = self._config.max_for(self.category)
        raw = document.get(field_name)
        label = raw.strip().upper() if isinstance(raw, str) else ""

        if not label:
            return CheckResult(
                category=self.category,
                passed=False,
                score=0.0,
                max_score=max_score,
                findings=[Finding(
                    rule="evidence:missing_level",
                    severity="error",
                    message=f"'{field_name}' is not set",
                    field_path=field_name,
                    suggestion="Set an evidence level from S to D",
                )],
                details={"level": None, "description": None},
            )

        level = self._registry.evidence_level(label)
        if level is None:
            known = ", ".join(lv.label for lv in self._registry.evidence_levels)
            logger.debug(f"[Evidence] unknown level '{label}'")
            return CheckResult(
                category=self.category,
                passed=False,
                score=0.0,
                max_score=max_score,
                findings=[Finding(
                    rule="evidence:unknown_level",
                    severity="error",
                    message=f"Unknown evidence level '{label}'",
                    field_path=field_name,
                    suggestion=f"Use one of: {known}",
                )],
                details={"level": label, "description": None},
            )

        return CheckResult(
            category=self.category,
            passed=True,
            score=float(min(level.score, max_score)),
            max_score=max_score,
            details={"level": level.label, "description": level.description},
        )
