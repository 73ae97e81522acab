"""StructureChecker -- top-level field presence and list cardinality."""

import logging
from typing import Any

from .config import ValidatorConfig
from .models import CheckResult, Finding

logger = logging.getLogger(__name__)


def is_missing(value: Any) -> bool:
    """None, absent and blank strings all count as missing."""
    if value is None:
        return True
    if isinstance(value, str) and not value.strip():
        return True
    return False


class StructureChecker:
    """Reports missing required fields and under-populated lists.

    Only the top level is inspected. Each missing field and each short list
    is one issue; every issue deducts the same amount.
    """

    category = "structural"

    def __init__(self, config: ValidatorConfig | None = None):
        self._config = config or ValidatorConfig()

    def check(self, document: dict[str, Any]) -> CheckResult:
        findings = []

        for name in self._config.required_fields:
            if is_missing(document.get(name)):
                findings.append(Finding(
                    rule="structure:missing_field",
                    severity="error",
                    message=f"Required field '{name}' is missing",
                    field_path=name,
                    suggestion=f"Fill in '{name}'",
                ))

        for name, minimum in self._config.min_array_items.items():
            value = document.get(name)
            count = len(value) if isinstance(value, list) else 0
            if count < minimum:
                findings.append(Finding(
                    rule="structure:insufficient_items",
                    severity="error",
                    message=f"'{name}' has {count} item(s); at least {minimum} required",
                    field_path=name,
                    suggestion=f"Add {minimum - count} more item(s) to '{name}'",
                ))

        max_score = self._config.max_for(self.category)
        score = max(0.0, max_score - len(findings) * self._config.structural_deduction)
        if findings:
            logger.debug(f"[Structure] {len(findings)} issues, score {score}")

        return CheckResult(
            category=self.category,
            passed=not findings,
            score=score,
            max_score=max_score,
            findings=findings,
        )
