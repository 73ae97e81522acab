"""
LengthChecker -- character-count bounds on article fields.

Length is counted in glyphs, not code units: every Unicode letter or digit
counts once, as does CJK and full-width punctuation. Whitespace and ASCII
punctuation are not counted, so a Japanese paragraph and its byte-heavy
UTF-8 encoding measure the same.

  below min  -> error   (fails the check, -5)
  above max  -> warning (-2)
  total of all scanned fields below the aggregate minimum -> error

Absent fields are skipped; StructureChecker reports those.
"""

import logging
import unicodedata
from typing import Any

from .config import LengthRange, ValidatorConfig
from .models import CheckResult, Finding
from .walker import index_path

logger = logging.getLogger(__name__)


def _is_counted(ch: str) -> bool:
    if unicodedata.category(ch)[0] in ("L", "N"):
        return True
    code = ord(ch)
    return 0x3001 <= code <= 0x303F or 0xFF01 <= code <= 0xFF65


def count_chars(text: str) -> int:
    """Glyph count used for every length rule."""
    return sum(1 for ch in text if _is_counted(ch))


class LengthChecker:
    """Checks configured scalar fields and array items against length ranges.

    Usage:
        checker = LengthChecker(ValidatorConfig())
        result = checker.check(article)
        errors = [f for f in result.findings if f.severity == "error"]
    """

    category = "length"

    def __init__(self, config: ValidatorConfig | None = None):
        self._config = config or ValidatorConfig()

    def check(self, document: dict[str, Any]) -> CheckResult:
        findings: list[Finding] = []
        total = 0

        for name, bounds in self._config.length_fields.items():
            value = document.get(name)
            if isinstance(value, str):
                total += self._measure(name, value, bounds, findings)

        for name, rule in self._config.length_array_fields.items():
            items = document.get(name)
            if not isinstance(items, list):
                continue
            for i, item in enumerate(items):
                path = index_path(name, i)
                if isinstance(item, str) and rule.item:
                    total += self._measure(path, item, rule.item, findings)
                elif isinstance(item, dict):
                    for sub, bounds in rule.fields.items():
                        value = item.get(sub)
                        if isinstance(value, str):
                            total += self._measure(f"{path}.{sub}", value, bounds, findings)

        aggregate_min = self._config.aggregate_min_length
        if total < aggregate_min:
            findings.append(Finding(
                rule="length:aggregate_too_short",
                severity="error",
                message=f"Article body totals {total} characters; at least {aggregate_min} required",
                suggestion=f"Expand the article by {aggregate_min - total} characters",
            ))

        errors = sum(1 for f in findings if f.severity == "error")
        warnings = sum(1 for f in findings if f.severity == "warning")
        max_score = self._config.max_for(self.category)
        score = max(
            0.0,
            max_score
            - errors * self._config.length_error_deduction
            - warnings * self._config.length_warning_deduction,
        )
        if findings:
            logger.debug(
                f"[Length] {errors} errors, {warnings} warnings, "
                f"total {total} chars, score {score}"
            )

        return CheckResult(
            category=self.category,
            passed=errors == 0,
            score=score,
            max_score=max_score,
            findings=findings,
            details={"total_chars": total, "errors": errors, "warnings": warnings},
        )

    @staticmethod
    def _measure(
        path: str, text: str, bounds: LengthRange, findings: list[Finding]
    ) -> int:
        length = count_chars(text)
        if bounds.min is not None and length < bounds.min:
            findings.append(Finding(
                rule="length:too_short",
                severity="error",
                message=f"'{path}' has {length} characters; minimum is {bounds.min}",
                field_path=path,
                suggestion=f"Add at least {bounds.min - length} characters",
            ))
        elif bounds.max is not None and length > bounds.max:
            findings.append(Finding(
                rule="length:too_long",
                severity="warning",
                message=f"'{path}' has {length} characters; maximum is {bounds.max}",
                field_path=path,
                suggestion=f"Trim about {length - bounds.max} characters",
            ))
        return length
