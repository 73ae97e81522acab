"""
LanguageChecker -- flags untranslated foreign-language passages.

A leak is a run of consecutive Latin-alphabet words separated only by
whitespace, at least `foreign_run_min_words` long. Short Latin tokens
inside Japanese text ("DNA", "Vitamin C", "mg") are expected and ignored.
"""

import logging
import re
from typing import Any

from .config import ValidatorConfig
from .models import CheckResult, Finding
from .walker import walk_text

logger = logging.getLogger(__name__)

LATIN_WORD = r"[A-Za-z][A-Za-z'-]*"


def foreign_run_pattern(min_words: int) -> re.Pattern:
    return re.compile(rf"{LATIN_WORD}(?:\s+{LATIN_WORD}){{{min_words - 1},}}")


class LanguageChecker:
    """One finding per foreign-language run; each deducts one point."""

    category = "language"

    def __init__(self, config: ValidatorConfig | None = None):
        self._config = config or ValidatorConfig()
        self._pattern = foreign_run_pattern(self._config.foreign_run_min_words)

    def check(self, document: Any) -> CheckResult:
        findings = []
        preview_length = self._config.preview_length

        for path, text in walk_text(document, self._config.language_exclude):
            for match in self._pattern.finditer(text):
                preview = match.group(0)[:preview_length]
                findings.append(Finding(
                    rule="language:foreign_text",
                    severity="warning",
                    message=f"Untranslated passage in '{path}': '{preview}'",
                    field_path=path,
                    suggestion="Translate the passage or move it to an excluded field",
                ))

        max_score = self._config.max_for(self.category)
        score = max(0.0, max_score - len(findings))
        if findings:
            logger.debug(f"[Language] {len(findings)} foreign runs, score {score}")

        return CheckResult(
            category=self.category,
            passed=not findings,
            score=score,
            max_score=max_score,
            findings=findings,
        )
