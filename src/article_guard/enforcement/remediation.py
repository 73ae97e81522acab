"""
Remediator -- rewrites regulated terms into their approved alternatives.

Tiers are applied highest severity first, rules in registry order, so a
critical phrase ("がんを治す") is rewritten as a whole before the generic
lower-tier terms inside it get a chance to match. Every substitution is
recorded as one Change; change_count is the number of substitutions.

The caller's document is never modified; a rebuilt copy is returned.
The registry rejects replacements that would match a pattern, alone or
joined to pattern fragments, and each string is rewritten until no rule
matches; remediating an already-fixed document makes no changes.
"""

import logging
import re
from typing import Any

from .config import ValidatorConfig
from .errors import RuleRegistryError
from .models import Change, RemediationResult, Severity
from .registry import Rule, RuleRegistry
from .walker import ensure_document, rewrite_text

logger = logging.getLogger(__name__)

MAX_PASSES = 5


class Remediator:
    """Applies registry replacements to every scanned field.

    Usage:
        remediator = Remediator(build_default_registry())
        result = remediator.remediate(article)
        print(result.change_count, result.fixed_document["description"])
    """

    def __init__(
        self,
        registry: RuleRegistry,
        config: ValidatorConfig | None = None,
        min_severity: Severity | None = None,
    ):
        self._registry = registry
        self._config = config or ValidatorConfig()
        self._min_severity = min_severity or self._config.remediation_threshold

    def remediate(self, document: Any) -> RemediationResult:
        """Return the rewritten document and the substitutions made."""
        ensure_document(document)
        changes: list[Change] = []

        def fix(path: str, text: str) -> str:
            return self.fix_text(text, path, changes)

        fixed = rewrite_text(document, fix, self._config.compliance_exclude)
        result = RemediationResult(
            original_document=document,
            fixed_document=fixed,
            changes=changes,
        )
        if changes:
            logger.info(
                f"[Remediation] {result.change_count} substitutions in "
                f"{len(result.changed_fields)} fields"
            )
        return result

    def fix_text(
        self, text: str, path: str = "", changes: list[Change] | None = None
    ) -> str:
        """Rewrite one string, appending a Change per substitution.

        Passes over the tiers repeat until one makes no substitution, so a
        replacement that completes a pattern together with its neighbours
        is rewritten too and the result holds no regulated term.
        """
        if changes is None:
            changes = []
        tiers = self._registry.tiers_at_or_above(self._min_severity)
        fixed = text
        for _ in range(MAX_PASSES):
            before = len(changes)
            for _, rules in tiers:
                for rule in rules:
                    fixed = rule.pattern.sub(self._recorder(rule, path, changes), fixed)
            if len(changes) == before:
                return fixed
        raise RuleRegistryError(
            f"Replacements at '{path or '<text>'}' still match after "
            f"{MAX_PASSES} passes; the rule set rewrites its own output"
        )

    @staticmethod
    def _recorder(rule: Rule, path: str, changes: list[Change]):
        def replace(match: re.Match) -> str:
            changes.append(Change(
                field_path=path,
                severity=rule.severity,
                original=match.group(0),
                replacement=rule.replacement,
                rationale=rule.explanation,
            ))
            return rule.replacement

        return replace
