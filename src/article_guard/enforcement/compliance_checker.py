"""
ComplianceChecker -- scans article text for regulated health-claim terms.

Every string field (except identifier-like fields) is matched against the
registry's rules at or above a minimum severity. Each match becomes one
Violation carrying the sentence it appeared in.

Mitigating context: if an approved phrasing ("研究では", "個人差があります",
...) appears in the same sentence, the violation's deduction is halved. The
violation is still reported and still fails the check.

Score = max(0, category max - sum of |effective deductions|).

Rules can be narrowed to a set of laws and stripped of categories. The
result details count violations per severity, law and category, and give an
overall risk level.
"""

import logging
import re
from typing import Any

from .config import ValidatorConfig
from .models import CheckResult, Severity, Violation
from .registry import LAW_NAMES, Rule, RuleRegistry
from .walker import walk_text

logger = logging.getLogger(__name__)

SENTENCE_PATTERN = re.compile(r"[^。．！？!?\n]+[。．！？!?\n]*")
TERMINATORS = frozenset("。．！？!?\n")

# Score percentage floors for the risk level when no count rule applies.
RISK_THRESHOLDS: list[tuple[float, str]] = [(90, "safe"), (70, "low"), (50, "medium")]


def split_sentences(text: str) -> list[tuple[int, int]]:
    """Spans of sentence-like units; terminators stay with their sentence."""
    return [m.span() for m in SENTENCE_PATTERN.finditer(text)]


def find_context(text: str, position: int, fallback_length: int = 100) -> str:
    """The sentence containing `position`.

    Text without any terminator has no sentence structure; its first
    `fallback_length` characters stand in for the sentence.
    """
    if not any(ch in TERMINATORS for ch in text):
        return text[:fallback_length]
    for start, end in split_sentences(text):
        if start <= position < end:
            return text[start:end].strip()
    return text[:fallback_length]


def risk_level(by_severity: dict[str, int], percent: float) -> str:
    """Overall exposure from violation counts and the score as a percentage.

    Any critical violation, or three high ones, decides it; otherwise the
    score does (90+ safe, 70+ low, 50+ medium, below that high).
    """
    if by_severity.get(Severity.CRITICAL.value, 0):
        return "critical"
    if by_severity.get(Severity.HIGH.value, 0) >= 3:
        return "high"
    for threshold, level in RISK_THRESHOLDS:
        if percent >= threshold:
            return level
    return "high"


class ComplianceChecker:
    """Reports regulated expressions in an article.

    Usage:
        checker = ComplianceChecker(build_default_registry())
        result = checker.check({"description": "がんを治すサプリです。"})
        # result.passed is False, one critical violation

        # Health Promotion Act rules only, ignoring superlatives
        checker = ComplianceChecker(registry, laws=("health_promotion",),
                                    ignore_categories=("superlative",))
    """

    category = "compliance"

    def __init__(
        self,
        registry: RuleRegistry,
        config: ValidatorConfig | None = None,
        min_severity: Severity | None = None,
        laws: tuple[str, ...] | None = None,
        ignore_categories: tuple[str, ...] | None = None,
    ):
        self._registry = registry
        self._config = config or ValidatorConfig()
        self._min_severity = min_severity or self._config.min_severity
        self._laws = tuple(laws if laws is not None else self._config.compliance_laws)
        self._ignore_categories = tuple(
            ignore_categories if ignore_categories is not None
            else self._config.ignore_categories
        )
        known = set(LAW_NAMES) | set(registry.laws)
        unknown = [law for law in self._laws if law not in known]
        if unknown:
            raise ValueError(
                f"Unknown law '{unknown[0]}' (expected one of: {', '.join(sorted(known))})"
            )

    @classmethod
    def lenient(
        cls, registry: RuleRegistry, config: ValidatorConfig | None = None
    ) -> "ComplianceChecker":
        """Checker that only reports the critical tier."""
        return cls(registry, config, min_severity=Severity.CRITICAL)

    @property
    def laws(self) -> tuple[str, ...]:
        """Laws this checker applies, in registry order."""
        return self._laws or self._registry.laws

    def scan(self, document: Any) -> list[Violation]:
        """All violations in the document (plain or a node), in field order."""
        violations: list[Violation] = []
        tiers = self._registry.tiers_at_or_above(
            self._min_severity, self._laws or None, self._ignore_categories
        )
        for path, text in walk_text(document, self._config.compliance_exclude):
            if not text.strip():
                continue
            for _, rules in tiers:
                for rule in rules:
                    for match in rule.pattern.finditer(text):
                        violations.append(self._violation(path, text, rule, match))
        return violations

    def check(self, document: Any) -> CheckResult:
        """Scan the document and score it."""
        violations = self.scan(document)
        max_score = self._config.max_for(self.category)
        deduction = sum(abs(v.effective_score_impact) for v in violations)
        score = max(0.0, max_score - deduction)

        by_severity = {
            s.value: sum(1 for v in violations if v.severity == s)
            for s, _ in self._registry.tiers
        }
        by_category: dict[str, int] = {}
        for v in violations:
            by_category[v.category] = by_category.get(v.category, 0) + 1
        percent = score / max_score * 100 if max_score else 100.0
        risk = risk_level(by_severity, percent)

        if violations:
            mitigated = sum(1 for v in violations if v.mitigated)
            logger.debug(
                f"[Compliance] {len(violations)} violations "
                f"({by_severity.get('critical', 0)} critical, {mitigated} mitigated), "
                f"score {score}, risk {risk}"
            )

        return CheckResult(
            category=self.category,
            passed=not violations,
            score=score,
            max_score=max_score,
            findings=violations,
            details={
                "min_severity": self._min_severity.value,
                "laws": list(self.laws),
                "by_severity": by_severity,
                "by_law": {
                    law: sum(1 for v in violations if v.law == law) for law in self.laws
                },
                "by_category": by_category,
                "risk_level": risk,
            },
        )

    def _violation(self, path: str, text: str, rule: Rule, match: re.Match) -> Violation:
        context = find_context(text, match.start(), self._config.sentence_fallback_length)
        impact = rule.score_impact
        if any(phrase in context for phrase in self._registry.safe_expressions):
            effective = impact / 2
        else:
            effective = impact
        return Violation(
            field_path=path,
            matched_text=match.group(0),
            severity=rule.severity,
            category=rule.category,
            context_sentence=context,
            raw_score_impact=impact,
            effective_score_impact=effective,
            suggestion=f"Replace '{match.group(0)}' with '{rule.replacement}'",
            rationale=rule.explanation,
            law=rule.law,
        )
