"""
CitationValidator -- scores an article's reference list.

Each reference is a bare URL or an object with a "url" key. URLs are parsed
(never fetched): an entry is valid when it has an http(s) scheme and a
hostname, secure when the scheme is https. Hostnames are ranked against the
registry's trust tiers; the first matching tier wins and unknown hosts
score 0.

Score (clipped to the category max):
    min(5, count)                              baseline
  + valid / count * 5                          validity
  + mean tier score / top tier score * 5       trust
  + 1 if every entry is https                  secure bonus

Passes only with at least 5 references and at least 5 valid URLs.
"""

import logging
from dataclasses import dataclass
from typing import Any
from urllib.parse import urlparse

from .config import ValidatorConfig
from .models import CheckResult, Finding
from .registry import RuleRegistry
from .walker import index_path

logger = logging.getLogger(__name__)

ALLOWED_URL_SCHEMES = {"http", "https"}


@dataclass
class ReferenceCheck:
    """What was learned about one reference entry."""

    url: str
    valid: bool
    secure: bool = False
    tier: str | None = None
    tier_score: int = 0


def reference_url(entry: Any) -> str | None:
    """Pull the URL out of a reference entry, if it has one."""
    if isinstance(entry, str):
        return entry.strip()
    if isinstance(entry, dict) and isinstance(entry.get("url"), str):
        return entry["url"].strip()
    return None


class CitationValidator:
    """Validates reference URLs and weights them by source trust.

    Usage:
        validator = CitationValidator(build_default_registry())
        result = validator.check({"references": ["https://pubmed.ncbi.nlm.nih.gov/1/"]})
    """

    category = "citation"

    def __init__(self, registry: RuleRegistry, config: ValidatorConfig | None = None):
        self._registry = registry
        self._config = config or ValidatorConfig()

    def inspect(self, entry: Any) -> ReferenceCheck:
        """Parse one entry and classify its host."""
        url = reference_url(entry)
        if not url:
            return ReferenceCheck(url="", valid=False)
        try:
            parsed = urlparse(url)
            hostname = parsed.hostname
        except ValueError:
            return ReferenceCheck(url=url, valid=False)
        if parsed.scheme.lower() not in ALLOWED_URL_SCHEMES or not hostname:
            return ReferenceCheck(url=url, valid=False)

        tier = self._registry.classify_host(hostname)
        return ReferenceCheck(
            url=url,
            valid=True,
            secure=parsed.scheme.lower() == "https",
            tier=tier.name if tier else None,
            tier_score=tier.score if tier else 0,
        )

    def check(self, document: dict[str, Any]) -> CheckResult:
        field_name = self._config.references_field
        entries = document.get(field_name)
        if not isinstance(entries, list):
            entries = []
        if self._config.dedupe_references:
            entries = self._dedupe(entries)

        checks = [self.inspect(entry) for entry in entries]
        findings = self._findings(field_name, checks)
        max_score = self._config.max_for(self.category)
        count = len(checks)
        valid = sum(1 for c in checks if c.valid)

        if count == 0:
            score = 0.0
        else:
            top = self._registry.top_trust_score
            baseline = min(5, count)
            validity = valid / count * 5
            trust = (sum(c.tier_score for c in checks) / count / top * 5) if top else 0.0
            bonus = 1 if all(c.secure for c in checks) else 0
            score = round(min(max_score, baseline + validity + trust + bonus), 2)

        minimum = self._config.min_references
        passed = count >= minimum and valid >= minimum
        if not passed:
            findings.append(Finding(
                rule="citation:insufficient_references",
                severity="error",
                message=f"{valid} valid reference(s) out of {count}; at least {minimum} required",
                field_path=field_name,
                suggestion="Cite primary sources such as PubMed, Cochrane or government pages",
            ))
        logger.debug(f"[Citation] {valid}/{count} valid, score {score}")

        return CheckResult(
            category=self.category,
            passed=passed,
            score=score,
            max_score=max_score,
            findings=findings,
            details={
                "count": count,
                "valid": valid,
                "secure": sum(1 for c in checks if c.secure),
                "references": [
                    {"url": c.url, "valid": c.valid, "secure": c.secure, "tier": c.tier}
                    for c in checks
                ],
            },
        )

    @staticmethod
    def _dedupe(entries: list[Any]) -> list[Any]:
        seen = set()
        unique = []
        for entry in entries:
            url = reference_url(entry)
            if url and url in seen:
                continue
            if url:
                seen.add(url)
            unique.append(entry)
        return unique

    @staticmethod
    def _findings(field_name: str, checks: list[ReferenceCheck]) -> list[Finding]:
        findings = []
        for i, c in enumerate(checks):
            path = index_path(field_name, i)
            if not c.valid:
                findings.append(Finding(
                    rule="citation:malformed_url",
                    severity="warning",
                    message=f"Reference is not a valid http(s) URL: '{c.url}'",
                    field_path=path,
                    suggestion="Replace with a full https:// link to the source",
                ))
                continue
            if not c.secure:
                findings.append(Finding(
                    rule="citation:insecure_url",
                    severity="warning",
                    message=f"Reference does not use https: '{c.url}'",
                    field_path=path,
                    suggestion="Link to the https version of the page",
                ))
            if c.tier is None:
                findings.append(Finding(
                    rule="citation:untrusted_domain",
                    severity="warning",
                    message=f"Reference host is not a trusted source: '{c.url}'",
                    field_path=path,
                    suggestion="Prefer PubMed, Cochrane, WHO or government sources",
                ))
        return findings
