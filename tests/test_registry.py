"""Rule registry -- tier ordering, replacement invariant, trust tiers, evidence levels."""

import pytest

from article_guard.enforcement.errors import RuleRegistryError
from article_guard.enforcement.models import Severity
from article_guard.enforcement.registry import (
    LAW_NAMES,
    RULE_TIERS,
    RuleRegistry,
    SEVERITY_IMPACT,
    boundary_contexts,
    compile_rules,
    literal_fragments,
)


def _rule(pattern, replacement, category="test"):
    return {"pattern": pattern, "category": category, "replacement": replacement, "rationale": "r"}


class TestTiers:
    """Tiers are an ordered list, highest severity first."""

    def test_default_order(self, registry):
        assert [s for s, _ in registry.tiers] == [
            Severity.CRITICAL, Severity.HIGH, Severity.MEDIUM, Severity.LOW,
        ]

    def test_order_does_not_depend_on_input_order(self):
        tiers = compile_rules([
            (Severity.LOW, [_rule("foo", "x")]),
            (Severity.CRITICAL, [_rule("bar", "y")]),
        ])
        registry = RuleRegistry(tiers)
        assert [s for s, _ in registry.tiers] == [Severity.CRITICAL, Severity.LOW]

    def test_tiers_at_or_above(self, registry):
        selected = [s for s, _ in registry.tiers_at_or_above(Severity.HIGH)]
        assert selected == [Severity.CRITICAL, Severity.HIGH]

    def test_default_impacts(self, registry):
        for severity, rules in registry.tiers:
            assert all(r.score_impact == SEVERITY_IMPACT[severity] for r in rules)
        assert SEVERITY_IMPACT[Severity.CRITICAL] == -10

    def test_every_tier_has_rules(self):
        assert all(entries for _, entries in RULE_TIERS)


class TestReplacementInvariant:
    """No replacement may be matched by any pattern."""

    def test_default_registry_satisfies_invariant(self, registry):
        for rule in registry.rules:
            for other in registry.rules:
                assert not other.pattern.search(rule.replacement), (
                    f"{rule.replacement!r} matches {other.pattern.pattern!r}"
                )

    def test_self_matching_replacement_rejected(self):
        with pytest.raises(RuleRegistryError, match="idempotent"):
            RuleRegistry(compile_rules([(Severity.HIGH, [_rule("効く", "よく効く")])]))

    def test_cross_tier_match_rejected(self):
        tiers = compile_rules([
            (Severity.CRITICAL, [_rule("治す", "最高の体調")]),
            (Severity.MEDIUM, [_rule("最高", "注目の")]),
        ])
        with pytest.raises(RuleRegistryError):
            RuleRegistry(tiers)

    def test_leading_fragment_completes_pattern(self):
        tiers = compile_rules([
            (Severity.CRITICAL, [_rule("治[るす]", "健康")]),
            (Severity.MEDIUM, [_rule("デトックス", "すっきり")]),
        ])
        with pytest.raises(RuleRegistryError, match="forms '治す'"):
            RuleRegistry(tiers)

    def test_multi_character_leading_fragment(self):
        tiers = compile_rules([
            (Severity.CRITICAL, [_rule("予防[すで]", "健康に配慮")]),
            (Severity.MEDIUM, [_rule("デトックス", "すっきり")]),
        ])
        with pytest.raises(RuleRegistryError, match="forms '予防す'"):
            RuleRegistry(tiers)

    def test_trailing_fragment_completes_pattern(self):
        tiers = compile_rules([
            (Severity.HIGH, [_rule("日本一", "注目の")]),
            (Severity.MEDIUM, [_rule("デトックス", "健やかな毎日")]),
        ])
        with pytest.raises(RuleRegistryError, match="forms '日本一'"):
            RuleRegistry(tiers)

    def test_invalid_pattern_rejected(self):
        with pytest.raises(RuleRegistryError, match="Invalid pattern"):
            compile_rules([(Severity.LOW, [_rule("(unclosed", "x")])])



class TestBoundaryContexts:
    """Pattern fragments a replacement is tested against."""

    def test_literal_fragments(self):
        assert literal_fragments(r"予防[すでし]|防止") == {"予防", "す", "で", "し", "防止"}
        assert literal_fragments(r"No\.?\s?1") == {"No", "1"}
        assert literal_fragments(r"(?:科学的|医学的)に(?:証明)") == {"科学的", "医学的", "に", "証明"}

    def test_heads_lead_and_tails_trail(self):
        rules = compile_rules([(Severity.LOW, [_rule("防止", "x")])])[0][1]
        leading, trailing = boundary_contexts(rules)
        # "防止" alone is a match and is left out of both
        assert leading == ["防"]
        assert trailing == ["止"]


class TestLaws:
    """Every shipped rule cites the law it enforces."""

    def test_every_rule_cites_a_law(self, registry):
        for rule in registry.rules:
            assert rule.law in LAW_NAMES, rule.pattern.pattern
            assert rule.law_article, rule.pattern.pattern

    def test_every_law_in_use(self, registry):
        assert set(registry.laws) == set(LAW_NAMES)

    def test_explanation_cites_law(self, registry):
        rule = next(r for r in registry.rules if r.category == "guarantee")
        assert rule.citation == "Health Promotion Act, Art. 65"
        assert rule.explanation == "Guarantees an outcome (Health Promotion Act, Art. 65)"

    def test_rule_without_law(self):
        rule = compile_rules([(Severity.LOW, [_rule("foo", "x")])])[0][1][0]
        assert rule.law == ""
        assert rule.explanation == "r"

    def test_filter_by_law(self, registry):
        tiers = registry.tiers_at_or_above(Severity.LOW, laws=("food_labeling",))
        assert [s for s, _ in tiers] == [Severity.MEDIUM]
        assert [r.category for _, rules in tiers for r in rules] == ["nutrition_labeling"]

    def test_ignore_categories(self, registry):
        tiers = registry.tiers_at_or_above(Severity.LOW, ignore_categories=("superlative",))
        categories = {r.category for _, rules in tiers for r in rules}
        assert "superlative" not in categories
        assert "guarantee" in categories

class TestTrustTiers:
    """Hostnames are classified by the first matching tier."""

    @pytest.mark.parametrize("host,tier", [
        ("pubmed.ncbi.nlm.nih.gov", "primary"),
        ("www.who.int", "primary"),
        ("www.mhlw.go.jp", "primary"),
        ("www.nature.com", "peer_reviewed"),
        ("www.jstage.jst.go.jp", "peer_reviewed"),
        ("examine.com", "reputable"),
        ("PubMed.NCBI.NLM.NIH.GOV", "primary"),
    ])
    def test_classify(self, registry, host, tier):
        assert registry.classify_host(host).name == tier

    def test_unknown_host(self, registry):
        assert registry.classify_host("example.com") is None

    def test_lookalike_host_not_trusted(self, registry):
        assert registry.classify_host("fakenih.gov") is None
        assert registry.classify_host("nih.gov.example.com") is None

    def test_top_score(self, registry):
        assert registry.top_trust_score == 3


class TestEvidenceLevels:

    def test_scores(self, registry):
        assert [(lv.label, lv.score) for lv in registry.evidence_levels] == [
            ("S", 10), ("A", 8), ("B", 6), ("C", 4), ("D", 2),
        ]

    def test_lookup(self, registry):
        assert registry.evidence_level("A").score == 8
        assert registry.evidence_level("Z") is None
