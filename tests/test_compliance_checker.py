"""
Compliance checker -- regulated terms, mitigating context, severity filter.

CODE-BASED checks against the default registry.
"""

import pytest

from article_guard.enforcement.compliance_checker import (
    ComplianceChecker,
    find_context,
    risk_level,
    split_sentences,
)
from article_guard.enforcement.config import ValidatorConfig
from article_guard.enforcement.models import Severity
from article_guard.enforcement.walker import to_node


@pytest.fixture
def checker(registry):
    return ComplianceChecker(registry)


class TestDetection:
    """Each match of each rule is one violation."""

    def test_clean_text_passes(self, checker, article):
        result = checker.check(article)
        assert result.passed
        assert result.score == 20
        assert result.findings == ()

    def test_critical_term(self, checker):
        result = checker.check({"description": "この成分で必ず健康になります。"})
        assert not result.passed
        assert len(result.findings) == 1
        violation = result.findings[0]
        assert violation.severity == Severity.CRITICAL
        assert violation.matched_text == "必ず"
        assert violation.category == "guarantee"
        assert violation.raw_score_impact == -10
        assert violation.effective_score_impact == -10
        assert result.score == 10

    def test_every_occurrence_counted(self, checker):
        result = checker.check({"description": "必ず飲む。必ず続ける。"})
        assert len(result.findings) == 2
        assert result.score == 0

    def test_field_paths_and_tier_order(self, checker):
        violations = checker.scan({"faqs": [{"question": "q", "answer": "必ず効く。"}]})
        assert [(v.field_path, v.severity) for v in violations] == [
            ("faqs[0].answer", Severity.CRITICAL),
            ("faqs[0].answer", Severity.HIGH),
        ]

    def test_case_insensitive(self, checker):
        violations = checker.scan({"description": "NO.1の人気成分です。"})
        assert [v.matched_text for v in violations] == ["NO.1"]
        assert violations[0].severity == Severity.MEDIUM

    def test_excluded_fields_not_scanned(self, checker):
        doc = {"nameEn": "必ず", "slug": "必ず", "references": ["必ず"], "description": "ok"}
        assert checker.scan(doc) == []

    def test_score_never_negative(self, checker):
        result = checker.check({"description": "必ず。絶対。確実に。間違いなく。"})
        assert result.score == 0

    def test_by_severity_details(self, checker):
        result = checker.check({"description": "最高の品質です。必ず満足します。"})
        assert result.details["by_severity"] == {
            "critical": 1, "high": 0, "medium": 1, "low": 0,
        }


class TestMitigation:
    """Approved phrasing in the same sentence halves the deduction."""

    def test_halved_in_same_sentence(self, checker):
        violations = checker.scan({"description": "研究では必ず結果が出ると報告されています。"})
        assert len(violations) == 1
        assert violations[0].raw_score_impact == -10
        assert violations[0].effective_score_impact == -5
        assert violations[0].mitigated

    def test_other_sentence_does_not_mitigate(self, checker):
        violations = checker.scan({"description": "研究では注目されています。必ず結果が出ます。"})
        assert violations[0].context_sentence == "必ず結果が出ます。"
        assert violations[0].effective_score_impact == -10

    def test_mitigated_violation_still_fails(self, checker):
        result = checker.check({"description": "個人差がありますが、必ず続けましょう。"})
        assert result.score == 15
        assert not result.passed


class TestMonotonicDeduction:

    def test_adding_critical_term_never_raises_score(self, checker):
        scores = []
        for n in range(5):
            text = "ビタミンCの話です。" + "必ず飲みます。" * n
            scores.append(checker.check({"description": text}).score)
        assert scores == sorted(scores, reverse=True)
        assert scores[0] == 20


class TestSeverityThreshold:
    """One registry serves strict and lenient passes."""

    def test_strict_reports_all_tiers(self, checker):
        result = checker.check({"description": "最高の品質です。必ず満足します。"})
        assert len(result.findings) == 2
        assert result.score == 7

    def test_lenient_reports_critical_only(self, registry):
        lenient = ComplianceChecker.lenient(registry)
        result = lenient.check({"description": "最高の品質です。必ず満足します。"})
        assert [v.severity for v in result.findings] == [Severity.CRITICAL]
        assert result.score == 10

    def test_threshold_from_config(self, registry):
        checker = ComplianceChecker(registry, ValidatorConfig(min_severity=Severity.HIGH))
        assert checker.scan({"description": "在庫わずかです。"}) == []


class TestSentences:

    def test_split_keeps_terminators(self):
        text = "一文目。二文目！三文目"
        assert [text[s:e] for s, e in split_sentences(text)] == ["一文目。", "二文目！", "三文目"]

    def test_context_is_containing_sentence(self):
        text = "最初の文です。必ず効きます。最後の文。"
        assert find_context(text, text.index("必ず")) == "必ず効きます。"

    def test_fallback_without_terminator(self):
        text = "必ず" + "あ" * 150
        assert find_context(text, 0) == text[:100]
        assert find_context(text, 0, fallback_length=10) == text[:10]


class TestRuleFamilies:
    """Disease names, skin and circulation claims, hormones and antibacterial wording."""

    @pytest.mark.parametrize("text,matched,category", [
        ("動脈硬化を予防します。", "動脈硬化を予防", "disease_treatment"),
        ("うつ病を改善する。", "うつ病を改善", "disease_treatment"),
        ("認知症を予防。", "認知症を予防", "disease_treatment"),
        ("アトピーを治す。", "アトピーを治す", "disease_treatment"),
        ("花粉症を治す。", "花粉症を治す", "disease_treatment"),
        ("ホルモンバランスを整える。", "ホルモンバランス", "body_function"),
        ("シワが消える。", "シワが消える", "beauty_claim"),
        ("シミを消す。", "シミを消す", "beauty_claim"),
        ("抗菌作用があります。", "抗菌作用", "medical_effect"),
        ("代謝アップ。", "代謝アップ", "body_function"),
        ("血液サラサラに。", "血液サラサラ", "body_function"),
    ])
    def test_detected(self, checker, text, matched, category):
        violation = checker.scan({"description": text})[0]
        assert violation.matched_text == matched
        assert violation.category == category
        assert violation.law == "pharmaceutical_affairs"


class TestLawDetails:
    """Violations carry their law; details count by law and category."""

    def test_violation_cites_law(self, checker):
        violation = checker.scan({"description": "必ず満足します。"})[0]
        assert violation.law == "health_promotion"
        assert violation.rationale.endswith("(Health Promotion Act, Art. 65)")

    def test_counts(self, checker, registry):
        result = checker.check({"description": "最高の品質です。必ず満足します。"})
        assert result.details["laws"] == registry.laws
        by_law = result.details["by_law"]
        assert set(by_law) == set(registry.laws)
        assert by_law["health_promotion"] == 1
        assert by_law["premiums_representations"] == 1
        assert by_law["pharmaceutical_affairs"] == 0
        assert result.details["by_category"] == {"guarantee": 1, "superlative": 1}

    def test_clean_article_counts_nothing(self, checker, article):
        details = checker.check(article).details
        assert not any(details["by_law"].values())
        assert details["by_category"] == {}
        assert details["risk_level"] == "safe"

    def test_accepts_node(self, checker):
        doc = {"description": "最高の品質です。必ず満足します。"}
        assert checker.scan(to_node(doc)) == checker.scan(doc)


class TestRiskLevel:

    @pytest.mark.parametrize("by_severity,percent,level", [
        ({"critical": 1}, 100, "critical"),
        ({"high": 3}, 95, "high"),
        ({"high": 2}, 95, "safe"),
        ({}, 90, "safe"),
        ({}, 89, "low"),
        ({}, 70, "low"),
        ({}, 69, "medium"),
        ({}, 50, "medium"),
        ({}, 49, "high"),
    ])
    def test_levels(self, by_severity, percent, level):
        assert risk_level(by_severity, percent) == level

    def test_in_details(self, checker):
        assert checker.check({"description": "必ず満足します。"}).details["risk_level"] == "critical"
        # one medium deduction leaves 17 of 20
        assert checker.check({"description": "最高の品質です。"}).details["risk_level"] == "low"


class TestLawFilters:
    """Checks can be limited to some laws or skip rule categories."""

    TEXT = {"description": "最高の品質です。必ず満足します。"}

    def test_single_law(self, registry):
        checker = ComplianceChecker(registry, laws=("health_promotion",))
        result = checker.check(self.TEXT)
        assert [v.matched_text for v in result.findings] == ["必ず"]
        assert result.score == 10
        assert result.details["laws"] == ("health_promotion",)
        assert result.details["by_law"] == {"health_promotion": 1}

    def test_laws_from_config(self, registry):
        config = ValidatorConfig(compliance_laws=("premiums_representations",))
        violations = ComplianceChecker(registry, config).scan(self.TEXT)
        assert [v.matched_text for v in violations] == ["最高"]

    def test_ignore_categories(self, registry):
        checker = ComplianceChecker(registry, ignore_categories=("superlative",))
        result = checker.check(self.TEXT)
        assert [v.category for v in result.findings] == ["guarantee"]
        assert "superlative" not in result.details["by_category"]

    def test_ignore_categories_from_config(self, registry):
        config = ValidatorConfig(ignore_categories=("guarantee",))
        violations = ComplianceChecker(registry, config).scan(self.TEXT)
        assert [v.category for v in violations] == ["superlative"]

    def test_unknown_law_rejected(self, registry):
        with pytest.raises(ValueError, match="Unknown law 'tax'"):
            ComplianceChecker(registry, laws=("tax",))
