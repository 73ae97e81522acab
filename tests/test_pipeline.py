"""
End-to-end validation and remediation through the public entry points.
"""

import pytest

from article_guard.enforcement import (
    ArticleValidator,
    InputError,
    Severity,
    ValidatorConfig,
    remediate,
    validate,
)
from article_guard.enforcement import pipeline, walker
from article_guard.enforcement.pipeline import UNKNOWN_DOCUMENT, document_id_for
from article_guard.enforcement.scoring import READY_MESSAGE

from .conftest import SENTENCE, build_article


class TestValidate:

    def test_clean_article_is_perfect(self, article):
        report = validate(article)
        assert report.total_score == 100
        assert report.grade == "S"
        assert report.status == "pass"
        assert report.recommendations == (READY_MESSAGE,)
        assert report.document_id == "vitamin-c"
        assert all(r.passed for r in report.results.values())

    def test_categories_in_order(self, article):
        report = validate(article)
        assert list(report.category_scores) == [
            "structural", "compliance", "length", "citation", "evidence", "language",
        ]

    def test_regulated_claim_lowers_score(self):
        article = build_article(description=SENTENCE * 39 + "このサプリでがんが治る。")
        report = validate(article)
        compliance = report.results["compliance"]
        assert not compliance.passed
        assert report.category_scores["compliance"] < 20
        assert report.total_score < 100
        assert report.recommendations[0].startswith("Rewrite regulated health claims")

    def test_scores_bounded(self):
        report = validate({"name": "空"})
        for name, score in report.category_scores.items():
            assert 0 <= score <= report.max_scores[name]
        assert 0 <= report.total_score <= 100
        assert report.grade == "D"
        assert report.status == "fail"

    def test_non_object_rejected(self):
        with pytest.raises(InputError):
            validate(["not", "an", "article"])

    def test_untraversable_value_fails_before_any_check(self, article):
        article["faqs"][0]["answer"] = object()
        with pytest.raises(InputError):
            validate(article)

    def test_lenient_config(self):
        article = build_article(description=SENTENCE * 39 + "最高の成分です。")
        assert validate(article).results["compliance"].score == 17
        lenient = validate(article, config=ValidatorConfig.lenient())
        assert lenient.results["compliance"].score == 20

    def test_explicit_document_id(self, article):
        report = ArticleValidator().validate(article, document_id="custom")
        assert report.document_id == "custom"

    def test_document_converted_once(self, article, monkeypatch):
        roots = []
        convert = walker.to_node

        def counting(value, path="", depth=0):
            if depth == 0:
                roots.append(path)
            return convert(value, path, depth)

        monkeypatch.setattr(walker, "to_node", counting)
        monkeypatch.setattr(pipeline, "to_node", counting)
        assert ArticleValidator().validate(article).total_score == 100
        assert roots == [""]

    def test_law_filter_from_config(self):
        article = build_article(description=SENTENCE * 39 + "最高の成分です。")
        config = ValidatorConfig(compliance_laws=("health_promotion",))
        compliance = validate(article, config=config).results["compliance"]
        assert compliance.score == 20
        assert compliance.details["laws"] == ("health_promotion",)

    def test_unknown_law_in_config(self):
        with pytest.raises(ValueError, match="Unknown law"):
            ArticleValidator(config=ValidatorConfig(compliance_laws=("tax",)))

    def test_nested_details_read_only(self):
        article = build_article(description=SENTENCE * 39 + "必ず痩せる。")
        details = validate(article).results["compliance"].details
        assert details["risk_level"] == "critical"
        with pytest.raises(TypeError):
            details["by_severity"]["critical"] = 0


class TestDocumentId:

    def test_sources(self):
        assert document_id_for({"slug": "plain"}) == "plain"
        assert document_id_for({"slug": {"current": "nested"}}) == "nested"
        assert document_id_for({"slug": "", "name": "名前"}) == "名前"
        assert document_id_for({}) == UNKNOWN_DOCUMENT


class TestRemediate:

    def test_fixes_then_validates_clean(self):
        article = build_article(description=SENTENCE * 39 + "飲むだけで必ず痩せる。")
        result = remediate(article)
        assert result.change_count == 2
        assert validate(result.fixed_document).results["compliance"].passed
        assert "必ず" in article["description"]

    def test_idempotent(self):
        article = build_article(description=SENTENCE * 39 + "最高の即効サプリで若返る。")
        first = remediate(article)
        assert first.change_count == 3
        assert remediate(first.fixed_document).change_count == 0

    def test_threshold_accepts_string(self):
        article = build_article(description="最高の成分で必ず元気に。")
        result = remediate(article, "critical")
        assert [c.severity for c in result.changes] == [Severity.CRITICAL]

    def test_bad_threshold(self, article):
        with pytest.raises(ValueError, match="Unknown severity"):
            remediate(article, "urgent")
