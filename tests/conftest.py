"""Test fixtures -- a publishable article, the default registry and config."""

import copy

import pytest

from article_guard.enforcement import ValidatorConfig, build_default_registry

# 19 counted characters (the full-width full stop counts)
SENTENCE = "ビタミンCは水溶性ビタミンの一種です。"
QUESTION = "ビタミンCはいつ摂るべきですか？"

TRUSTED_REFERENCES = [f"https://pubmed.ncbi.nlm.nih.gov/1000000{i}/" for i in range(6)]

CLEAN_ARTICLE = {
    "_id": "ingredient-vitamin-c",
    "_type": "ingredient",
    "name": "ビタミンC",
    "nameEn": "Vitamin C",
    "slug": {"_type": "slug", "current": "vitamin-c"},
    "category": "ビタミン",
    "description": SENTENCE * 40,
    "recommendedDosage": SENTENCE * 10,
    "sideEffects": SENTENCE * 6,
    "benefits": [SENTENCE * 2 for _ in range(5)],
    "faqs": [{"question": QUESTION, "answer": SENTENCE * 10} for _ in range(5)],
    "interactions": [
        "鉄の吸収を助けるとされています。",
        "ビタミンEと一緒に摂る組み合わせが知られています。",
        "抗凝固薬を服用中の方は医師に相談してください。",
    ],
    "foodSources": ["アセロラ", "キウイ", "ブロッコリー"],
    "references": TRUSTED_REFERENCES,
    "evidenceLevel": "S",
}


def build_article(**overrides):
    """A fresh copy of the clean article with top-level fields replaced."""
    article = copy.deepcopy(CLEAN_ARTICLE)
    article.update(overrides)
    return article


@pytest.fixture
def article():
    """Article that scores 100 / S / pass."""
    return build_article()


@pytest.fixture
def registry():
    return build_default_registry()


@pytest.fixture
def config():
    return ValidatorConfig()
