"""
RuleRegistry -- the immutable catalog every checker and the remediator read.

Holds three tables:
  - Regulated-term rules, grouped into severity tiers (critical > high >
    medium > low). Each rule carries a deduction, an approved replacement,
    a rationale, and the law (and article) it comes from.
  - Trusted citation domains, grouped into trust tiers (highest first).
  - The evidence-level taxonomy (S/A/B/C/D).

Tiers are ordered lists of (severity, rules) tuples, never dicts, so the
remediation pass always rewrites critical terms before lower tiers.

Invariant: no rule's replacement may match any rule's pattern, either on its
own or joined to a fragment of another pattern ("治" + "す..." would form
"治す"). The registry checks this when it is built and raises
RuleRegistryError otherwise.
"""

import logging
import re
from dataclasses import dataclass
from functools import lru_cache

from .errors import RuleRegistryError
from .models import Severity

logger = logging.getLogger(__name__)

LAW_NAMES: dict[str, str] = {
    "pharmaceutical_affairs": "Pharmaceutical Affairs Act",
    "health_promotion": "Health Promotion Act",
    "food_labeling": "Food Labeling Act",
    "food_sanitation": "Food Sanitation Act",
    "premiums_representations": "Premiums and Representations Act",
    "specified_commercial_transactions": "Specified Commercial Transactions Act",
}


@dataclass(frozen=True)
class Rule:
    """A regulated-term pattern and its approved alternative."""

    pattern: re.Pattern
    category: str
    severity: Severity
    score_impact: float
    replacement: str
    rationale: str
    law: str = ""
    law_article: str = ""

    @property
    def citation(self) -> str:
        """Law name and article, e.g. "Health Promotion Act, Art. 65"."""
        if not self.law:
            return ""
        name = LAW_NAMES.get(self.law, self.law)
        return f"{name}, {self.law_article}" if self.law_article else name

    @property
    def explanation(self) -> str:
        citation = self.citation
        return f"{self.rationale} ({citation})" if citation else self.rationale


@dataclass(frozen=True)
class TrustTier:
    """A named group of citation domains sharing one trust score."""

    name: str
    score: int
    domains: tuple[str, ...]

    def matches(self, hostname: str) -> bool:
        host = hostname.lower().rstrip(".")
        return any(host == d or host.endswith("." + d) for d in self.domains)


@dataclass(frozen=True)
class EvidenceLevel:
    """One label of the evidence taxonomy."""

    label: str
    score: int
    description: str


SEVERITY_IMPACT: dict[Severity, float] = {
    Severity.CRITICAL: -10,
    Severity.HIGH: -5,
    Severity.MEDIUM: -3,
    Severity.LOW: -1,
}

# Order inside a tier matters: specific phrases come before the generic
# terms they contain.
RULE_TIERS: list[tuple[Severity, list[dict]]] = [
    (Severity.CRITICAL, [
        {"pattern": r"(?:がん|癌)(?:を|が|に)?(?:治す|治る|治療|予防|防ぐ)", "category": "disease_treatment",
         "replacement": "健やかな毎日をサポート",
         "law": "pharmaceutical_affairs", "law_article": "Art. 68",
         "rationale": "Claims to treat or prevent cancer"},
        {"pattern": r"糖尿病(?:を|が|に)?(?:治す|治る|治療|予防)", "category": "disease_treatment",
         "replacement": "糖質バランスに配慮",
         "law": "pharmaceutical_affairs", "law_article": "Art. 68",
         "rationale": "Claims to treat or prevent diabetes"},
        {"pattern": r"高血圧(?:を|が|に)?(?:治す|治る|治療|予防|改善)", "category": "disease_treatment",
         "replacement": "めぐりをサポート",
         "law": "pharmaceutical_affairs", "law_article": "Art. 68",
         "rationale": "Claims to treat hypertension"},
        {"pattern": r"動脈硬化(?:を|が|に)?(?:治す|治る|治療|予防|改善)", "category": "disease_treatment",
         "replacement": "血管の健康をサポート",
         "law": "pharmaceutical_affairs", "law_article": "Art. 68",
         "rationale": "Claims to treat or prevent arteriosclerosis"},
        {"pattern": r"(?:うつ病|鬱病)(?:を|が|に)?(?:治す|治る|治療|予防|改善)", "category": "disease_treatment",
         "replacement": "心の健康をサポート",
         "law": "pharmaceutical_affairs", "law_article": "Art. 68",
         "rationale": "Claims to treat or prevent depression"},
        {"pattern": r"(?:認知症|アルツハイマー)(?:を|が|に)?(?:治す|治る|治療|予防|改善)",
         "category": "disease_treatment",
         "replacement": "考える力をサポート",
         "law": "pharmaceutical_affairs", "law_article": "Art. 68",
         "rationale": "Claims to treat or prevent dementia"},
        {"pattern": r"アトピー(?:性皮膚炎)?(?:を|が|に)?(?:治す|治る|治療|改善)", "category": "disease_treatment",
         "replacement": "肌の調子を整える",
         "law": "pharmaceutical_affairs", "law_article": "Art. 68",
         "rationale": "Claims to treat atopic dermatitis"},
        {"pattern": r"花粉症(?:を|が|に)?(?:治す|治る|治療|改善)", "category": "disease_treatment",
         "replacement": "季節の健康維持に",
         "law": "pharmaceutical_affairs", "law_article": "Art. 68",
         "rationale": "Claims to treat hay fever"},
        {"pattern": r"血圧(?:を|が)?(?:下げる|下がる|低下させる)", "category": "body_function",
         "replacement": "めぐりをサポート",
         "law": "pharmaceutical_affairs", "law_article": "Art. 68",
         "rationale": "Claims a change in body function"},
        {"pattern": r"血糖値(?:を|が)?(?:下げる|下がる|低下させる)", "category": "body_function",
         "replacement": "糖質バランスをサポート",
         "law": "pharmaceutical_affairs", "law_article": "Art. 68",
         "rationale": "Claims a change in body function"},
        {"pattern": r"コレステロール(?:を|が)?(?:下げる|下がる|減らす)", "category": "body_function",
         "replacement": "脂質バランスをサポート",
         "law": "pharmaceutical_affairs", "law_article": "Art. 68",
         "rationale": "Claims a change in body function"},
        {"pattern": r"ホルモン(?:を|の)?(?:調整|バランス|整える|正常化)", "category": "body_function",
         "replacement": "健やかなリズムをサポート",
         "law": "pharmaceutical_affairs", "law_article": "Art. 68",
         "rationale": "Claims to act on hormone function"},
        {"pattern": r"(?:シワ|たるみ)(?:を|が)?(?:消す|消える|なくす|なくなる|改善|除去)",
         "category": "beauty_claim",
         "replacement": "ハリのある印象に",
         "law": "pharmaceutical_affairs", "law_article": "Art. 66",
         "rationale": "Asserts removal of wrinkles"},
        {"pattern": r"(?:シミ|くすみ)(?:を|が)?(?:消す|消える|なくす|なくなる|改善|除去)|美白効果",
         "category": "beauty_claim",
         "replacement": "透明感のある印象に",
         "law": "pharmaceutical_affairs", "law_article": "Art. 68",
         "rationale": "Asserts removal of blemishes, a quasi-drug efficacy"},
        {"pattern": r"老化(?:を|が)?(?:防ぐ|止める|遅らせる)|老化防止", "category": "beauty_claim",
         "replacement": "年齢に応じた健康をサポート",
         "law": "pharmaceutical_affairs", "law_article": "Art. 66",
         "rationale": "Claims to stop aging"},
        {"pattern": r"治[るりすせ]|治療|治癒|完治|根治", "category": "disease_treatment",
         "replacement": "健康維持をサポート",
         "law": "pharmaceutical_affairs", "law_article": "Art. 68",
         "rationale": "Claims to cure a disease"},
        {"pattern": r"予防[すでし]|予防効果|防[ぐぎげ]|防止", "category": "disease_prevention",
         "replacement": "健康な状態の維持に配慮",
         "law": "pharmaceutical_affairs", "law_article": "Art. 68",
         "rationale": "Claims to prevent a disease"},
        {"pattern": r"副作用(?:なし|ゼロ|がない)|絶対安全|完全無害", "category": "safety_claim",
         "replacement": "体質に合わせてご利用ください",
         "law": "health_promotion", "law_article": "Art. 65",
         "rationale": "Guarantees safety"},
        {"pattern": r"必ず|絶対に?|確実に|間違いなく", "category": "guarantee",
         "replacement": "継続的に",
         "law": "health_promotion", "law_article": "Art. 65",
         "rationale": "Guarantees an outcome"},
        {"pattern": r"若返[るりっ]", "category": "beauty_claim",
         "replacement": "年齢に応じた美容",
         "law": "pharmaceutical_affairs", "law_article": "Art. 66",
         "rationale": "Asserts a rejuvenating effect"},
    ]),
    (Severity.HIGH, [
        {"pattern": r"即効|すぐに効く|飲んですぐ", "category": "speed_claim",
         "replacement": "毎日の習慣として",
         "law": "health_promotion", "law_article": "Art. 65",
         "rationale": "Claims immediate effect"},
        {"pattern": r"(?:殺菌|抗菌|滅菌)(?:効果|作用)?", "category": "medical_effect",
         "replacement": "清潔感",
         "law": "pharmaceutical_affairs", "law_article": "Art. 66",
         "rationale": "Asserts an antimicrobial effect"},
        {"pattern": r"効く|効きます|効果がある|効能", "category": "medical_effect",
         "replacement": "役立つ可能性がある",
         "law": "pharmaceutical_affairs", "law_article": "Art. 66",
         "rationale": "Asserts a medicinal effect"},
        {"pattern": r"改善(?:する|します|した|効果)", "category": "medical_effect",
         "replacement": "サポート",
         "law": "pharmaceutical_affairs", "law_article": "Art. 66",
         "rationale": "Asserts an improvement effect"},
        {"pattern": r"脂肪燃焼|脂肪を燃やす", "category": "body_function",
         "replacement": "運動時のエネルギー消費をサポート",
         "law": "pharmaceutical_affairs", "law_article": "Art. 66",
         "rationale": "Claims a change in body function"},
        {"pattern": r"(?:新陳)?代謝(?:を|が)?(?:上げる|上がる|促進|活性化|アップ)", "category": "body_function",
         "replacement": "活動的な毎日をサポート",
         "law": "pharmaceutical_affairs", "law_article": "Art. 66",
         "rationale": "Claims to raise metabolism"},
        {"pattern": r"血(?:液|流)(?:を|が)?(?:サラサラ|浄化|きれい)", "category": "body_function",
         "replacement": "めぐりをサポート",
         "law": "pharmaceutical_affairs", "law_article": "Art. 66",
         "rationale": "Claims to purify the blood"},
        {"pattern": r"免疫力(?:を|が)?(?:高める|強化|アップ)", "category": "body_function",
         "replacement": "健康維持をサポート",
         "law": "pharmaceutical_affairs", "law_article": "Art. 66",
         "rationale": "Claims a change in body function"},
        {"pattern": r"(?:医師|専門家)が?(?:推奨|推薦|お墨付き)", "category": "testimonial_misuse",
         "replacement": "研究されている成分",
         "law": "health_promotion", "law_article": "Art. 65",
         "rationale": "Borrows professional authority"},
        {"pattern": r"(?:科学的|医学的)に(?:証明|実証)|臨床試験で証明", "category": "exaggeration",
         "replacement": "研究が行われています",
         "law": "health_promotion", "law_article": "Art. 65",
         "rationale": "Overstates the scientific basis"},
        {"pattern": r"診断|処方|投与", "category": "medical_term",
         "replacement": "ご相談",
         "law": "pharmaceutical_affairs", "law_article": "Art. 66",
         "rationale": "Medical-practice terminology"},
        {"pattern": r"痩せる|やせる", "category": "diet_claim",
         "replacement": "体重管理をサポート",
         "law": "health_promotion", "law_article": "Art. 65",
         "rationale": "Asserts weight loss"},
        {"pattern": r"完全無添加|無添加だから安全", "category": "additive_labeling",
         "replacement": "原材料にこだわった配合",
         "law": "food_sanitation", "law_article": "Art. 19",
         "rationale": "Implies safety from the absence of additives"},
    ]),
    (Severity.MEDIUM, [
        {"pattern": r"最高|最強|No\.?\s?1|ナンバーワン|業界一|日本一|世界一", "category": "superlative",
         "replacement": "注目の",
         "law": "premiums_representations", "law_article": "Art. 5",
         "rationale": "Superlative without objective basis"},
        {"pattern": r"カロリーゼロ|糖質ゼロ|ノンカロリー", "category": "nutrition_labeling",
         "replacement": "栄養成分に配慮した",
         "law": "food_labeling", "law_article": "Labeling Standards Art. 7",
         "rationale": "Nutrient claim requires labeling-standard figures"},
        {"pattern": r"アンチエイジング", "category": "beauty_claim",
         "replacement": "年齢に応じた美容",
         "law": "pharmaceutical_affairs", "law_article": "Art. 66",
         "rationale": "Implies reversal of aging"},
        {"pattern": r"デトックス", "category": "body_function",
         "replacement": "健やかなめぐり",
         "law": "pharmaceutical_affairs", "law_article": "Art. 66",
         "rationale": "Implies detoxification of the body"},
    ]),
    (Severity.LOW, [
        {"pattern": r"今だけ|期間限定|本日限り", "category": "advantage_misleading",
         "replacement": "ただいま",
         "law": "premiums_representations", "law_article": "Art. 5",
         "rationale": "Time-limited offer must match reality"},
        {"pattern": r"在庫わずか|売り切れ間近", "category": "pressure_selling",
         "replacement": "在庫状況をご確認ください",
         "law": "specified_commercial_transactions", "law_article": "Art. 12",
         "rationale": "Stock pressure must match reality"},
    ]),
]

# Approved phrasings; a violation sharing a sentence with one of these is
# mitigated (its deduction is halved) but still reported.
SAFE_EXPRESSIONS: tuple[str, ...] = (
    "研究では",
    "報告されています",
    "と言われています",
    "可能性があります",
    "個人差があります",
    "効果を保証するものではありません",
    "目的としたものではありません",
    "医師に相談",
    "バランスの取れた食生活",
)

TRUST_TIERS: list[dict] = [
    {"name": "primary", "score": 3, "domains": [
        "pubmed.ncbi.nlm.nih.gov", "ncbi.nlm.nih.gov", "nih.gov", "cochranelibrary.com",
        "who.int", "fda.gov", "mhlw.go.jp", "caa.go.jp", "nibiohn.go.jp", "efsa.europa.eu",
    ]},
    {"name": "peer_reviewed", "score": 2, "domains": [
        "nature.com", "sciencedirect.com", "springer.com", "jamanetwork.com", "nejm.org",
        "thelancet.com", "bmj.com", "wiley.com", "academic.oup.com", "jstage.jst.go.jp",
        "mdpi.com", "frontiersin.org",
    ]},
    {"name": "reputable", "score": 1, "domains": [
        "examine.com", "mayoclinic.org", "health.harvard.edu", "clevelandclinic.org",
        "msdmanuals.com", "webmd.com",
    ]},
]

EVIDENCE_LEVELS: list[dict] = [
    {"label": "S", "score": 10, "description": "Established by multiple large RCTs or meta-analyses"},
    {"label": "A", "score": 8, "description": "Supported by well-designed RCTs"},
    {"label": "B", "score": 6, "description": "Limited RCTs or consistent observational studies"},
    {"label": "C", "score": 4, "description": "Animal studies or small pilot studies only"},
    {"label": "D", "score": 2, "description": "Anecdotal or theoretical support only"},
]


class RuleRegistry:
    """Immutable rule, trust-tier and evidence catalog.

    Usage:
        registry = build_default_registry()
        for severity, rules in registry.tiers_at_or_above(Severity.HIGH):
            ...
    """

    def __init__(
        self,
        tiers: list[tuple[Severity, list[Rule]]],
        safe_expressions: tuple[str, ...] = (),
        trust_tiers: tuple[TrustTier, ...] = (),
        evidence_levels: tuple[EvidenceLevel, ...] = (),
    ):
        ordered = sorted(tiers, key=lambda t: t[0].rank, reverse=True)
        self._tiers: tuple[tuple[Severity, tuple[Rule, ...]], ...] = tuple(
            (severity, tuple(rules)) for severity, rules in ordered
        )
        self._safe_expressions = tuple(safe_expressions)
        self._trust_tiers = tuple(sorted(trust_tiers, key=lambda t: t.score, reverse=True))
        self._evidence_levels = tuple(evidence_levels)
        self._check_replacements()

    @property
    def tiers(self) -> tuple[tuple[Severity, tuple[Rule, ...]], ...]:
        return self._tiers

    @property
    def safe_expressions(self) -> tuple[str, ...]:
        return self._safe_expressions

    @property
    def trust_tiers(self) -> tuple[TrustTier, ...]:
        return self._trust_tiers

    @property
    def evidence_levels(self) -> tuple[EvidenceLevel, ...]:
        return self._evidence_levels

    @property
    def rules(self) -> list[Rule]:
        return [rule for _, rules in self._tiers for rule in rules]

    @property
    def top_trust_score(self) -> int:
        return self._trust_tiers[0].score if self._trust_tiers else 0

    @property
    def laws(self) -> tuple[str, ...]:
        """Law keys used by at least one rule, in rule order."""
        return tuple(dict.fromkeys(rule.law for rule in self.rules if rule.law))

    @property
    def categories(self) -> tuple[str, ...]:
        return tuple(dict.fromkeys(rule.category for rule in self.rules))

    def tiers_at_or_above(
        self,
        minimum: Severity,
        laws: tuple[str, ...] | None = None,
        ignore_categories: tuple[str, ...] = (),
    ) -> list[tuple[Severity, tuple[Rule, ...]]]:
        """Tiers whose severity is at least `minimum`, highest first.

        `laws` keeps only the rules citing one of those laws and
        `ignore_categories` drops rules by category. Tiers left without
        rules are omitted.
        """
        selected = []
        for severity, rules in self._tiers:
            if not severity.at_least(minimum):
                continue
            kept = tuple(
                r for r in rules
                if (not laws or r.law in laws) and r.category not in ignore_categories
            )
            if kept:
                selected.append((severity, kept))
        return selected

    def classify_host(self, hostname: str) -> TrustTier | None:
        """First trust tier containing the hostname, or None if untrusted."""
        for tier in self._trust_tiers:
            if tier.matches(hostname):
                return tier
        return None

    def evidence_level(self, label: str) -> EvidenceLevel | None:
        for level in self._evidence_levels:
            if level.label == label:
                return level
        return None

    def _check_replacements(self) -> None:
        """Fail fast if any replacement would be rewritten again.

        Each replacement is tested alone, then with every literal fragment
        of every pattern placed directly before and after it.
        """
        rules = self.rules
        for rule in rules:
            for other in rules:
                match = other.pattern.search(rule.replacement)
                if match:
                    raise RuleRegistryError(
                        f"Replacement '{rule.replacement}' for pattern "
                        f"'{rule.pattern.pattern}' matches pattern "
                        f"'{other.pattern.pattern}' ('{match.group(0)}'); "
                        f"remediation would not be idempotent"
                    )

        leading, trailing = boundary_contexts(rules)
        for rule in rules:
            joins = [c + rule.replacement for c in leading]
            joins += [rule.replacement + c for c in trailing]
            for joined in joins:
                for other in rules:
                    match = other.pattern.search(joined)
                    if match:
                        raise RuleRegistryError(
                            f"Replacement '{rule.replacement}' for pattern "
                            f"'{rule.pattern.pattern}' forms '{match.group(0)}' "
                            f"in '{joined}', which matches pattern "
                            f"'{other.pattern.pattern}'; "
                            f"remediation would not be idempotent"
                        )


_CHAR_CLASS = re.compile(r"\[([^\]]*)\]")
_REGEX_SYNTAX = re.compile(r"\\.|[()|?*+.{}^$:]")


def literal_fragments(source: str) -> set[str]:
    """Literal runs of a pattern's source; character-class members count alone."""
    runs = set()
    for members in _CHAR_CLASS.findall(source):
        runs.update(ch for ch in members if ch.isalnum())
    for run in _REGEX_SYNTAX.split(_CHAR_CLASS.sub("|", source)):
        if run.isalnum():
            runs.add(run)
    return runs


def boundary_contexts(rules: list[Rule]) -> tuple[list[str], list[str]]:
    """Text that could sit next to a replacement and complete a pattern.

    Text before a replacement can supply the start of a pattern, so leading
    contexts are the heads of literal fragments; trailing contexts are their
    tails. Contexts that already match a pattern on their own are
    left out.
    """
    runs: set[str] = set()
    for rule in rules:
        runs |= literal_fragments(rule.pattern.pattern)
    leading = {run[:i] for run in runs for i in range(1, len(run) + 1)}
    trailing = {run[i:] for run in runs for i in range(len(run))}

    def inert(text: str) -> bool:
        return not any(rule.pattern.search(text) for rule in rules)

    return sorted(filter(inert, leading)), sorted(filter(inert, trailing))


def compile_rules(
    tiers: list[tuple[Severity, list[dict]]],
    impacts: dict[Severity, float] | None = None,
) -> list[tuple[Severity, list[Rule]]]:
    """Turn literal rule tables into Rule objects."""
    impacts = impacts or SEVERITY_IMPACT
    compiled = []
    for severity, entries in tiers:
        rules = []
        for entry in entries:
            try:
                pattern = re.compile(entry["pattern"], re.IGNORECASE)
            except re.error as e:
                raise RuleRegistryError(
                    f"Invalid pattern '{entry['pattern']}': {e}"
                ) from e
            rules.append(Rule(
                pattern=pattern,
                category=entry["category"],
                severity=severity,
                score_impact=entry.get("score_impact", impacts[severity]),
                replacement=entry["replacement"],
                rationale=entry["rationale"],
                law=entry.get("law", ""),
                law_article=entry.get("law_article", ""),
            ))
        compiled.append((severity, rules))
    return compiled


@lru_cache(maxsize=1)
def build_default_registry() -> RuleRegistry:
    """Build the shipped registry once per process."""
    registry = RuleRegistry(
        tiers=compile_rules(RULE_TIERS),
        safe_expressions=SAFE_EXPRESSIONS,
        trust_tiers=tuple(
            TrustTier(name=t["name"], score=t["score"], domains=tuple(t["domains"]))
            for t in TRUST_TIERS
        ),
        evidence_levels=tuple(EvidenceLevel(**e) for e in EVIDENCE_LEVELS),
    )
    logger.debug(
        f"[Registry] Loaded {len(registry.rules)} rules in "
        f"{len(registry.tiers)} tiers, {len(registry.trust_tiers)} trust tiers"
    )
    return registry
