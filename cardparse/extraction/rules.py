"""
Per-language rule tables for business card field extraction.

The scoring code in ``fields.py`` is shared by every language; a language is
described entirely by one ``LanguageRules`` instance: keyword tables,
script-aware character classes, shape patterns, address indicators and the
OCR glyph fixups applied to e-mail lines.
"""

import re
from dataclasses import dataclass
from typing import Iterable, Pattern, Tuple

# Script ranges (Python ``re`` has no \p{Han})
HIRAGANA = "\u3040-\u309f"
KATAKANA = "\u30a0-\u30ff"
HAN = "\u3400-\u4dbf\u4e00-\u9fff\u3005"
HALFWIDTH_KATAKANA = "\uff66-\uff9f"
CJK = HIRAGANA + KATAKANA + HAN + HALFWIDTH_KATAKANA


def keywords(words: Iterable[str]) -> Pattern:
    """Compile a keyword list into one case-insensitive pattern.

    Latin keywords only match whole words ("co" does not match "Nicole");
    keywords written in CJK script match anywhere in the line.
    """
    parts = []
    for word in sorted(set(words), key=len, reverse=True):
        escaped = re.escape(word)
        if word.isascii():
            parts.append(rf"(?<![A-Za-z]){escaped}(?![A-Za-z])")
        else:
            parts.append(escaped)
    return re.compile("|".join(parts), re.IGNORECASE)


@dataclass(frozen=True)
class AddressIndicator:
    name: str
    pattern: Pattern
    weight: int


@dataclass(frozen=True)
class LanguageRules:
    name: str
    phone_region: str
    letter: Pattern
    min_name_length: int
    role_or_company: Pattern
    job_title: Pattern
    person_patterns: Tuple[Pattern, ...]
    position_keywords: Pattern
    seniority_keywords: Pattern
    legal_suffixes: Pattern
    industry_keywords: Pattern
    address_hint: Pattern
    address_indicators: Tuple[AddressIndicator, ...]
    email_glyphs: Tuple[Tuple[str, str], ...] = ()
    guess_organization: bool = True


# =========================
# SHARED TABLES
# =========================

_NAME_ROLE_OR_COMPANY = (
    "engineer", "engineering", "developer", "manager", "director", "founder",
    "cofounder", "co-founder", "chief", "officer", "marketing", "sales",
    "product", "design", "designer", "accounting", "consultant", "analyst",
    "software", "hardware", "solutions", "technologies", "technology", "tech",
    "ltd", "limited", "inc", "llc", "corp", "corporation", "company", "co",
    "gmbh", "srl", "spa", "bv", "sa", "plc", "university", "college",
    "school", "department", "division", "team",
)

_JOB_TITLE_WORDS = (
    "account executive", "account manager", "sales manager", "marketing manager",
    "engineer", "developer", "designer", "consultant", "analyst", "specialist",
    "director", "manager", "supervisor", "coordinator", "lead", "senior",
    "junior", "president", "vice", "ceo", "cto", "cfo", "coo", "vp",
    "executive", "officer", "ambassador", "consul", "attache", "attaché",
    "secretary", "counselor", "commissioner",
)

_POSITION_KEYWORDS = (
    "engineer", "engineering", "developer", "manager", "director", "founder",
    "cofounder", "co-founder", "chief", "officer", "marketing", "sales",
    "product", "designer", "accountant", "accounting", "consultant",
    "analyst", "specialist", "coordinator", "supervisor", "president",
    "ceo", "cto", "cfo", "coo", "cmo", "vp", "executive", "partner",
    "architect", "administrator", "assistant", "associate", "representative",
    "agent", "advisor", "adviser", "attorney", "counsel", "professor",
    "scientist", "researcher", "editor", "producer", "owner", "head",
    "ambassador", "consul", "consul general", "deputy consul", "attache",
    "attaché", "first secretary", "second secretary", "third secretary",
    "minister", "counselor", "trade commissioner", "operations manager",
)

_SENIORITY_KEYWORDS = (
    "senior", "sr", "junior", "jr", "lead", "principal", "chief", "head",
    "vice", "deputy", "assistant", "associate", "general", "executive",
    "staff",
)

_LEGAL_SUFFIXES = (
    "inc", "incorporated", "ltd", "limited", "llc", "llp", "corp",
    "corporation", "co", "company", "gmbh", "ag", "srl", "spa", "bv", "sa",
    "plc", "pty", "kk", "k.k", "s.a", "n.v",
)

_INDUSTRY_KEYWORDS = (
    "technologies", "technology", "tech", "solutions", "systems", "group",
    "international", "national", "global", "university", "college",
    "school", "institute", "foundation", "center", "centre", "hospital",
    "medical", "clinic", "bank", "financial", "insurance", "consulting",
    "services", "manufacturing", "production", "retail", "store", "shop",
    "restaurant", "cafe", "hotel", "law", "legal", "firm", "real estate",
    "property", "media", "communications", "entertainment", "sports",
    "club", "nonprofit", "non-profit", "ngo", "government", "municipal",
    "association", "society", "federation", "union", "alliance",
    "partnership", "ventures", "capital", "equity", "investments", "fund",
    "holdings", "industries", "enterprises", "associates", "partners",
    "labs", "studio", "agency",
)

_ENGLISH_PERSON_PATTERNS = (
    re.compile(r"^[A-Z][A-Za-z'-]+\s+[A-Z][A-Za-z'-]+$"),
    re.compile(r"^[A-Z][A-Za-z'-]+\s+[A-Z]\.?\s+[A-Z][A-Za-z'-]+$"),
    re.compile(r"^[A-Z][A-Za-z'-]+(\s+[A-Z]\.?)+\s+[A-Z][A-Za-z'-]+$"),
    re.compile(r"^[A-Z][A-Za-z'-]+\s+[A-Z][A-Za-z'-]+,\s*[A-Z]\.?[A-Za-z]?\.?[A-Z]?\.?$"),
    re.compile(r"^(?:Dr|Mr|Mrs|Ms|Prof)\.?\s+[A-Z][a-z]+\s+[A-Z][a-z]+(?:,\s*[A-Z][A-Za-z.]+)?$"),
)

_ENGLISH_ADDRESS_HINT = re.compile(
    r"\d|\b(?:st|ave|rd|blvd)\.|\b(?:street|avenue|road|boulevard|drive|lane|suite)\b|,",
    re.IGNORECASE
)

_ENGLISH_ADDRESS_INDICATORS = (
    AddressIndicator("street_number", re.compile(r"\b\d{1,6}[A-Za-z]?\s+[A-Za-z]"), 6),
    AddressIndicator(
        "street_type",
        re.compile(
            r"\b(?:street|st|avenue|ave|road|rd|boulevard|blvd|drive|dr|lane|ln|way|"
            r"court|ct|place|pl|parkway|pkwy|highway|hwy|square|sq|terrace|plaza)\b\.?",
            re.IGNORECASE
        ),
        6
    ),
    AddressIndicator(
        "suite",
        re.compile(r"\b(?:suite|ste|unit|apt|apartment|floor|fl|room|rm)\b|#\s*\d", re.IGNORECASE),
        4
    ),
    AddressIndicator("city_state", re.compile(r"[A-Za-z][A-Za-z .]*,\s*[A-Z]{2}\b"), 7),
    AddressIndicator(
        "zip",
        re.compile(r"\b\d{5}(?:-\d{4})?\b|\b[A-Z]{1,2}\d[A-Z\d]?\s*\d[A-Z]{2}\b"),
        7
    ),
)

_ENGLISH_EMAIL_GLYPHS = (
    ("c0m", "com"),
    ("cQm", "com"),
    ("ccm", "com"),
)


ENGLISH_RULES = LanguageRules(
    name="english",
    phone_region="US",
    letter=re.compile(r"[A-Za-z\u00c0-\u024f]"),
    min_name_length=3,
    role_or_company=keywords(_NAME_ROLE_OR_COMPANY),
    job_title=keywords(_JOB_TITLE_WORDS),
    person_patterns=_ENGLISH_PERSON_PATTERNS,
    position_keywords=keywords(_POSITION_KEYWORDS),
    seniority_keywords=keywords(_SENIORITY_KEYWORDS),
    legal_suffixes=keywords(_LEGAL_SUFFIXES),
    industry_keywords=keywords(_INDUSTRY_KEYWORDS),
    address_hint=_ENGLISH_ADDRESS_HINT,
    address_indicators=_ENGLISH_ADDRESS_INDICATORS,
    email_glyphs=_ENGLISH_EMAIL_GLYPHS,
)


# =========================
# JAPANESE
# =========================

_JAPANESE_POSITION_KEYWORDS = (
    "エンジニア", "デベロッパー", "マネージャー", "ディレクター", "ファウンダー",
    "チーフ", "オフィサー", "デザイナー", "コンサルタント", "アナリスト",
    "スペシャリスト", "コーディネーター", "スーパーバイザー", "プレジデント",
    "エグゼクティブ", "アドバイザー", "アタッシェ", "カウンセラー",
    "技術者", "開発者", "管理者", "取締役", "代表取締役", "創設者", "共同創設者",
    "最高責任者", "役員", "執行役員", "社長", "副社長", "会長", "部長", "副部長",
    "課長", "係長", "主任", "室長", "所長", "支店長", "店長", "本部長", "担当",
    "顧問", "専門家", "監督者", "最高経営責任者", "最高技術責任者",
    "最高財務責任者", "最高執行責任者", "大使", "総領事", "領事", "副領事",
    "一等書記官", "二等書記官", "三等書記官", "参事官", "大臣", "外交官",
    "報道担当", "文化担当", "商務担当", "広報担当官", "儀典担当官",
    "貿易委員", "経済担当官", "政治担当官", "運営管理者", "教授", "准教授",
    "講師", "研究員", "営業",
)

_JAPANESE_ORGANIZATION_KEYWORDS = (
    "株式会社", "有限会社", "合同会社", "合資会社", "合名会社", "一般社団法人",
    "一般財団法人", "公益社団法人", "公益財団法人", "学校法人", "医療法人",
    "社会福祉法人", "宗教法人", "NPO法人", "特定非営利活動法人", "(株)", "（株）",
    "㈱", "大学", "学校", "研究所", "財団", "病院", "クリニック", "診療所",
    "銀行", "金融", "保険", "コンサルティング", "グループ", "インターナショナル",
    "グローバル", "システムズ", "ソリューションズ", "テクノロジーズ",
    "テクノロジー", "サービス", "エンタープライズ", "ホールディングス",
    "インダストリーズ", "製作所", "工業", "商事", "商会", "事務所", "法律事務所",
    "不動産", "メディア", "大使館", "領事館", "外務省", "省", "庁",
)

_JAPANESE_SENIORITY_KEYWORDS = ("代表", "副", "上級", "主席", "筆頭", "執行")

_JAPANESE_LEGAL_SUFFIXES = (
    "株式会社", "有限会社", "合同会社", "合資会社", "合名会社", "一般社団法人",
    "一般財団法人", "公益社団法人", "公益財団法人", "学校法人", "医療法人",
    "社会福祉法人", "宗教法人", "NPO法人", "特定非営利活動法人", "(株)", "（株）", "㈱",
)

_PREFECTURE = r"(?:東京都|北海道|京都府|大阪府|[" + HAN + r"]{2,3}県)"

_JAPANESE_ADDRESS_HINT = re.compile(r"\d|〒|" + _PREFECTURE + r"|丁目|番地")

_JAPANESE_ADDRESS_INDICATORS = _ENGLISH_ADDRESS_INDICATORS + (
    AddressIndicator("postal_code", re.compile(r"〒\s*\d{3}[-－]?\d{4}|(?<!\d)\d{3}[-－]\d{4}(?![-\d])"), 7),
    AddressIndicator("prefecture", re.compile(_PREFECTURE), 7),
    AddressIndicator("municipality", re.compile(r"[" + HAN + KATAKANA + r"]{1,5}[市区町村郡]"), 6),
    AddressIndicator(
        "block",
        re.compile(r"\d+\s*丁目|\d+\s*番地?|\d+\s*号|\d+[-－‐ー]\d+(?:[-－‐ー]\d+)?"),
        6
    ),
    AddressIndicator(
        "building",
        re.compile(r"ビル|タワー|マンション|ハイツ|\d+\s*[階F]|\bbldg\b|\bbuilding\b", re.IGNORECASE),
        4
    ),
)

_JAPANESE_EMAIL_GLYPHS = (
    ("鹵", "l"),
    ("ー", "-"),
    ("ⅰ", "i"),
    ("ⅱ", "ii"),
    ("ⅲ", "iii"),
    ("ⅳ", "iv"),
    ("ⅴ", "v"),
    ("ⅵ", "vi"),
    ("ⅶ", "vii"),
    ("ⅷ", "viii"),
    ("ⅸ", "ix"),
    ("ⅹ", "x"),
    ("ぉ", "o"),
    ("軒", "n"),
    ("眠", "m"),
    ("離", "l"),
    ("僑", "g"),
    ("配", "p"),
    ("費", "f"),
    ("翹", "n"),
    ("は", "a"),
    ("血", "c"),
    ("日", "d"),
    ("恥", "c"),
    ("部", "b"),
    ("区", "u"),
    ("、", ""),
    ("・", ""),
    ("(", ""),
    (")", ""),
    ("«", ""),
    ("»", ""),
)

_CJK_NAME = re.compile(
    r"^[" + HAN + r"]{1,4}[ \u3000]?[" + HAN + HIRAGANA + KATAKANA + r"]{1,4}$"
)

JAPANESE_RULES = LanguageRules(
    name="japanese",
    phone_region="JP",
    letter=re.compile(r"[A-Za-z\u00c0-\u024f" + CJK + r"]"),
    min_name_length=2,
    role_or_company=keywords(
        _NAME_ROLE_OR_COMPANY + _JAPANESE_POSITION_KEYWORDS + _JAPANESE_ORGANIZATION_KEYWORDS
    ),
    job_title=keywords(_JOB_TITLE_WORDS + _JAPANESE_POSITION_KEYWORDS),
    person_patterns=_ENGLISH_PERSON_PATTERNS + (_CJK_NAME,),
    position_keywords=keywords(_POSITION_KEYWORDS + _JAPANESE_POSITION_KEYWORDS),
    seniority_keywords=keywords(_SENIORITY_KEYWORDS + _JAPANESE_SENIORITY_KEYWORDS),
    legal_suffixes=keywords(_LEGAL_SUFFIXES + _JAPANESE_LEGAL_SUFFIXES),
    industry_keywords=keywords(_INDUSTRY_KEYWORDS + _JAPANESE_ORGANIZATION_KEYWORDS),
    address_hint=_JAPANESE_ADDRESS_HINT,
    address_indicators=_JAPANESE_ADDRESS_INDICATORS,
    email_glyphs=_ENGLISH_EMAIL_GLYPHS + _JAPANESE_EMAIL_GLYPHS,
    guess_organization=False,
)


def rules_for(language: str) -> LanguageRules:
    """Pick the rule set for an OCR language tag ("eng", "jpn", "eng,jpn")."""
    if "jpn" in (language or "").lower():
        return JAPANESE_RULES
    return ENGLISH_RULES
