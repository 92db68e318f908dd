"""検査名のキーワード分類.

CATEGORY_TABLE の並び順がそのまま優先順位になる。
先に宣言されたカテゴリのキーワードに一致した時点で確定する。
"""

from __future__ import annotations

import unicodedata

DEFAULT_CATEGORY = "Examens généraux"

CATEGORY_TABLE: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("Analyses sanguines", (
        "sang", "hémoglobine", "cholestérol", "glycémie", "glucose", "nfs", "numération",
    )),
    ("Analyses hormonales", (
        "tsh", "hormone", "testosterone", "oestradiol", "prolactine", "cortisol", "insuline",
    )),
    ("Sérologies", (
        "sérologie", "hépatite", "hiv", "sida", "rubéole", "toxoplasmose", "cmv", "syphilis",
    )),
    ("Marqueurs tumoraux", (
        "psa", "ca 125", "ca 19", "cea", "afp", "marqueur", "cancer",
    )),
    ("Examens cardiaques", (
        "troponine", "bnp", "cardiaque", "ckmb",
    )),
    ("Biochimie", (
        "créatinine", "urée", "alat", "asat", "bilirubine", "gamma", "phosphatase",
    )),
    ("Vitamines", (
        "vitamine", "b12", "folate", "acide folique",
    )),
    ("Fer", (
        "fer", "ferritine", "transferrine",
    )),
    ("Examens bactériologiques", (
        "ecbu", "culture", "helicobacter", "parasitologie",
    )),
    ("Examens immunologiques", (
        "anticorps", "fan", "facteur", "auto-immun",
    )),
)

CATEGORIES: tuple[str, ...] = tuple(label for label, _ in CATEGORY_TABLE) + (DEFAULT_CATEGORY,)


def classify(name: str) -> str:
    """検査名からカテゴリを決める.

    小文字化した名称にキーワードが部分一致した最初のカテゴリを返す。
    どれにも一致しなければ DEFAULT_CATEGORY。
    """
    name_lower = unicodedata.normalize("NFC", name).lower()
    for label, keywords in CATEGORY_TABLE:
        if any(keyword in name_lower for keyword in keywords):
            return label
    return DEFAULT_CATEGORY
