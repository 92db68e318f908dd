"""データモデル定義."""

from __future__ import annotations

import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from labsearch.config import CURRENCY
from labsearch.errors import MalformedRecordError

# 通貨表記と空白（NBSP 含む）
_PRICE_NOISE_PATTERN = re.compile(r"(?i)dirhams?|dhs?|mad|eur|€|\s")
_PRICE_TEXT_PATTERN = re.compile(r"^\d[\d.,]*$")


@dataclass(frozen=True)
class AnalysisRecord:
    """読み込み済みの医療検査 1 件を表す."""

    id: int  # 読み込み順の連番（1始まり）
    code: str  # 検査コード (例: HGB)。無い場合は ""
    name: str  # 表示名
    price: Decimal  # 0 以上
    category: str  # キーワード分類で決まるカテゴリ
    search_name: str  # name の小文字版
    sector: str = ""
    delay: str = ""
    description: str = ""

    @property
    def display_price(self) -> str:
        """表示用の価格文字列 (例: "12.00 DH")."""
        return f"{self.price:.2f} {CURRENCY}"


def parse_price(value) -> Decimal:
    """価格らしき値を 0 以上の Decimal に変換する.

    数値はそのまま、文字列は通貨表記と桁区切りを取り除いてから解釈する。
    "1 234,50" / "1,234.50" / "1.234,50" / "12,5 DH" を受け付ける。

    Raises:
        MalformedRecordError: 解釈できない、または負の値。
    """
    if isinstance(value, bool) or value is None:
        raise MalformedRecordError(f"価格が不正です: {value!r}")

    if isinstance(value, (int, float, Decimal)):
        try:
            price = Decimal(str(value))
        except InvalidOperation as e:
            raise MalformedRecordError(f"価格が不正です: {value!r}") from e
    elif isinstance(value, str):
        price = _parse_price_text(value)
    else:
        raise MalformedRecordError(f"価格が不正です: {value!r}")

    if not price.is_finite() or price < 0:
        raise MalformedRecordError(f"価格が不正です: {value!r}")
    return price


def _parse_price_text(text: str) -> Decimal:
    """価格文字列を Decimal に変換する."""
    cleaned = _PRICE_NOISE_PATTERN.sub("", text)
    if not _PRICE_TEXT_PATTERN.match(cleaned):
        raise MalformedRecordError(f"価格が不正です: {text!r}")

    last_comma = cleaned.rfind(",")
    last_dot = cleaned.rfind(".")
    if last_comma >= 0 and last_dot >= 0:
        # 後ろに現れた方が小数点
        if last_comma > last_dot:
            cleaned = cleaned.replace(".", "").replace(",", ".")
        else:
            cleaned = cleaned.replace(",", "")
    elif last_comma >= 0:
        if cleaned.count(",") > 1:
            cleaned = cleaned.replace(",", "")
        else:
            cleaned = cleaned.replace(",", ".")
    elif cleaned.count(".") > 1:
        cleaned = cleaned.replace(".", "")

    try:
        return Decimal(cleaned)
    except InvalidOperation as e:
        raise MalformedRecordError(f"価格が不正です: {text!r}") from e
