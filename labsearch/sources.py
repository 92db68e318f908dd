"""検査レコードソースの取得・パースモジュール.

取得戦略:
  1. ローカルファイル、または http(s) URL からテキストを取得
  2. 形式ごとにパース
     - 埋め込みデータベース: window.MEDICAL_DATABASE の JSON（主戦略）
       → <script type="application/json"> ブロック（フォールバック）
     - 区切りテキスト (CSV/TSV): ヘッダーから名称列・価格列を特定
  3. どれも失敗したらデフォルトリストにフォールバック
"""

from __future__ import annotations

import csv
import io
import json
import logging
import re
from collections.abc import Mapping
from pathlib import Path

import requests
from bs4 import BeautifulSoup

from labsearch.config import LABSEARCH_SOURCE, REQUEST_TIMEOUT, USER_AGENT
from labsearch.defaults import DEFAULT_RECORDS, DEFAULT_SECTOR_NAMES
from labsearch.errors import EmptyDatasetError, SourceFormatError
from labsearch.index import AnalysisIndex

logger = logging.getLogger(__name__)

_DATABASE_PATTERN = re.compile(
    r"window\.MEDICAL_DATABASE\s*=\s*(\[.*?\])\s*(?:;|</script>|\Z)", re.DOTALL
)
_SECTOR_NAMES_PATTERN = re.compile(
    r"window\.SECTOR_NAMES\s*=\s*({.*?})\s*;", re.DOTALL
)

_DELIMITED_SUFFIXES = {".csv", ".tsv", ".txt"}
_CANDIDATE_DELIMITERS = ",;\t|"

# ヘッダー名 → フィールド。上から順に判定し、最初に一致したフィールドに割り当てる
_COLUMN_PATTERNS: tuple[tuple[str, re.Pattern], ...] = (
    ("code", re.compile(r"\bcode\b|\bref", re.IGNORECASE)),
    ("price", re.compile(r"prix|price|co[uû]t|cost|montant|amount|tarif|fee", re.IGNORECASE)),
    ("sector", re.compile(r"secteur|sector|service|d[ée]partement", re.IGNORECASE)),
    ("delay", re.compile(r"d[ée]lai|delay|dur[ée]e|turnaround", re.IGNORECASE)),
    ("description", re.compile(r"description|d[ée]tail|desc\b", re.IGNORECASE)),
    ("name", re.compile(r"nom|name|analy|test|exam|libell", re.IGNORECASE)),
)


def fetch_source(location: str) -> str | None:
    """レコードソースのテキストを取得する.

    Args:
        location: ファイルパス、または http(s) URL

    Returns:
        テキスト。失敗時は None。
    """
    if location.startswith(("http://", "https://")):
        headers = {
            "User-Agent": USER_AGENT,
            "Accept-Language": "fr,en-US;q=0.9,en;q=0.8",
        }
        try:
            resp = requests.get(location, headers=headers, timeout=REQUEST_TIMEOUT)
            resp.raise_for_status()
            return resp.text
        except requests.RequestException as e:
            logger.error("ソース取得失敗: url=%s, error=%s", location, e)
            return None

    try:
        return Path(location).read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as e:
        logger.error("ソース読み込み失敗: path=%s, error=%s", location, e)
        return None


def parse_embedded_database(text: str) -> list[dict]:
    """埋め込みデータベースからレコードリストを抽出する.

    主戦略: window.MEDICAL_DATABASE = [...] の JSON
    フォールバック: <script type="application/json"> ブロック
    """
    records = _parse_from_window_assignment(text)
    if records:
        return records

    logger.warning("MEDICAL_DATABASE パース失敗。JSON script ブロックにフォールバック")
    return _parse_from_json_script(text)


def _parse_from_window_assignment(text: str) -> list[dict]:
    """window.MEDICAL_DATABASE の配列リテラルを JSON として読む."""
    match = _DATABASE_PATTERN.search(text)
    if not match:
        return []

    try:
        data = json.loads(match.group(1))
    except json.JSONDecodeError as e:
        logger.warning("MEDICAL_DATABASE JSON パースエラー: %s", e)
        return []

    return _records_from_json(data)


def _parse_from_json_script(text: str) -> list[dict]:
    """<script type="application/json"> からレコード配列を探す."""
    soup = BeautifulSoup(text, "html.parser")

    for script in soup.find_all("script", type="application/json"):
        try:
            data = json.loads(script.string)
        except (json.JSONDecodeError, TypeError):
            continue

        records = _records_from_json(data)
        if records:
            return records

    return []


def _records_from_json(data) -> list[dict]:
    """JSON 値からレコード（dict）の配列を取り出す.

    配列そのもの、または {"records": [...]} 形式を受け付ける。
    """
    if isinstance(data, Mapping):
        data = data.get("records")
    if not isinstance(data, list):
        return []
    return [item for item in data if isinstance(item, Mapping)]


def parse_sector_names(text: str) -> dict[str, str]:
    """window.SECTOR_NAMES からセクターコード → 表示名の対応表を抽出する."""
    match = _SECTOR_NAMES_PATTERN.search(text)
    if not match:
        return {}

    try:
        data = json.loads(match.group(1))
    except json.JSONDecodeError as e:
        logger.warning("SECTOR_NAMES JSON パースエラー: %s", e)
        return {}

    if not isinstance(data, dict):
        return {}
    return {str(k): str(v) for k, v in data.items()}


def parse_json_records(text: str) -> list[dict]:
    """JSON 配列（または {"records": [...]}）のテキストを読む."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        logger.warning("JSON パースエラー: %s", e)
        return []
    return _records_from_json(data)


def parse_delimited(text: str) -> list[dict]:
    """区切りテキスト (CSV/TSV) からレコードリストを抽出する.

    ヘッダー行から名称列・価格列（必須）と
    コード・セクター・所要日数・説明の列（任意）を特定する。
    価格は文字列のまま返し、変換はインデックス側で行う。

    Raises:
        SourceFormatError: 名称列または価格列が見つからない。
    """
    text = text.lstrip("\ufeff")
    reader = csv.reader(io.StringIO(text), delimiter=_sniff_delimiter(text))

    header = next((row for row in reader if any(cell.strip() for cell in row)), None)
    if header is None:
        raise SourceFormatError("ヘッダー行がありません")

    columns = detect_columns(header)
    missing = [field for field in ("name", "price") if field not in columns]
    if missing:
        raise SourceFormatError(f"必須列が見つかりません: {', '.join(missing)} (header={header})")

    records: list[dict] = []
    for row in reader:
        if not any(cell.strip() for cell in row):
            continue
        records.append({
            field: row[i].strip() if i < len(row) else ""
            for field, i in columns.items()
        })

    return records


def detect_columns(header: list[str]) -> dict[str, int]:
    """ヘッダー行から フィールド名 → 列番号 の対応を作る.

    各フィールドには最初に一致した列を割り当てる。
    """
    columns: dict[str, int] = {}
    for i, title in enumerate(header):
        title = title.strip()
        for field, pattern in _COLUMN_PATTERNS:
            if field in columns:
                continue
            if pattern.search(title):
                columns[field] = i
                break
    return columns


def _sniff_delimiter(text: str) -> str:
    """ヘッダー行から区切り文字を推定する.

    csv.Sniffer で判定できなければ、最も多く現れる候補文字。無ければカンマ。
    """
    header_line = next((line for line in text.splitlines() if line.strip()), "")
    try:
        return csv.Sniffer().sniff(header_line, delimiters=_CANDIDATE_DELIMITERS).delimiter
    except csv.Error:
        pass

    counts = {d: header_line.count(d) for d in _CANDIDATE_DELIMITERS}
    best = max(_CANDIDATE_DELIMITERS, key=lambda d: counts[d])
    return best if counts[best] else ","


def load_records(location: str) -> tuple[list[dict], dict[str, str]]:
    """ソースからレコードとセクター対応表を読み込む.

    失敗時・0 件時はデフォルトリストを返す。

    Returns:
        (records, sector_names) のタプル。
    """
    text = fetch_source(location)
    if text is None:
        logger.warning("ソースが利用できません。デフォルトリストにフォールバック")
        return _default_records()

    suffix = Path(location.split("?", 1)[0]).suffix.lower()
    sector_names: dict[str, str] = {}
    try:
        if suffix in _DELIMITED_SUFFIXES:
            records = parse_delimited(text)
        elif suffix == ".json":
            records = parse_json_records(text)
        else:
            records = parse_embedded_database(text)
            sector_names = parse_sector_names(text)
            if not records:
                logger.warning("埋め込みデータベースなし。区切りテキストとして再試行")
                records = parse_delimited(text)
    except SourceFormatError as e:
        logger.warning("ソースのパースに失敗: %s", e)
        records = []

    if not records:
        logger.warning("ソースにレコードがありません。デフォルトリストにフォールバック")
        return _default_records()

    logger.info("ソースから %d 件のレコードを取得: %s", len(records), location)
    return records, sector_names or dict(DEFAULT_SECTOR_NAMES)


def load_index(location: str | None = None) -> AnalysisIndex:
    """ソースを読み込んでインデックスを構築する.

    location 省略時は設定の LABSEARCH_SOURCE、それも空ならデフォルトリスト。
    ソースのレコードが全て不正だった場合もデフォルトリストで作り直す。
    """
    if location is None:
        location = LABSEARCH_SOURCE

    if not location:
        logger.info("ソース未設定。デフォルトリストを使用")
        records, sector_names = _default_records()
        return AnalysisIndex.load(records, sector_names)

    records, sector_names = load_records(location)
    try:
        return AnalysisIndex.load(records, sector_names)
    except EmptyDatasetError:
        logger.warning("有効なレコードがありません。デフォルトリストで再構築")
        records, sector_names = _default_records()
        return AnalysisIndex.load(records, sector_names)


def _default_records() -> tuple[list[dict], dict[str, str]]:
    return [dict(r) for r in DEFAULT_RECORDS], dict(DEFAULT_SECTOR_NAMES)
