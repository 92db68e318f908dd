"""検査レコードの検索インデックス.

読み込み時に分類・ソートを済ませ、以降は読み取り専用。
検索系の操作は全て同期・副作用なしで、何度呼んでも同じ結果を返す。
"""

from __future__ import annotations

import logging
import unicodedata
from collections import Counter
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass

from labsearch.categories import classify
from labsearch.config import SUGGEST_LIMIT
from labsearch.errors import EmptyDatasetError, EmptySearchTermError, MalformedRecordError
from labsearch.models import AnalysisRecord, parse_price

logger = logging.getLogger(__name__)


def fold(text: str) -> str:
    """アクセントを除去して casefold する ("Hépatite" → "hepatite")."""
    decomposed = unicodedata.normalize("NFKD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch)).casefold()


def collation_key(text: str) -> tuple[str, str]:
    """アクセント・大文字小文字を無視した並び順キー.

    "Échographie" と "Echographie" が隣り合うようにする。
    同値の場合は元の文字列で順序を固定する。
    """
    return fold(text), text


@dataclass(frozen=True)
class _SearchKeys:
    """search / ranked_search 用に畳み込んだ文字列."""

    name: str
    code: str
    words: tuple[str, ...]
    text: str  # code + name + description


def _search_keys(record: AnalysisRecord) -> _SearchKeys:
    name = fold(record.name)
    return _SearchKeys(
        name=name,
        code=fold(record.code),
        words=tuple(name.split()),
        text=fold(f"{record.code} {record.name} {record.description}"),
    )


def _text(raw: Mapping, key: str) -> str:
    value = raw.get(key)
    if value is None:
        return ""
    return str(value).strip()


def build_record(raw: Mapping, record_id: int) -> AnalysisRecord:
    """生レコード 1 件を AnalysisRecord に変換する.

    Raises:
        MalformedRecordError: 名称が空、または価格が解釈できない。
    """
    if not isinstance(raw, Mapping):
        raise MalformedRecordError(f"レコードが dict ではありません: {raw!r}")

    name = _text(raw, "name")
    if not name:
        raise MalformedRecordError(f"名称がありません: {raw!r}")

    return AnalysisRecord(
        id=record_id,
        code=_text(raw, "code"),
        name=name,
        price=parse_price(raw.get("price")),
        category=classify(name),
        search_name=name.lower(),
        sector=_text(raw, "sector"),
        delay=_text(raw, "delay"),
        description=_text(raw, "description"),
    )


class AnalysisIndex:
    """検査レコード集合と検索操作."""

    def __init__(
        self,
        records: Iterable[AnalysisRecord],
        sector_names: Mapping[str, str] | None = None,
    ) -> None:
        self._records: tuple[AnalysisRecord, ...] = tuple(
            sorted(records, key=lambda r: collation_key(r.name))
        )
        if not self._records:
            raise EmptyDatasetError("有効なレコードがありません")
        self._keys = tuple(_search_keys(r) for r in self._records)
        self._by_id = {r.id: r for r in self._records}
        self._sector_names = dict(sector_names or {})

    @classmethod
    def load(
        cls,
        raw_records: Iterable[Mapping],
        sector_names: Mapping[str, str] | None = None,
    ) -> AnalysisIndex:
        """生レコード列からインデックスを構築する.

        ID は不正レコードを除いた入力順（ソート前）に 1 から振る。

        Raises:
            EmptyDatasetError: 有効なレコードが 1 件も無い。
        """
        accepted: list[AnalysisRecord] = []
        dropped = 0
        for raw in raw_records:
            try:
                accepted.append(build_record(raw, len(accepted) + 1))
            except MalformedRecordError as e:
                dropped += 1
                logger.debug("不正レコードをスキップ: %s", e)

        if dropped:
            logger.debug("スキップしたレコード: %d 件", dropped)
        return cls(accepted, sector_names)

    # --- 読み取り ---

    @property
    def records(self) -> tuple[AnalysisRecord, ...]:
        return self._records

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[AnalysisRecord]:
        return iter(self._records)

    def get(self, record_id: int) -> AnalysisRecord | None:
        return self._by_id.get(record_id)

    @staticmethod
    def classify(name: str) -> str:
        return classify(name)

    def sector_label(self, record: AnalysisRecord) -> str:
        """セクターの表示名。対応表に無ければ元の値."""
        return self._sector_names.get(record.sector, record.sector)

    # --- 検索 ---

    def search(self, term: str) -> tuple[AnalysisRecord, ...]:
        """単一語の部分一致・前方一致検索.

        名称またはコードに部分一致するか、名称のいずれかの単語が term で
        始まるレコードを名称順で返す。アクセントは区別しない。

        Raises:
            EmptySearchTermError: term が空白のみ。
        """
        term = fold((term or "").strip())
        if not term:
            raise EmptySearchTermError("検索語が空です")

        return tuple(
            r for r, keys in zip(self._records, self._keys)
            if term in keys.name
            or term in keys.code
            or any(word.startswith(term) for word in keys.words)
        )

    def ranked_search(self, query: str) -> tuple[AnalysisRecord, ...]:
        """複数語の AND 検索（自由文の問い合わせ向け）.

        全ての語が code + name + description に含まれるレコードを返す。
        並び順:
          1. コードがクエリ全体と完全一致
          2. 名称がクエリ全体を含む
          3. それ以外は名称順のまま
        """
        query = fold((query or "").strip())
        terms = query.split()
        if not terms:
            return ()

        matches = [
            (r, keys) for r, keys in zip(self._records, self._keys)
            if all(t in keys.text for t in terms)
        ]
        # 安定ソートなので同順位は名称順を保つ
        matches.sort(key=lambda m: (m[1].code != query, query not in m[1].name))
        return tuple(r for r, _ in matches)

    def suggest(self, prefix: str, limit: int | None = None) -> tuple[AnalysisRecord, ...]:
        """入力補完候補を最大 limit 件返す.

        search_name または小文字のコードに prefix を含むものを名称順で。
        """
        if limit is None:
            limit = SUGGEST_LIMIT
        prefix = (prefix or "").lower()
        if not prefix.strip() or limit <= 0:
            return ()

        results: list[AnalysisRecord] = []
        for r in self._records:
            if prefix in r.search_name or prefix in r.code.lower():
                results.append(r)
                if len(results) >= limit:
                    break
        return tuple(results)

    # --- カテゴリ ---

    def group_by_category(self) -> dict[str, tuple[AnalysisRecord, ...]]:
        """カテゴリごとにレコードをまとめる（カテゴリ名順、中身は名称順）."""
        groups: dict[str, list[AnalysisRecord]] = {}
        for r in self._records:
            groups.setdefault(r.category, []).append(r)
        return {
            category: tuple(groups[category])
            for category in sorted(groups, key=collation_key)
        }

    def category_stats(self, top: int | None = None) -> list[tuple[str, int]]:
        """カテゴリ別件数を多い順に返す.

        同数の場合は名称順で先に現れたカテゴリが前。
        """
        stats = Counter(r.category for r in self._records).most_common()
        if top is not None:
            stats = stats[:max(top, 0)]
        return stats
