"""医療検査カタログ検索 — メインエントリーポイント.

処理フロー:
  1. レコードソース（ファイル / URL / デフォルトリスト）を読み込む
  2. インデックスを構築（分類・名称順ソート）
  3. サブコマンドに応じて検索・補完・カテゴリ一覧を表示
"""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import datetime

from labsearch.config import (
    CATEGORY_PREVIEW_LIMIT,
    LOG_DIR,
    LOG_LEVEL,
    MIN_SUGGEST_LENGTH,
    RESULT_LIMIT,
    SUGGEST_LIMIT,
    TOP_CATEGORY_COUNT,
)
from labsearch.errors import EmptySearchTermError
from labsearch.index import AnalysisIndex
from labsearch.models import AnalysisRecord
from labsearch.sources import load_index

logger = logging.getLogger(__name__)


def setup_logging() -> None:
    """ロギングの初期設定.

    ログは stderr とファイルに出す（stdout は検索結果用）。
    """
    LOG_DIR.mkdir(exist_ok=True)
    log_file = LOG_DIR / f"labsearch_{datetime.now().strftime('%Y%m%d')}.log"
    logging.basicConfig(
        level=getattr(logging, LOG_LEVEL, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[
            logging.StreamHandler(sys.stderr),
            logging.FileHandler(log_file, encoding="utf-8"),
        ],
    )


def format_record(index: AnalysisIndex, record: AnalysisRecord) -> str:
    """検索結果 1 件を複数行テキストにする."""
    code = record.code or "-"
    lines = [f"[{code}] {record.name}"]
    if record.description:
        lines.append(f"    {record.description}")
    details = [record.display_price]
    if record.sector:
        details.append(index.sector_label(record))
    if record.delay:
        details.append(record.delay)
    lines.append("    " + " | ".join(details))
    lines.append(f"    {record.category}")
    return "\n".join(lines)


def print_results(index: AnalysisIndex, results: tuple[AnalysisRecord, ...], title: str) -> None:
    if not results:
        print("Aucun résultat trouvé")
        print("Essayez avec d'autres mots-clés ou vérifiez l'orthographe.")
        return

    plural = "s" if len(results) != 1 else ""
    print(f"{title} : {len(results)} résultat{plural}")
    for record in results[:RESULT_LIMIT]:
        print(format_record(index, record))

    if len(results) > RESULT_LIMIT:
        print(
            f"Affichage des {RESULT_LIMIT} premiers résultats sur {len(results)}. "
            "Affinez votre recherche."
        )


def cmd_search(index: AnalysisIndex, args: argparse.Namespace) -> int:
    try:
        results = index.search(args.term)
    except EmptySearchTermError:
        print("Veuillez entrer un terme de recherche", file=sys.stderr)
        return 1

    logger.info("検索: %r → %d 件", args.term, len(results))
    print_results(index, results, f'Résultats pour "{args.term}"')
    return 0


def cmd_ask(index: AnalysisIndex, args: argparse.Namespace) -> int:
    query = " ".join(args.query)
    results = index.ranked_search(query)
    logger.info("問い合わせ: %r → %d 件", query, len(results))
    print_results(index, results, f'Résultats pour "{query}"')
    return 0


def cmd_suggest(index: AnalysisIndex, args: argparse.Namespace) -> int:
    if len(args.prefix.strip()) < MIN_SUGGEST_LENGTH:
        return 0

    for record in index.suggest(args.prefix, args.limit):
        print(f"{record.code or '-'} - {record.name}\t{record.display_price}\t{record.category}")
    return 0


def cmd_categories(index: AnalysisIndex, args: argparse.Namespace) -> int:
    for category, records in index.group_by_category().items():
        print(f"{category} ({len(records)})")
        for record in records[:CATEGORY_PREVIEW_LIMIT]:
            print(f"    {record.code or '-'}  {record.name}  {record.display_price}")
        if len(records) > CATEGORY_PREVIEW_LIMIT:
            print(f"    +{len(records) - CATEGORY_PREVIEW_LIMIT} autres...")
    return 0


def cmd_stats(index: AnalysisIndex, args: argparse.Namespace) -> int:
    print(f"{len(index)} Analyses Disponibles")
    for category, count in index.category_stats(TOP_CATEGORY_COUNT):
        print(f"    {count} {category}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="labsearch",
        description="Recherche dans la base d'analyses médicales",
    )
    parser.add_argument(
        "--source",
        default=None,
        help="Fichier ou URL des analyses (défaut: LABSEARCH_SOURCE, sinon liste intégrée)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("search", help="Recherche par nom ou code")
    p.add_argument("term")
    p.set_defaults(func=cmd_search)

    p = sub.add_parser("ask", help="Recherche multi-mots classée")
    p.add_argument("query", nargs="+")
    p.set_defaults(func=cmd_ask)

    p = sub.add_parser("suggest", help="Suggestions pendant la saisie")
    p.add_argument("prefix")
    p.add_argument("--limit", type=int, default=SUGGEST_LIMIT)
    p.set_defaults(func=cmd_suggest)

    p = sub.add_parser("categories", help="Toutes les analyses par catégorie")
    p.set_defaults(func=cmd_categories)

    p = sub.add_parser("stats", help="Nombre d'analyses et principales catégories")
    p.set_defaults(func=cmd_stats)

    return parser


def main(argv: list[str] | None = None) -> int:
    """メイン処理."""
    args = build_parser().parse_args(argv)
    setup_logging()

    index = load_index(args.source)
    logger.info("%d 件の検査を読み込みました", len(index))
    return args.func(index, args)


if __name__ == "__main__":
    sys.exit(main())
