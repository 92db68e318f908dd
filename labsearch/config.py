"""設定モジュール — 環境変数・定数定義."""

import os
from pathlib import Path

from dotenv import load_dotenv

# .env はプロジェクトルートに配置
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
load_dotenv(_PROJECT_ROOT / ".env")

# --- レコードソース ---
# ファイルパスまたは http(s) URL。空ならデフォルトリストを使う
LABSEARCH_SOURCE: str = os.getenv("LABSEARCH_SOURCE", "").strip()

# --- 検索 ---
SUGGEST_LIMIT = 8
MIN_SUGGEST_LENGTH = 2
RESULT_LIMIT = 50
CATEGORY_PREVIEW_LIMIT = 20
TOP_CATEGORY_COUNT = 4

# --- 表示 ---
CURRENCY = "DH"

# --- リクエスト設定 ---
REQUEST_TIMEOUT = 15  # 秒
USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/131.0.0.0 Safari/537.36"
)

# --- ログ ---
LOG_LEVEL: str = os.getenv("LABSEARCH_LOG_LEVEL", "INFO").upper()
LOG_DIR = Path(os.getenv("LABSEARCH_LOG_DIR", "").strip() or _PROJECT_ROOT / "logs")
