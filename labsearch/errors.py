"""例外定義."""


class LabSearchError(Exception):
    """labsearch の例外基底クラス."""


class EmptyDatasetError(LabSearchError):
    """読み込み後に有効なレコードが 1 件も残らなかった."""


class MalformedRecordError(LabSearchError):
    """入力レコード 1 件が不正（読み込み時にスキップされる）."""


class EmptySearchTermError(LabSearchError):
    """検索語が空、または空白のみ."""


class SourceFormatError(LabSearchError):
    """区切りテキストのヘッダーから名称列・価格列を特定できない."""
