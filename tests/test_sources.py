"""sources モジュールのユニットテスト."""

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
import requests

from labsearch.defaults import DEFAULT_RECORDS, DEFAULT_SECTOR_NAMES
from labsearch.errors import SourceFormatError
from labsearch.sources import (
    detect_columns,
    fetch_source,
    load_index,
    load_records,
    parse_delimited,
    parse_embedded_database,
    parse_json_records,
    parse_sector_names,
)

FIXTURES_DIR = Path(__file__).parent / "fixtures"


def _load_fixture(name: str) -> str:
    return (FIXTURES_DIR / name).read_text(encoding="utf-8")


class TestParseEmbeddedDatabase:
    """parse_embedded_database のテスト."""

    def test_window_assignment_parse(self):
        """window.MEDICAL_DATABASE から正しくパースできること."""
        records = parse_embedded_database(_load_fixture("medical_database.js"))

        assert len(records) == 3
        assert records[0]["code"] == "HGB"
        assert records[0]["name"] == "Hémoglobine"
        assert records[0]["price"] == 12.0
        assert [r["code"] for r in records] == ["HGB", "HBV", "CREA"]

    def test_json_script_fallback(self):
        """<script type="application/json"> フォールバックでパースできること."""
        records = parse_embedded_database(_load_fixture("medical_database.html"))

        assert len(records) == 2
        assert records[0]["code"] == "TSH"
        assert records[1]["price"] == "200,00 DH"

    def test_invalid_json(self):
        html = "<script>window.MEDICAL_DATABASE = [{name: 'x'}];</script>"
        assert parse_embedded_database(html) == []

    def test_empty_html(self):
        """空の HTML では空リストを返すこと."""
        assert parse_embedded_database("<html><body></body></html>") == []


class TestParseSectorNames:
    """parse_sector_names のテスト."""

    def test_found(self):
        names = parse_sector_names(_load_fixture("medical_database.js"))
        assert names == {"HEM": "Hématologie", "BIO": "Biochimie", "SER": "Sérologie"}

    def test_missing(self):
        assert parse_sector_names("window.MEDICAL_DATABASE = [];") == {}


class TestParseJsonRecords:
    """parse_json_records のテスト."""

    def test_array(self):
        assert parse_json_records('[{"name": "Urée", "price": 25}]') == [
            {"name": "Urée", "price": 25},
        ]

    def test_records_object(self):
        assert len(parse_json_records('{"records": [{"name": "Urée"}, 3]}')) == 1

    def test_invalid(self):
        assert parse_json_records("{not json") == []
        assert parse_json_records('{"other": []}') == []


class TestParseDelimited:
    """parse_delimited のテスト."""

    def test_semicolon_csv(self):
        """セミコロン区切り・引用符付きフィールドを扱えること."""
        records = parse_delimited(_load_fixture("analyses.csv"))

        assert len(records) == 4
        assert records[0] == {
            "code": "NFS",
            "name": "Numération Formule Sanguine",
            "sector": "HEM",
            "delay": "24h",
            "price": "80,00",
            "description": "Hémogramme complet; plaquettes incluses",
        }
        assert records[2]["price"] == "N/A"
        assert records[3]["price"] == "1 130,50"

    def test_comma_csv_with_quotes(self):
        text = 'name,price\n"Fer sérique, dosage","1,234.50"\nUrée,25\n'
        records = parse_delimited(text)

        assert records == [
            {"name": "Fer sérique, dosage", "price": "1,234.50"},
            {"name": "Urée", "price": "25"},
        ]

    def test_tab_separated(self):
        text = "Analyse\tTarif\nCréatinine\t25\n"
        assert parse_delimited(text) == [{"name": "Créatinine", "price": "25"}]

    def test_quoted_header_with_comma(self):
        """引用符内のカンマを区切り文字と誤認しないこと."""
        text = '"Nom, analyse";Prix\nUrée;25\nFerritine;"130,50"\n'
        assert parse_delimited(text) == [
            {"name": "Urée", "price": "25"},
            {"name": "Ferritine", "price": "130,50"},
        ]

    def test_short_rows_padded(self):
        text = "Code;Nom;Prix;Description\nGLY;Glycémie;20\n"
        assert parse_delimited(text)[0]["description"] == ""

    def test_missing_price_column(self):
        """価格列が無ければ SourceFormatError."""
        with pytest.raises(SourceFormatError):
            parse_delimited(_load_fixture("analyses_no_price.csv"))

    def test_empty_text(self):
        with pytest.raises(SourceFormatError):
            parse_delimited("")


class TestDetectColumns:
    """detect_columns のテスト."""

    def test_french_header(self):
        header = ["Code", "Nom de l'analyse", "Secteur", "Délai", "Prix (DH)", "Description"]
        assert detect_columns(header) == {
            "code": 0, "name": 1, "sector": 2, "delay": 3, "price": 4, "description": 5,
        }

    def test_english_header(self):
        header = ["Test name", "Cost", "Turnaround"]
        assert detect_columns(header) == {"name": 0, "price": 1, "delay": 2}

    def test_first_match_wins(self):
        assert detect_columns(["Exam", "Analysis", "Fee"]) == {"name": 0, "price": 2}


class TestFetchSource:
    """fetch_source のテスト."""

    def test_local_file(self):
        text = fetch_source(str(FIXTURES_DIR / "analyses.csv"))
        assert text.startswith("Code;")

    def test_missing_file(self, tmp_path):
        assert fetch_source(str(tmp_path / "absent.csv")) is None

    @patch("labsearch.sources.requests.get")
    def test_url(self, mock_get):
        mock_resp = MagicMock(text="name,price\nUrée,25\n")
        mock_get.return_value = mock_resp

        text = fetch_source("https://example.com/analyses.csv")

        assert text == "name,price\nUrée,25\n"
        mock_resp.raise_for_status.assert_called_once()
        assert mock_get.call_args.args == ("https://example.com/analyses.csv",)
        assert "User-Agent" in mock_get.call_args.kwargs["headers"]

    @patch("labsearch.sources.requests.get")
    def test_url_error(self, mock_get):
        mock_get.side_effect = requests.ConnectionError("boom")
        assert fetch_source("https://example.com/analyses.csv") is None


class TestLoadRecords:
    """load_records のテスト."""

    def test_js_source(self):
        records, sector_names = load_records(str(FIXTURES_DIR / "medical_database.js"))

        assert len(records) == 3
        assert sector_names["HEM"] == "Hématologie"

    def test_html_source_uses_default_sector_names(self):
        records, sector_names = load_records(str(FIXTURES_DIR / "medical_database.html"))

        assert len(records) == 2
        assert sector_names == DEFAULT_SECTOR_NAMES

    def test_csv_source(self):
        records, _ = load_records(str(FIXTURES_DIR / "analyses.csv"))
        assert len(records) == 4

    def test_json_source(self, tmp_path):
        path = tmp_path / "analyses.json"
        path.write_text('[{"name": "Urée", "price": 25}]', encoding="utf-8")

        records, _ = load_records(str(path))
        assert records == [{"name": "Urée", "price": 25}]

    def test_unknown_extension_tries_delimited(self, tmp_path):
        path = tmp_path / "analyses.dat"
        path.write_text("nom;prix\nUrée;25\n", encoding="utf-8")

        records, _ = load_records(str(path))
        assert records == [{"name": "Urée", "price": "25"}]

    def test_missing_file_falls_back(self, tmp_path):
        """ソースが無ければデフォルトリスト."""
        records, sector_names = load_records(str(tmp_path / "absent.csv"))

        assert len(records) == len(DEFAULT_RECORDS)
        assert sector_names == DEFAULT_SECTOR_NAMES

    def test_bad_columns_fall_back(self):
        records, _ = load_records(str(FIXTURES_DIR / "analyses_no_price.csv"))
        assert len(records) == len(DEFAULT_RECORDS)


class TestLoadIndex:
    """load_index のテスト."""

    def test_csv_drops_malformed_rows(self):
        """価格が N/A の行だけ除外されること."""
        index = load_index(str(FIXTURES_DIR / "analyses.csv"))

        assert [r.name for r in index.records] == [
            "Ferritine", "Glycémie à jeun", "Numération Formule Sanguine",
        ]
        assert [r.id for r in index.records] == [3, 2, 1]
        assert index.records[0].display_price == "1130.50 DH"

    def test_js_round_trip(self):
        index = load_index(str(FIXTURES_DIR / "medical_database.js"))

        assert [r.name for r in index.search("hep")] == ["Hépatite B"]
        assert index.ranked_search("hbv")[0].code == "HBV"
        assert index.sector_label(index.ranked_search("hbv")[0]) == "Sérologie"

    def test_all_invalid_falls_back(self, tmp_path):
        """全レコードが不正ならデフォルトリストで作り直すこと."""
        path = tmp_path / "analyses.csv"
        path.write_text("nom,prix\nUrée,N/A\n", encoding="utf-8")

        index = load_index(str(path))
        assert len(index) == len(DEFAULT_RECORDS)

    def test_no_location_uses_defaults(self):
        with patch("labsearch.sources.LABSEARCH_SOURCE", ""):
            index = load_index()
        assert len(index) == len(DEFAULT_RECORDS)

    def test_configured_location(self):
        with patch("labsearch.sources.LABSEARCH_SOURCE", str(FIXTURES_DIR / "medical_database.js")):
            index = load_index()
        assert len(index) == 3
