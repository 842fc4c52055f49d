"""
Tests for column resolution and literal encoding.
"""

from datetime import date, datetime

import pytest

from vecfilter.db.filters import (
    HANA, SQLITE, ColumnResolver, LiteralEncoder, MissingOperandError,
    UnsupportedValueError, get_dialect
)
from vecfilter.db.filters.dialects import DIALECTS


class TestColumnResolver:

    def test_dedicated_column_is_quoted(self):
        resolver = ColumnResolver({"name"}, "META")
        assert resolver.resolve("name") == '"name"'
        assert resolver.is_dedicated("name")

    def test_generic_key_uses_json_path(self):
        resolver = ColumnResolver({"name"}, "META")
        assert resolver.resolve("age") == "JSON_VALUE(META, '$.age')"
        assert not resolver.is_dedicated("age")

    def test_sqlite(self):
        resolver = ColumnResolver([], '"metadata"', SQLITE)
        assert resolver.resolve("age") == "json_extract(\"metadata\", '$.age')"


class TestLiteralEncoder:

    @pytest.fixture
    def encoder(self):
        return LiteralEncoder(HANA)

    def test_booleans(self, encoder):
        assert encoder.encode(True) == ("TO_BOOLEAN(?)", "true")
        assert encoder.encode(False) == ("TO_BOOLEAN(?)", "false")

    def test_integers(self, encoder):
        assert encoder.encode(0) == ("TO_DOUBLE(?)", "0")
        assert encoder.encode(-42) == ("TO_DOUBLE(?)", "-42")
        assert encoder.encode(3.0) == ("TO_DOUBLE(?)", "3")

    @pytest.mark.parametrize("value", [3.14, float("inf"), float("nan")])
    def test_non_integers(self, encoder, value):
        with pytest.raises(UnsupportedValueError):
            encoder.encode(value)

    @pytest.mark.parametrize("value", [None, ""])
    def test_empty_values(self, encoder, value):
        with pytest.raises(MissingOperandError, match="No operands provided"):
            encoder.encode(value)

    @pytest.mark.parametrize("value", [[], {}, ()])
    def test_empty_containers_are_unencodable(self, encoder, value):
        with pytest.raises(UnsupportedValueError, match="Cannot handle value"):
            encoder.encode(value)

    def test_missing_operand_is_a_type_error(self, encoder):
        with pytest.raises(TypeError):
            encoder.encode(None)

    def test_dates(self, encoder):
        assert encoder.encode({"type": "date", "date": "2024-02-29"}) == ("TO_DATE(?)", "2024-02-29")
        assert encoder.encode(date(2024, 2, 29)) == ("TO_DATE(?)", "2024-02-29")
        assert encoder.encode(datetime(2024, 2, 29, 8, 30)) == ("TO_DATE(?)", "2024-02-29")
        assert encoder.encode({"type": "date", "date": datetime(2024, 2, 29, 23, 59)}) == ("TO_DATE(?)", "2024-02-29")

    @pytest.mark.parametrize("value", [{"type": "geo"}, ["a"], object()])
    def test_unencodable(self, encoder, value):
        with pytest.raises(UnsupportedValueError, match="Cannot handle value"):
            encoder.encode(value)

    def test_strings(self, encoder):
        assert encoder.encode("hello") == ("?", "hello")

    def test_sqlite_placeholders(self):
        encoder = LiteralEncoder(SQLITE)
        assert encoder.encode(True) == ("(? = 'true')", "true")
        assert encoder.encode(7) == ("CAST(? AS REAL)", "7")
        assert encoder.encode(date(2024, 1, 1)) == ("date(?)", "2024-01-01")


class TestDialects:

    def test_lookup(self):
        assert get_dialect("hana") is HANA
        assert get_dialect("SQLite") is SQLITE

    def test_registry_is_read_only(self):
        with pytest.raises(TypeError):
            DIALECTS["oracle"] = HANA

    def test_unknown(self):
        with pytest.raises(ValueError, match="Unknown SQL dialect"):
            get_dialect("oracle")

    @pytest.mark.parametrize("dialect", [HANA, SQLITE])
    def test_one_placeholder_per_template(self, dialect):
        for template in (dialect.boolean_placeholder, dialect.number_placeholder,
                         dialect.date_placeholder):
            assert template.count("?") == 1
        assert "?" not in dialect.json_selector
