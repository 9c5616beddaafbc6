"""
Tests for the decoder (Layer 2: Syntax Tree → Canonical DMM Model).

Covers key interning, var edit folding, row splitting policies,
reference validation and the error paths.
"""

import warnings

import pytest
from dmm.config import DecodeOptions, RowSplitPolicy
from dmm.decoder import from_str, from_file, document_to_dmm
from dmm.errors import (
    ConversionError,
    DMMSyntaxError,
    InvalidKeyError,
    TrailingCharactersError,
    UnknownKeyError,
    line_and_column,
)
from dmm.examples import EXAMPLE_DMM_TEXT, build_example_map
from dmm.keys import Key, encode_key
from dmm.literals import Number, Text, Path, ListLiteral
from dmm.model import DMM, Datum
from dmm.syntax import Document, GridEntry


FIREALARM = Datum(
    "/obj/machinery/firealarm",
    {"dir": Number(8), "name": Text("thing")},
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    monkeypatch.delenv("DMM_ROW_SPLIT", raising=False)
    monkeypatch.delenv("DMM_VALIDATE_REFERENCES", raising=False)


class TestFromStr:
    """Test the full text -> model pipeline."""

    def test_reference_document(self):
        source = (
            '"aaa" = (/turf/open/space/basic, /area/space),\n'
            '"aab" = (/obj/machinery/firealarm{ dir = 8; name = "thing" })\n'
            "\n"
            '(1,1,1) = {"\n'
            "aaa\n"
            "aab\n"
            '"}\n'
        )
        dmm = from_str(source)

        assert dmm.dictionary == {
            Key.from_str("aaa"): [Datum("/turf/open/space/basic"), Datum("/area/space")],
            Key.from_str("aab"): [FIREALARM],
        }
        assert dmm.grid == {(1, 1, 1): [Key(0), Key(1)]}

        assert list(dmm.iter_cells()) == [
            ((1, 1, 1), [Datum("/turf/open/space/basic"), Datum("/area/space")]),
            ((1, 2, 1), [FIREALARM]),
        ]

    def test_example_text_matches_example_builder(self):
        assert from_str(EXAMPLE_DMM_TEXT) == build_example_map()

    def test_last_var_edit_wins(self):
        dmm = from_str('"aaa" = (/obj{ dir = 1; name = "x"; dir = 4 })')
        datum = dmm.get_datums(Key(0))[0]
        assert datum.var_edits == {"dir": Number(4), "name": Text("x")}

    def test_rich_literals_survive(self):
        dmm = from_str('"aaa" = (/obj{ a = /obj/item; b = list(1, 2); c = null })')
        edits = dmm.get_datums(Key(0))[0].var_edits
        assert edits["a"] == Path("/obj/item")
        assert edits["b"] == ListLiteral("list(1, 2)")
        assert edits["c"] == Text("null")

    def test_empty_document(self):
        assert from_str("") == DMM()

    def test_empty_dictionary_entry(self):
        dmm = from_str('"aaa" = ()\n(1,1,1) = {"aaa"}')
        assert list(dmm.iter_cells()) == [((1, 1, 1), [])]

    def test_syntax_errors_propagate(self):
        with pytest.raises(TrailingCharactersError):
            from_str('"aaa" = ()\n(1,1,1) = {"aaa"}\n!')
        with pytest.raises(DMMSyntaxError):
            from_str('"aaa" = (/obj{ dir = })')


class TestKeyConversion:
    """Test key codec errors during conversion."""

    def test_invalid_dictionary_key(self):
        with pytest.raises(ConversionError) as exc_info:
            from_str('"aaaa" = ()')
        assert exc_info.value.token == "aaaa"
        assert exc_info.value.coords is None
        assert isinstance(exc_info.value.__cause__, InvalidKeyError)

    def test_invalid_grid_token_names_coords(self):
        with pytest.raises(ConversionError) as exc_info:
            from_str('"aaa" = ()\n(3,4,5) = {"\naaa\nab\n"}')
        assert exc_info.value.token == "ab"
        assert exc_info.value.coords == (3, 4, 5)

    def test_packed_row_rejected_by_default(self):
        with pytest.raises(ConversionError) as exc_info:
            from_str('"aaa" = ()\n"aab" = ()\n(1,1,1) = {"aaaaab"}')
        assert exc_info.value.token == "aaaaab"

    def test_rows_past_largest_coordinate_rejected(self):
        with pytest.raises(ConversionError) as exc_info:
            from_str('"aaa" = ()\n(1,4294967295,1) = {"\naaa\naaa\n"}')
        assert exc_info.value.coords == (1, 4294967295, 1)

    def test_single_row_at_largest_coordinate(self):
        dmm = from_str('"aaa" = ()\n(1,4294967295,1) = {"aaa"}')
        assert [c for c, _ in dmm.iter_cells()] == [(1, 4294967295, 1)]


class TestRowSplitting:
    """Test FIXED_WIDTH row splitting."""

    SOURCE = '"aaa" = (/a)\n"aab" = (/b)\n(1,1,1) = {"\naaaaabaaa\naab\n"}'

    def test_fixed_width_splits_packed_rows(self):
        options = DecodeOptions(row_split=RowSplitPolicy.FIXED_WIDTH)
        dmm = from_str(self.SOURCE, options)
        assert dmm.grid[(1, 1, 1)] == [Key(0), Key(1), Key(0), Key(1)]
        assert [c for c, _ in dmm.iter_cells()] == [
            (1, 1, 1), (1, 2, 1), (1, 3, 1), (1, 4, 1),
        ]

    def test_fixed_width_rejects_ragged_rows(self):
        options = DecodeOptions(row_split=RowSplitPolicy.FIXED_WIDTH)
        with pytest.raises(ConversionError) as exc_info:
            from_str('"aaa" = ()\n(1,1,1) = {"aaaa"}', options)
        assert exc_info.value.token == "a"

    def test_policy_from_environment(self, monkeypatch):
        monkeypatch.setenv("DMM_ROW_SPLIT", "fixed_width")
        dmm = from_str(self.SOURCE, DecodeOptions.from_env())
        assert len(dmm.grid[(1, 1, 1)]) == 4

    def test_environment_ignored_without_from_env(self, monkeypatch):
        monkeypatch.setenv("DMM_ROW_SPLIT", "fixed_width")
        with pytest.raises(ConversionError):
            from_str(self.SOURCE)


class TestReferenceValidation:
    """Test grid -> dictionary cross-reference checking."""

    SOURCE = '"aaa" = (/a)\n(1,1,1) = {"\naaa\naab\n"}'

    def test_dangling_key_rejected_by_default(self):
        with pytest.raises(UnknownKeyError) as exc_info:
            from_str(self.SOURCE)
        assert exc_info.value.key == Key(1)
        assert exc_info.value.coords == (1, 2, 1)

    def test_validation_can_be_deferred(self):
        dmm = from_str(self.SOURCE, DecodeOptions(validate_references=False))
        cells = dmm.iter_cells()
        assert next(cells) == ((1, 1, 1), [Datum("/a")])
        with pytest.raises(UnknownKeyError):
            next(cells)

    def test_validation_disabled_from_environment(self, monkeypatch):
        monkeypatch.setenv("DMM_VALIDATE_REFERENCES", "false")
        dmm = from_str(self.SOURCE, DecodeOptions.from_env())
        assert dmm.missing_keys() == [((1, 2, 1), Key(1))]


class TestDuplicates:
    """Duplicates are accepted, last one wins, with a warning."""

    def test_duplicate_dictionary_key(self):
        with pytest.warns(UserWarning, match="Duplicate dictionary key"):
            dmm = from_str('"aaa" = (/a),\n"aaa" = (/b)')
        assert dmm.dictionary == {Key(0): [Datum("/b")]}

    def test_duplicate_grid_coords(self):
        with pytest.warns(UserWarning, match="Duplicate grid entry"):
            dmm = from_str('"aaa" = (/a)\n"aab" = (/b)\n(1,1,1) = {"aaa"}\n(1,1,1) = {"aab"}')
        assert dmm.grid == {(1, 1, 1): [Key(1)]}

    def test_no_warning_for_clean_input(self):
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            from_str(EXAMPLE_DMM_TEXT)


class TestLargeMaps:
    """Line and column are not computed for errors the parser backtracks over."""

    @staticmethod
    def build_text(count):
        lines = []
        for value in range(count):
            lines.append(f'"{encode_key(value)}" = (/obj/a{{ dir = {value}; name = "n"; }},/area/b)')
        for value in range(count):
            lines.append(f'({value + 1},1,1) = {{"\n{encode_key(value)}\n"}}')
        return "\n".join(lines) + "\n"

    @pytest.mark.parametrize("count", [10, 2000])
    def test_no_line_lookups_on_success(self, monkeypatch, count):
        calls = []

        def counting(text, position):
            calls.append(position)
            return line_and_column(text, position)

        monkeypatch.setattr("dmm.errors.line_and_column", counting)
        dmm = from_str(self.build_text(count))
        assert len(dmm.dictionary) == count
        assert len(dmm.grid) == count
        assert calls == []

    def test_error_message_still_has_line(self):
        text = self.build_text(3) + "junk"
        with pytest.raises(TrailingCharactersError) as exc_info:
            from_str(text)
        assert exc_info.value.line == 7
        assert "line 7, column 1" in str(exc_info.value)

def test_document_to_dmm_keeps_grid_order():
    document = Document(
        dictionary=[],
        grid=[GridEntry((2, 1, 1), []), GridEntry((1, 1, 1), [])],
    )
    dmm = document_to_dmm(document, DecodeOptions())
    assert list(dmm.grid) == [(2, 1, 1), (1, 1, 1)]


def test_from_file(tmp_path):
    path = tmp_path / "example.dmm"
    path.write_text(EXAMPLE_DMM_TEXT, encoding="utf-8")
    assert from_file(str(path)) == build_example_map()


def test_from_file_missing(tmp_path):
    with pytest.raises(FileNotFoundError):
        from_file(str(tmp_path / "missing.dmm"))
