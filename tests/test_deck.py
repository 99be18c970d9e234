"""
Tests for the deck reader and section views.
"""

import numpy as np
import pytest

from eclgrid.deck import Deck, expand_items, parse_deck_file, parse_deck_string
from eclgrid.errors import DeckParseError, MissingSectionError


class TestTokens:

    def test_expand_items(self):
        assert expand_items(["3*1.5", "2", "2*"]) == ["1.5", "1.5", "1.5", "2", None, None]


class TestParse:

    def test_box_deck_keywords(self, box_deck_text):
        deck = parse_deck_string(box_deck_text)
        names = [kw.name for kw in deck]
        assert names[:3] == ["RUNSPEC", "TITLE", "DIMENS"]
        assert "SCHEDULE" in names
        assert deck[1].title == "Simple box model"
        assert all(kw.is_known for kw in deck)

    def test_line_numbers(self, box_deck_text):
        deck = parse_deck_string(box_deck_text, file_name="BOX.DATA")
        dimens = deck.section("RUNSPEC").get_deck_keyword("DIMENS")
        assert dimens.line_number == 6
        assert dimens.file_name == "BOX.DATA"

    def test_repeat_counts_and_comments(self):
        deck = parse_deck_string("GRID\nDX\n -- comment line\n 2*1.0 3.5 -- trailing\n 1D2 /\n")
        np.testing.assert_array_equal(deck.section("GRID").get_keyword("DX").values, [1.0, 1.0, 3.5, 100.0])

    def test_data_on_keyword_line_and_after_slash(self):
        deck = parse_deck_string("RUNSPEC\nDIMENS 3 2 1 / ignored text\n")
        section = deck.section("RUNSPEC")
        assert [section.get_record_field("DIMENS", 0, n) for n in ("NX", "NY", "NZ")] == [3, 2, 1]

    def test_unterminated_record(self):
        with pytest.raises(DeckParseError) as exc_info:
            parse_deck_string("RUNSPEC\nDIMENS\n 1 2 3\n", file_name="bad.DATA")
        assert exc_info.value.line_number == 2
        assert "bad.DATA" in str(exc_info.value)

    def test_data_without_keyword(self):
        with pytest.raises(DeckParseError):
            parse_deck_string("1 2 3 /\n")

    def test_defaulted_dimension(self):
        deck = parse_deck_string("RUNSPEC\nDIMENS\n 1* 2 3 /\n")
        with pytest.raises(DeckParseError):
            deck.section("RUNSPEC").get_record_field("DIMENS", 0, "NX")

    def test_defaulted_array_value(self):
        deck = parse_deck_string("GRID\nDX\n 2* /\n")
        with pytest.raises(DeckParseError):
            deck.section("GRID").get_keyword("DX")

    def test_unknown_keyword_kept(self):
        deck = parse_deck_string("SOLUTION\nRPTRST\n BASIC=2 /\nSCHEDULE\nEND\n")
        names = [kw.name for kw in deck]
        assert names == ["SOLUTION", "RPTRST", "SCHEDULE", "END"]
        rptrst = deck[1]
        assert not rptrst.is_known
        assert rptrst.records == [["BASIC=2"]]

    def test_include(self, tmp_path):
        (tmp_path / "dx.inc").write_text("DX\n 4*25 /\n")
        main = tmp_path / "MAIN.DATA"
        main.write_text("GRID\nINCLUDE\n 'dx.inc' /\nTOPS\n 4*0 /\n")
        deck = parse_deck_file(str(main))
        grid = deck.section("GRID")
        assert [kw.name for kw in grid] == ["DX", "TOPS"]
        assert grid.get_deck_keyword("DX").file_name.endswith("dx.inc")
        np.testing.assert_array_equal(grid.get_keyword("DX").values, [25.0] * 4)

    def test_include_cycle(self, tmp_path):
        (tmp_path / "a.inc").write_text("INCLUDE\n 'b.inc' /\n")
        (tmp_path / "b.inc").write_text("INCLUDE\n 'a.inc' /\n")
        with pytest.raises(DeckParseError):
            parse_deck_string("GRID\nINCLUDE\n 'a.inc' /\n", base_dir=str(tmp_path))

    def test_include_missing_file(self, tmp_path):
        with pytest.raises(DeckParseError):
            parse_deck_string("GRID\nINCLUDE\n 'nope.inc' /\n", base_dir=str(tmp_path))


class TestUnits:

    def test_metric_is_default(self):
        deck = parse_deck_string("RUNSPEC\nGRID\nDZ\n 2*3 /\n")
        assert deck.unit_system == "METRIC"
        np.testing.assert_allclose(deck.section("GRID").get_keyword("DZ").values, [3.0, 3.0])

    def test_field_lengths_in_metres(self):
        deck = parse_deck_string("RUNSPEC\nFIELD\nGRID\nTOPS\n 2*10 /\nPORO\n 2*0.2 /\n")
        grid = deck.section("GRID")
        np.testing.assert_allclose(grid.get_keyword("TOPS").values, [3.048, 3.048])
        np.testing.assert_allclose(grid.get_keyword("PORO").values, [0.2, 0.2])

    def test_lab_lengths(self):
        deck = parse_deck_string("RUNSPEC\nLAB\nGRID\nDX\n 1*50 /\n")
        np.testing.assert_allclose(deck.section("GRID").get_keyword("DX").values, [0.5])

    def test_permeability_millidarcy(self):
        deck = parse_deck_string("GRID\nPERMX\n 1*1000 /\n")
        np.testing.assert_allclose(deck.section("GRID").get_keyword("PERMX").values, [9.869233e-13])


class TestSection:

    def test_section_bounds(self, box_deck_text):
        deck = parse_deck_string(box_deck_text)
        runspec = deck.section("RUNSPEC")
        grid = deck.section("GRID")
        assert runspec.has_keyword("DIMENS")
        assert not runspec.has_keyword("DX")
        assert grid.has_keyword("DX") and grid.has_keyword("TOPS")
        assert not grid.has_keyword("DIMENS")
        assert len(deck.section("PROPS")) == 0

    def test_missing_section(self):
        deck = parse_deck_string("RUNSPEC\n")
        with pytest.raises(MissingSectionError):
            deck.section("GRID")

    def test_missing_keyword(self, box_deck_text):
        grid = parse_deck_string(box_deck_text).section("GRID")
        with pytest.raises(KeyError):
            grid.get_keyword("ZCORN")

    def test_last_occurrence_wins(self):
        grid = parse_deck_string("GRID\nDX\n 1 /\nDX\n 2 /\n").section("GRID")
        np.testing.assert_array_equal(grid.get_keyword("DX").values, [2.0])

    def test_empty_deck(self):
        assert len(Deck()) == 0
