"""
Tests for the Map Analyzer.

Tests verify that the analyzer correctly:
    - Inventories keys, grid entries and cells
    - Detects grid keys missing from the dictionary
    - Detects unused and empty dictionary keys
    - Counts type path usage
    - Reports coordinate bounds
"""

from dmm.analyzer import analyze_map
from dmm.examples import build_example_map
from dmm.keys import Key
from dmm.model import DMM, Datum


def test_example_map():
    report = analyze_map(build_example_map())

    assert report.total_keys == 2
    assert report.total_grid_entries == 1
    assert report.total_cells == 2
    assert report.total_datums == 3
    assert report.is_consistent
    assert report.unused_keys == set()
    assert report.key_usage == {Key(0): 1, Key(1): 1}
    assert report.path_usage["/area/space"] == 1
    assert report.min_coords == (1, 1, 1)
    assert report.max_coords == (1, 2, 1)
    assert report.warnings == []


def test_unknown_keys_are_collected_not_raised():
    dmm = DMM(
        dictionary={Key(0): [Datum("/a")]},
        grid={(1, 1, 1): [Key(0), Key(5)], (4, 2, 1): [Key(5)]},
    )
    report = analyze_map(dmm)

    assert not report.is_consistent
    assert report.unknown_keys == {Key(5)}
    assert report.unknown_cells == [(1, 2, 1), (4, 2, 1)]
    assert any("missing from dictionary" in w and "aaf" in w for w in report.warnings)


def test_unused_and_empty_keys():
    dmm = DMM(
        dictionary={Key(0): [Datum("/a")], Key(1): [], Key(2): [Datum("/a")]},
        grid={(1, 1, 1): [Key(0)]},
    )
    report = analyze_map(dmm)

    assert report.unused_keys == {Key(1), Key(2)}
    assert report.empty_keys == {Key(1)}
    assert report.path_usage == {"/a": 2}
    assert len(report.warnings) == 2


def test_bounds_over_expanded_cells():
    dmm = DMM(
        dictionary={Key(0): []},
        grid={(3, 7, 2): [Key(0)] * 3, (1, 9, 1): [Key(0)]},
    )
    report = analyze_map(dmm)

    assert report.total_cells == 4
    assert report.min_coords == (1, 7, 1)
    assert report.max_coords == (3, 9, 2)


def test_empty_map():
    report = analyze_map(DMM())
    assert report.total_cells == 0
    assert report.min_coords is None
    assert report.max_coords is None
    assert report.warnings == []


def test_warnings_are_not_duplicated():
    report = analyze_map(DMM())
    report.add_warning("x")
    report.add_warning("x")
    assert report.warnings == ["x"]
