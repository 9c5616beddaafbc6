"""
Map Analyzer — Early diagnostics and inventory of decoded DMM maps.

This module provides lightweight analysis of DMM objects:
    - Dictionary / grid inventory
    - Cross-reference check (grid keys missing from the dictionary)
    - Unused dictionary keys
    - Type path usage
    - Coordinate bounds of the expanded grid

IMPORTANT: This is Layer 3 (Analysis). It does NOT modify the map.
It only produces read-only reports.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set, Tuple

from dmm.keys import Key
from dmm.model import DMM, Coords


@dataclass
class MapReport:
    """Analysis report for a decoded map."""

    total_keys: int = 0
    total_grid_entries: int = 0
    total_cells: int = 0
    total_datums: int = 0

    # Cross-reference
    unknown_keys: Set[Key] = field(default_factory=set)
    unknown_cells: List[Coords] = field(default_factory=list)
    unused_keys: Set[Key] = field(default_factory=set)

    # Usage
    key_usage: Dict[Key, int] = field(default_factory=dict)
    path_usage: Dict[str, int] = field(default_factory=dict)
    empty_keys: Set[Key] = field(default_factory=set)  # Keys with no datums

    # Bounds of expanded cells, as (min_x, min_y, min_z), (max_x, max_y, max_z)
    min_coords: Optional[Coords] = None
    max_coords: Optional[Coords] = None

    warnings: List[str] = field(default_factory=list)

    def add_warning(self, msg: str) -> None:
        """Add a warning to the report."""
        if msg not in self.warnings:
            self.warnings.append(msg)

    @property
    def is_consistent(self) -> bool:
        return not self.unknown_keys


def _bounds(cells: List[Coords]) -> Tuple[Optional[Coords], Optional[Coords]]:
    if not cells:
        return None, None
    xs, ys, zs = zip(*cells)
    return (min(xs), min(ys), min(zs)), (max(xs), max(ys), max(zs))


def analyze_map(dmm: DMM) -> MapReport:
    """
    Perform analysis of a DMM.

    Unlike DMM.iter_cells(), this never raises on dangling keys; they are
    collected into the report instead.

    Returns a MapReport with metrics and warnings.
    """
    report = MapReport()

    report.total_keys = len(dmm.dictionary)
    report.total_grid_entries = len(dmm.grid)
    report.total_datums = sum(len(datums) for datums in dmm.dictionary.values())

    # =========================================================================
    # 1. GRID EXPANSION AND CROSS-REFERENCE
    # =========================================================================

    key_usage: Counter = Counter()
    cells: List[Coords] = []

    for (x, y, z), keys in dmm.grid.items():
        for i, key in enumerate(keys):
            cell = (x, y + i, z)
            cells.append(cell)
            key_usage[key] += 1
            if key not in dmm.dictionary:
                report.unknown_keys.add(key)
                report.unknown_cells.append(cell)

    report.total_cells = len(cells)
    report.key_usage = dict(key_usage)
    report.unused_keys = set(dmm.dictionary) - set(key_usage)
    report.min_coords, report.max_coords = _bounds(cells)

    # =========================================================================
    # 2. DICTIONARY CONTENT
    # =========================================================================

    path_usage: Counter = Counter()
    for key, datums in dmm.dictionary.items():
        if not datums:
            report.empty_keys.add(key)
        for datum in datums:
            path_usage[datum.path] += 1
    report.path_usage = dict(path_usage)

    # =========================================================================
    # 3. WARNING FLAGS
    # =========================================================================

    if report.unknown_keys:
        report.add_warning(
            f"Grid keys missing from dictionary: {', '.join(str(k) for k in sorted(report.unknown_keys))}"
        )

    if report.unused_keys:
        report.add_warning(
            f"Unused dictionary keys: {', '.join(str(k) for k in sorted(report.unused_keys))}"
        )

    if report.empty_keys:
        report.add_warning(
            f"Dictionary keys with no datums: {', '.join(str(k) for k in sorted(report.empty_keys))}"
        )

    return report
