"""
Canonical DMM Model

Owned, immutable representation of a decoded map.

These are pure data classes representing:
    - Datums (a type path plus its var edits)
    - The DMM map (dictionary + grid)

ARCHITECTURAL RULE:
    The model holds no reference to the source text or the syntax tree.
    It is built once by the decoder and never mutated afterwards, so it can
    be shared freely between threads.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple

from dmm.errors import UnknownKeyError
from dmm.keys import Key
from dmm.literals import Literal


Coords = Tuple[int, int, int]


@dataclass(frozen=True)
class Datum:
    """
    An object instance inside a dictionary entry.

    Example:
        /obj/machinery/firealarm{ dir = 8; name = "thing" }

        Datum(
            path="/obj/machinery/firealarm",
            var_edits={"dir": Number(8), "name": Text("thing")},
        )

    Properties:
        path:
            Type path, always starting with ``/``

        var_edits:
            Field overrides by name. When the source repeats a name, the
            last assignment wins.
    """

    path: str
    var_edits: Dict[str, Literal] = field(default_factory=dict)


@dataclass(frozen=True)
class DMM:
    """
    Root container for a decoded map.

    Properties:
        dictionary:
            Key -> ordered datums making up one tile

        grid:
            (x, y, z) -> ordered keys. The i-th key of an entry describes
            the cell at (x, y + i, z).

    INVARIANTS:
        - Every key used in the grid should exist in the dictionary.
          validate() checks this; iter_cells() raises on a dangling key.
        - Both mappings keep insertion order, which is document order when
          the map comes from the decoder.
    """

    dictionary: Dict[Key, List[Datum]] = field(default_factory=dict)
    grid: Dict[Coords, List[Key]] = field(default_factory=dict)

    def get_datums(self, key: Key) -> Optional[List[Datum]]:
        """
        Retrieve the datums for a key.

        Returns:
            List of datums or None if the key is not in the dictionary
        """
        return self.dictionary.get(key)

    def get_keys(self, coords: Coords) -> Optional[List[Key]]:
        """
        Retrieve the key list stored at a grid coordinate.

        Returns:
            List of keys or None if no grid entry starts there
        """
        return self.grid.get(coords)

    def missing_keys(self) -> List[Tuple[Coords, Key]]:
        """Return every (cell coordinate, key) whose key has no dictionary entry."""
        missing = []
        for (x, y, z), keys in self.grid.items():
            for i, key in enumerate(keys):
                if key not in self.dictionary:
                    missing.append(((x, y + i, z), key))
        return missing

    def validate(self) -> None:
        """
        Check that every grid key has a dictionary entry.

        Raises:
            UnknownKeyError: For the first dangling key, in grid order
        """
        missing = self.missing_keys()
        if missing:
            coords, key = missing[0]
            raise UnknownKeyError(key, coords)

    def iter_cells(self) -> Iterator[Tuple[Coords, List[Datum]]]:
        """
        Lazily expand the grid into per-cell (coordinate, datums) pairs.

        Grid entries are visited in insertion order. Within an entry the
        i-th key yields the cell with its second coordinate offset by i.
        Decoded maps keep every offset cell within the parser's coordinate
        range; hand-built grids are not checked.

        Raises:
            UnknownKeyError: When a key with no dictionary entry is reached
        """
        for (x, y, z), keys in self.grid.items():
            for i, key in enumerate(keys):
                cell = (x, y + i, z)
                datums = self.dictionary.get(key)
                if datums is None:
                    raise UnknownKeyError(key, cell)
                yield cell, datums

    def __iter__(self) -> Iterator[Tuple[Coords, List[Datum]]]:
        return self.iter_cells()
