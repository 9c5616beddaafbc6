"""
Syntax tree produced by the DMM parser.

These nodes mirror the grammar one-to-one and keep the source order of
everything (dictionary entries, datums, var edits, grid entries, row tokens).
Duplicate var edits are preserved here; collapsing them is the decoder's job.

The tree is short-lived: it is built by dmm_parser, converted by decoder and
then discarded.
"""

from dataclasses import dataclass, field
from typing import List, Tuple

from dmm.literals import Literal


Coords = Tuple[int, int, int]


@dataclass(frozen=True)
class VarEdit:
    """``identifier = literal`` inside a datum's brace block."""
    identifier: str
    value: Literal


@dataclass(frozen=True)
class DatumNode:
    """A type path with its (possibly empty) ordered var edits."""
    path: str
    var_edits: List[VarEdit] = field(default_factory=list)


@dataclass(frozen=True)
class DictionaryEntry:
    """``"key" = ( datum ... )``. position is the offset of the opening quote."""
    key: str
    datums: List[DatumNode] = field(default_factory=list)
    position: int = field(default=0, compare=False)


@dataclass(frozen=True)
class GridEntry:
    """``(x,y,z) = {" row tokens "}``. position is the offset of ``(``."""
    coords: Coords
    keys: List[str] = field(default_factory=list)
    position: int = field(default=0, compare=False)


@dataclass(frozen=True)
class Document:
    """A whole parsed file: dictionary section followed by grid section."""
    dictionary: List[DictionaryEntry] = field(default_factory=list)
    grid: List[GridEntry] = field(default_factory=list)
