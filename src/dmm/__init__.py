"""
DMM Tile-Map Codec Package

Decodes the DMM tile-map text format into a canonical, owned model.

A DMM document has two sections:
    - A dictionary mapping short alphabetic keys to lists of datums
      (a type path plus var edits)
    - A grid mapping 3D integer coordinates to sequences of those keys

PIPELINE:
---------
    text --dmm_parser--> syntax tree --decoder--> DMM model --iter_cells()--> per-cell datums

The syntax tree is ephemeral. The DMM model owns all of its data and is the
only thing consumers should hold on to.
"""

from dmm.errors import (
    DMMError,
    DMMSyntaxError,
    TrailingCharactersError,
    InvalidKeyError,
    ConversionError,
    UnknownKeyError,
)
from dmm.keys import Key, encode_key, decode_key
from dmm.literals import Literal, Number, Float, Text, Path, ListLiteral
from dmm.model import Datum, DMM
from dmm.config import DecodeOptions, RowSplitPolicy
from dmm.decoder import from_str, from_file

__version__ = "0.1.0"

__all__ = [
    "DMMError",
    "DMMSyntaxError",
    "TrailingCharactersError",
    "InvalidKeyError",
    "ConversionError",
    "UnknownKeyError",
    "Key",
    "encode_key",
    "decode_key",
    "Literal",
    "Number",
    "Float",
    "Text",
    "Path",
    "ListLiteral",
    "Datum",
    "DMM",
    "DecodeOptions",
    "RowSplitPolicy",
    "from_str",
    "from_file",
]
