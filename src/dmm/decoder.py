"""
DMM Decoder (Layer 2: Syntax Tree → Canonical DMM Model).

Converts the parser's syntax tree into an owned DMM:
    - Dictionary keys and grid row tokens go through the key codec
    - Var edits are folded into a mapping (last assignment wins)
    - Grid row tokens are cut into keys according to DecodeOptions.row_split
    - Optionally, grid keys are checked against the dictionary
"""

import logging
import warnings
from typing import Dict, List, Optional

from dmm.config import DecodeOptions, RowSplitPolicy
from dmm.dmm_parser import COORD_MAX, parse_document
from dmm.errors import ConversionError, InvalidKeyError
from dmm.keys import Key, KEY_WIDTH
from dmm.literals import Literal
from dmm.model import DMM, Datum, Coords
from dmm.syntax import Document, DatumNode, GridEntry


LOGGER = logging.getLogger(__name__)


def _split_row_token(token: str, policy: RowSplitPolicy) -> List[str]:
    if policy is RowSplitPolicy.RUN:
        return [token]
    return [token[i:i + KEY_WIDTH] for i in range(0, len(token), KEY_WIDTH)]


def _convert_datum(node: DatumNode) -> Datum:
    var_edits: Dict[str, Literal] = {}
    for edit in node.var_edits:
        var_edits[edit.identifier] = edit.value
    return Datum(path=node.path, var_edits=var_edits)


def _convert_grid_entry(entry: GridEntry, policy: RowSplitPolicy) -> List[Key]:
    keys = []
    for token in entry.keys:
        for code in _split_row_token(token, policy):
            try:
                keys.append(Key.from_str(code))
            except InvalidKeyError as e:
                raise ConversionError(
                    f"Invalid grid key '{code}' at {entry.coords}: {e}",
                    token=code,
                    coords=entry.coords,
                ) from e
    y = entry.coords[1]
    if keys and y + len(keys) - 1 > COORD_MAX:
        raise ConversionError(
            f"Grid entry at {entry.coords} has {len(keys)} rows and runs past "
            f"the largest coordinate {COORD_MAX}",
            token=entry.keys[-1],
            coords=entry.coords,
        )
    return keys


def document_to_dmm(document: Document, options: Optional[DecodeOptions] = None) -> DMM:
    """
    Convert a parsed Document into a DMM.

    Args:
        document: Syntax tree from dmm_parser.parse_document
        options: Decode options (defaults to DecodeOptions(); pass
            DecodeOptions.from_env() to honour DMM_* variables)

    Returns:
        DMM model owning all of its data

    Raises:
        ConversionError: If a dictionary key or row token is not a valid key,
            or a grid entry runs past the largest coordinate
        UnknownKeyError: If options.validate_references is set and a grid key
            has no dictionary entry
    """
    if options is None:
        options = DecodeOptions()

    dictionary: Dict[Key, List[Datum]] = {}
    for entry in document.dictionary:
        try:
            key = Key.from_str(entry.key)
        except InvalidKeyError as e:
            raise ConversionError(
                f"Invalid dictionary key '{entry.key}': {e}", token=entry.key
            ) from e
        if key in dictionary:
            warnings.warn(f"Duplicate dictionary key '{entry.key}'; last entry wins", UserWarning)
        dictionary[key] = [_convert_datum(d) for d in entry.datums]

    grid: Dict[Coords, List[Key]] = {}
    for entry in document.grid:
        if entry.coords in grid:
            warnings.warn(f"Duplicate grid entry at {entry.coords}; last entry wins", UserWarning)
        grid[entry.coords] = _convert_grid_entry(entry, options.row_split)

    dmm = DMM(dictionary=dictionary, grid=grid)
    if options.validate_references:
        dmm.validate()

    LOGGER.debug(
        "Decoded DMM: %d dictionary entries, %d grid entries (row split: %s)",
        len(dictionary), len(grid), options.row_split.value,
    )
    return dmm


def from_str(text: str, options: Optional[DecodeOptions] = None) -> DMM:
    """
    Decode DMM text into a DMM model.

    Raises:
        DMMSyntaxError: If the text does not match the grammar
        TrailingCharactersError: If non-whitespace follows the grid section
        ConversionError: If a key fails the key codec
        UnknownKeyError: If reference validation is enabled and fails
    """
    return document_to_dmm(parse_document(text), options)


def from_file(filepath: str, options: Optional[DecodeOptions] = None) -> DMM:
    """
    Read a UTF-8 DMM file and decode it.

    Raises:
        FileNotFoundError: If the file doesn't exist
        DMMError: If decoding fails
    """
    try:
        with open(filepath, 'r', encoding='utf-8') as f:
            content = f.read()
    except FileNotFoundError:
        raise FileNotFoundError(f"DMM file not found: {filepath}")

    return from_str(content, options)


__all__ = [
    "document_to_dmm",
    "from_str",
    "from_file",
]
