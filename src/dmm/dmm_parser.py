"""
DMM Parser (Layer 1: Raw Text → Syntax Tree).

Recursive-descent parser for the DMM tile-map format.

Grammar (``ws`` is the newline- and comment-aware skip rule):

    document    := ws (dict_entry (ws ',' ws dict_entry)*)? ws grid_entry*
    dict_entry  := '"' letters '"' ws '=' ws '(' ws (datum (','? datum)*)? ws ')'
    datum       := path (ws '{' ws var_edits ws '}')?
    var_edits   := (var_edit (ws ';' ws var_edit)*)? (ws ';')?
    var_edit    := identifier ws '=' ws literal
    literal     := integer | float | string | path | 'null' | list
    list        := 'list(' ws (literal (ws ',' ws literal)*)? ws ')'
    grid_entry  := '(' uint ',' uint ',' uint ')' ws '=' ws '{"' ws (letters ws)* '"}'

Syntax Notes:
    - ``ws`` skips spaces, tabs, form feeds and newlines; a ``//`` comment
      counts as whitespace only when a newline ends it
    - Literal alternatives are tried in the order above. An integer is
      rejected when a digit, ``.``, ``e`` or ``E`` follows it, so the float
      alternative gets the whole token
    - Each function takes ``(text, pos)`` and returns ``(result, new_pos)``,
      raising DMMSyntaxError when it does not match
"""

from __future__ import annotations

import logging
import re
from typing import List, Optional, Tuple

from dmm.errors import DMMSyntaxError, TrailingCharactersError
from dmm.literals import Literal, Number, Float, Text, Path, ListLiteral, NULL_TEXT
from dmm.syntax import Coords, Document, DictionaryEntry, DatumNode, VarEdit, GridEntry


LOGGER = logging.getLogger(__name__)

_SPACES_RE = re.compile(r"[ \t\f]*")
_WS_RE = re.compile(r"(?:[ \t\f]|(?://[^\n]*)?\n)*")
_INTEGER_RE = re.compile(r"-?[0-9]+(?![0-9.eE])")
_FLOAT_RE = re.compile(r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")
_PATH_RE = re.compile(r"/[A-Za-z0-9/_]*")
_IDENTIFIER_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
_LETTERS_RE = re.compile(r"[A-Za-z]+")
_DIGITS_RE = re.compile(r"[0-9]+")

_I64_MIN = -(2 ** 63)
_I64_MAX = 2 ** 63 - 1
COORD_MAX = 2 ** 32 - 1

_ESCAPES = {"\\": "\\", "n": "\n", "i": "\\i"}


# ---------------------------------------------------------------------------
# Skip rules
# ---------------------------------------------------------------------------

def skip_spaces(text: str, pos: int) -> int:
    """Skip spaces, tabs and form feeds only. Always succeeds."""
    return _SPACES_RE.match(text, pos).end()


def skip_ws(text: str, pos: int) -> int:
    """Skip spaces, tabs, newlines and newline-terminated ``//`` comments."""
    return _WS_RE.match(text, pos).end()


def _expect(text: str, pos: int, token: str) -> int:
    if not text.startswith(token, pos):
        raise DMMSyntaxError(f"'{token}'", text, pos)
    return pos + len(token)


def _match(pattern: re.Pattern, text: str, pos: int, expected: str) -> Tuple[str, int]:
    m = pattern.match(text, pos)
    if m is None:
        raise DMMSyntaxError(expected, text, pos)
    return m.group(), m.end()


# ---------------------------------------------------------------------------
# Literals
# ---------------------------------------------------------------------------

def parse_path(text: str, pos: int = 0) -> Tuple[str, int]:
    """Parse a type path such as ``/obj/machinery/firealarm``."""
    return _match(_PATH_RE, text, pos, "path")


def parse_string(text: str, pos: int = 0) -> Tuple[str, int]:
    """
    Parse a double- or single-quoted string and resolve its escapes.

    Recognized escapes: ``\\\\``, the enclosing quote, ``\\n`` (newline) and
    ``\\i`` (kept as the two characters backslash-i).
    """
    if pos >= len(text) or text[pos] not in "\"'":
        raise DMMSyntaxError("quoted string", text, pos)

    quote = text[pos]
    chars: List[str] = []
    i = pos + 1
    while i < len(text):
        c = text[i]
        if c == quote:
            return "".join(chars), i + 1
        if c == "\\":
            nxt = text[i + 1] if i + 1 < len(text) else ""
            if nxt == quote:
                chars.append(quote)
            elif nxt in _ESCAPES:
                chars.append(_ESCAPES[nxt])
            else:
                raise DMMSyntaxError("escape sequence", text, i + 1)
            i += 2
            continue
        chars.append(c)
        i += 1

    raise DMMSyntaxError(f"closing {quote}", text, i)


def parse_list(text: str, pos: int = 0) -> Tuple[ListLiteral, int]:
    """Parse ``list( literal, ... )`` and keep its raw source text."""
    i = _expect(text, pos, "list(")
    i = skip_ws(text, i)
    if not text.startswith(")", i):
        _, i = parse_literal(text, i)
        i = skip_ws(text, i)
        while text.startswith(",", i):
            i = skip_ws(text, i + 1)
            _, i = parse_literal(text, i)
            i = skip_ws(text, i)
    i = _expect(text, i, ")")
    return ListLiteral(text[pos:i]), i


def parse_literal(text: str, pos: int = 0) -> Tuple[Literal, int]:
    """
    Parse a literal value.

    Alternatives are tried in order: integer, float, quoted string, path,
    ``null`` and ``list(...)``.

    Returns:
        (Literal, position after the literal)

    Raises:
        DMMSyntaxError: If no alternative matches
    """
    m = _INTEGER_RE.match(text, pos)
    if m is not None:
        value = int(m.group())
        # Out of i64 range: fall through to the float alternative
        if _I64_MIN <= value <= _I64_MAX:
            return Number(value), m.end()

    m = _FLOAT_RE.match(text, pos)
    if m is not None:
        return Float(float(m.group())), m.end()

    if pos < len(text) and text[pos] in "\"'":
        value, end = parse_string(text, pos)
        return Text(value), end

    if text.startswith("/", pos):
        path, end = parse_path(text, pos)
        return Path(path), end

    if text.startswith("null", pos):
        return NULL_TEXT, pos + 4

    if text.startswith("list(", pos):
        return parse_list(text, pos)

    raise DMMSyntaxError("literal", text, pos)


# ---------------------------------------------------------------------------
# Datums
# ---------------------------------------------------------------------------

def parse_identifier(text: str, pos: int = 0) -> Tuple[str, int]:
    return _match(_IDENTIFIER_RE, text, pos, "identifier")


def parse_var_edit(text: str, pos: int = 0) -> Tuple[VarEdit, int]:
    """Parse ``identifier = literal``. Comments may sit between any two tokens."""
    i = skip_ws(text, pos)
    identifier, i = parse_identifier(text, i)
    i = skip_ws(text, i)
    i = _expect(text, i, "=")
    i = skip_ws(text, i)
    value, i = parse_literal(text, i)
    i = skip_ws(text, i)
    return VarEdit(identifier=identifier, value=value), i


def parse_var_edits(text: str, pos: int = 0) -> Tuple[List[VarEdit], int]:
    """Parse ``;``-separated var edits with an optional trailing ``;``."""
    edits: List[VarEdit] = []
    i = skip_ws(text, pos)
    try:
        edit, i = parse_var_edit(text, i)
    except DMMSyntaxError as e:
        # An edit that started matching cannot be backtracked over
        if e.position > i:
            raise
    else:
        edits.append(edit)
        while True:
            j = skip_ws(text, i)
            if not text.startswith(";", j):
                break
            j = skip_ws(text, j + 1)
            try:
                edit, j = parse_var_edit(text, j)
            except DMMSyntaxError as e:
                if e.position > j:
                    raise
                break
            edits.append(edit)
            i = j

    i = skip_ws(text, i)
    if text.startswith(";", i):
        i = skip_ws(text, i + 1)
    return edits, i


def parse_data_block(text: str, pos: int = 0) -> Tuple[List[VarEdit], int]:
    """Parse ``{ var_edits }``. An empty block yields no edits."""
    i = skip_ws(text, pos)
    i = _expect(text, i, "{")
    edits, i = parse_var_edits(text, i)
    i = skip_ws(text, i)
    i = _expect(text, i, "}")
    return edits, skip_ws(text, i)


def parse_datum(text: str, pos: int = 0) -> Tuple[DatumNode, int]:
    """Parse a path optionally followed by a data block."""
    i = skip_ws(text, pos)
    path, i = parse_path(text, i)
    i = skip_ws(text, i)
    var_edits: List[VarEdit] = []
    if text.startswith("{", i):
        var_edits, i = parse_data_block(text, i)
    return DatumNode(path=path, var_edits=var_edits), skip_ws(text, i)


# ---------------------------------------------------------------------------
# Dictionary
# ---------------------------------------------------------------------------

def parse_key(text: str, pos: int = 0) -> Tuple[str, int]:
    """Parse a quoted dictionary key such as ``"aaB"``."""
    i = _expect(text, pos, '"')
    key, i = _match(_LETTERS_RE, text, i, "key letters")
    i = _expect(text, i, '"')
    return key, i


def parse_datums_block(text: str, pos: int = 0) -> Tuple[List[DatumNode], int]:
    """
    Parse ``( datum ... )``.

    Datums are delimited by whitespace or comments, or by a single ``,``.
    A ``,`` directly before ``)`` is rejected.
    """
    i = skip_ws(text, pos)
    i = _expect(text, i, "(")
    i = skip_ws(text, i)
    datums: List[DatumNode] = []
    while True:
        j = i
        if datums and text.startswith(",", j):
            j += 1
        j = skip_ws(text, j)
        try:
            datum, j = parse_datum(text, j)
        except DMMSyntaxError as e:
            # A datum whose path matched cannot be backtracked over
            if e.position > j:
                raise
            break
        datums.append(datum)
        i = j

    i = skip_ws(text, i)
    i = _expect(text, i, ")")
    return datums, skip_ws(text, i)


def parse_dictionary_entry(text: str, pos: int = 0) -> Tuple[DictionaryEntry, int]:
    """Parse ``"key" = ( datums )``."""
    start = skip_ws(text, pos)
    key, i = parse_key(text, start)
    i = skip_ws(text, i)
    i = _expect(text, i, "=")
    datums, i = parse_datums_block(text, i)
    return DictionaryEntry(key=key, datums=datums, position=start), skip_ws(text, i)


def parse_dictionary(text: str, pos: int = 0) -> Tuple[List[DictionaryEntry], int, Optional[DMMSyntaxError]]:
    """
    Parse ``,``-separated dictionary entries.

    Returns:
        (entries, position after the last entry, error that stopped the list)
    """
    entries: List[DictionaryEntry] = []
    i = skip_ws(text, pos)
    try:
        entry, i = parse_dictionary_entry(text, i)
    except DMMSyntaxError as e:
        return entries, i, e
    entries.append(entry)

    while True:
        j = skip_ws(text, i)
        if not text.startswith(",", j):
            return entries, skip_ws(text, i), DMMSyntaxError("','", text, j)
        try:
            entry, j = parse_dictionary_entry(text, j + 1)
        except DMMSyntaxError as e:
            return entries, skip_ws(text, i), e
        entries.append(entry)
        i = j


# ---------------------------------------------------------------------------
# Grid
# ---------------------------------------------------------------------------

def _parse_uint(text: str, pos: int) -> Tuple[int, int]:
    digits, end = _match(_DIGITS_RE, text, pos, "unsigned integer")
    value = int(digits)
    if value > COORD_MAX:
        raise DMMSyntaxError(f"coordinate no greater than {COORD_MAX}", text, pos)
    return value, end


def parse_grid_coords(text: str, pos: int = 0) -> Tuple[Coords, int]:
    """Parse ``(x, y, z)``."""
    i = skip_ws(text, pos)
    i = _expect(text, i, "(")
    values = []
    for n in range(3):
        if n:
            i = _expect(text, skip_ws(text, i), ",")
        value, i = _parse_uint(text, skip_ws(text, i))
        values.append(value)
    i = _expect(text, skip_ws(text, i), ")")
    return (values[0], values[1], values[2]), skip_ws(text, i)


def parse_grid_keys(text: str, pos: int = 0) -> Tuple[List[str], int]:
    """Parse row tokens: maximal letter runs separated by whitespace or comments."""
    keys: List[str] = []
    i = skip_ws(text, pos)
    while True:
        m = _LETTERS_RE.match(text, i)
        if m is None:
            return keys, i
        keys.append(m.group())
        i = skip_ws(text, m.end())


def parse_grid_entry(text: str, pos: int = 0) -> Tuple[GridEntry, int]:
    """Parse ``(x,y,z) = {" rows "}``."""
    start = skip_ws(text, pos)
    coords, i = parse_grid_coords(text, start)
    i = _expect(text, skip_ws(text, i), "=")
    i = _expect(text, skip_ws(text, i), '{"')
    keys, i = parse_grid_keys(text, i)
    i = _expect(text, i, '"}')
    return GridEntry(coords=coords, keys=keys, position=start), skip_ws(text, i)


def parse_grid(text: str, pos: int = 0) -> Tuple[List[GridEntry], int, Optional[DMMSyntaxError]]:
    """
    Parse zero or more grid entries.

    Returns:
        (entries, position after the last entry, error that stopped the list)
    """
    entries: List[GridEntry] = []
    i = pos
    while True:
        try:
            entry, i = parse_grid_entry(text, i)
        except DMMSyntaxError as e:
            return entries, i, e
        entries.append(entry)


# ---------------------------------------------------------------------------
# Document
# ---------------------------------------------------------------------------

def parse_document(text: str) -> Document:
    """
    Parse a complete DMM document.

    Args:
        text: Entire file contents

    Returns:
        Document syntax tree

    Raises:
        TrailingCharactersError: If non-whitespace input remains after the
            grid section
    """
    dictionary, pos, dict_stop = parse_dictionary(text, 0)
    grid, pos, grid_stop = parse_grid(text, pos)

    if text[pos:].strip():
        stops = [e for e in (dict_stop, grid_stop) if e is not None]
        detail = max(stops, key=lambda e: e.position) if stops else None
        LOGGER.debug(
            "Parser stopped at offset %d after %d dictionary and %d grid entries",
            pos, len(dictionary), len(grid),
        )
        raise TrailingCharactersError(text, pos, detail)

    return Document(dictionary=dictionary, grid=grid)


__all__ = [
    "COORD_MAX",
    "skip_spaces",
    "skip_ws",
    "parse_literal",
    "parse_string",
    "parse_path",
    "parse_list",
    "parse_identifier",
    "parse_var_edit",
    "parse_var_edits",
    "parse_data_block",
    "parse_datum",
    "parse_key",
    "parse_datums_block",
    "parse_dictionary_entry",
    "parse_dictionary",
    "parse_grid_coords",
    "parse_grid_keys",
    "parse_grid_entry",
    "parse_grid",
    "parse_document",
]
