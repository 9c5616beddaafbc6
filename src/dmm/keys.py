"""
Key Codec

Dictionary keys are bounded integers with a fixed-width alphabetic text form.

The text form is a base-52 numeral, most significant character first, over
the alphabet ``a-z`` followed by ``A-Z``. Every code is exactly KEY_WIDTH
characters; the alphabet's first symbol pads on the left, so 0 is ``aaa``.

Examples:
    encode_key(0)      -> "aaa"
    encode_key(52)     -> "aba"
    encode_key(140607) -> "ZZZ"
    decode_key("aaQ")  -> 42
"""

from dataclasses import dataclass

from dmm.errors import InvalidKeyError


KEY_ALPHABET = "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ"
KEY_BASE = len(KEY_ALPHABET)
KEY_WIDTH = 3
MAX_KEY = KEY_BASE ** KEY_WIDTH - 1

_INDEX = {c: i for i, c in enumerate(KEY_ALPHABET)}


def encode_key(value: int) -> str:
    """
    Encode an integer in [0, MAX_KEY] as its KEY_WIDTH-letter code.

    Raises:
        InvalidKeyError: If value is outside the key domain
    """
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= MAX_KEY:
        raise InvalidKeyError(f"Key value {value!r} is outside [0, {MAX_KEY}]")

    chars = []
    while value:
        value, index = divmod(value, KEY_BASE)
        chars.insert(0, KEY_ALPHABET[index])

    while len(chars) < KEY_WIDTH:
        chars.insert(0, KEY_ALPHABET[0])

    return "".join(chars)


def decode_key(code: str) -> int:
    """
    Decode a KEY_WIDTH-letter code into its integer value.

    Raises:
        InvalidKeyError: If code has the wrong length or a character outside
            the alphabet
    """
    if len(code) != KEY_WIDTH:
        raise InvalidKeyError(
            f"Key '{code}' must be exactly {KEY_WIDTH} characters, got {len(code)}"
        )

    value = 0
    for c in code:
        index = _INDEX.get(c)
        if index is None:
            raise InvalidKeyError(f"Invalid character {c!r} in key '{code}'")
        value = value * KEY_BASE + index

    return value


@dataclass(frozen=True, order=True)
class Key:
    """
    A dictionary key.

    Keys compare and hash by integer value; str() gives the text code.

    Properties:
        value: Integer in [0, MAX_KEY]
    """

    value: int

    def __post_init__(self) -> None:
        # Validates the domain; the code itself is not needed here.
        encode_key(self.value)

    @classmethod
    def from_str(cls, code: str) -> "Key":
        return cls(decode_key(code))

    @property
    def code(self) -> str:
        return encode_key(self.value)

    def __int__(self) -> int:
        return self.value

    def __str__(self) -> str:
        return self.code
