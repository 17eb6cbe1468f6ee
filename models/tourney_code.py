"""Bracket codes.

A completed bracket is a sequence of bits, one per game in play order
(0 = home team won, 1 = away team won). Reading those bits as a base-2
integer and writing it out in a larger radix gives a short code that can be
turned back into the exact same bits.

Two schemes are supported:
- radix36: digits 0-9a-z, left-padded with "0" to a fixed 13 characters.
  67 games fit because 36**13 > 2**67. Case-insensitive; "-" may be used to
  group characters for display.
- base64: a 64-symbol URL-safe alphabet, 6 bits per symbol, so the code
  length is ceil(games / 6).

Phrase codes hash arbitrary text with SHA-256 and keep the leading bits,
then go through the same encoder, so they decode like any simulated code.
"""

from __future__ import annotations

import dataclasses
import hashlib
from dataclasses import dataclass

from models.errors import ConfigurationError, InvalidCode

HASH_BITS = 256
WHITESPACE = " \t\r\n"


@dataclass(frozen=True)
class CodeScheme:
    name: str
    alphabet: str
    length: int | None = None  # None: shortest length that fits the bits
    separators: str = WHITESPACE
    group_separator: str | None = None
    case_insensitive: bool = False

    @property
    def radix(self) -> int:
        return len(self.alphabet)

    def code_length(self, bit_length: int) -> int:
        """Number of symbols in a code for a bracket of `bit_length` games."""
        needed = symbols_needed(bit_length, self.radix)
        if self.length is None:
            return needed
        if needed > self.length:
            raise ConfigurationError(
                f"{self.name} codes of length {self.length} cannot hold {bit_length} games "
                f"(need {needed} characters)"
            )
        return self.length


RADIX36 = CodeScheme(
    name="radix36",
    alphabet="0123456789abcdefghijklmnopqrstuvwxyz",
    length=13,
    separators="-" + WHITESPACE,
    group_separator="-",
    case_insensitive=True,
)

BASE64 = CodeScheme(
    name="base64",
    alphabet="0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz-_",
)

SCHEMES = {s.name: s for s in (RADIX36, BASE64)}


def get_scheme(name: str, length: int | None = None) -> CodeScheme:
    """Look up a scheme by name, overriding its fixed length if it has one."""
    try:
        scheme = SCHEMES[name]
    except KeyError:
        raise ConfigurationError(f"Unknown code scheme: {name!r}") from None
    if length is not None and scheme.length is not None and length != scheme.length:
        scheme = dataclasses.replace(scheme, length=length)
    return scheme


def symbols_needed(bit_length: int, radix: int) -> int:
    """Smallest number of radix-`radix` symbols that can hold `bit_length` bits."""
    if bit_length < 0:
        raise ValueError(f"Invalid bit length: {bit_length}")
    n = 1
    limit = 1 << bit_length
    while radix ** n < limit:
        n += 1
    return n


def encode_value(value: int, bit_length: int, scheme: CodeScheme = RADIX36) -> str:
    """Render an integer of at most `bit_length` bits as a canonical code."""
    if value < 0 or value >> bit_length:
        raise ValueError(f"{value} does not fit in {bit_length} bits")

    length = scheme.code_length(bit_length)
    symbols = []
    while value:
        value, digit = divmod(value, scheme.radix)
        symbols.append(scheme.alphabet[digit])
    return "".join(reversed(symbols)).rjust(length, scheme.alphabet[0])


def encode_bits(bits: str, scheme: CodeScheme = RADIX36) -> str:
    """Encode a string of "0"/"1" game outcomes as a code."""
    if set(bits) - {"0", "1"}:
        raise ValueError(f"Not a bit string: {bits!r}")
    return encode_value(int(bits, 2) if bits else 0, len(bits), scheme)


def decode_code(code: str, bit_length: int, scheme: CodeScheme = RADIX36) -> str:
    """Turn a code back into its bit string, left-padded to `bit_length`.

    Raises:
        InvalidCode: if the code has the wrong length, contains symbols outside
            the scheme's alphabet, or holds a value wider than `bit_length` bits
    """
    if not isinstance(code, str):
        raise InvalidCode(f"Code must be a string, got {type(code).__name__}")

    cleaned = "".join(ch for ch in code if ch not in scheme.separators)
    if scheme.case_insensitive:
        cleaned = cleaned.lower()

    length = scheme.code_length(bit_length)
    if len(cleaned) != length:
        raise InvalidCode(f"Code {code!r} must be {length} characters, got {len(cleaned)}")

    value = 0
    for ch in cleaned:
        digit = scheme.alphabet.find(ch)
        if digit < 0:
            raise InvalidCode(f"Code {code!r} contains invalid character {ch!r}")
        value = value * scheme.radix + digit

    if value >> bit_length:
        raise InvalidCode(f"Code {code!r} is out of range for a {bit_length}-game bracket")

    if bit_length == 0:
        return ""
    return format(value, "b").zfill(bit_length)


def phrase_value(phrase: str, bit_length: int) -> int:
    """SHA-256 of the phrase, truncated to its leading `bit_length` bits."""
    if bit_length > HASH_BITS:
        raise ConfigurationError(f"Phrase codes support at most {HASH_BITS} games")
    digest = hashlib.sha256(phrase.encode("utf-8")).digest()
    return int.from_bytes(digest, "big") >> (HASH_BITS - bit_length)


def phrase_bits(phrase: str, bit_length: int) -> str:
    if bit_length == 0:
        return ""
    return format(phrase_value(phrase, bit_length), "b").zfill(bit_length)


def code_from_phrase(phrase: str, bit_length: int, scheme: CodeScheme = RADIX36) -> str:
    return encode_bits(phrase_bits(phrase, bit_length), scheme)


def group_code(code: str, scheme: CodeScheme = RADIX36, size: int = 4) -> str:
    """Punctuate a code for display, e.g. "0a1b-2c3d-4e5f-6"."""
    if not scheme.group_separator or size <= 0:
        return code
    return scheme.group_separator.join(code[i:i + size] for i in range(0, len(code), size))
