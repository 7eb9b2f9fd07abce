"""
Content digests, random IDs and numeric fields as Docker writes them into the layer store.
"""

import hashlib
import re
import secrets

SHA256 = 'sha256'

# Hex length of the encoded part for every supported algorithm
ALGORITHMS = {
    'sha256': 64,
    'sha384': 96,
    'sha512': 128,
}

DIGEST_RE = re.compile(r'[a-z0-9]+(?:[.+_-][a-z0-9]+)*:[a-zA-Z0-9=_-]+')
HEX_RE = re.compile(r'[a-f0-9]+')
ID_RE = re.compile(r'[a-f0-9]{64}')

MAX_UINT64 = 2 ** 64 - 1


class DigestError(ValueError):
    """Base class for digest parsing errors."""


class InvalidDigestFormat(DigestError):
    pass


class InvalidDigestLength(DigestError):
    pass


class UnsupportedDigest(DigestError):
    pass


class InvalidID(ValueError):
    pass


class Digest(str):
    """A validated "<algorithm>:<encoded>" string."""

    @property
    def algorithm(self) -> str:
        return self[:self.index(':')]

    @property
    def encoded(self) -> str:
        return self[self.index(':') + 1:]


def parse_digest(s: str) -> Digest:
    """
    Parse and validate a digest string.

    The value is used as-is: surrounding whitespace, including a trailing
    newline, makes the digest invalid.
    """
    i = s.find(':')
    if i <= 0 or i + 1 == len(s):
        raise InvalidDigestFormat(f"invalid checksum digest format: {s!r}")

    algorithm, encoded = s[:i], s[i + 1:]
    if algorithm not in ALGORITHMS:
        if not DIGEST_RE.fullmatch(s):
            raise InvalidDigestFormat(f"invalid checksum digest format: {s!r}")
        raise UnsupportedDigest(f"unsupported digest algorithm: {algorithm!r}")

    if len(encoded) != ALGORITHMS[algorithm]:
        raise InvalidDigestLength(f"invalid checksum digest length: {s!r}")
    if not HEX_RE.fullmatch(encoded):
        raise InvalidDigestFormat(f"invalid checksum digest format: {s!r}")

    return Digest(s)


def from_bytes(data: bytes, algorithm: str = SHA256) -> Digest:
    """Compute the digest of a byte string."""
    return Digest(f"{algorithm}:{hashlib.new(algorithm, data).hexdigest()}")


def validate_id(s: str) -> None:
    """Check a random ID, 64 lowercase hex characters as used for cache IDs."""
    if not ID_RE.fullmatch(s):
        raise InvalidID(f"invalid id: {s!r}")


def generate_random_id() -> str:
    while True:
        id_ = secrets.token_hex(32)
        # a short ID made of digits only would be taken for an integer
        if not id_[:12].isdigit():
            return id_


def parse_size(s: str) -> int:
    """
    Parse an unsigned 64-bit integer.

    The base is taken from the prefix: 0x, 0o, 0b or a leading zero for
    octal, decimal otherwise. Underscores may separate digits.
    """
    if not s or not re.fullmatch(r'[0-9a-fA-FxXoObB_]+', s):
        raise ValueError(f"invalid size: {s!r}")

    if re.fullmatch(r'0_?[0-7]+(?:_[0-7]+)*', s):
        value = int(s[1:].lstrip('_'), 8)
    else:
        try:
            value = int(s, 0)
        except ValueError:
            raise ValueError(f"invalid size: {s!r}") from None

    if value > MAX_UINT64:
        raise ValueError(f"size out of range: {s!r}")
    return value
