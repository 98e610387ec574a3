"""
commitment.py
Commitment generator for the fair random protocol: a secret number, a one-time key and
an HMAC-SHA3-256 digest that binds the two without revealing the number.
Related modules:
- session.py: Publishes the digest, combines the secret with the counterpart's number and reveals.
- persistence/transcript.py: Re-verifies revealed commitments.
"""

import hashlib
import hmac
import secrets
from dataclasses import dataclass, field

MIN_KEY_BYTES = 32


class RandomnessSourceError(RuntimeError):
    """
    Raised when the OS cryptographic randomness source fails.
    Fatal: there is no fallback to a non-cryptographic generator.
    """
    pass


def encode_secret(secret: int) -> bytes:
    """
    Canonical byte encoding of a committed number: its ASCII decimal string (17 -> b"17").
    Commit and verify both go through this function.
    """
    if secret < 0:
        raise ValueError("secret must be non-negative")
    return str(int(secret)).encode("ascii")


def keyed_hash(key: bytes, secret: int) -> str:
    """
    HMAC-SHA3-256 of the encoded secret under key.
    Returns:
        str: Lower-case hex digest.
    """
    return hmac.new(key, encode_secret(secret), hashlib.sha3_256).hexdigest()


def verify(digest: str, key: bytes, secret: int) -> bool:
    """
    Check a revealed (key, secret) pair against the digest published before the reveal.
    Hex case is ignored.
    """
    return hmac.compare_digest(keyed_hash(key, secret), digest.lower())


@dataclass(frozen=True)
class Commitment:
    """
    A published digest together with the private values it binds.
    Fields:
        range (int): The secret lies in [0, range).
        secret (int): Private until reveal.
        key (bytes): One-time HMAC key, private until reveal.
        digest (str): Hex HMAC, safe to publish immediately.
    """
    range: int
    secret: int
    key: bytes = field(repr=False)
    digest: str

    @property
    def key_hex(self) -> str:
        return self.key.hex()


def make_commitment(secret: int, key: bytes, range_: int) -> Commitment:
    """
    Build a commitment from known parts.
    Raises:
        ValueError: If secret is outside [0, range_).
    """
    if not (0 <= secret < range_):
        raise ValueError(f"secret {secret} outside [0, {range_})")
    return Commitment(range=range_, secret=secret, key=key, digest=keyed_hash(key, secret))


def commit(range_: int, key_bytes: int = MIN_KEY_BYTES) -> Commitment:
    """
    Draw a fresh key and a uniform secret in [0, range_) and commit to them.
    secrets.randbelow rejection-samples, so non-power-of-two ranges carry no modulo bias.
    Args:
        range_ (int): Size of the range, at least 1.
        key_bytes (int): Key length in bytes, at least 32.
    Returns:
        Commitment
    Raises:
        ValueError: Bad range or key size.
        RandomnessSourceError: The OS randomness source is unavailable.
    """
    if range_ < 1:
        raise ValueError("range must be at least 1")
    if key_bytes < MIN_KEY_BYTES:
        raise ValueError(f"key must be at least {MIN_KEY_BYTES} bytes")
    try:
        key = secrets.token_bytes(key_bytes)
        secret = secrets.randbelow(range_)
    except (OSError, NotImplementedError) as e:
        raise RandomnessSourceError(f"secure randomness unavailable: {e}") from e
    return make_commitment(secret, key, range_)
