"""Password hashing with Argon2id, and PBKDF2 kept for older hashes.

Hashes are base64 strings of a small binary record: a marker byte naming
the algorithm, big-endian 32-bit parameters, the salt and the derived key.
"""

from __future__ import annotations

import base64
import binascii
import enum
import hashlib
import hmac
import os
import struct
from dataclasses import dataclass, field

from cryptography.hazmat.primitives.kdf.argon2 import Argon2id

__all__ = [
    "PasswordVerificationResult",
    "Pbkdf2Algorithm",
    "HasherError",
    "WrongSaltLengthError",
    "WrongSubkeyLengthError",
    "WrongAlgorithmError",
    "Argon2idHasher",
    "Pbkdf2Hasher",
    "Hasher",
    "new",
    "new_argon2id",
    "new_pbkdf2",
    "new_pbkdf2_from_algo",
]

_ARGON2ID_OFFSET = 17
_PBKDF2_OFFSET = 13


class _Algorithm(enum.IntEnum):
    PBKDF2 = 0x01
    ARGON2ID = 0x02


class PasswordVerificationResult(enum.IntEnum):
    """Outcome of checking a password against a stored hash."""

    FAILED = 0
    SUCCESS = 1
    NEEDS_REHASH = 2

    def __str__(self) -> str:
        return {
            PasswordVerificationResult.FAILED: "Failed",
            PasswordVerificationResult.SUCCESS: "Success",
            PasswordVerificationResult.NEEDS_REHASH: "NeedsRehash",
        }[self]


class Pbkdf2Algorithm(enum.IntEnum):
    """Pseudo-random function used by PBKDF2."""

    HMAC_SHA512 = 0
    HMAC_SHA256 = 1
    HMAC_SHA1 = 2

    def __str__(self) -> str:
        return _PBKDF2_LABELS[self]


_PBKDF2_LABELS = {
    Pbkdf2Algorithm.HMAC_SHA512: "HMAC-SHA-512",
    Pbkdf2Algorithm.HMAC_SHA256: "HMAC-SHA-256",
    Pbkdf2Algorithm.HMAC_SHA1: "HMAC-SHA-1",
}

_PBKDF2_DIGESTS = {
    Pbkdf2Algorithm.HMAC_SHA512: "sha512",
    Pbkdf2Algorithm.HMAC_SHA256: "sha256",
    Pbkdf2Algorithm.HMAC_SHA1: "sha1",
}


def _pbkdf2_digest(code: int) -> str:
    """Digest name for a stored algorithm code; unknown codes fall back to SHA-512."""
    try:
        return _PBKDF2_DIGESTS[Pbkdf2Algorithm(code)]
    except ValueError:
        return "sha512"


class HasherError(ValueError):
    """A stored hash could not be read or checked."""


class WrongSaltLengthError(HasherError):
    """The salt recorded in a hash is shorter than required."""

    def __init__(self) -> None:
        super().__init__("hasher: Wrong salt size in provided hash")


class WrongSubkeyLengthError(HasherError):
    """The derived key recorded in a hash is shorter than required."""

    def __init__(self) -> None:
        super().__init__("hasher: Wrong subkey length in provided hash")


class WrongAlgorithmError(HasherError):
    """The hash was made by a different algorithm."""

    def __init__(self) -> None:
        super().__init__("hasher: Password hashed with wrong algorithm")


def _decode(hashed: str) -> bytes:
    try:
        return base64.b64decode(hashed, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise HasherError(f"hasher: invalid base64 hash: {exc}") from exc


def _encode(record: bytes) -> str:
    return base64.b64encode(record).decode("ascii")


def _result(expected: bytes, actual: bytes) -> PasswordVerificationResult:
    if hmac.compare_digest(expected, actual):
        return PasswordVerificationResult.SUCCESS
    return PasswordVerificationResult.FAILED


@dataclass
class Argon2idHasher:
    """Hashes passwords with Argon2id."""

    time_cost: int = 1
    salt_size: int = 128 // 8
    memory: int = 32 * 1024
    threads: int = 1
    key_len: int = 256 // 8

    def hash(self, password: str) -> str:
        """Hash ``password`` with a fresh random salt."""
        salt = os.urandom(self.salt_size)
        subkey = _argon2id(
            password.encode("utf-8"), salt, self.time_cost, self.memory, self.threads, self.key_len
        )
        header = struct.pack(
            ">BIIII", _Algorithm.ARGON2ID, self.time_cost, self.memory, self.threads, len(salt)
        )
        return _encode(header + salt + subkey)

    def verify(self, hashed: str, password: str) -> PasswordVerificationResult:
        """Check ``password`` against an Argon2id hash."""
        return self._verify(_decode(hashed), password.encode("utf-8"))

    def _verify(self, record: bytes, password: bytes) -> PasswordVerificationResult:
        if not record or record[0] != _Algorithm.ARGON2ID:
            raise WrongAlgorithmError()
        if len(record) < _ARGON2ID_OFFSET:
            raise HasherError("hasher: Hash is too short")

        _, time_cost, memory, threads, salt_len = struct.unpack_from(">BIIII", record)
        threads &= 0xFF
        if salt_len < self.salt_size:
            raise WrongSaltLengthError()
        key_start = _ARGON2ID_OFFSET + salt_len
        if key_start > len(record):
            raise HasherError("hasher: Offset + salt length are out of bounds of buffer")

        salt = record[_ARGON2ID_OFFSET:key_start]
        expected = record[key_start:]
        if len(expected) < self.key_len:
            raise WrongSubkeyLengthError()

        actual = _argon2id(password, salt, time_cost, memory, threads, len(expected))
        return _result(expected, actual)


def _argon2id(password: bytes, salt: bytes, time_cost: int, memory: int, threads: int, length: int) -> bytes:
    try:
        kdf = Argon2id(
            salt=salt,
            length=length,
            iterations=time_cost,
            lanes=threads,
            memory_cost=max(memory, 8 * threads),
        )
        return kdf.derive(password)
    except ValueError as exc:
        raise HasherError(f"hasher: invalid Argon2id parameters: {exc}") from exc


@dataclass
class Pbkdf2Hasher:
    """Hashes passwords with PBKDF2."""

    algorithm: Pbkdf2Algorithm = Pbkdf2Algorithm.HMAC_SHA512
    salt_size: int = 128 // 8
    key_len: int = 256 // 8
    iter_count: int = 210_000

    def hash(self, password: str) -> str:
        """Hash ``password`` with a fresh random salt."""
        salt = os.urandom(self.salt_size)
        subkey = hashlib.pbkdf2_hmac(
            _pbkdf2_digest(self.algorithm),
            password.encode("utf-8"),
            salt,
            self.iter_count,
            self.key_len,
        )
        header = struct.pack(">BIII", _Algorithm.PBKDF2, self.algorithm, self.iter_count, len(salt))
        return _encode(header + salt + subkey)

    def verify(self, hashed: str, password: str) -> PasswordVerificationResult:
        """Check ``password`` against a PBKDF2 hash.

        A match made with anything but HMAC-SHA-512 asks for a rehash.
        """
        return self._verify(_decode(hashed), password.encode("utf-8"))

    def _verify(self, record: bytes, password: bytes) -> PasswordVerificationResult:
        if not record or record[0] != _Algorithm.PBKDF2:
            raise WrongAlgorithmError()
        if len(record) < _PBKDF2_OFFSET:
            raise HasherError("hasher: Hash is too short")

        _, prf, iter_count, salt_len = struct.unpack_from(">BIII", record)
        prf &= 0xFF
        if salt_len < self.salt_size:
            raise WrongSaltLengthError()
        key_start = _PBKDF2_OFFSET + salt_len
        if key_start > len(record):
            raise HasherError("hasher: Offset + salt length are out of bounds of buffer")

        salt = record[_PBKDF2_OFFSET:key_start]
        expected = record[key_start:]
        if len(expected) < self.key_len:
            raise WrongSubkeyLengthError()

        try:
            actual = hashlib.pbkdf2_hmac(_pbkdf2_digest(prf), password, salt, iter_count, len(expected))
        except ValueError as exc:
            raise HasherError(f"hasher: invalid PBKDF2 parameters: {exc}") from exc

        result = _result(expected, actual)
        if result is PasswordVerificationResult.SUCCESS and prf != Pbkdf2Algorithm.HMAC_SHA512:
            return PasswordVerificationResult.NEEDS_REHASH
        return result


@dataclass
class Hasher:
    """Hashes with Argon2id and verifies both Argon2id and PBKDF2 hashes.

    A correct password under a PBKDF2 hash always asks for a rehash.
    """

    argon2id: Argon2idHasher = field(default_factory=Argon2idHasher)
    pbkdf2: Pbkdf2Hasher = field(default_factory=Pbkdf2Hasher)

    def hash(self, password: str) -> str:
        """Hash ``password`` with Argon2id."""
        return self.argon2id.hash(password)

    def verify(self, hashed: str, password: str) -> PasswordVerificationResult:
        """Check ``password`` against a hash made by either algorithm."""
        record = _decode(hashed)
        if not record:
            raise HasherError("hasher: Hash is empty")
        encoded = password.encode("utf-8")
        if record[0] == _Algorithm.PBKDF2:
            result = self.pbkdf2._verify(record, encoded)
            if result is PasswordVerificationResult.SUCCESS:
                return PasswordVerificationResult.NEEDS_REHASH
            return result
        return self.argon2id._verify(record, encoded)


def new() -> Hasher:
    """Return the default hasher."""
    return Hasher()


def new_argon2id() -> Argon2idHasher:
    """Return an Argon2id hasher with default parameters."""
    return Argon2idHasher()


def new_pbkdf2() -> Pbkdf2Hasher:
    """Return a PBKDF2 hasher using HMAC-SHA-512."""
    return Pbkdf2Hasher()


def new_pbkdf2_from_algo(algorithm: Pbkdf2Algorithm) -> Pbkdf2Hasher:
    """Return a PBKDF2 hasher using the given pseudo-random function."""
    return Pbkdf2Hasher(algorithm=Pbkdf2Algorithm(algorithm))