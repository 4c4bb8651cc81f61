"""Streaming SHA-256 hasher built on `compress_block` from `compress.py`.

Usage follows the ingest -> (repeat) -> finalize pattern:

    hasher = Sha256Hasher()
    hasher.ingest(b"ab")
    hasher.ingest(b"c")
    hasher.finalize()   # '0x ba7816bf...f20015ad'

Full 64-byte blocks are compressed as soon as they are buffered, so the
pending buffer never holds more than 63 bytes between calls. The digest does
not depend on how the input is split across `ingest` calls.

An engine is single use: once finalized it rejects further input until
`reset()` is called. Instances are not thread-safe; use one engine per
hash computation.
"""

from __future__ import annotations

from typing import Optional, Tuple

from compress import State, compress_block
from schedule import BLOCK_SIZE, MAX_MESSAGE_BITS, build_message_schedule, pad_tail, split_into_blocks


# Initial hash values (first 32 bits of the fractional parts of the
# square roots of the first 8 primes 2..19), as per FIPS 180-4.
_H0: State = (
    0x6A09E667,
    0xBB67AE85,
    0x3C6EF372,
    0xA54FF53A,
    0x510E527F,
    0x9B05688C,
    0x1F83D9AB,
    0x5BE0CD19,
)

DIGEST_PREFIX = "0x "

# Largest message whose bit length still fits the 64-bit length field.
MAX_MESSAGE_BYTES = MAX_MESSAGE_BITS // 8


class Sha256Error(Exception):
    """Base class for errors raised by the SHA-256 engine."""


class FinalizedError(Sha256Error, RuntimeError):
    """The engine was used after `finalize()`."""


class InputTooLargeError(Sha256Error, OverflowError):
    """The total input no longer fits the 64-bit bit-length field."""


def format_digest(state: State) -> str:
    """Render a final hash state as `0x ` followed by 64 lowercase hex digits."""
    return DIGEST_PREFIX + "".join(f"{word:08x}" for word in state)


def _state_to_bytes(state: State) -> bytes:
    return b"".join(word.to_bytes(4, byteorder="big") for word in state)


class Sha256Hasher:
    """Incremental SHA-256 engine.

    States: ACCUMULATING (initial, `ingest` allowed) and FINALIZED (entered
    by `finalize`; `ingest` and `finalize` raise `FinalizedError`).
    """

    name = "sha256"
    digest_size = 32
    block_size = BLOCK_SIZE

    def __init__(self, data: Optional[bytes] = None) -> None:
        self._state: State = _H0
        self._pending = bytearray()
        self._length = 0
        self._blocks = 0
        self._finalized = False
        if data is not None:
            self.ingest(data)

    @staticmethod
    def hash(data: bytes) -> str:
        """One-shot: ingest `data` into a fresh engine and finalize it."""
        hasher = Sha256Hasher()
        hasher.ingest(data)
        return hasher.finalize()

    @property
    def length(self) -> int:
        """Number of bytes ingested so far."""
        return self._length

    @property
    def blocks(self) -> int:
        """Number of 64-byte blocks folded into the hash state so far."""
        return self._blocks

    @property
    def finalized(self) -> bool:
        return self._finalized

    def ingest(self, data: bytes) -> None:
        """Append `data` and compress every complete 64-byte block."""
        if self._finalized:
            raise FinalizedError("cannot ingest data after finalize(); call reset() first")

        if isinstance(data, (str, int)):
            raise TypeError(f"expected a bytes-like object, got {type(data).__name__}")
        data = bytes(data)
        if self._length + len(data) > MAX_MESSAGE_BYTES:
            raise InputTooLargeError(
                f"total input of {self._length + len(data)} bytes exceeds the "
                f"SHA-256 limit of {MAX_MESSAGE_BYTES} bytes"
            )

        self._pending.extend(data)
        self._length += len(data)

        # Compress in place by offset, then drop the consumed prefix once.
        consumed = 0
        while len(self._pending) - consumed >= BLOCK_SIZE:
            self._process_block(self._pending[consumed : consumed + BLOCK_SIZE])
            consumed += BLOCK_SIZE
        if consumed:
            del self._pending[:consumed]

    update = ingest

    def _process_block(self, block) -> None:
        ws = build_message_schedule(block)
        self._state = compress_block(self._state, ws)
        self._blocks += 1

    def _final_state(self) -> Tuple[State, int]:
        """Pad the pending tail and return (final state, blocks used)."""
        state = self._state
        count = 0
        for block in split_into_blocks(pad_tail(bytes(self._pending), self._length)):
            state = compress_block(state, build_message_schedule(block))
            count += 1
        return state, count

    def finalize(self) -> str:
        """Pad, compress the final block(s) and return the framed digest.

        The result is `0x ` followed by the eight state words as 8-digit
        lowercase hex, with no separator between words.
        """
        if self._finalized:
            raise FinalizedError("finalize() may only be called once; call reset() first")

        self._state, count = self._final_state()
        self._blocks += count
        self._pending.clear()
        self._finalized = True
        return format_digest(self._state)

    def digest(self) -> bytes:
        """Return the 32-byte digest of the data ingested so far.

        While accumulating, the padding is applied to a copy of the state so
        further `ingest` calls are still allowed.
        """
        if self._finalized:
            return _state_to_bytes(self._state)
        state, _ = self._final_state()
        return _state_to_bytes(state)

    def hexdigest(self) -> str:
        """Like `digest()` but as 64 lowercase hex characters."""
        return self.digest().hex()

    def copy(self) -> "Sha256Hasher":
        """Return an independent engine with the same accumulated input."""
        other = Sha256Hasher()
        other._state = self._state
        other._pending = bytearray(self._pending)
        other._length = self._length
        other._blocks = self._blocks
        other._finalized = self._finalized
        return other

    def reset(self) -> None:
        """Discard all input and return to the initial ACCUMULATING state."""
        self._state = _H0
        self._pending.clear()
        self._length = 0
        self._blocks = 0
        self._finalized = False

    def __repr__(self) -> str:
        status = "finalized" if self._finalized else "accumulating"
        return f"<Sha256Hasher {status} length={self._length} pending={len(self._pending)}>"


def hash_message(data: bytes) -> str:
    """Compute the framed SHA-256 digest (`0x ` + 64 hex digits) of `data`."""
    return Sha256Hasher.hash(data)


def sha256(data: bytes) -> bytes:
    """Compute the raw 32-byte SHA-256 digest of `data`."""
    return Sha256Hasher(data).digest()
