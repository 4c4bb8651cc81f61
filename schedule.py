"""Message padding and message-schedule expansion for SHA-256."""

from __future__ import annotations

from typing import Iterable, List

from compress import MASK32, _rotr


BLOCK_SIZE = 64

# The length field is a 64-bit count of message *bits*.
MAX_MESSAGE_BITS = (1 << 64) - 1


def _shr(x: int, n: int) -> int:
    """Right-shift a 32-bit word `x` by `n` bits."""
    x &= MASK32
    return x >> n


def _small_sigma0(x: int) -> int:
    """SHA-256 function σ0 used in the message schedule."""
    return (_rotr(x, 7) ^ _rotr(x, 18) ^ _shr(x, 3)) & MASK32


def _small_sigma1(x: int) -> int:
    """SHA-256 function σ1 used in the message schedule."""
    return (_rotr(x, 17) ^ _rotr(x, 19) ^ _shr(x, 10)) & MASK32


def build_message_schedule(block) -> List[int]:
    """Given a 512-bit block, build the 64-word message schedule w[0..63].

    The first 16 words are the block bytes read big-endian; words 16..63
    follow the recurrence

        w[t] = σ1(w[t-2]) + w[t-7] + σ0(w[t-15]) + w[t-16]   (mod 2**32)
    """
    if len(block) != BLOCK_SIZE:
        raise ValueError(f"Expected 64-byte block, got {len(block)}")

    w: List[int] = [0] * 64

    for i in range(16):
        w[i] = int.from_bytes(block[4 * i : 4 * (i + 1)], byteorder="big")

    for t in range(16, 64):
        w[t] = (
            _small_sigma1(w[t - 2]) + w[t - 7] + _small_sigma0(w[t - 15]) + w[t - 16]
        ) & MASK32

    return w


def pad_tail(tail: bytes, total_length: int) -> bytes:
    """Pad the unprocessed tail of a message into one or two final blocks.

    `tail` holds the last `total_length % 64` bytes of the message (fewer
    than 64), and `total_length` is the byte count of the whole message.
    A tail of up to 55 bytes fits a single block together with the 0x80
    marker and the 8-byte length; longer tails need a second block.
    """
    if len(tail) >= BLOCK_SIZE:
        raise ValueError(f"Tail must be shorter than one block, got {len(tail)} bytes")

    length_bits = total_length * 8
    if length_bits > MAX_MESSAGE_BITS:
        raise ValueError(f"Message length {total_length} bytes exceeds the 64-bit length field")

    padded = bytearray(tail)
    padded.append(0x80)

    while (len(padded) % BLOCK_SIZE) != 56:
        padded.append(0x00)

    padded.extend(length_bits.to_bytes(8, byteorder="big"))
    return bytes(padded)


def split_into_blocks(data) -> Iterable[bytes]:
    """Yield successive 64-byte blocks of already padded `data`."""
    if len(data) % BLOCK_SIZE != 0:
        raise ValueError(
            f"Padded message length must be a multiple of 64 bytes, got {len(data)}"
        )
    for i in range(0, len(data), BLOCK_SIZE):
        yield bytes(data[i : i + BLOCK_SIZE])
