"""
Bytekiller decompression algorithm.
Used by Delphine Software games (Another World, Flashback) for data compression.

The algorithm reads from the END of the compressed buffer backwards,
using a bit stream to control copy operations. Output is written
back-to-front as well, so back-reference offsets point towards the
higher, already decoded end of the destination buffer.

Packed buffer layout (big-endian words, from the end):
    [-4]   declared unpacked size
    [-8]   checksum
    [-12]  first bit reservoir word
    [..]   bit stream words, consumed from high to low addresses
"""

import struct
from typing import Optional


class BytekillerError(ValueError):
    """Base class for all decompression failures."""


class FormatError(BytekillerError):
    """Packed buffer framing is invalid; nothing was decoded."""


class CorruptionError(BytekillerError):
    """Inconsistency found while decoding the token stream."""


class ChecksumError(BytekillerError):
    """Stream decoded to the right size but the checksum did not cancel."""


def read_be_uint32(data: bytes, offset: int) -> int:
    """Read a big-endian 32-bit unsigned integer."""
    return struct.unpack('>I', data[offset:offset + 4])[0]


def declared_size(src: bytes) -> int:
    """Return the unpacked size stored in the trailer of a packed buffer."""
    if len(src) < 4:
        raise FormatError("Data too short to carry a size trailer")
    return read_be_uint32(src, len(src) - 4)


class BitReader:
    """
    Backward bit stream over the packed data.

    Words are read from the end of ``data`` towards its start and drained
    least-significant bit first. Every word it loads, the first included, is
    XORed into ``checksum``.

    The first word carries a marker bit above its payload: it is dropped as
    soon as only the marker (or nothing) is left, instead of after 32 bits.
    """

    def __init__(self, data: bytes, checksum: int = 0):
        self.data = data
        self.pos = len(data) - 4
        self.word = read_be_uint32(data, self.pos)
        self.shift = 0
        self.first_word = True
        self.checksum = checksum ^ self.word

    def _refill(self) -> None:
        self.pos -= 4
        if self.pos < 0:
            raise CorruptionError("Bit stream exhausted before end of data")
        self.word = read_be_uint32(self.data, self.pos)
        self.checksum ^= self.word
        self.shift = 0

    def next_bit(self) -> int:
        """Get next bit from the bit stream."""
        if self.first_word and (self.word >> self.shift) <= 1:
            self.first_word = False
            self.shift = 32
        if self.shift == 32:
            self._refill()
        bit = (self.word >> self.shift) & 1
        self.shift += 1
        return bit

    def get_bits(self, count: int) -> int:
        """Get multiple bits from the bit stream (MSB first)."""
        result = 0
        for _ in range(count):
            result = (result << 1) | self.next_bit()
        return result

    def fold_unread(self) -> int:
        """XOR the words below the read position into the checksum."""
        for offset in range(0, self.pos, 4):
            self.checksum ^= read_be_uint32(self.data, offset)
        self.pos = 0
        return self.checksum


class _Writer:
    """Back-to-front writer over the destination buffer."""

    def __init__(self, dst: bytearray, size: int):
        self.dst = dst
        self.size = size
        self.pos = size - 1
        self.remaining = size

    def _reserve(self, length: int) -> None:
        if length > self.remaining:
            raise CorruptionError(
                f"Token of {length} bytes overruns output "
                f"({self.remaining} bytes left of {self.size})"
            )
        self.remaining -= length

    def copy_literal(self, length: int, bits: BitReader) -> None:
        """Copy literal bytes from bit stream to output."""
        self._reserve(length)
        for _ in range(length):
            self.dst[self.pos] = bits.get_bits(8)
            self.pos -= 1

    def copy_reference(self, length: int, offset: int) -> None:
        """Copy bytes from earlier in output (LZ77 back-reference)."""
        if self.pos + offset >= self.size:
            raise CorruptionError(
                f"Back-reference offset {offset} at position {self.pos} "
                f"points outside {self.size} bytes of output"
            )
        self._reserve(length)
        for _ in range(length):
            self.dst[self.pos] = self.dst[self.pos + offset]
            self.pos -= 1


def unpack(src: bytes, dst: Optional[bytearray] = None) -> bytes:
    """
    Decompress Bytekiller-compressed data.

    Args:
        src: Compressed data bytes
        dst: Optional destination buffer, at least the declared size long.
            Decoded bytes land in ``dst[:size]``.

    Returns:
        Decompressed data bytes

    Raises:
        FormatError: If the packed buffer or destination is malformed
        CorruptionError: If the token stream is inconsistent
        ChecksumError: If the checksum does not cancel out
    """
    if len(src) <= 8:
        raise FormatError(f"Packed size must be > 8 (got {len(src)})")
    if len(src) % 4 != 0:
        raise FormatError(f"Packed size must be a multiple of 4 (got {len(src)})")

    # Read header from END of buffer
    size = read_be_uint32(src, len(src) - 4)
    crc = read_be_uint32(src, len(src) - 8)

    # At best a 23-bit token emits 256 bytes
    max_size = ((len(src) - 8) * 8 // 23 + 1) * 256
    if size > max_size:
        raise FormatError(
            f"Unpacked size {size} cannot come from {len(src)} packed bytes"
        )

    if dst is None:
        dst = bytearray(size)
    elif len(dst) < size:
        raise FormatError(
            f"Unpacked size {size} too big for output buffer of {len(dst)} bytes"
        )

    bits = BitReader(src[:len(src) - 8], crc)
    out = _Writer(dst, size)

    # Main decompression loop
    while out.remaining > 0:
        if not bits.next_bit():
            if not bits.next_bit():
                # 00: Copy 1-8 literal bytes
                out.copy_literal(bits.get_bits(3) + 1, bits)
            else:
                # 01: Copy 2 bytes from offset (8-bit)
                out.copy_reference(2, bits.get_bits(8))
        else:
            code = bits.get_bits(2)
            if code == 3:
                # 111: Copy 9-264 literal bytes
                out.copy_literal(bits.get_bits(8) + 9, bits)
            elif code == 2:
                # 110: Copy N bytes from offset (12-bit)
                length = bits.get_bits(8) + 1
                out.copy_reference(length, bits.get_bits(12))
            elif code == 1:
                # 101: Copy 4 bytes from offset (10-bit)
                out.copy_reference(4, bits.get_bits(10))
            else:
                # 100: Copy 3 bytes from offset (9-bit)
                out.copy_reference(3, bits.get_bits(9))

    # Verify CRC, including any words the tokens never reached
    residual = bits.fold_unread()
    if residual != 0:
        raise ChecksumError(f"CRC check failed (residual: 0x{residual:08x})")

    return bytes(dst[:size])
