"""
Shared fixtures: a tiny Bytekiller bit stream builder.

Tokens are listed in decode order. Since the decoder fills its output
back-to-front, the first token produces the END of the unpacked data.
"""

import struct

import pytest


def bits_of(value, count):
    """MSB-first list of ``count`` bits."""
    return [(value >> i) & 1 for i in reversed(range(count))]


class TokenStream:
    def __init__(self):
        self.bits = []
        self.size = 0

    def literal(self, data):
        """Emit ``data`` as it should appear in the output."""
        n = len(data)
        if n <= 8:
            self.bits += [0, 0] + bits_of(n - 1, 3)
        else:
            assert n <= 264
            self.bits += [1] + bits_of(3, 2) + bits_of(n - 9, 8)
        for b in reversed(data):
            self.bits += bits_of(b, 8)
        self.size += n
        return self

    def ref(self, length, offset):
        """Copy ``length`` bytes from ``offset`` bytes above the cursor."""
        if length == 2:
            self.bits += [0, 1] + bits_of(offset, 8)
        elif length == 3:
            self.bits += [1] + bits_of(0, 2) + bits_of(offset, 9)
        elif length == 4:
            self.bits += [1] + bits_of(1, 2) + bits_of(offset, 10)
        else:
            self.long_ref(length, offset)
            return self
        self.size += length
        return self

    def long_ref(self, length, offset):
        self.bits += [1] + bits_of(2, 2) + bits_of(length - 1, 8) + bits_of(offset, 12)
        self.size += length
        return self

    def pack(self, size=None):
        """Build the packed buffer: bit stream words, then the trailer."""
        if size is None:
            size = self.size
        k = min(len(self.bits), 31)
        head, rest = self.bits[:k], self.bits[k:]

        first = 1 << k
        for i, b in enumerate(head):
            first |= b << i

        words = []
        for start in range(0, len(rest), 32):
            word = 0
            for i, b in enumerate(rest[start:start + 32]):
                word |= b << i
            words.append(word)

        crc = first
        for word in words:
            crc ^= word

        body = b''.join(struct.pack('>I', w) for w in reversed(words))
        return body + struct.pack('>III', first, crc, size)


@pytest.fixture
def stream():
    return TokenStream()
