"""
MEMLIST.BIN parser for Another World resource data.

The memlist is a flat table of 20-byte big-endian records, one per
resource, terminated by a record whose state byte is 0xFF.

Record layout:
    0x00: uint8  state
    0x01: uint8  type
    0x02: uint16 buffer pointer (runtime only)
    0x04: uint16 unused
    0x06: uint8  rank
    0x07: uint8  bank id
    0x08: uint32 bank offset
    0x0C: uint16 unused
    0x0E: uint16 packed size
    0x10: uint16 unused
    0x12: uint16 unpacked size
"""

import struct
from dataclasses import dataclass
from enum import IntEnum
from pathlib import Path
from typing import List, Union


MEMLIST_ENTRY_FORMAT = '>BBHHBBIHHHH'
MEMLIST_ENTRY_SIZE = struct.calcsize(MEMLIST_ENTRY_FORMAT)


class EntryState(IntEnum):
    """Resource load state as stored in the memlist."""
    NOT_NEEDED = 0
    LOADED = 1
    LOAD_ME = 2
    END_OF_MEMLIST = 255


@dataclass
class MemEntry:
    """A single resource entry of the memlist."""
    state: int
    type: int
    buf_ptr: int
    rank: int
    bank_id: int
    bank_offset: int
    packed_size: int
    size: int

    @property
    def is_compressed(self) -> bool:
        return self.packed_size != self.size

    @property
    def bank_name(self) -> str:
        return f"BANK{self.bank_id:02X}"

    @classmethod
    def from_bytes(cls, data: bytes, offset: int = 0) -> 'MemEntry':
        (state, type_, buf_ptr, _unused_4, rank, bank_id, bank_offset,
         _unused_c, packed_size, _unused_10, size) = struct.unpack_from(
            MEMLIST_ENTRY_FORMAT, data, offset)
        return cls(
            state=state,
            type=type_,
            buf_ptr=buf_ptr,
            rank=rank,
            bank_id=bank_id,
            bank_offset=bank_offset,
            packed_size=packed_size,
            size=size,
        )


def parse_memlist(data: bytes) -> List[MemEntry]:
    """
    Parse memlist records until the end marker.

    A trailing partial record also ends the list, like the engine's
    own reader.
    """
    entries = []
    offset = 0
    while offset + MEMLIST_ENTRY_SIZE <= len(data):
        if data[offset] == EntryState.END_OF_MEMLIST:
            break
        entries.append(MemEntry.from_bytes(data, offset))
        offset += MEMLIST_ENTRY_SIZE
    return entries


def load_memlist(path: Union[str, Path]) -> List[MemEntry]:
    """Read and parse a MEMLIST.BIN file."""
    with open(path, 'rb') as f:
        return parse_memlist(f.read())


if __name__ == "__main__":
    import sys

    if len(sys.argv) < 2:
        print("Usage: python memlist.py <MEMLIST.BIN>")
        sys.exit(1)

    entries = load_memlist(sys.argv[1])
    print(f"Memlist contains {len(entries)} entries")
    print()

    for i, entry in enumerate(entries):
        comp = "packed" if entry.is_compressed else "raw"
        print(f"  {i:3d}  {entry.bank_name}  0x{entry.bank_offset:06X}  "
              f"{entry.packed_size:6d} -> {entry.size:6d} bytes ({comp})")
