import struct

from memlist import (
    MEMLIST_ENTRY_FORMAT,
    MEMLIST_ENTRY_SIZE,
    EntryState,
    MemEntry,
    load_memlist,
    parse_memlist,
)


def record(state=0, type_=2, rank=1, bank_id=1, offset=0, packed=16, size=16):
    return struct.pack(MEMLIST_ENTRY_FORMAT, state, type_, 0x1234, 0,
                       rank, bank_id, offset, 0, packed, 0, size)


END = bytes([EntryState.END_OF_MEMLIST]) + bytes(MEMLIST_ENTRY_SIZE - 1)


def test_record_size():
    assert MEMLIST_ENTRY_SIZE == 20


def test_parse_fields():
    data = record(state=2, type_=4, rank=3, bank_id=0x0D, offset=0x012345,
                  packed=100, size=300)
    entry = MemEntry.from_bytes(data)
    assert entry == MemEntry(state=EntryState.LOAD_ME, type=4, buf_ptr=0x1234,
                             rank=3, bank_id=0x0D, bank_offset=0x012345,
                             packed_size=100, size=300)
    assert entry.is_compressed
    assert entry.bank_name == "BANK0D"


def test_raw_entry_is_not_compressed():
    assert not MemEntry.from_bytes(record(packed=64, size=64)).is_compressed


def test_stops_at_end_marker():
    data = record(offset=0) + record(offset=16) + END + record(offset=32)
    entries = parse_memlist(data)
    assert [e.bank_offset for e in entries] == [0, 16]


def test_stops_at_partial_record():
    data = record(offset=0) + record(offset=16)[:10]
    assert len(parse_memlist(data)) == 1


def test_empty():
    assert parse_memlist(b'') == []
    assert parse_memlist(END) == []


def test_load_memlist(tmp_path):
    path = tmp_path / "MEMLIST.BIN"
    path.write_bytes(record(bank_id=1) + record(bank_id=2) + END)
    entries = load_memlist(path)
    assert [e.bank_name for e in entries] == ["BANK01", "BANK02"]
