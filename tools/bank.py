"""
Bank file reader.

Bank files (BANK01, BANK02, ...) hold the bytes of many resources back
to back. The memlist gives each resource's bank, offset and sizes; an
entry whose packed size differs from its size is Bytekiller compressed.
"""

from pathlib import Path
from typing import BinaryIO, Optional, Union

from bytekiller import CorruptionError, unpack as bytekiller_unpack
from memlist import MemEntry


class BankIOError(OSError):
    """Failure to open or read a bank file."""

    def __init__(self, message: str, path: Optional[Union[str, Path]] = None):
        super().__init__(message)
        self.path = path

    def __str__(self) -> str:
        if self.path is None:
            return self.args[0]
        return f"{self.args[0]} ({self.path})"


def bank_path(resources_dir: Union[str, Path], bank_id: int) -> Path:
    """Path of the bank file holding ``bank_id``."""
    return Path(resources_dir) / f"BANK{bank_id:02X}"


def _read_at(fd: BinaryIO, offset: int, count: int, path) -> bytes:
    try:
        fd.seek(offset)
        data = fd.read(count)
    except OSError as e:
        raise BankIOError(e.strerror or str(e), path) from e
    if len(data) != count:
        raise BankIOError(f"Short read: expected {count} bytes, got {len(data)}", path)
    return data


def read_bank_entry(fd: BinaryIO, entry: MemEntry, path=None) -> bytes:
    """
    Read one entry from an open bank file.

    Args:
        fd: Bank file opened in binary mode
        entry: Memlist entry to read
        path: Bank path, only used in error messages

    Returns:
        Unpacked entry contents, ``entry.size`` bytes long
    """
    if not entry.is_compressed:
        return _read_at(fd, entry.bank_offset, entry.size, path)

    packed = _read_at(fd, entry.bank_offset, entry.packed_size, path)
    dst = bytearray(entry.size)
    data = bytekiller_unpack(packed, dst)
    if len(data) != entry.size:
        raise CorruptionError(
            f"Packed data declares {len(data)} bytes, memlist says {entry.size}"
        )
    return data


def load_bank_entry(path: Union[str, Path], entry: MemEntry) -> bytes:
    """
    Open a bank file and read one entry from it.

    Raises:
        BankIOError: If the bank cannot be opened or is too short
        BytekillerError: If the packed data cannot be decompressed
    """
    if entry.size == 0:
        return b''

    try:
        with open(path, 'rb') as f:
            return read_bank_entry(f, entry, path)
    except BankIOError:
        raise
    except OSError as e:
        raise BankIOError(e.strerror or str(e), path) from e
