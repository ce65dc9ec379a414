"""
Resource loader: reads the memlist and unpacks every entry from its bank.
"""

from pathlib import Path
from typing import Dict, List, Union

from bank import bank_path, load_bank_entry
from memlist import MemEntry, load_memlist


MEMLIST_NAME = "MEMLIST.BIN"


class Resources:
    """
    Unpacked game resources.

    Usage:
        resources = load_resources("DATA/")
        data = resources.data[0x11]
    """

    def __init__(self, entries: List[MemEntry]):
        self.entries = entries
        self.data: Dict[int, bytes] = {}

    def __len__(self) -> int:
        return len(self.entries)

    @property
    def total_size(self) -> int:
        return sum(len(d) for d in self.data.values())


def load_resources(resources_dir: Union[str, Path]) -> Resources:
    """
    Load the memlist and every resource it lists.

    Stops at the first entry that fails to load; the error propagates.
    """
    resources_dir = Path(resources_dir)
    resources = Resources(load_memlist(resources_dir / MEMLIST_NAME))

    for index, entry in enumerate(resources.entries):
        print(f"LOADING {entry.bank_name} 0x{entry.bank_offset:X} -> "
              f"0x{entry.bank_offset + entry.packed_size:X}")
        path = bank_path(resources_dir, entry.bank_id)
        resources.data[index] = load_bank_entry(path, entry)

    return resources
