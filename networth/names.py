"""
names.py - Account and asset name interning

NameBank maps every account/asset name seen in a ledger to a dense integer
id. Ids are handed out in first-seen order and never reused, so they can
index plain lists and dicts for the whole run.

The built-in ids (see core.Builtin) are registered at construction, before
any user name, so id 0..NR_BUILT_IN_ACCOUNTS-1 always mean the same thing.
"""

from __future__ import annotations
from typing import Dict, Iterator, List, Optional

from .core import Builtin, NR_BUILT_IN_ACCOUNTS


class NameBank:
    """
    Append-only bidirectional registry of names and ids.

    Not thread-safe. A run creates one NameBank, grows it while parsing and
    only reads from it afterwards.

    Example:
        names = NameBank()
        checking = names.register("checking")
        assert names.register("checking") == checking
        assert names.resolve(checking) == "checking"
    """

    def __init__(self):
        self._names: List[str] = []
        self._ids: Dict[str, int] = {}
        for builtin in Builtin:
            assigned = self.register(builtin.label)
            assert assigned == builtin.value

    def register(self, name: str) -> int:
        """
        Return the id for a name, assigning the next free id if it is new.

        Args:
            name: Exact account or asset name (no normalisation is applied)

        Returns:
            The stable id for this name
        """
        existing = self._ids.get(name)
        if existing is not None:
            return existing
        new_id = len(self._names)
        self._names.append(name)
        self._ids[name] = new_id
        return new_id

    def resolve(self, name_id: int) -> str:
        """
        Return the name registered under an id.

        Raises:
            IndexError: If the id was never issued
        """
        if name_id < 0:
            raise IndexError(f"Name id {name_id} was never issued")
        return self._names[name_id]

    def lookup(self, name: str) -> Optional[int]:
        """Id of an already registered name, or None."""
        return self._ids.get(name)

    @staticmethod
    def is_builtin(name_id: int) -> bool:
        return 0 <= name_id < NR_BUILT_IN_ACCOUNTS

    def user_ids(self) -> range:
        """Ids of every name registered from ledger content."""
        return range(NR_BUILT_IN_ACCOUNTS, len(self._names))

    def __len__(self) -> int:
        return len(self._names)

    def __contains__(self, name: object) -> bool:
        return name in self._ids

    def __iter__(self) -> Iterator[str]:
        return iter(self._names)

    def __repr__(self) -> str:
        return f"NameBank({len(self._names)} names, {len(self._names) - NR_BUILT_IN_ACCOUNTS} user)"
