# ssrportal/client/form_state.py
"""
Immutable form state: the last server snapshot plus the user's draft.

Nothing here mutates in place; every edit returns a new object, so the
server snapshot stays exactly as loaded until a successful save replaces it.
"""
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Dict, Iterator, Mapping, Tuple


class MemberMarksTable:
    """
    Per-member marks keyed by member id. Iteration follows the member-list
    order given at construction, not insertion order.
    """

    def __init__(self, member_order, entries=None):
        self._order = tuple(member_order)
        known = set(self._order)
        entries = dict(entries or {})
        unknown = [k for k in entries if k not in known]
        if unknown:
            raise KeyError(f"Unknown member id(s): {', '.join(map(str, unknown))}")
        self._entries = {k: MappingProxyType(dict(v)) for k, v in entries.items()}

    @property
    def member_order(self) -> Tuple[str, ...]:
        return self._order

    def get(self, member_id, default=None):
        return self._entries.get(member_id, default)

    def upsert(self, member_id, **marks) -> "MemberMarksTable":
        if member_id not in self._order:
            raise KeyError(f"Unknown member id: {member_id}")
        merged = dict(self._entries.get(member_id, {}))
        merged.update(marks)
        entries = dict(self._entries)
        entries[member_id] = merged
        return MemberMarksTable(self._order, entries)

    def remove_all(self) -> "MemberMarksTable":
        return MemberMarksTable(self._order)

    def __iter__(self) -> Iterator[Tuple[str, Mapping[str, Any]]]:
        for member_id in self._order:
            if member_id in self._entries:
                yield member_id, self._entries[member_id]

    def __len__(self):
        return len(self._entries)

    def __contains__(self, member_id):
        return member_id in self._entries

    def __eq__(self, other):
        if not isinstance(other, MemberMarksTable):
            return NotImplemented
        return self._order == other._order and \
            {k: dict(v) for k, v in self._entries.items()} == {k: dict(v) for k, v in other._entries.items()}

    def __repr__(self):
        return f"MemberMarksTable({[(k, dict(v)) for k, v in self]})"


@dataclass(frozen=True)
class FormState:
    server: Mapping[str, Any] = field(default_factory=dict)
    draft: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def load(cls, server: Dict[str, Any]) -> "FormState":
        snapshot = MappingProxyType(dict(server))
        return cls(server=snapshot, draft=snapshot)

    def set(self, key, value) -> "FormState":
        draft = dict(self.draft)
        draft[key] = value
        return replace(self, draft=MappingProxyType(draft))

    def get(self, key, default=None):
        return self.draft.get(key, default)

    def diff(self) -> Dict[str, Tuple[Any, Any]]:
        """``{key: (server_value, draft_value)}`` for every key that changed."""
        keys = list(self.server) + [k for k in self.draft if k not in self.server]
        return {
            k: (self.server.get(k), self.draft.get(k))
            for k in keys
            if self.server.get(k) != self.draft.get(k)
        }

    @property
    def is_dirty(self) -> bool:
        return bool(self.diff())

    def revert(self) -> "FormState":
        return replace(self, draft=self.server)

    def commit(self, server: Dict[str, Any]) -> "FormState":
        """New snapshot after a successful save; the draft is reset to it."""
        return FormState.load(server)
