from __future__ import annotations

from dataclasses import dataclass, field

from coursebase.seed.errors import ResolutionError


def name_key(raw: str | None) -> str:
    return str(raw or "").strip()


class NameIndex:
    """Display name -> generated id, for resolving parents declared by name.

    Keys are trimmed. Registering an existing key overwrites it (last write
    wins); blank keys are ignored.
    """

    def __init__(self, label: str):
        self.label = label
        self._ids: dict[str, str] = {}

    def register(self, raw_key: str | None, entity_id: str) -> None:
        key = name_key(raw_key)
        if key:
            self._ids[key] = entity_id

    def get(self, raw_key: str | None) -> str | None:
        return self._ids.get(name_key(raw_key))

    def resolve(self, raw_key: str | None) -> str:
        entity_id = self.get(raw_key)
        if entity_id is None:
            raise ResolutionError(self.label, name_key(raw_key) or None)
        return entity_id

    def __contains__(self, raw_key: object) -> bool:
        return isinstance(raw_key, str) and name_key(raw_key) in self._ids

    def __len__(self) -> int:
        return len(self._ids)


@dataclass
class SeedIndexes:
    courses: NameIndex = field(default_factory=lambda: NameIndex("Course"))
    units: NameIndex = field(default_factory=lambda: NameIndex("Unit"))
    chunks: NameIndex = field(default_factory=lambda: NameIndex("Chunk"))
