"""YAML encoding of category index records.

On disk::

    memories:
    - path: project/notes
      token_estimate: 12
    subcategories:
    - path: project/cortex
      memory_count: 1
      description: Architecture notes
"""

from __future__ import annotations

import yaml

from cortex.index.models import CategoryIndex, MemoryEntry, SubcategoryEntry
from cortex.paths import parse_category_path, parse_memory_path


class IndexParseError(ValueError):
    """Bytes on disk are not a valid category index."""


class IndexCodec:
    def encode(self, index: CategoryIndex) -> bytes:
        data = {
            "memories": [
                {"path": str(m.path), "token_estimate": m.token_estimate} for m in index.memories
            ],
            "subcategories": [self._encode_subcategory(s) for s in index.subcategories],
        }
        text = yaml.safe_dump(data, sort_keys=False, allow_unicode=True, default_flow_style=False)
        return text.encode("utf-8")

    @staticmethod
    def _encode_subcategory(entry: SubcategoryEntry) -> dict:
        item = {"path": str(entry.path), "memory_count": entry.memory_count}
        if entry.description:
            item["description"] = entry.description
        return item

    def decode(self, data: bytes) -> CategoryIndex:
        try:
            raw = yaml.safe_load(data.decode("utf-8"))
        except (UnicodeDecodeError, yaml.YAMLError) as exc:
            raise IndexParseError(f"Failed to parse category index: {exc}") from exc

        if raw is None:
            return CategoryIndex.empty()
        if not isinstance(raw, dict):
            raise IndexParseError("Category index must be a mapping")

        memories = [self._decode_memory(item) for item in self._section(raw, "memories")]
        subcategories = [
            self._decode_subcategory(item) for item in self._section(raw, "subcategories")
        ]
        return CategoryIndex.build(memories, subcategories)

    @staticmethod
    def _section(raw: dict, name: str) -> list:
        items = raw.get(name) or []
        if not isinstance(items, list):
            raise IndexParseError(f"Section '{name}' must be a list")
        for item in items:
            if not isinstance(item, dict):
                raise IndexParseError(f"Entries in '{name}' must be mappings")
        return items

    @staticmethod
    def _count(item: dict, field: str) -> int:
        value = item.get(field)
        # bool is an int subclass; reject it explicitly
        if not isinstance(value, int) or isinstance(value, bool) or value < 0:
            raise IndexParseError(f"Field '{field}' must be a non-negative integer: {value!r}")
        return value

    def _decode_memory(self, item: dict) -> MemoryEntry:
        parsed = parse_memory_path(str(item.get("path") or ""))
        if not parsed.ok:
            raise IndexParseError(parsed.error.message)
        return MemoryEntry(path=parsed.value, token_estimate=self._count(item, "token_estimate"))

    def _decode_subcategory(self, item: dict) -> SubcategoryEntry:
        raw_path = str(item.get("path") or "")
        parsed = parse_category_path(raw_path)
        if not parsed.ok or parsed.value.is_root:
            raise IndexParseError(f"Invalid subcategory path: {raw_path!r}")
        description = item.get("description")
        if description is not None and not isinstance(description, str):
            raise IndexParseError("Subcategory description must be a string")
        return SubcategoryEntry(
            path=parsed.value,
            memory_count=self._count(item, "memory_count"),
            description=description or None,
        )
