"""Plain-data views of index records and memories for CLI and tool output."""

from __future__ import annotations

import yaml

from cortex.index.models import CategoryIndex
from cortex.memory.models import Memory
from cortex.paths import CategoryPath


def index_to_dict(category: CategoryPath, index: CategoryIndex) -> dict:
    subcategories = []
    for sub in index.subcategories:
        item = {"path": str(sub.path), "memory_count": sub.memory_count}
        if sub.description:
            item["description"] = sub.description
        subcategories.append(item)
    return {
        "category": str(category) or "/",
        "memories": [
            {"path": str(m.path), "token_estimate": m.token_estimate} for m in index.memories
        ],
        "subcategories": subcategories,
    }


def memory_to_dict(memory: Memory) -> dict:
    meta = memory.metadata
    data = {
        "path": str(memory.path),
        "created_at": meta.created_at.isoformat(),
        "updated_at": meta.updated_at.isoformat(),
        "tags": list(meta.tags),
        "source": meta.source,
    }
    if meta.expires_at is not None:
        data["expires_at"] = meta.expires_at.isoformat()
    if meta.citations:
        data["citations"] = list(meta.citations)
    data["content"] = memory.content
    return data


def to_yaml(data) -> str:
    return yaml.safe_dump(data, sort_keys=False, allow_unicode=True, default_flow_style=False)
