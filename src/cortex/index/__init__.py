"""Category index engine: records, codec, storage, incremental and full rebuild."""

from cortex.index.codec import IndexCodec, IndexParseError
from cortex.index.layout import StoreLayout
from cortex.index.models import CategoryIndex, MemoryEntry, ReindexResult, SubcategoryEntry
from cortex.index.reindex import FullReindexer
from cortex.index.store import CategoryIndexStore
from cortex.index.updater import IncrementalIndexUpdater, UpdateOptions

__all__ = [
    "CategoryIndex",
    "CategoryIndexStore",
    "FullReindexer",
    "IncrementalIndexUpdater",
    "IndexCodec",
    "IndexParseError",
    "MemoryEntry",
    "ReindexResult",
    "StoreLayout",
    "SubcategoryEntry",
    "UpdateOptions",
]
