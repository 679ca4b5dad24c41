"""Memoized generated-code classification keyed by tree identity.

Results live in an immutable table held by a single CacheSlot. A miss builds
a new table with the entry added and installs it, replacing whatever is in
the slot (last write wins, no lock). The slot may be emptied at any time:
explicitly, by the entry bound, or by a full garbage collection in "weak"
mode. Losing the table only costs a recomputation, since classification is a
pure function of the tree.

Configuration (read when the default cache is first built):
  GENRECOG_CACHE_MODE         weak (default) | bounded | off
  GENRECOG_CACHE_MAX_ENTRIES  positive int, default 2048
"""

from __future__ import annotations

import gc
import logging
import os
import weakref
from collections.abc import Callable, Mapping
from types import MappingProxyType

from .cancellation import CancellationToken
from .comments import contains_generated_code_marker
from .filenames import is_generated_file_name
from .protocols import AnalysisContext, SourceTree

logger = logging.getLogger(__name__)

_DEFAULT_MAX_ENTRIES = 2048
_DEFAULT_MODE = "weak"
_VALID_MODES = {"weak", "bounded", "off"}

# id(tree) -> (tree reference, result)
ClassificationTable = Mapping[int, tuple[Callable[[], object], bool]]

_EMPTY_TABLE: ClassificationTable = MappingProxyType({})


class CacheSlot:
    """Holds the current classification table. May be emptied at any time.

    max_entries bounds the table (oldest entries are dropped first); 0
    disables memoization. With drop_on_full_collection, the table is
    released whenever a generation-2 garbage collection starts.
    """

    def __init__(
        self,
        max_entries: int = _DEFAULT_MAX_ENTRIES,
        drop_on_full_collection: bool = False,
    ):
        self.max_entries = max_entries
        self.drop_on_full_collection = drop_on_full_collection
        self.gc_drops = 0
        self._table: ClassificationTable | None = None
        if drop_on_full_collection:
            _register_gc_hook(self)

    def get(self) -> ClassificationTable | None:
        return self._table

    def set(self, table: ClassificationTable) -> None:
        self._table = table

    def clear(self) -> None:
        self._table = None


def _register_gc_hook(slot: CacheSlot) -> None:
    # The hook only holds a weak reference, so the slot can still be collected.
    slot_ref = weakref.ref(slot)

    def _on_gc(phase: str, info: dict) -> None:
        target = slot_ref()
        if target is None or phase != "start" or info.get("generation") != 2:
            return
        if target._table is not None:
            target._table = None
            target.gc_drops += 1

    gc.callbacks.append(_on_gc)
    weakref.finalize(slot, _unregister_gc_hook, _on_gc)


def _unregister_gc_hook(hook: Callable) -> None:
    try:
        gc.callbacks.remove(hook)
    except ValueError:
        pass


def _tree_ref(tree: SourceTree) -> Callable[[], object]:
    try:
        return weakref.ref(tree)
    except TypeError:
        # Not weak-referenceable (e.g. __slots__ without __weakref__); hold it.
        return lambda: tree


def _with_entry(
    table: ClassificationTable,
    tree: SourceTree,
    result: bool,
    max_entries: int,
) -> ClassificationTable:
    """Return a new table with tree -> result added. table is not modified."""
    items = {
        key: entry for key, entry in table.items()
        if entry[0]() is not None
    }
    key = id(tree)
    items.pop(key, None)
    items[key] = (_tree_ref(tree), result)
    while len(items) > max_entries:
        del items[next(iter(items))]
    return MappingProxyType(items)


class GeneratedCodeCache:
    """Classifies trees as generated code, memoizing results per tree."""

    def __init__(
        self,
        slot: CacheSlot | None = None,
        classify_file_name: Callable[[str], bool] = is_generated_file_name,
        scan_comments: Callable[
            [SourceTree, CancellationToken | None], bool
        ] = contains_generated_code_marker,
    ):
        self.slot = slot if slot is not None else CacheSlot()
        self._classify_file_name = classify_file_name
        self._scan_comments = scan_comments

    def __len__(self) -> int:
        """Number of cached entries whose tree is still alive."""
        table = self.slot.get()
        if table is None:
            return 0
        return sum(1 for entry in table.values() if entry[0]() is not None)

    def lookup(self, tree: SourceTree) -> bool | None:
        """Return the memoized result for tree, or None if it is not cached."""
        table = self.slot.get()
        if table is None:
            return None
        entry = table.get(id(tree))
        if entry is None or entry[0]() is not tree:
            return None
        return entry[1]

    def is_generated(
        self,
        tree: SourceTree,
        cancel: CancellationToken | None = None,
    ) -> bool:
        """Return True if tree is generated code.

        Cache hits return without touching the tree or cancel. On a miss the
        file name is checked first; the comment scan only runs when the name
        does not match.

        Raises:
            OperationCancelled: cancel fired during the comment scan.
        """
        table = self.slot.get()
        if table is None:
            table = _EMPTY_TABLE

        entry = table.get(id(tree))
        if entry is not None and entry[0]() is tree:
            return entry[1]

        result = bool(
            self._classify_file_name(tree.file_path)
            or self._scan_comments(tree, cancel)
        )
        logger.debug(
            "cache.miss",
            extra={
                "file_path": tree.file_path,
                "generated": result,
                "table_size": len(table),
            },
        )

        if self.slot.max_entries > 0:
            self.slot.set(_with_entry(table, tree, result, self.slot.max_entries))
        return result

    def clear(self) -> None:
        self.slot.clear()


def _load_cache_settings() -> tuple[str, int]:
    mode_raw = os.getenv("GENRECOG_CACHE_MODE", _DEFAULT_MODE).strip().lower()
    if mode_raw not in _VALID_MODES:
        logger.warning(
            "cache.invalid_mode",
            extra={"mode": mode_raw, "fallback_mode": _DEFAULT_MODE},
        )
        mode = _DEFAULT_MODE
    else:
        mode = mode_raw

    max_entries = _DEFAULT_MAX_ENTRIES
    max_raw = os.getenv("GENRECOG_CACHE_MAX_ENTRIES")
    if max_raw is not None:
        try:
            value = int(max_raw.strip())
        except ValueError:
            value = 0
        if value > 0:
            max_entries = value
        else:
            logger.warning(
                "cache.invalid_max_entries",
                extra={"max_entries": max_raw, "fallback_max_entries": _DEFAULT_MAX_ENTRIES},
            )

    return mode, max_entries


def build_slot(mode: str, max_entries: int = _DEFAULT_MAX_ENTRIES) -> CacheSlot:
    """Build a CacheSlot for one of the GENRECOG_CACHE_MODE values."""
    if mode == "off":
        return CacheSlot(max_entries=0)
    if mode == "bounded":
        return CacheSlot(max_entries=max_entries)
    if mode == "weak":
        return CacheSlot(max_entries=max_entries, drop_on_full_collection=True)
    raise ValueError(f"Unknown cache mode: {mode}")


_default_cache: GeneratedCodeCache | None = None


def default_cache() -> GeneratedCodeCache:
    """Return the process-wide cache, building it from the environment on first use."""
    global _default_cache
    if _default_cache is None:
        mode, max_entries = _load_cache_settings()
        logger.debug(
            "cache.configured",
            extra={"mode": mode, "max_entries": max_entries},
        )
        _default_cache = GeneratedCodeCache(build_slot(mode, max_entries))
    return _default_cache


def reset_default_cache() -> None:
    """Forget the process-wide cache so the next use re-reads the environment."""
    global _default_cache
    _default_cache = None


def is_from_generated_code(
    tree: SourceTree,
    cancel: CancellationToken | None = None,
) -> bool:
    return default_cache().is_generated(tree, cancel)


def is_context_from_generated_code(context: AnalysisContext) -> bool:
    return default_cache().is_generated(context.tree, context.cancel)


def clear_cache() -> None:
    """Drop all memoized results of the process-wide cache."""
    default_cache().clear()
