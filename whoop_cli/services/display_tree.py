"""Null-safe traversal of WHOOP display trees.

The home, sleep and strain endpoints return the layout the app renders:
``{pillars: [{type, sections: [{items: [{type, content}]}]}]}`` for the
overview, or bare ``{sections: [...]}`` for the deep-dive screens. The shape
is an internal app contract, so every helper here treats each node as
untrusted and degrades to "not found" instead of raising.
"""

from typing import Any, Callable, Iterator, Optional

ItemPredicate = Callable[[dict], bool]


def as_list(value: Any) -> list:
    """The value if it is a list, otherwise an empty list."""
    return value if isinstance(value, list) else []


def get_path(node: Any, *keys: Any) -> Any:
    """Walk dict keys (and list indices) from node; None on any mismatch."""
    current = node
    for key in keys:
        if isinstance(key, int) and not isinstance(key, bool):
            if not isinstance(current, list) or not -len(current) <= key < len(current):
                return None
            current = current[key]
        elif isinstance(current, dict):
            current = current.get(key)
        else:
            return None
    return current


def get_str(node: Any, *keys: Any) -> Optional[str]:
    """String leaf at path, or None."""
    value = get_path(node, *keys)
    return value if isinstance(value, str) else None


def get_number(node: Any, *keys: Any) -> Optional[float]:
    """Numeric leaf at path (booleans excluded), or None."""
    value = get_path(node, *keys)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return value


def find_pillar(tree: Any, pillar_type: str) -> Optional[dict]:
    """First pillar with the given type tag."""
    for pillar in as_list(get_path(tree, "pillars")):
        if isinstance(pillar, dict) and pillar.get("type") == pillar_type:
            return pillar
    return None


def iter_sections(node: Any) -> Iterator[dict]:
    """Dict sections under node["sections"]."""
    for section in as_list(get_path(node, "sections")):
        if isinstance(section, dict):
            yield section


def iter_items(node: Any, item_type: Optional[str] = None) -> Iterator[dict]:
    """Items across all sections of node, optionally filtered by type tag."""
    for section in iter_sections(node):
        for item in as_list(section.get("items")):
            if not isinstance(item, dict):
                continue
            if item_type is None or item.get("type") == item_type:
                yield item


def iter_pillar_items(
    tree: Any,
    pillar_type: str,
    item_type: Optional[str] = None,
) -> Iterator[dict]:
    """Items of one pillar, e.g. the KEY_STATISTIC items of OVERVIEW."""
    pillar = find_pillar(tree, pillar_type)
    if pillar is None:
        return
    yield from iter_items(pillar, item_type)


def find_item(
    node: Any,
    item_type: str,
    predicate: Optional[ItemPredicate] = None,
) -> Optional[dict]:
    """First item of a type (and matching predicate) across node's sections."""
    for item in iter_items(node, item_type):
        if predicate is None or predicate(item):
            return item
    return None


def find_entry(entries: Any, entry_type: str) -> Optional[dict]:
    """First dict in a plain list whose type tag matches."""
    for entry in as_list(entries):
        if isinstance(entry, dict) and entry.get("type") == entry_type:
            return entry
    return None
