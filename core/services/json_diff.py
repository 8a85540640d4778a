"""Structural diff between two JSON-compatible values as RFC 6902 patch operations."""

from __future__ import annotations

from copy import deepcopy
from typing import Any


def escape_pointer(token: Any) -> str:
    return str(token).replace("~", "~0").replace("/", "~1")


def _keys(value: Any) -> list:
    if isinstance(value, list):
        return list(range(len(value)))
    return list(value.keys())


def _has(container: Any, key: Any) -> bool:
    if isinstance(container, list):
        return 0 <= key < len(container)
    return key in container


def _is_container(value: Any) -> bool:
    return isinstance(value, (dict, list))


def _generate(old: Any, new: Any, patches: list[dict], path: str) -> None:
    if old is new:
        return
    old_keys = _keys(old)
    new_keys = _keys(new)
    deleted = False

    for key in reversed(old_keys):
        old_val = old[key]
        child = f"{path}/{escape_pointer(key)}"
        if _has(new, key):
            new_val = new[key]
            if (
                _is_container(old_val)
                and _is_container(new_val)
                and isinstance(old_val, list) == isinstance(new_val, list)
            ):
                _generate(old_val, new_val, patches, child)
            elif old_val != new_val:
                patches.append({"op": "replace", "path": child, "value": deepcopy(new_val)})
        else:
            patches.append({"op": "remove", "path": child})
            deleted = True

    if not deleted and len(new_keys) == len(old_keys):
        return
    for key in new_keys:
        if not _has(old, key):
            patches.append({"op": "add", "path": f"{path}/{escape_pointer(key)}", "value": deepcopy(new[key])})


def compare(old: Any, new: Any) -> list[dict]:
    """Patch operations turning ``old`` into ``new``.

    Removals are emitted in reverse key order so they can be applied in
    sequence; additions follow in forward order.
    """
    patches: list[dict] = []
    if _is_container(old) and _is_container(new) and isinstance(old, list) == isinstance(new, list):
        _generate(old, new, patches, "")
    elif old != new:
        patches.append({"op": "replace", "path": "", "value": deepcopy(new)})
    return patches
