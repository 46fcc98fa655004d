from collections.abc import Mapping
from typing import Iterable, List, Union

from pydantic import BaseModel

LegacyStorageLoadItem = Union[int, float, Mapping, BaseModel]


def to_legacy_storage_load(storage: Iterable[LegacyStorageLoadItem]) -> List[Union[int, float]]:
    """
    Collapse extended entries to their load values.

    Plain numbers pass through, so the projection is safe to apply to a payload
    that is already legacy. Index alignment and the -1 sentinel are preserved.
    """
    legacy = []
    for item in storage:
        if isinstance(item, (int, float)) and not isinstance(item, bool):
            legacy.append(item)
        elif isinstance(item, Mapping):
            legacy.append(item["load"])
        else:
            legacy.append(item.load)
    return legacy
