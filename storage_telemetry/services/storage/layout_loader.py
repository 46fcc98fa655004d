import json
import logging
from typing import Tuple

import aiofiles
import aiofiles.os
from pydantic import TypeAdapter, ValidationError

from ...core.exceptions import LayoutLoadError
from ...models import StorageLayoutEntry

_layout_adapter = TypeAdapter(list[StorageLayoutEntry])


async def load_storage_layout(path: str) -> Tuple[StorageLayoutEntry, ...]:
    """
    Read the static storage layout written by the static-info collector.

    Accepts a JSON array of entries or an object with a "storage" array.
    A missing file yields an empty layout.
    """
    if not await aiofiles.os.path.exists(path):
        logging.warning(f"Storage layout file not found: {path} - no storage entries will be reported")
        return ()

    async with aiofiles.open(path, "r", encoding="utf-8") as f:
        content = await f.read()

    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise LayoutLoadError(path, f"not valid JSON ({e})") from e

    if isinstance(data, dict):
        data = data.get("storage", [])

    try:
        layout = _layout_adapter.validate_python(data)
    except ValidationError as e:
        raise LayoutLoadError(path, str(e)) from e

    logging.info(f"Loaded {len(layout)} storage layout entries from {path}")
    return tuple(layout)
