"""Line-oriented I/O: resource ids in, one JSON document per execution out."""

import asyncio
import json
import threading
from collections.abc import AsyncIterator
from typing import TextIO

from bigml_parallel.resource.domain.resource import Resource


async def read_ids(stream: TextIO) -> AsyncIterator[str]:
    """
    Yield each non-blank line of ``stream``, stripped, as it becomes available.

    Lines are read one at a time, on demand, by a daemon thread so that a slow
    producer on stdin does not stall executions already in flight. A read
    still blocked when the run ends is abandoned with the thread instead of
    holding up interpreter shutdown.
    """
    loop = asyncio.get_running_loop()
    lines: asyncio.Queue[str | Exception] = asyncio.Queue()
    wanted = threading.Semaphore(0)

    def deliver(item: str | Exception) -> bool:
        try:
            loop.call_soon_threadsafe(lines.put_nowait, item)
        except RuntimeError:
            # The event loop is closed, so nobody is waiting for more ids.
            return False
        return True

    def pump() -> None:
        while True:
            wanted.acquire()
            try:
                line = stream.readline()
            except Exception as exc:  # noqa: BLE001
                deliver(exc)
                return
            if not deliver(line) or not line:
                return

    threading.Thread(target=pump, daemon=True, name="resource-id-reader").start()
    while True:
        wanted.release()
        item = await lines.get()
        if isinstance(item, Exception):
            raise item
        if not item:
            return
        resource_id = item.strip()
        if resource_id:
            yield resource_id


class JsonLinesWriter:
    """Writes each resource as a single line of JSON, flushing after every line."""

    def __init__(self, stream: TextIO) -> None:
        self._stream = stream

    def write(self, resource: Resource) -> None:
        self._stream.write(json.dumps(resource.to_json_dict()))
        self._stream.write("\n")
        self._stream.flush()
