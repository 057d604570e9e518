"""
Local key-value storage for the client session.

Values are strings; structured values such as the user record are stored as
JSON text by the caller.
"""

import asyncio
import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Iterable, Optional, Union

AUTH_TOKEN_KEY = "authToken"
USER_DATA_KEY = "userData"
SESSION_KEYS = (AUTH_TOKEN_KEY, USER_DATA_KEY)


class CredentialStore(ABC):
    """Async string key-value store."""

    @abstractmethod
    async def get_item(self, key: str) -> Optional[str]:
        pass

    @abstractmethod
    async def set_item(self, key: str, value: str) -> None:
        pass

    @abstractmethod
    async def remove_item(self, key: str) -> None:
        pass

    async def multi_remove(self, keys: Iterable[str]) -> None:
        for key in keys:
            await self.remove_item(key)


class MemoryStorage(CredentialStore):

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._items: Dict[str, str] = dict(initial or {})

    async def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    async def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    async def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    async def multi_remove(self, keys: Iterable[str]) -> None:
        for key in keys:
            self._items.pop(key, None)


class JsonFileStorage(CredentialStore):
    """Persists all keys in one JSON document; file IO runs in a worker thread."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._lock = asyncio.Lock()

    def _read(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        with self.path.open("r", encoding="utf-8") as fh:
            content = fh.read()
        return json.loads(content) if content.strip() else {}

    def _write(self, items: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with tmp_path.open("w", encoding="utf-8") as fh:
            json.dump(items, fh)
        tmp_path.replace(self.path)

    async def get_item(self, key: str) -> Optional[str]:
        items = await asyncio.to_thread(self._read)
        return items.get(key)

    async def set_item(self, key: str, value: str) -> None:
        async with self._lock:
            items = await asyncio.to_thread(self._read)
            items[key] = value
            await asyncio.to_thread(self._write, items)

    async def remove_item(self, key: str) -> None:
        await self.multi_remove([key])

    async def multi_remove(self, keys: Iterable[str]) -> None:
        async with self._lock:
            items = await asyncio.to_thread(self._read)
            for key in keys:
                items.pop(key, None)
            await asyncio.to_thread(self._write, items)
