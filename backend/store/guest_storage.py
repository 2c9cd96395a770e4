# backend/store/guest_storage.py
import logging
from pathlib import Path
from typing import Generic, List, Type, TypeVar

from pydantic import BaseModel, TypeAdapter, ValidationError

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


class MemoryGuestStorage(Generic[T]):
    """Keeps guest lines for the lifetime of the process only."""

    def __init__(self):
        self._lines: List[T] = []

    def load(self) -> List[T]:
        return [line.model_copy(deep=True) for line in self._lines]

    def save(self, lines: List[T]) -> None:
        self._lines = [line.model_copy(deep=True) for line in lines]


class JsonFileGuestStorage(Generic[T]):
    """Persists guest lines as JSON so the guest cart survives a restart."""

    def __init__(self, path, model: Type[T]):
        self.path = Path(path)
        self._adapter = TypeAdapter(List[model])

    def load(self) -> List[T]:
        if not self.path.exists():
            return []
        try:
            return self._adapter.validate_json(self.path.read_bytes())
        except (OSError, ValidationError) as e:
            # A damaged file must not lock the visitor out of their cart
            logger.warning(f"Ignoring unreadable guest storage {self.path}: {e}")
            return []

    def save(self, lines: List[T]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_bytes(self._adapter.dump_json(lines))
        tmp.replace(self.path)


def guest_storage_for(path, model: Type[T]):
    """Storage configured by path, in-memory when no path is set."""
    if path:
        return JsonFileGuestStorage(path, model)
    return MemoryGuestStorage()
