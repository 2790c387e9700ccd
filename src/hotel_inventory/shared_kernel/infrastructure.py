"""
Базовые реализации хранилищ, общие для всех контекстов.

Репозитории хранят и отдают копии моделей: изменение полученного объекта
не попадает в хранилище без явного вызова update().
"""

import json
import threading
from pathlib import Path
from typing import Callable, Dict, Generic, Iterable, List, Optional, Type, TypeVar

from pydantic import BaseModel

from .domain import EntityId

T = TypeVar("T", bound=BaseModel)


class InMemoryRepository(Generic[T]):
    """Базовый класс для репозиториев в памяти."""

    def __init__(self) -> None:
        self._data: Dict[EntityId, T] = {}
        self._lock = threading.RLock()

    def _get(self, entity_id: EntityId) -> Optional[T]:
        with self._lock:
            item = self._data.get(entity_id)
            return item.model_copy(deep=True) if item is not None else None

    def _select(self, predicate: Callable[[T], bool]) -> List[T]:
        with self._lock:
            return [
                item.model_copy(deep=True)
                for item in self._data.values()
                if predicate(item)
            ]

    def _insert(self, entity_id: EntityId, item: T) -> None:
        with self._lock:
            if entity_id in self._data:
                raise ValueError(f"Запись с id {entity_id} уже существует")
            self._data[entity_id] = item.model_copy(deep=True)

    def _replace(self, entity_id: EntityId, item: T) -> None:
        with self._lock:
            if entity_id not in self._data:
                raise KeyError(f"Запись с id {entity_id} не найдена")
            self._data[entity_id] = item.model_copy(deep=True)

    def _remove(self, entity_id: EntityId) -> None:
        with self._lock:
            if entity_id not in self._data:
                raise KeyError(f"Запись с id {entity_id} не найдена")
            del self._data[entity_id]

    # Хуки для Unit of Work

    def snapshot(self, entity_id: EntityId) -> Optional[T]:
        """Возвращает копию записи для журнала отката."""
        return self._get(entity_id)

    def restore(self, entity_id: EntityId, item: Optional[T]) -> None:
        """Возвращает запись в состояние из журнала (None - записи не было)."""
        with self._lock:
            if item is None:
                self._data.pop(entity_id, None)
            else:
                self._data[entity_id] = item.model_copy(deep=True)

    def flush(self) -> None:
        """Сохраняет состояние во внешнее хранилище (в памяти - ничего не делает)."""
        pass

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)


class JsonFileRepository(InMemoryRepository[T]):
    """Базовый класс для репозиториев, работающих с JSON-файлами."""

    def __init__(self, file_path: str, model_class: Type[T]):
        """
        Инициализирует репозиторий.

        Args:
            file_path: Путь к JSON-файлу с данными
            model_class: Класс модели данных
        """
        super().__init__()
        self._file_path = Path(file_path)
        self._model_class = model_class
        self._load_data()

    def _load_data(self) -> None:
        """Загружает данные из JSON-файла."""
        if not self._file_path.exists():
            self._data = {}
            return

        with open(self._file_path, "r", encoding="utf-8") as f:
            raw_data = f.read()

        if not raw_data.strip():
            self._data = {}
            return

        items: Iterable[dict] = json.loads(raw_data)
        self._data = {
            item["id"]: self._model_class.model_validate(item) for item in items
        }

    def _save_data(self) -> None:
        """Сохраняет данные в JSON-файл."""
        # Создаем директорию, если она не существует
        self._file_path.parent.mkdir(parents=True, exist_ok=True)

        with self._lock:
            data = [item.model_dump(mode="json") for item in self._data.values()]

        # Пишем во временный файл и подменяем, чтобы не оставить файл недописанным
        tmp_path = self._file_path.with_suffix(self._file_path.suffix + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
        tmp_path.replace(self._file_path)

    def flush(self) -> None:
        self._save_data()
