"""历史记录存储 / History storage

HistoryManager 只依赖 HistoryStorage 接口；这里提供内存和 YAML 文件两种参考实现。
History storage backends: in-memory and YAML file.
"""

from abc import ABC, abstractmethod
from pathlib import Path

import yaml

from prompt_evo.core.errors import HistoryStorageError
from prompt_evo.models.config import HistoryConfig
from prompt_evo.models.history import PromptRecord


class HistoryStorage(ABC):
    """历史记录存储接口 / History storage interface"""

    @abstractmethod
    def load_records(self) -> list[PromptRecord]:
        """读取全部记录（按写入顺序）/ Read all records in insertion order"""

    @abstractmethod
    def save_records(self, records: list[PromptRecord]) -> None:
        """整体写回 / Persist the full record list"""


class InMemoryHistoryStorage(HistoryStorage):
    """内存存储 / In-memory storage"""

    def __init__(self):
        self._records: list[PromptRecord] = []

    def load_records(self) -> list[PromptRecord]:
        return list(self._records)

    def save_records(self, records: list[PromptRecord]) -> None:
        self._records = list(records)


class YamlHistoryStorage(HistoryStorage):
    """YAML 文件存储 / YAML file storage"""

    def __init__(self, path: str):
        self.path = Path(path)

    def load_records(self) -> list[PromptRecord]:
        if not self.path.exists():
            return []

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise HistoryStorageError(str(e), "read") from e

        if not data or "records" not in data:
            return []

        return [PromptRecord.model_validate(r) for r in data["records"]]

    def save_records(self, records: list[PromptRecord]) -> None:
        content = yaml.dump(
            {"records": [r.model_dump(mode="json", by_alias=True, exclude_none=True) for r in records]},
            allow_unicode=True,
            default_flow_style=False,
            sort_keys=False,
        )
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(content, encoding="utf-8")
        except OSError as e:
            raise HistoryStorageError(str(e), "write") from e


def create_storage(config: HistoryConfig) -> HistoryStorage:
    """根据配置创建存储 / Build the storage backend named by the config"""
    if config.storage == "yaml":
        return YamlHistoryStorage(config.path)
    return InMemoryHistoryStorage()
