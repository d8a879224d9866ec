"""版本链管理

链只通过追加增长：根版本 version=1，之后每次 version = 当前版本 + 1，
previous_id 指向当前链头。版本创建后不可变，链不会被拼接或重排。
"""

import logging
import time
import uuid
from typing import Callable, Optional

from prompt_evo.core.errors import (
    ChainNotFoundError, HistoryChainError, RecordNotFoundError, RecordValidationError,
)
from prompt_evo.core.storage import HistoryStorage, InMemoryHistoryStorage
from prompt_evo.models.history import (
    PromptRecord, PromptRecordChain, PromptRecordType, RecordDraft,
)

logger = logging.getLogger(__name__)


def _now_ms() -> int:
    return int(time.time() * 1000)


def _new_id() -> str:
    return uuid.uuid4().hex


class HistoryManager:
    """提示词版本链管理器"""

    def __init__(
        self,
        storage: Optional[HistoryStorage] = None,
        clock: Callable[[], int] = _now_ms,
        id_factory: Callable[[], str] = _new_id,
    ):
        self.storage = storage or InMemoryHistoryStorage()
        self.clock = clock
        self.id_factory = id_factory

    # ── 写入 ─────────────────────────────────────────────

    def create_chain(self, draft: RecordDraft) -> PromptRecordChain:
        """创建新链，根版本 version=1、无 previous_id"""
        self._validate_draft(draft)
        chain_id = self.id_factory()
        record = self._build_record(draft, chain_id, version=1, previous_id=None,
                                    default_type=PromptRecordType.OPTIMIZE)

        records = self.storage.load_records()
        self._ensure_unique_id(records, record.id)
        records.append(record)
        self.storage.save_records(records)

        logger.debug("Created chain %s with root %s", chain_id, record.id)
        return self._assemble_chain(chain_id, [record])

    def append_version(self, chain_id: str, draft: RecordDraft) -> PromptRecordChain:
        """在链尾追加一个版本"""
        self._validate_draft(draft)
        records = self.storage.load_records()
        versions = self._chain_versions(records, chain_id)
        head = versions[-1]

        record = self._build_record(draft, chain_id, version=head.version + 1, previous_id=head.id,
                                    default_type=PromptRecordType.ITERATE)
        self._ensure_unique_id(records, record.id)
        records.append(record)
        self.storage.save_records(records)

        logger.debug("Appended version %d to chain %s", record.version, chain_id)
        return self._assemble_chain(chain_id, versions + [record])

    def delete_chain(self, chain_id: str) -> None:
        records = self.storage.load_records()
        remaining = [r for r in records if r.chain_id != chain_id]
        if len(remaining) == len(records):
            raise ChainNotFoundError(chain_id)
        self.storage.save_records(remaining)

    def clear_history(self) -> None:
        self.storage.save_records([])

    # ── 读取 ─────────────────────────────────────────────

    def get_chain(self, chain_id: str) -> PromptRecordChain:
        versions = self._chain_versions(self.storage.load_records(), chain_id)
        return self._assemble_chain(chain_id, versions)

    def get_all_chains(self) -> list[PromptRecordChain]:
        """所有链，最近更新的在前"""
        records = self.storage.load_records()
        chain_ids: list[str] = []
        for r in records:
            if r.chain_id not in chain_ids:
                chain_ids.append(r.chain_id)

        chains = [self._assemble_chain(cid, self._chain_versions(records, cid)) for cid in chain_ids]
        chains.sort(key=lambda c: c.current_record.timestamp, reverse=True)
        return chains

    def get_record(self, record_id: str) -> PromptRecord:
        for r in self.storage.load_records():
            if r.id == record_id:
                return r
        raise RecordNotFoundError(record_id)

    def get_records(self) -> list[PromptRecord]:
        """全部记录，最新的在前"""
        return sorted(self.storage.load_records(), key=lambda r: r.timestamp, reverse=True)

    def get_version_lineage(self, version_id: str) -> list[PromptRecord]:
        """沿 previous_id 回溯到根版本，返回从根到该版本的列表"""
        by_id = {r.id: r for r in self.storage.load_records()}
        if version_id not in by_id:
            raise RecordNotFoundError(version_id)

        lineage: list[PromptRecord] = []
        visited: set[str] = set()
        current: Optional[PromptRecord] = by_id[version_id]
        while current is not None:
            if current.id in visited:
                raise HistoryChainError(f"Cycle detected in lineage of '{version_id}' at '{current.id}'.")
            visited.add(current.id)
            lineage.append(current)

            if current.previous_id is None:
                break
            if current.previous_id not in by_id:
                raise RecordNotFoundError(current.previous_id)
            current = by_id[current.previous_id]

        lineage.reverse()
        if lineage[0].version != 1:
            raise HistoryChainError(f"Lineage of '{version_id}' does not start at version 1.")
        return lineage

    # ── 内部 ─────────────────────────────────────────────

    @staticmethod
    def _validate_draft(draft: RecordDraft) -> None:
        errors = []
        if not draft.optimized_prompt.strip():
            errors.append("optimized_prompt must not be empty")
        if not draft.model_key.strip():
            errors.append("model_key must not be empty")
        if not draft.template_id.strip():
            errors.append("template_id must not be empty")
        if errors:
            raise RecordValidationError("Invalid record", errors)

    @staticmethod
    def _ensure_unique_id(records: list[PromptRecord], record_id: str) -> None:
        if any(r.id == record_id for r in records):
            raise RecordValidationError("Invalid record", [f"record id '{record_id}' already exists"])

    def _build_record(
        self,
        draft: RecordDraft,
        chain_id: str,
        version: int,
        previous_id: Optional[str],
        default_type: PromptRecordType,
    ) -> PromptRecord:
        return PromptRecord(
            id=draft.id or self.id_factory(),
            chain_id=chain_id,
            version=version,
            previous_id=previous_id,
            original_prompt=draft.original_prompt,
            optimized_prompt=draft.optimized_prompt,
            type=draft.type or default_type,
            timestamp=draft.timestamp if draft.timestamp is not None else self.clock(),
            model_key=draft.model_key,
            template_id=draft.template_id,
            iteration_note=draft.iteration_note,
            metadata=dict(draft.metadata),
        )

    @staticmethod
    def _chain_versions(records: list[PromptRecord], chain_id: str) -> list[PromptRecord]:
        versions = sorted((r for r in records if r.chain_id == chain_id), key=lambda r: r.version)
        if not versions:
            raise ChainNotFoundError(chain_id)
        return versions

    @staticmethod
    def _assemble_chain(chain_id: str, versions: list[PromptRecord]) -> PromptRecordChain:
        for expected, record in enumerate(versions, start=1):
            if record.version != expected:
                raise HistoryChainError(
                    f"Chain '{chain_id}' has version {record.version} where {expected} was expected."
                )
        return PromptRecordChain(
            chain_id=chain_id,
            root_record=versions[0],
            current_record=versions[-1],
            versions=versions,
        )
