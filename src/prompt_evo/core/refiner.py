"""提示词精修：把评估给出的补丁计划落到版本链上"""

import logging
from typing import TYPE_CHECKING, Iterable, Optional

from pydantic import BaseModel

from prompt_evo.core.errors import ValidationError
from prompt_evo.core.history import HistoryManager
from prompt_evo.core.patch import apply_patch_plan
from prompt_evo.models import (
    EvaluationRequest, EvaluationResponse, PatchApplyStatus, PatchBatchResult,
    PatchOperation, PromptRecordChain, PromptRecordType, RecordDraft,
)

if TYPE_CHECKING:
    from prompt_evo.services.evaluation import EvaluationService

DOMAIN = "refiner"

logger = logging.getLogger(__name__)


class RefineResult(BaseModel):
    """chain 为应用后的链；没有任何操作生效时 new_version 为 False"""
    chain: PromptRecordChain
    batch: PatchBatchResult
    new_version: bool
    evaluation: Optional[EvaluationResponse] = None


class PromptRefiner:
    """
    提示词精修器

    取链头的 optimized_prompt 作为当前文本，依次应用补丁；
    至少一个操作生效时追加一个 iterate 版本。
    """

    def __init__(self, history: HistoryManager, evaluation_service: Optional["EvaluationService"] = None):
        self.history = history
        self.evaluation_service = evaluation_service

    def apply_patch_plan(
        self,
        chain_id: str,
        patch_plan: Iterable[PatchOperation],
        model_key: str,
        template_id: str,
        iteration_note: Optional[str] = None,
    ) -> RefineResult:
        chain = self.history.get_chain(chain_id)
        current_text = chain.current_record.optimized_prompt

        batch = apply_patch_plan(current_text, patch_plan)
        for index, item in enumerate(batch.reports):
            if item.status != PatchApplyStatus.APPLIED:
                logger.info("Patch #%d %s: %s", index, item.status.value, item.reason)

        if batch.applied_count == 0:
            return RefineResult(chain=chain, batch=batch, new_version=False)

        chain = self.history.append_version(chain_id, RecordDraft(
            original_prompt=current_text,
            optimized_prompt=batch.text,
            model_key=model_key,
            template_id=template_id,
            type=PromptRecordType.ITERATE,
            iteration_note=iteration_note,
            metadata={"appliedPatches": batch.applied_count},
        ))
        return RefineResult(chain=chain, batch=batch, new_version=True)

    async def evaluate_and_patch(
        self,
        chain_id: str,
        request: EvaluationRequest,
        template_id: str,
        iteration_note: Optional[str] = None,
    ) -> RefineResult:
        """
        先评估再应用评估返回的 patch_plan

        Args:
            chain_id: 链 ID
            request: EvaluationRequest
            template_id: 写入新版本的模板 ID
            iteration_note: 迭代说明，默认使用评估 summary
        """
        if self.evaluation_service is None:
            raise ValidationError("PromptRefiner has no evaluation service.", DOMAIN)

        evaluation = await self.evaluation_service.evaluate(request)
        result = self.apply_patch_plan(
            chain_id,
            evaluation.patch_plan,
            model_key=request.evaluation_model_key,
            template_id=template_id,
            iteration_note=iteration_note or evaluation.summary or None,
        )
        return result.model_copy(update={"evaluation": evaluation})
