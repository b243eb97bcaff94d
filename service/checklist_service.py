# service/checklist_service.py
import logging
from typing import List, Optional
from config.settings import settings
from core.checklist_generator import (
    build_generate_prompt,
    generate_with_llm,
    simulate_generation,
)
from model.api import GenerateChecklistRequest
from model.checklist import (
    ChecklistDefinition,
    ChecklistItemDefinition,
    ChecklistSummary,
    GeneratedItem,
    SaveChecklistRequest,
)
from repository.checklist_repository import ChecklistRepository
from util.enums import ErrorMessage
from util.errors import AppError, ChecklistLoadError, LLMTimeout

logger = logging.getLogger(__name__)

MIN_REQUEST_ITEMS = 1
MAX_REQUEST_ITEMS = 20
DEFAULT_REQUEST_ITEMS = 6


class ChecklistService:
    def __init__(
        self,
        checklists: ChecklistRepository,
        use_real_api: bool = settings.USE_REAL_API,
    ) -> None:
        self._checklists = checklists
        self._use_real_api = use_real_api

    async def list(self) -> List[ChecklistSummary]:
        return await self._checklists.list()

    async def get(self, checklist_id: str) -> ChecklistDefinition:
        try:
            checklist = await self._checklists.load(checklist_id)
        except ChecklistLoadError:
            raise AppError.of(ErrorMessage.CHECKLIST_LOAD_ERROR)
        if checklist is None:
            raise AppError.of(ErrorMessage.CHECKLIST_NOT_FOUND)
        return checklist

    async def create(self, payload: SaveChecklistRequest) -> ChecklistDefinition:
        name = payload.name.strip()
        if not name or payload.items is None:
            raise AppError.of(ErrorMessage.INVALID_CHECKLIST)
        items = self._normalize_items(payload)
        return await self._checklists.save(
            name=name, description=payload.description, items=items
        )

    async def update(
        self, checklist_id: str, payload: SaveChecklistRequest
    ) -> ChecklistDefinition:
        name = payload.name.strip()
        if not name:
            raise AppError.of(ErrorMessage.INVALID_CHECKLIST, "Name is required")
        if not payload.items:
            raise AppError.of(
                ErrorMessage.INVALID_CHECKLIST, "At least one item is required"
            )
        items = self._normalize_items(payload)
        if any(not it.description.strip() for it in items):
            raise AppError.of(
                ErrorMessage.INVALID_CHECKLIST, "Each item must have a description"
            )
        return await self._checklists.save(
            name=name,
            description=payload.description,
            items=items,
            checklist_id=checklist_id,
        )

    @staticmethod
    def _normalize_items(payload: SaveChecklistRequest) -> List[ChecklistItemDefinition]:
        # Items without an explicit id take their 1-based position.
        return [
            ChecklistItemDefinition(
                id=it.id if it.id is not None else idx,
                description=it.description,
                criteria=it.criteria,
            )
            for idx, it in enumerate(payload.items or [], start=1)
        ]

    async def generate(
        self, payload: GenerateChecklistRequest, token: Optional[str]
    ) -> List[GeneratedItem]:
        document_type = payload.documentType.strip() or "Document"
        custom = payload.customDescription.strip() or None
        count = (
            max(MIN_REQUEST_ITEMS, min(payload.itemCount, MAX_REQUEST_ITEMS))
            if payload.itemCount is not None
            else DEFAULT_REQUEST_ITEMS
        )
        logger.info(
            "checklist.generate type=%s count=%d real=%s",
            document_type,
            count,
            self._use_real_api,
        )

        if not self._use_real_api:
            # Simulated mode does not require a session
            items = simulate_generation(document_type, count)
        else:
            if not token:
                raise AppError.of(ErrorMessage.UNAUTHORIZED, "Unauthorized")
            prompt = build_generate_prompt(
                settings.GENERATE_PROMPT, document_type, custom, count
            )
            try:
                items = await generate_with_llm(
                    token=token,
                    api_url=settings.LLM_API_URL,
                    prompt=prompt,
                    max_tokens=settings.LLM_GENERATE_MAX_TOKENS,
                    temperature=settings.LLM_GENERATE_TEMPERATURE,
                    timeout=settings.LLM_GENERATE_TIMEOUT_SECONDS,
                )
            except LLMTimeout:
                raise AppError.of(ErrorMessage.LLM_TIMEOUT)
            except Exception as e:
                logger.error("checklist.generate.error err=%s", type(e).__name__)
                raise AppError.of(ErrorMessage.LLM_GENERATION_FAILED, extra=str(e))

        if not items:
            raise AppError.of(ErrorMessage.LLM_INVALID_RESPONSE)
        return items
