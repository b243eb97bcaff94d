# controller/checklist_controller.py
from typing import Optional
from fastapi import APIRouter, Depends
from controller.controller_dependencies import (
    get_checklist_service,
    get_token,
    rate_limit,
    require_token,
)
from model.api import GenerateChecklistRequest, GenerateChecklistResponse
from model.checklist import SaveChecklistRequest
from service.checklist_service import ChecklistService
from util.constants import InternalURIs

checklist_router = APIRouter(dependencies=[Depends(rate_limit)])


@checklist_router.get(InternalURIs.CHECKLISTS, dependencies=[Depends(require_token)])
async def list_checklists(
    service: ChecklistService = Depends(get_checklist_service),
) -> dict:
    items = await service.list()
    return {"success": True, "data": [c.model_dump() for c in items]}


@checklist_router.post(InternalURIs.CHECKLISTS, dependencies=[Depends(require_token)])
async def create_checklist(
    payload: SaveChecklistRequest,
    service: ChecklistService = Depends(get_checklist_service),
) -> dict:
    saved = await service.create(payload)
    return {"success": True, "data": saved.model_dump()}


# Registered before the {checklist_id} routes; generation works without a
# session when the simulated backend is active.
@checklist_router.post(
    InternalURIs.GENERATE_CHECKLIST, response_model=GenerateChecklistResponse
)
async def generate_checklist(
    payload: GenerateChecklistRequest,
    token: Optional[str] = Depends(get_token),
    service: ChecklistService = Depends(get_checklist_service),
) -> GenerateChecklistResponse:
    items = await service.generate(payload, token)
    return GenerateChecklistResponse(items=items)


@checklist_router.get(InternalURIs.CHECKLIST, dependencies=[Depends(require_token)])
async def get_checklist(
    checklist_id: str,
    service: ChecklistService = Depends(get_checklist_service),
) -> dict:
    checklist = await service.get(checklist_id)
    return {"success": True, "data": checklist.model_dump()}


@checklist_router.put(InternalURIs.CHECKLIST, dependencies=[Depends(require_token)])
async def update_checklist(
    checklist_id: str,
    payload: SaveChecklistRequest,
    service: ChecklistService = Depends(get_checklist_service),
) -> dict:
    updated = await service.update(checklist_id, payload)
    return {"success": True, "data": updated.model_dump()}
