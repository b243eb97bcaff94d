# model/checklist.py
from pydantic import BaseModel, Field


class ChecklistItemDefinition(BaseModel):
    id: int
    description: str
    criteria: str = ""


class ChecklistDefinition(BaseModel):
    id: str
    name: str
    description: str = ""
    items: list[ChecklistItemDefinition] = Field(default_factory=list)
    createdAt: str = ""
    updatedAt: str = ""


class ChecklistSummary(BaseModel):
    id: str
    name: str
    description: str = ""
    createdAt: str = ""
    updatedAt: str = ""
    itemCount: int = 0


class ChecklistItemDraft(BaseModel):
    id: int | None = None
    description: str = ""
    criteria: str = ""


class SaveChecklistRequest(BaseModel):
    name: str = ""
    description: str = ""
    items: list[ChecklistItemDraft] | None = None


class GeneratedItem(BaseModel):
    description: str
    criteria: str
