# repository/checklist_repository.py
import asyncio
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, List, Optional
from uuid import uuid4
from pydantic import ValidationError
from config.settings import settings
from model.checklist import (
    ChecklistDefinition,
    ChecklistItemDefinition,
    ChecklistSummary,
)
from util.errors import ChecklistLoadError
from util.functions import is_safe_name
import logging

logger = logging.getLogger(__name__)

RESUME_ITEMS: List[ChecklistItemDefinition] = [
    ChecklistItemDefinition(
        id=1,
        description="Contact Information",
        criteria="Full name, phone number, email address, and location (city/state) clearly visible at the top of resume",
    ),
    ChecklistItemDefinition(
        id=2,
        description="Professional Summary or Objective",
        criteria="Brief professional summary or career objective statement (2-4 sentences) describing candidate background and goals",
    ),
    ChecklistItemDefinition(
        id=3,
        description="Work Experience Section",
        criteria="Work experience with job titles, company names, employment dates (month/year format), and detailed responsibilities or achievements",
    ),
    ChecklistItemDefinition(
        id=4,
        description="Education History",
        criteria="Educational background including degree(s), institution name(s), graduation date(s) or expected graduation date",
    ),
    ChecklistItemDefinition(
        id=5,
        description="Skills Section",
        criteria="Dedicated skills section listing relevant technical skills, tools, programming languages, or competencies",
    ),
    ChecklistItemDefinition(
        id=6,
        description="Professional Formatting",
        criteria="Consistent formatting with clear section headers, appropriate font sizes, proper spacing, and professional layout",
    ),
    ChecklistItemDefinition(
        id=7,
        description="Quantifiable Achievements",
        criteria='Work experience includes specific metrics, numbers, percentages, or measurable accomplishments (e.g., "increased sales by 25%")',
    ),
    ChecklistItemDefinition(
        id=8,
        description="Certifications or Additional Sections",
        criteria="Additional relevant sections such as certifications, projects, publications, awards, or volunteer experience",
    ),
]


def _presets(now: str) -> List[ChecklistDefinition]:
    small_ids = {1, 3, 4}
    return [
        ChecklistDefinition(
            id="full-resume-checklist",
            name="Full Resume Checklist",
            description="Complete resume verification covering contact, summary, work experience, "
            "education, skills, formatting, achievements, and optional sections.",
            items=list(RESUME_ITEMS),
            createdAt=now,
            updatedAt=now,
        ),
        ChecklistDefinition(
            id="small-resume-checklist",
            name="Small Resume Checklist",
            description="Minimal resume verification: contact, work experience, and education.",
            items=[it for it in RESUME_ITEMS if it.id in small_ids],
            createdAt=now,
            updatedAt=now,
        ),
    ]


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class ChecklistRepository:
    """
    Flow:
    - One `<id>.json` file per checklist under `base_dir`.
    - Two resume presets are seeded (by name) the first time the store is touched.
    - load() returns None for unknown ids; a file that exists but cannot be
      decoded raises ChecklistLoadError.
    """

    def __init__(self, base_dir: str = settings.CHECKLISTS_DIR) -> None:
        self._dir = Path(base_dir)

    def _path(self, checklist_id: str) -> Optional[Path]:
        if not is_safe_name(checklist_id):
            return None
        return self._dir / f"{checklist_id}.json"

    def _files(self) -> Iterable[Path]:
        return sorted(self._dir.glob("*.json"))

    def _read(self, path: Path) -> ChecklistDefinition:
        return ChecklistDefinition.model_validate_json(path.read_text(encoding="utf-8"))

    def _write(self, checklist: ChecklistDefinition) -> None:
        path = self._dir / f"{checklist.id}.json"
        path.write_text(checklist.model_dump_json(indent=2), encoding="utf-8")

    def _ensure_presets(self) -> None:
        self._dir.mkdir(parents=True, exist_ok=True)
        names = set()
        for f in self._files():
            try:
                names.add(self._read(f).name)
            except (OSError, ValueError):
                continue
        for preset in _presets(_now_iso()):
            if preset.name not in names:
                self._write(preset)
                logger.info("checklist.preset.seeded id=%s", preset.id)

    def _load(self, checklist_id: str) -> Optional[ChecklistDefinition]:
        self._ensure_presets()
        path = self._path(checklist_id)
        if path is None or not path.is_file():
            return None
        try:
            return self._read(path)
        except (OSError, ValueError, ValidationError) as e:
            logger.error("checklist.load.error id=%s err=%s", checklist_id, type(e).__name__)
            raise ChecklistLoadError(f"Malformed checklist: {checklist_id}") from e

    def _list(self) -> List[ChecklistSummary]:
        self._ensure_presets()
        out: List[ChecklistSummary] = []
        for f in self._files():
            try:
                data = self._read(f)
            except (OSError, ValueError):
                # ignore malformed
                continue
            out.append(
                ChecklistSummary(
                    id=data.id,
                    name=data.name,
                    description=data.description,
                    createdAt=data.createdAt,
                    updatedAt=data.updatedAt,
                    itemCount=len(data.items),
                )
            )
        out.sort(key=lambda c: c.updatedAt or "", reverse=True)
        return out

    def _save(
        self,
        name: str,
        description: str,
        items: List[ChecklistItemDefinition],
        checklist_id: Optional[str],
    ) -> ChecklistDefinition:
        self._dir.mkdir(parents=True, exist_ok=True)
        now = _now_iso()
        cid = checklist_id or str(uuid4())
        existing = None
        if checklist_id:
            try:
                existing = self._load(checklist_id)
            except ChecklistLoadError:
                existing = None
        checklist = ChecklistDefinition(
            id=cid,
            name=name,
            description=description,
            items=items,
            createdAt=existing.createdAt if existing else now,
            updatedAt=now,
        )
        self._write(checklist)
        logger.info("checklist.saved id=%s items=%d", cid, len(items))
        return checklist

    # ---------------- async surface ----------------

    async def load(self, checklist_id: str) -> Optional[ChecklistDefinition]:
        return await asyncio.to_thread(self._load, checklist_id)

    async def list(self) -> List[ChecklistSummary]:
        return await asyncio.to_thread(self._list)

    async def save(
        self,
        *,
        name: str,
        description: str,
        items: List[ChecklistItemDefinition],
        checklist_id: Optional[str] = None,
    ) -> ChecklistDefinition:
        return await asyncio.to_thread(self._save, name, description, items, checklist_id)
