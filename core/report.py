# core/report.py
from datetime import datetime, timezone
from typing import Optional, Sequence
from model.checklist import ChecklistDefinition
from model.verification import VerificationReport, VerificationResult, VerificationSummary


def summarize(results: Sequence[VerificationResult]) -> VerificationSummary:
    """
    passed + failed == total == len(results). An empty run reports a 0.0
    success rate rather than dividing by zero.
    """
    total = len(results)
    passed = sum(1 for r in results if r.status == "verified")
    rate = round(passed / total * 100, 2) if total else 0.0
    return VerificationSummary(
        total=total, passed=passed, failed=total - passed, successRate=rate
    )


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def build_report(
    *,
    filename: str,
    document_path: Optional[str],
    checklist: ChecklistDefinition,
    results: Sequence[VerificationResult],
) -> VerificationReport:
    now = _now_iso()
    return VerificationReport(
        documentName=filename,
        documentPath=document_path,
        uploadDate=now,
        processingDate=now,
        results=list(results),
        summary=summarize(results),
        checklistId=checklist.id,
        checklistName=checklist.name,
        checklistDescription=checklist.description,
        checklistCreatedAt=checklist.createdAt,
    )
