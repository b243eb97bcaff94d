from unittest.mock import AsyncMock

import pytest

from core.dispatcher import VerificationDispatcher
from core.document_text import load_document_text
from core.streaming import parse_sse
from model.api import CompleteEvent, ResultEvent
from model.checklist import ChecklistDefinition
from repository.upload_repository import UploadRepository
from service.verification_service import VerificationService
from util.errors import AppError, ChecklistLoadError


def _repo(checklist=None, error=None):
    repo = AsyncMock()
    if error is not None:
        repo.load.side_effect = error
    else:
        repo.load.return_value = checklist
    return repo


@pytest.fixture
def uploads(tmp_path):
    """Upload store rooted where `document_file` lives."""
    return UploadRepository(str(tmp_path))


def _service(repo, config, uploads, **kw):
    return VerificationService(repo, VerificationDispatcher(config), 5, uploads, **kw)


class TestValidate:

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "filename,path,cid",
        [(None, "p", "c"), ("f", None, "c"), ("f", "p", None), ("", "p", "c")],
    )
    async def test_missing_parameters(self, simulated_config, uploads, filename, path, cid):
        service = _service(_repo(), simulated_config, uploads)
        with pytest.raises(AppError) as exc:
            await service.validate(filename, path, cid, None)
        assert exc.value.code == "MISSING_PARAMETERS"
        assert exc.value.status_code == 400

    @pytest.mark.asyncio
    async def test_token_checked_before_document(self, simulated_config, uploads, tmp_path):
        service = _service(_repo(), simulated_config, uploads)
        with pytest.raises(AppError) as exc:
            await service.validate("f", str(tmp_path / "missing.pdf"), "c", None)
        assert exc.value.code == "UNAUTHORIZED"
        assert exc.value.status_code == 401

    @pytest.mark.asyncio
    async def test_document_checked_before_checklist(self, simulated_config, uploads, tmp_path):
        repo = _repo(error=ChecklistLoadError("bad"))
        service = _service(repo, simulated_config, uploads)
        with pytest.raises(AppError) as exc:
            await service.validate("f", str(tmp_path / "missing.pdf"), "c", "tok")
        assert exc.value.code == "DOCUMENT_NOT_FOUND"
        assert exc.value.status_code == 404
        repo.load.assert_not_called()

    @pytest.mark.asyncio
    async def test_checklist_load_error(self, simulated_config, uploads, document_file):
        service = _service(_repo(error=ChecklistLoadError("bad")), simulated_config, uploads)
        with pytest.raises(AppError) as exc:
            await service.validate("f", str(document_file), "c", "tok")
        assert exc.value.code == "CHECKLIST_LOAD_ERROR"
        assert exc.value.status_code == 500

    @pytest.mark.asyncio
    async def test_checklist_not_found(self, simulated_config, uploads, document_file):
        service = _service(_repo(None), simulated_config, uploads)
        with pytest.raises(AppError) as exc:
            await service.validate("f", str(document_file), "ghost", "tok")
        assert exc.value.code == "CHECKLIST_NOT_FOUND"
        assert exc.value.detail == "Checklist not found: ghost"

    @pytest.mark.asyncio
    async def test_checklist_empty(self, simulated_config, uploads, document_file):
        empty = ChecklistDefinition(id="empty", name="Empty")
        service = _service(_repo(empty), simulated_config, uploads)
        with pytest.raises(AppError) as exc:
            await service.validate("f", str(document_file), "empty", "tok")
        assert exc.value.code == "CHECKLIST_EMPTY"
        assert exc.value.status_code == 400
        assert exc.value.detail == "Checklist has no items: empty"

    @pytest.mark.asyncio
    async def test_valid_request(self, simulated_config, uploads, document_file, checklist):
        service = _service(_repo(checklist), simulated_config, uploads)
        req = await service.validate("resume.docx", str(document_file), checklist.id, "tok")
        assert req.checklist == checklist
        assert req.token == "tok"


class TestDocumentConfinement:

    @pytest.fixture
    def outside_file(self, tmp_path_factory):
        path = tmp_path_factory.mktemp("elsewhere") / "secrets.env"
        path.write_text("API_KEY=hunter2 phone email address", encoding="utf-8")
        return path

    @pytest.mark.asyncio
    async def test_file_outside_upload_store_is_not_found(
        self, simulated_config, uploads, checklist, outside_file
    ):
        repo = _repo(checklist)
        service = _service(repo, simulated_config, uploads)
        with pytest.raises(AppError) as exc:
            await service.validate("x.docx", str(outside_file), checklist.id, "tok")
        assert exc.value.code == "DOCUMENT_NOT_FOUND"
        assert exc.value.status_code == 404
        repo.load.assert_not_called()

    @pytest.mark.asyncio
    async def test_outside_file_never_reaches_the_verifier(
        self, simulated_config, uploads, checklist, outside_file
    ):
        seen = []

        async def loader(path):
            seen.append(path)
            return await load_document_text(path)

        service = _service(_repo(checklist), simulated_config, uploads, load_text=loader)
        with pytest.raises(AppError):
            await service.process("x.docx", str(outside_file), checklist.id, "tok")
        assert seen == []
        assert not (outside_file.parent / "secrets.env.txt").exists()

    @pytest.mark.asyncio
    async def test_dot_dot_escape_is_rejected(self, simulated_config, uploads, tmp_path, checklist, outside_file):
        escaped = tmp_path / ".." / outside_file.parent.name / outside_file.name
        service = _service(_repo(checklist), simulated_config, uploads)
        with pytest.raises(AppError) as exc:
            await service.validate("x.docx", str(escaped), checklist.id, "tok")
        assert exc.value.code == "DOCUMENT_NOT_FOUND"

    def test_contains(self, uploads, tmp_path, document_file, outside_file):
        assert uploads.contains(str(document_file))
        assert uploads.contains(str(tmp_path / "sub" / ".." / document_file.name))
        assert not uploads.contains(str(outside_file))
        assert not uploads.contains("/etc/passwd")


class TestProcess:

    @pytest.mark.asyncio
    async def test_report_for_three_items(self, simulated_config, uploads, document_file, checklist):
        service = _service(_repo(checklist), simulated_config, uploads)
        report = await service.process("resume.docx", str(document_file), checklist.id, "tok")

        assert [r.status for r in report.results] == ["verified", "verified", "failed"]
        assert report.summary.total == 3
        assert report.summary.passed == 2
        assert report.summary.successRate == 66.67
        assert report.documentName == "resume.docx"
        assert report.checklistName == "Resume Basics"

    @pytest.mark.asyncio
    async def test_validation_error_propagates(self, simulated_config, uploads, checklist):
        service = _service(_repo(checklist), simulated_config, uploads)
        with pytest.raises(AppError) as exc:
            await service.process(None, None, None, "tok")
        assert exc.value.code == "MISSING_PARAMETERS"

    @pytest.mark.asyncio
    async def test_orchestration_failure_is_processing_error(
        self, simulated_config, uploads, document_file, checklist
    ):
        async def broken_loader(path):
            raise RuntimeError("disk unavailable")

        service = _service(_repo(checklist), simulated_config, uploads, load_text=broken_loader)
        with pytest.raises(AppError) as exc:
            await service.process("f", str(document_file), checklist.id, "tok")
        assert exc.value.code == "PROCESSING_ERROR"
        assert exc.value.status_code == 500
        assert exc.value.extra == "disk unavailable"

    @pytest.mark.asyncio
    async def test_empty_document_still_reports(self, simulated_config, uploads, tmp_path, checklist):
        path = tmp_path / "blank.pdf"
        path.write_bytes(b"%PDF-1.4")

        def no_text(p, mime):
            raise ValueError("no text layer")

        async def loader(p):
            return await load_document_text(p, extractor=no_text)

        service = _service(_repo(checklist), simulated_config, uploads, load_text=loader)
        report = await service.process("blank.pdf", str(path), checklist.id, "tok")
        assert report.summary.passed == 0
        assert report.summary.failed == 3


class TestStream:

    @pytest.mark.asyncio
    async def test_stream_bytes(self, simulated_config, uploads, document_file, checklist):
        service = _service(_repo(checklist), simulated_config, uploads)
        req = await service.validate("resume.docx", str(document_file), checklist.id, "tok")
        body = b"".join([chunk async for chunk in service.stream(req)]).decode()

        events = parse_sse(body)
        results = [e.data for e in events if isinstance(e, ResultEvent)]
        assert {r.itemId: r.status for r in results} == {1: "verified", 2: "verified", 3: "failed"}
        assert isinstance(events[-1], CompleteEvent)
