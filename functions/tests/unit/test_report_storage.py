"""Unit tests for report persistence and retrieval."""

import base64

import pytest

from config.errors import ErrorCode, RoofReportError, StorageError
from models.persisted_document import PersistedDocument, RenderedDocument
from services.report_storage import (
    ALERT_DELETE_FAILED,
    ALERT_DOWNLOAD_FAILED,
    ALERT_NOT_AVAILABLE,
    ALERT_VIEW_FAILED,
    UNSET,
    ReportStorage,
    decode_pdf,
    encode_pdf,
    format_file_size,
    strip_unset,
)

PDF_BYTES = b"%PDF-1.4\n%fake\n"


@pytest.fixture
def document():
    return RenderedDocument(
        pdf_bytes=PDF_BYTES,
        page_count=3,
        generated_at="2024-03-01T09:30:00",
        file_name="pat_maple_street_roof_2024-03-01_RoofReport.pdf",
        role="homeowner",
    )


@pytest.fixture
def storage(fake_firestore_service):
    return ReportStorage(firestore_service=fake_firestore_service)


def _stored(**overrides):
    record = {
        "id": "report-123",
        "fileName": "report.pdf",
        "pdfBase64": encode_pdf(PDF_BYTES),
        "fileSize": len(PDF_BYTES),
        "generatedAt": "2024-03-01T09:30:00",
        "userId": "user-1",
        "projectType": "residential",
        "project": {"name": "Maple Street Roof"},
        "estimate": {"totalCost": 196388},
    }
    record.update(overrides)
    return record


class TestSave:

    @pytest.mark.asyncio
    async def test_anonymous_save_is_skipped(self, storage, document, anonymous_session, fake_firestore_service):
        outcome = await storage.save(document, {"projectType": "residential"}, anonymous_session)

        assert outcome.ok
        assert outcome.value is None
        assert outcome.warnings == ["skipped: no authenticated user"]
        fake_firestore_service.add_report.assert_not_called()

    @pytest.mark.asyncio
    async def test_save_writes_record(self, storage, document, signed_in_session, fake_firestore_service):
        metadata = {"projectType": "residential", "geminiResponse": UNSET, "estimate": None}

        outcome = await storage.save(document, metadata, signed_in_session)

        assert outcome.ok
        assert outcome.value == "report-123"
        record = fake_firestore_service.add_report.call_args.args[0]
        assert record["userId"] == "user-1"
        assert record["fileSize"] == len(PDF_BYTES)
        assert record["pdfBase64"].startswith("data:application/pdf;base64,")
        assert "geminiResponse" not in record
        assert record["estimate"] is None

    @pytest.mark.asyncio
    async def test_store_failure_is_an_outcome(self, storage, document, signed_in_session, fake_firestore_service):
        fake_firestore_service.add_report.side_effect = RoofReportError(
            code=ErrorCode.FIRESTORE_ERROR, message="unavailable"
        )

        outcome = await storage.save(document, {}, signed_in_session)

        assert not outcome.ok
        assert outcome.error_code == ErrorCode.FIRESTORE_ERROR


class TestRetrieve:

    @pytest.mark.asyncio
    async def test_retrieve(self, storage, fake_firestore_service):
        fake_firestore_service.get_report.return_value = _stored()

        outcome = await storage.retrieve("report-123")

        assert outcome.ok
        assert outcome.value.owner_id == "user-1"
        assert outcome.value.metadata["projectType"] == "residential"
        assert storage.decode(outcome.value) == PDF_BYTES

    @pytest.mark.asyncio
    async def test_nested_payload_fallback(self, storage, fake_firestore_service):
        record = _stored(pdf={"pdfBase64": encode_pdf(PDF_BYTES), "fileName": "nested.pdf"})
        del record["pdfBase64"]
        del record["fileName"]
        fake_firestore_service.get_report.return_value = record

        outcome = await storage.retrieve("report-123")

        assert outcome.ok
        assert outcome.value.file_name == "nested.pdf"
        assert storage.decode(outcome.value) == PDF_BYTES

    @pytest.mark.asyncio
    async def test_missing_record(self, storage):
        outcome = await storage.retrieve("nope")

        assert outcome.error_code == ErrorCode.REPORT_NOT_FOUND
        assert outcome.alert == ALERT_NOT_AVAILABLE

    @pytest.mark.asyncio
    async def test_record_without_payload(self, storage, fake_firestore_service):
        record = _stored()
        del record["pdfBase64"]
        fake_firestore_service.get_report.return_value = record

        outcome = await storage.retrieve("report-123")

        assert outcome.error_code == ErrorCode.REPORT_NOT_FOUND
        assert outcome.alert == ALERT_NOT_AVAILABLE


class TestViewAndDownload:

    def test_view(self, storage):
        doc = PersistedDocument(id="r1", fileName="r.pdf", pdfBase64=encode_pdf(PDF_BYTES))

        outcome = storage.view(doc)

        assert outcome.ok
        assert outcome.value["contentType"] == "application/pdf"
        assert outcome.value["fileSize"] == len(PDF_BYTES)

    def test_view_corrupt_payload(self, storage):
        doc = PersistedDocument(id="r1", pdfBase64="%%%not-base64")

        outcome = storage.view(doc)

        assert outcome.error_code == ErrorCode.DECODE_FAILED
        assert outcome.alert == ALERT_VIEW_FAILED

    def test_download_writes_file(self, storage, tmp_path):
        doc = PersistedDocument(id="r1", fileName="../escape.pdf", pdfBase64=encode_pdf(PDF_BYTES))

        outcome = storage.download(doc, tmp_path / "out")

        assert outcome.ok
        assert outcome.value == tmp_path / "out" / "escape.pdf"
        assert outcome.value.read_bytes() == PDF_BYTES

    def test_download_empty_payload(self, storage, tmp_path):
        outcome = storage.download(PersistedDocument(id="r1"), tmp_path)

        assert outcome.error_code == ErrorCode.PAYLOAD_MISSING
        assert outcome.alert == ALERT_NOT_AVAILABLE

    def test_download_corrupt_payload(self, storage, tmp_path):
        outcome = storage.download(PersistedDocument(id="r1", pdfBase64="data:text/plain,abc"), tmp_path)

        assert outcome.error_code == ErrorCode.DECODE_FAILED
        assert outcome.alert == ALERT_DOWNLOAD_FAILED

    def test_read_pdf(self, storage):
        outcome = storage.read_pdf(PersistedDocument(id="r1", pdfBase64=encode_pdf(PDF_BYTES)))

        assert outcome.ok
        assert outcome.value == PDF_BYTES

    def test_read_pdf_corrupt_payload(self, storage):
        outcome = storage.read_pdf(PersistedDocument(id="r1", pdfBase64="%%%"))

        assert not outcome.ok
        assert outcome.alert == ALERT_DOWNLOAD_FAILED


class TestListAndDelete:

    @pytest.mark.asyncio
    async def test_list_reports(self, storage, fake_firestore_service):
        fake_firestore_service.list_user_reports.return_value = [_stored(fileSize=1536)]

        outcome = await storage.list_reports("user-1")

        assert outcome.ok
        summary = outcome.value[0]
        assert summary["projectName"] == "Maple Street Roof"
        assert summary["totalCost"] == 196388
        assert summary["fileSizeLabel"] == "1.5 KB"
        assert "pdfBase64" not in summary

    @pytest.mark.asyncio
    async def test_delete_own_report(self, storage, signed_in_session, fake_firestore_service):
        fake_firestore_service.get_report.return_value = _stored()

        outcome = await storage.delete_report("report-123", signed_in_session)

        assert outcome.ok
        fake_firestore_service.delete_report.assert_awaited_once_with("report-123")

    @pytest.mark.asyncio
    async def test_delete_other_users_report(self, storage, signed_in_session, fake_firestore_service):
        fake_firestore_service.get_report.return_value = _stored(userId="someone-else")

        outcome = await storage.delete_report("report-123", signed_in_session)

        assert outcome.error_code == ErrorCode.NOT_AUTHORIZED
        assert outcome.alert == ALERT_DELETE_FAILED
        fake_firestore_service.delete_report.assert_not_called()

    @pytest.mark.asyncio
    async def test_delete_requires_session(self, storage, anonymous_session):
        outcome = await storage.delete_report("report-123", anonymous_session)

        assert outcome.error_code == ErrorCode.NOT_AUTHENTICATED

    @pytest.mark.asyncio
    async def test_delete_user_reports(self, storage, fake_firestore_service):
        fake_firestore_service.list_user_reports.return_value = [_stored(id="a"), _stored(id="b")]

        outcome = await storage.delete_user_reports("user-1")

        assert outcome.value == 2
        assert fake_firestore_service.delete_report.await_count == 2


class TestCodec:

    def test_encode_decode(self):
        assert decode_pdf(encode_pdf(PDF_BYTES)) == PDF_BYTES

    def test_decode_bare_base64(self):
        assert decode_pdf(base64.b64encode(PDF_BYTES).decode("ascii")) == PDF_BYTES

    @pytest.mark.parametrize("payload,code", [
        ("", ErrorCode.PAYLOAD_MISSING),
        ("   ", ErrorCode.PAYLOAD_MISSING),
        ("!!!", ErrorCode.DECODE_FAILED),
        ("data:application/pdf,abc", ErrorCode.DECODE_FAILED),
    ])
    def test_decode_errors(self, payload, code):
        with pytest.raises(StorageError) as exc_info:
            decode_pdf(payload)

        assert exc_info.value.code == code

    @pytest.mark.parametrize("size,expected", [
        (0, "0 Bytes"),
        (512, "512 Bytes"),
        (1024, "1 KB"),
        (1536, "1.5 KB"),
        (2 * 1024 * 1024, "2 MB"),
    ])
    def test_format_file_size(self, size, expected):
        assert format_file_size(size) == expected

    def test_strip_unset(self):
        value = {"a": UNSET, "b": None, "c": {"d": UNSET, "e": 1}, "f": [1, UNSET, 2]}

        assert strip_unset(value) == {"b": None, "c": {"e": 1}, "f": [1, 2]}
