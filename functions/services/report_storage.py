"""Persistence and retrieval of rendered reports.

Reports are stored in the ``pdfs`` collection as base64 data URIs alongside
their structured metadata. Every operation here reports problems through an
``Outcome`` instead of raising: failing to persist a report must never keep
the user from the document they just generated, and a broken record must
surface as a user-facing alert rather than a crash.
"""

import base64
import binascii
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import structlog

from config.errors import ErrorCode, RoofReportError, StorageError
from models.outcome import Outcome
from models.persisted_document import PersistedDocument, RenderedDocument
from services.firestore_service import FirestoreService
from services.session import UserSession

logger = structlog.get_logger()

PDF_MIME = "application/pdf"
DATA_URI_PREFIX = f"data:{PDF_MIME};base64,"

ALERT_NOT_AVAILABLE = "PDF not available for this report."
ALERT_VIEW_FAILED = "Unable to view PDF. Please try downloading instead."
ALERT_DOWNLOAD_FAILED = "Unable to download PDF. Please try again."
ALERT_DELETE_FAILED = "Failed to delete report. Please try again."
ALERT_LOAD_FAILED = "Unable to load this report. Please try again."

# Record keys that map onto PersistedDocument fields rather than metadata
DOCUMENT_KEYS = {"id", "fileName", "pdfBase64", "fileSize", "generatedAt", "userId", "pdf"}


class _Unset:
    """Marker for a value that was never provided, as opposed to an explicit None."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET = _Unset()


def strip_unset(value: Any) -> Any:
    """Recursively drop UNSET values.

    Mapping entries whose value is (or strips down to) UNSET are omitted and
    UNSET list items are removed. None is kept as an explicit null.
    """
    if value is UNSET:
        return UNSET
    if isinstance(value, dict):
        cleaned = {}
        for key, item in value.items():
            stripped = strip_unset(item)
            if stripped is not UNSET:
                cleaned[key] = stripped
        return cleaned
    if isinstance(value, (list, tuple)):
        return [stripped for stripped in (strip_unset(item) for item in value) if stripped is not UNSET]
    return value


def encode_pdf(pdf_bytes: bytes) -> str:
    """Encode PDF bytes as a base64 data URI."""
    return DATA_URI_PREFIX + base64.b64encode(pdf_bytes).decode("ascii")


def decode_pdf(payload: str) -> bytes:
    """Decode a base64 payload, with or without a ``data:...;base64,`` prefix.

    Raises:
        StorageError: If the payload is empty or not valid base64.
    """
    if not payload or not payload.strip():
        raise StorageError(code=ErrorCode.PAYLOAD_MISSING, message="PDF payload is empty")
    body = payload.strip()
    if body.startswith("data:"):
        header, sep, rest = body.partition(",")
        if not sep or not header.endswith(";base64"):
            raise StorageError(code=ErrorCode.DECODE_FAILED, message="Malformed data URI")
        body = rest
    try:
        return base64.b64decode(body, validate=True)
    except (binascii.Error, ValueError) as e:
        raise StorageError(code=ErrorCode.DECODE_FAILED, message=f"Invalid base64 payload: {e}")


def format_file_size(size: int) -> str:
    """Human readable size: ``0 Bytes``, ``512 Bytes``, ``1.5 KB``, ``2 MB``."""
    if size <= 0:
        return "0 Bytes"
    units = ["Bytes", "KB", "MB"]
    index = 0
    while index < len(units) - 1 and size >= 1024 ** (index + 1):
        index += 1
    value = round(size / (1024 ** index), 2)
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return f"{text} {units[index]}"


def _to_document(record: Dict[str, Any]) -> PersistedDocument:
    """Map a stored record onto PersistedDocument, honouring the nested ``pdf`` layout."""
    nested = record.get("pdf") if isinstance(record.get("pdf"), dict) else {}
    payload = record.get("pdfBase64") or nested.get("pdfBase64") or ""
    if not record.get("pdfBase64") and nested.get("pdfBase64"):
        logger.info("report_payload_nested_fallback", document_id=record.get("id"))

    metadata = {key: value for key, value in record.items() if key not in DOCUMENT_KEYS}
    for key in ("projectType", "uploadedBy"):
        if key not in metadata and key in nested:
            metadata[key] = nested[key]

    return PersistedDocument(
        id=str(record.get("id", "")),
        file_name=record.get("fileName") or nested.get("fileName") or "report.pdf",
        pdf_base64=payload,
        file_size=record.get("fileSize") or nested.get("fileSize") or 0,
        generated_at=record.get("generatedAt") or nested.get("generatedAt"),
        owner_id=record.get("userId"),
        metadata=metadata,
    )


class ReportStorage:
    """Bridge between rendered documents and the ``pdfs`` collection.

    Usage:
        storage = ReportStorage()
        outcome = await storage.save(document, metadata, session)
        fetched = await storage.retrieve(outcome.value)
    """

    def __init__(self, firestore_service: Optional[FirestoreService] = None):
        self.firestore = firestore_service or FirestoreService()

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    async def save(
        self,
        document: RenderedDocument,
        metadata: Dict[str, Any],
        session: Optional[UserSession],
    ) -> Outcome[str]:
        """Store a rendered document. Returns the new document ID.

        Without an authenticated owner nothing is written and the outcome is
        still successful, with ``value=None`` and a ``skipped`` warning.
        """
        if session is None or not session.is_authenticated:
            logger.info("report_save_skipped", reason="no_authenticated_user", file_name=document.file_name)
            return Outcome.success(None, warnings=["skipped: no authenticated user"])

        record = strip_unset({
            **metadata,
            "fileName": document.file_name,
            "fileSize": document.file_size,
            "pdfBase64": encode_pdf(document.pdf_bytes),
            "generatedAt": document.generated_at,
            "userId": session.user_id,
        })

        try:
            document_id = await self.firestore.add_report(record)
        except RoofReportError as e:
            logger.error("report_save_failed", user_id=session.user_id, code=e.code, error=e.message)
            return Outcome.failure(e.code, e.message)

        logger.info(
            "report_saved",
            document_id=document_id,
            user_id=session.user_id,
            file_size_kb=round(document.file_size / 1024, 2),
        )
        return Outcome.success(document_id)

    # ------------------------------------------------------------------
    # Retrieval
    # ------------------------------------------------------------------

    async def retrieve(self, document_id: str) -> Outcome[PersistedDocument]:
        """Fetch a stored report by ID."""
        try:
            record = await self.firestore.get_report(document_id)
        except RoofReportError as e:
            logger.error("report_retrieve_failed", document_id=document_id, error=e.message)
            return Outcome.failure(e.code, e.message, alert=ALERT_LOAD_FAILED)

        if record is None:
            logger.warning("report_not_found", document_id=document_id)
            return Outcome.failure(
                ErrorCode.REPORT_NOT_FOUND,
                f"Report {document_id} not found",
                alert=ALERT_NOT_AVAILABLE,
            )

        document = _to_document(record)
        if not document.has_payload:
            logger.warning("report_payload_missing", document_id=document_id)
            return Outcome.failure(
                ErrorCode.REPORT_NOT_FOUND,
                f"Report {document_id} has no PDF payload",
                alert=ALERT_NOT_AVAILABLE,
            )
        return Outcome.success(document)

    def decode(self, document: PersistedDocument) -> bytes:
        """Decode the stored payload into PDF bytes.

        Raises:
            StorageError: If the payload is missing or not valid base64.
        """
        return decode_pdf(document.pdf_base64)

    def read_pdf(self, document: PersistedDocument) -> Outcome[bytes]:
        """Decoded PDF bytes for a download, or a failure carrying a user alert."""
        try:
            pdf_bytes = self.decode(document)
        except StorageError as e:
            logger.warning("report_download_failed", document_id=document.id, code=e.code, error=e.message)
            alert = ALERT_NOT_AVAILABLE if e.code == ErrorCode.PAYLOAD_MISSING else ALERT_DOWNLOAD_FAILED
            return Outcome.failure(e.code, e.message, alert=alert)
        return Outcome.success(pdf_bytes)

    def download(self, document: PersistedDocument, directory: Union[str, Path]) -> Outcome[Path]:
        """Write the decoded PDF into ``directory`` under its stored file name."""
        read = self.read_pdf(document)
        if not read.ok:
            return Outcome.failure(read.error_code, read.message, alert=read.alert)

        target_dir = Path(directory)
        target_dir.mkdir(parents=True, exist_ok=True)
        path = target_dir / Path(document.file_name).name
        path.write_bytes(read.value)
        logger.info("report_downloaded", document_id=document.id, path=str(path), file_size=len(read.value))
        return Outcome.success(path)

    def view(self, document: PersistedDocument) -> Outcome[Dict[str, Any]]:
        """Inline payload for a PDF viewer."""
        try:
            pdf_bytes = self.decode(document)
        except StorageError as e:
            logger.warning("report_view_failed", document_id=document.id, code=e.code, error=e.message)
            alert = ALERT_NOT_AVAILABLE if e.code == ErrorCode.PAYLOAD_MISSING else ALERT_VIEW_FAILED
            return Outcome.failure(e.code, e.message, alert=alert)

        return Outcome.success({
            "fileName": document.file_name,
            "contentType": PDF_MIME,
            "dataUri": encode_pdf(pdf_bytes),
            "fileSize": len(pdf_bytes),
            "fileSizeLabel": format_file_size(len(pdf_bytes)),
        })

    # ------------------------------------------------------------------
    # Listing and deletion
    # ------------------------------------------------------------------

    async def list_reports(self, user_id: str) -> Outcome[List[Dict[str, Any]]]:
        """Summaries of a user's reports, newest first, without payloads."""
        try:
            records = await self.firestore.list_user_reports(user_id)
        except RoofReportError as e:
            logger.error("report_list_failed", user_id=user_id, error=e.message)
            return Outcome.failure(e.code, e.message, alert=ALERT_LOAD_FAILED)

        summaries = []
        for record in records:
            summary = _to_document(record).summary()
            summary["fileSizeLabel"] = format_file_size(summary["fileSize"] or 0)
            summaries.append(summary)
        return Outcome.success(summaries)

    async def delete_report(self, document_id: str, session: Optional[UserSession]) -> Outcome[None]:
        """Delete one report owned by the session's user."""
        if session is None or not session.is_authenticated:
            return Outcome.failure(ErrorCode.NOT_AUTHENTICATED, "No authenticated user", alert=ALERT_DELETE_FAILED)

        try:
            record = await self.firestore.get_report(document_id)
            if record is None:
                return Outcome.failure(
                    ErrorCode.REPORT_NOT_FOUND,
                    f"Report {document_id} not found",
                    alert=ALERT_NOT_AVAILABLE,
                )
            if record.get("userId") != session.user_id:
                logger.warning("report_delete_forbidden", document_id=document_id, user_id=session.user_id)
                return Outcome.failure(
                    ErrorCode.NOT_AUTHORIZED,
                    "Report belongs to another user",
                    alert=ALERT_DELETE_FAILED,
                )
            await self.firestore.delete_report(document_id)
        except RoofReportError as e:
            logger.error("report_delete_failed", document_id=document_id, error=e.message)
            return Outcome.failure(e.code, e.message, alert=ALERT_DELETE_FAILED)

        return Outcome.success(None)

    async def delete_user_reports(self, user_id: str) -> Outcome[int]:
        """Delete every report a user owns (account deletion). Returns the count removed."""
        try:
            records = await self.firestore.list_user_reports(user_id)
            for record in records:
                await self.firestore.delete_report(record["id"])
        except RoofReportError as e:
            logger.error("user_reports_delete_failed", user_id=user_id, error=e.message)
            return Outcome.failure(e.code, e.message)

        logger.info("user_reports_deleted", user_id=user_id, count=len(records))
        return Outcome.success(len(records))
