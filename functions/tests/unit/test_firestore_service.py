"""Unit tests for Firestore service."""

import pytest
from unittest.mock import AsyncMock, MagicMock

from config.errors import ErrorCode, RoofReportError


def _doc(doc_id, data, exists=True):
    doc = MagicMock()
    doc.exists = exists
    doc.id = doc_id
    doc.to_dict.return_value = data
    return doc


class TestReports:
    """Tests for report records."""

    @pytest.mark.asyncio
    async def test_add_report(self, mock_firestore_service):
        """New records get a generated ID and a createdAt timestamp."""
        document_ref = mock_firestore_service.db.collection.return_value.document.return_value

        document_id = await mock_firestore_service.add_report({"fileName": "r.pdf", "userId": "user-1"})

        assert document_id == "report-123"
        mock_firestore_service.db.collection.assert_called_with("pdfs")
        written = document_ref.set.call_args.args[0]
        assert written["fileName"] == "r.pdf"
        assert "createdAt" in written

    @pytest.mark.asyncio
    async def test_add_report_failure(self, mock_firestore_service):
        document_ref = mock_firestore_service.db.collection.return_value.document.return_value
        document_ref.set = AsyncMock(side_effect=RuntimeError("quota exceeded"))

        with pytest.raises(RoofReportError) as exc_info:
            await mock_firestore_service.add_report({"fileName": "r.pdf"})

        assert exc_info.value.code == ErrorCode.FIRESTORE_WRITE_FAILED

    @pytest.mark.asyncio
    async def test_get_report_exists(self, mock_firestore_service):
        mock_firestore_service.db.collection.return_value.document.return_value.get = AsyncMock(
            return_value=_doc("report-123", {"fileName": "r.pdf", "userId": "user-1"})
        )

        result = await mock_firestore_service.get_report("report-123")

        assert result == {"id": "report-123", "fileName": "r.pdf", "userId": "user-1"}

    @pytest.mark.asyncio
    async def test_get_report_not_exists(self, mock_firestore_service):
        mock_firestore_service.db.collection.return_value.document.return_value.get = AsyncMock(
            return_value=_doc("missing", None, exists=False)
        )

        assert await mock_firestore_service.get_report("missing") is None

    @pytest.mark.asyncio
    async def test_get_report_failure(self, mock_firestore_service):
        mock_firestore_service.db.collection.return_value.document.return_value.get = AsyncMock(
            side_effect=RuntimeError("unavailable")
        )

        with pytest.raises(RoofReportError) as exc_info:
            await mock_firestore_service.get_report("report-123")

        assert exc_info.value.code == ErrorCode.FIRESTORE_ERROR

    @pytest.mark.asyncio
    async def test_list_user_reports(self, mock_firestore_service):
        query = mock_firestore_service.db.collection.return_value.where.return_value.order_by.return_value
        query.stream.return_value = [_doc("a", {"fileName": "a.pdf"}), _doc("b", {"fileName": "b.pdf"})]

        results = await mock_firestore_service.list_user_reports("user-1")

        assert [r["id"] for r in results] == ["a", "b"]
        mock_firestore_service.db.collection.return_value.where.assert_called_once_with("userId", "==", "user-1")

    @pytest.mark.asyncio
    async def test_list_user_reports_with_limit(self, mock_firestore_service):
        query = mock_firestore_service.db.collection.return_value.where.return_value.order_by.return_value
        query.limit.return_value.stream.return_value = []

        await mock_firestore_service.list_user_reports("user-1", limit=5)

        query.limit.assert_called_once_with(5)

    @pytest.mark.asyncio
    async def test_delete_report(self, mock_firestore_service):
        document_ref = mock_firestore_service.db.collection.return_value.document.return_value

        await mock_firestore_service.delete_report("report-123")

        document_ref.delete.assert_called_once()


class TestUserRoles:
    """Tests for role records."""

    @pytest.mark.asyncio
    async def test_set_and_get_role(self, mock_firestore_service):
        document_ref = mock_firestore_service.db.collection.return_value.document.return_value
        document_ref.get = AsyncMock(return_value=_doc("user-1", {"role": "inspector"}))

        await mock_firestore_service.set_user_role("user-1", {"role": "inspector"})
        record = await mock_firestore_service.get_user_role("user-1")

        mock_firestore_service.db.collection.assert_called_with("userRoles")
        document_ref.set.assert_called_once_with({"role": "inspector"})
        assert record == {"role": "inspector"}

    @pytest.mark.asyncio
    async def test_get_role_missing(self, mock_firestore_service):
        mock_firestore_service.db.collection.return_value.document.return_value.get = AsyncMock(
            return_value=_doc("user-1", None, exists=False)
        )

        assert await mock_firestore_service.get_user_role("user-1") is None

    @pytest.mark.asyncio
    async def test_delete_role_failure(self, mock_firestore_service):
        mock_firestore_service.db.collection.return_value.document.return_value.delete = AsyncMock(
            side_effect=RuntimeError("boom")
        )

        with pytest.raises(RoofReportError):
            await mock_firestore_service.delete_user_role("user-1")
