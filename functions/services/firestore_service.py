"""Firestore service for RoofReport.

Provides CRUD operations for stored PDF reports and user roles.
"""

from typing import Dict, Any, Optional, List
import inspect
import structlog

from firebase_admin import firestore

from config.errors import RoofReportError, ErrorCode
from config.settings import settings

logger = structlog.get_logger()


class FirestoreService:
    """Service for Firestore operations.

    Handles all database operations for report records and user roles.

    Note: Firebase Admin SDK for Python is synchronous. Methods are
    marked async for interface compatibility but operations are sync.
    """

    def __init__(self, db=None):
        """Initialize FirestoreService.

        Args:
            db: Optional Firestore client. If not provided, uses default.
        """
        self._db = db
        self.reports_collection = settings.reports_collection
        self.user_roles_collection = settings.user_roles_collection

    @property
    def db(self):
        """Get Firestore client (lazy initialization)."""
        if self._db is None:
            self._db = firestore.client()
        return self._db

    async def _maybe_await(self, result: Any) -> Any:
        """Await result if it is awaitable (supports AsyncMock in unit tests)."""
        if inspect.isawaitable(result):
            return await result
        return result

    # =========================================================================
    # Reports
    # =========================================================================

    async def add_report(self, record: Dict[str, Any]) -> str:
        """Write a new report record.

        Args:
            record: Document body; a ``createdAt`` server timestamp is added.

        Returns:
            The generated document ID.

        Raises:
            RoofReportError: If Firestore operation fails.
        """
        try:
            doc_ref = self.db.collection(self.reports_collection).document()
            await self._maybe_await(doc_ref.set({**record, "createdAt": firestore.SERVER_TIMESTAMP}))
            logger.info("report_record_added", document_id=doc_ref.id, fields=list(record.keys()))
            return doc_ref.id

        except Exception as e:
            logger.error("firestore_add_failed", collection=self.reports_collection, error=str(e))
            raise RoofReportError(
                code=ErrorCode.FIRESTORE_WRITE_FAILED,
                message=f"Failed to save report: {str(e)}",
                details={"collection": self.reports_collection}
            )

    async def get_report(self, document_id: str) -> Optional[Dict[str, Any]]:
        """Fetch report document by ID.

        Args:
            document_id: The report document ID.

        Returns:
            Report document data or None if not found.

        Raises:
            RoofReportError: If Firestore operation fails.
        """
        try:
            doc_ref = self.db.collection(self.reports_collection).document(document_id)
            doc = await self._maybe_await(doc_ref.get())

            if doc.exists:
                return {"id": doc.id, **(doc.to_dict() or {})}
            return None

        except Exception as e:
            logger.error("firestore_get_failed", document_id=document_id, error=str(e))
            raise RoofReportError(
                code=ErrorCode.FIRESTORE_ERROR,
                message=f"Failed to get report: {str(e)}",
                details={"document_id": document_id}
            )

    async def list_user_reports(
        self,
        user_id: str,
        limit: Optional[int] = None
    ) -> List[Dict[str, Any]]:
        """List a user's report records, newest first.

        Args:
            user_id: Owner user ID.
            limit: Optional maximum number of records to return.

        Returns:
            List of report documents (each includes "id").

        Raises:
            RoofReportError: If Firestore operation fails.
        """
        try:
            query = (
                self.db
                .collection(self.reports_collection)
                .where("userId", "==", user_id)
                .order_by("createdAt", direction=firestore.Query.DESCENDING)
            )
            if limit is not None:
                query = query.limit(int(limit))

            results: List[Dict[str, Any]] = []
            for doc in query.stream():
                results.append({"id": doc.id, **(doc.to_dict() or {})})
            return results

        except Exception as e:
            logger.error("firestore_list_failed", user_id=user_id, error=str(e))
            raise RoofReportError(
                code=ErrorCode.FIRESTORE_ERROR,
                message=f"Failed to list reports: {str(e)}",
                details={"user_id": user_id}
            )

    async def delete_report(self, document_id: str) -> None:
        """Delete a report record.

        Raises:
            RoofReportError: If Firestore operation fails.
        """
        try:
            doc_ref = self.db.collection(self.reports_collection).document(document_id)
            await self._maybe_await(doc_ref.delete())
            logger.info("report_record_deleted", document_id=document_id)

        except Exception as e:
            logger.error("firestore_delete_failed", document_id=document_id, error=str(e))
            raise RoofReportError(
                code=ErrorCode.FIRESTORE_ERROR,
                message=f"Failed to delete report: {str(e)}",
                details={"document_id": document_id}
            )

    # =========================================================================
    # User roles
    # =========================================================================

    async def get_user_role(self, user_id: str) -> Optional[Dict[str, Any]]:
        """Fetch the stored role record for a user, or None."""
        try:
            doc_ref = self.db.collection(self.user_roles_collection).document(user_id)
            doc = await self._maybe_await(doc_ref.get())
            if doc.exists:
                return doc.to_dict() or {}
            return None

        except Exception as e:
            logger.error("user_role_get_failed", user_id=user_id, error=str(e))
            raise RoofReportError(
                code=ErrorCode.FIRESTORE_ERROR,
                message=f"Failed to get user role: {str(e)}",
                details={"user_id": user_id}
            )

    async def set_user_role(self, user_id: str, data: Dict[str, Any]) -> None:
        """Replace the role record for a user."""
        try:
            doc_ref = self.db.collection(self.user_roles_collection).document(user_id)
            await self._maybe_await(doc_ref.set(data))
            logger.info("user_role_set", user_id=user_id, role=data.get("role"))

        except Exception as e:
            logger.error("user_role_set_failed", user_id=user_id, error=str(e))
            raise RoofReportError(
                code=ErrorCode.FIRESTORE_WRITE_FAILED,
                message=f"Failed to set user role: {str(e)}",
                details={"user_id": user_id}
            )

    async def delete_user_role(self, user_id: str) -> None:
        try:
            doc_ref = self.db.collection(self.user_roles_collection).document(user_id)
            await self._maybe_await(doc_ref.delete())
            logger.info("user_role_deleted", user_id=user_id)

        except Exception as e:
            logger.error("user_role_delete_failed", user_id=user_id, error=str(e))
            raise RoofReportError(
                code=ErrorCode.FIRESTORE_ERROR,
                message=f"Failed to delete user role: {str(e)}",
                details={"user_id": user_id}
            )
