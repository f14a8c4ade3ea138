"""User session context and role persistence.

The caller's identity is passed around explicitly as a ``UserSession``; the
authentication provider that issues it is outside this service.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import structlog

from config.errors import ErrorCode, RoofReportError, ValidationError
from models.project_input import UserRole
from services.firestore_service import FirestoreService

logger = structlog.get_logger()

BILLING_PERIODS = ("monthly", "yearly")

ROLE_DISPLAY_NAMES = {
    UserRole.HOMEOWNER: "🏠 Homeowner",
    UserRole.CONTRACTOR: "🧱 Contractor",
    UserRole.INSPECTOR: "🧑‍💼 Inspector",
    UserRole.INSURANCE_ADJUSTER: "💼 Insurance Adjuster",
}

ROLE_DESCRIPTIONS = {
    UserRole.HOMEOWNER: "Basic estimator with simplified interface and budget-friendly options",
    UserRole.CONTRACTOR: "Professional estimator with detailed breakdowns and bid-ready reports",
    UserRole.INSPECTOR: "Comprehensive inspection tools with damage assessment and certification",
    UserRole.INSURANCE_ADJUSTER: "Insurance-focused tools with coverage analysis and claim management",
}

ROLE_FEATURES = {
    UserRole.HOMEOWNER: [
        "Basic Estimator (fewer fields)",
        "No cost breakdowns by unit",
        "Plain-language summary",
        "Budget suggestions only",
    ],
    UserRole.CONTRACTOR: [
        "Full estimator with labor, material, permit, equipment breakdown",
        "Editable line items",
        "Downloadable bid-ready report",
    ],
    UserRole.INSPECTOR: [
        "Slope-by-slope damage input",
        "Component condition checklist",
        "Certification option",
        "Annotated photos included in report",
    ],
    UserRole.INSURANCE_ADJUSTER: [
        "Damage cause classification",
        "Coverage table (Covered / Not Covered)",
        "Claim number and metadata fields",
        "Legal certification block",
    ],
}


@dataclass(frozen=True)
class UserSession:
    """Authenticated caller context.

    Attributes:
        user_id: Firebase Auth UID; None for an anonymous caller
        email: Account email, if known
        role: Selected user role, if any
    """

    user_id: Optional[str] = None
    email: Optional[str] = None
    role: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return bool(self.user_id)

    @property
    def display_name(self) -> str:
        """Name used in file names and record metadata."""
        if self.email:
            return self.email.split("@", 1)[0]
        return self.user_id or "anonymous"

    @classmethod
    def from_request(cls, data: Dict[str, Any]) -> "UserSession":
        """Build a session from request fields (``userId``/``email``/``role``)."""
        return cls(
            user_id=data.get("userId") or data.get("user_id"),
            email=data.get("email"),
            role=data.get("role") or data.get("userRole"),
        )


def parse_role(role: Any) -> UserRole:
    """Convert a role name to ``UserRole``.

    Raises:
        ValidationError: If the name is not a known role.
    """
    try:
        return UserRole(str(role).strip().lower())
    except ValueError:
        raise ValidationError(
            message=f"Unknown user role: {role}",
            field="role",
            code=ErrorCode.UNKNOWN_ROLE,
        )


class RoleService:
    """Persists the selected role per user in the ``userRoles`` collection."""

    def __init__(self, firestore_service: Optional[FirestoreService] = None):
        self.firestore = firestore_service or FirestoreService()

    @staticmethod
    def _require_user(session: Optional[UserSession]) -> str:
        if session is None or not session.is_authenticated:
            raise RoofReportError(
                code=ErrorCode.NOT_AUTHENTICATED,
                message="No authenticated user",
            )
        return session.user_id

    async def set_role(
        self,
        session: UserSession,
        role: Any,
        subscription_id: Optional[str] = None,
        billing_period: Optional[str] = None,
    ) -> UserRole:
        user_id = self._require_user(session)
        parsed = parse_role(role)
        if billing_period is not None and billing_period not in BILLING_PERIODS:
            raise ValidationError(
                message=f"Unknown billing period: {billing_period}",
                field="billingPeriod",
                code=ErrorCode.INVALID_FIELD,
            )

        data: Dict[str, Any] = {
            "role": parsed.value,
            "lastUpdated": datetime.now(timezone.utc).isoformat(),
        }
        if subscription_id:
            data["subscriptionId"] = subscription_id
        if billing_period:
            data["billingPeriod"] = billing_period

        await self.firestore.set_user_role(user_id, data)
        return parsed

    async def get_role(self, session: Optional[UserSession]) -> Optional[UserRole]:
        """Stored role for the session's user; None when anonymous or unset."""
        if session is None or not session.is_authenticated:
            return None
        try:
            record = await self.firestore.get_user_role(session.user_id)
        except RoofReportError as e:
            logger.warning("user_role_lookup_failed", user_id=session.user_id, error=e.message)
            return None
        if not record or not record.get("role"):
            return None
        try:
            return UserRole(record["role"])
        except ValueError:
            logger.warning("user_role_unrecognized", user_id=session.user_id, role=record.get("role"))
            return None

    async def clear_role(self, session: Optional[UserSession]) -> None:
        if session is None or not session.is_authenticated:
            return
        try:
            await self.firestore.delete_user_role(session.user_id)
        except RoofReportError as e:
            logger.warning("user_role_clear_failed", user_id=session.user_id, error=e.message)

    @staticmethod
    def display_name(role: Any) -> str:
        return ROLE_DISPLAY_NAMES[parse_role(role)]

    @staticmethod
    def description(role: Any) -> str:
        return ROLE_DESCRIPTIONS[parse_role(role)]

    @staticmethod
    def features(role: Any) -> List[str]:
        return list(ROLE_FEATURES[parse_role(role)])
