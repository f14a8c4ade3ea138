"""Cloud Function entry points for RoofReport.

Provides HTTP endpoints for:
- Cost estimation
- Report generation
- Report retrieval (metadata, download, inline view), listing and deletion
- Account data deletion
- User role selection
- Regional pricing lookups
"""

import asyncio
import json
from typing import Dict, Any, Optional
from datetime import datetime, date

import structlog
from firebase_functions import https_fn, options
from firebase_admin import initialize_app

from config.errors import RoofReportError, ErrorCode, ValidationError
from config.settings import settings
from models.outcome import Outcome
from services.cost_estimator import estimate, regional_insights
from services.pricing_service import PriceCache, PricingService
from services.report_pipeline import ReportOptions, ReportPipeline
from services.report_storage import ReportStorage
from services.session import RoleService, UserSession

# Initialize Firebase Admin SDK
try:
    initialize_app()
except ValueError:
    # Already initialized
    pass

settings.validate()

logger = structlog.get_logger()

# Shared across invocations on a warm instance
PRICE_CACHE = PriceCache()

# ============================================================================
# Helper Functions
# ============================================================================

# Outcome error codes that map onto a client error status
STATUS_BY_CODE = {
    ErrorCode.REPORT_NOT_FOUND: 404,
    ErrorCode.PAYLOAD_MISSING: 404,
    ErrorCode.DECODE_FAILED: 422,
    ErrorCode.NOT_AUTHENTICATED: 401,
    ErrorCode.NOT_AUTHORIZED: 403,
}


def success_response(data: Any) -> Dict[str, Any]:
    """Build success response."""
    return {"success": True, "data": data}


def error_response(code: str, message: str, details: Dict[str, Any] = None) -> Dict[str, Any]:
    """Build error response."""
    return {
        "success": False,
        "error": {
            "code": code,
            "message": message,
            "details": details or {}
        }
    }


def outcome_error_response(outcome: Outcome) -> https_fn.Response:
    """Turn a failed Outcome into an error response, keeping its user alert."""
    return _json_response(
        error_response(
            outcome.error_code or ErrorCode.FIRESTORE_ERROR,
            outcome.message or "Request failed",
            {"alert": outcome.alert} if outcome.alert else None,
        ),
        status=STATUS_BY_CODE.get(outcome.error_code, 500)
    )


def get_request_json(req: https_fn.Request) -> Dict[str, Any]:
    """Extract JSON from request body.

    Args:
        req: HTTP request object.

    Returns:
        Parsed JSON data.

    Raises:
        ValidationError: If JSON is invalid.
    """
    try:
        return req.get_json(force=True) or {}
    except Exception as e:
        raise ValidationError(
            message=f"Invalid JSON in request body: {str(e)}"
        )


def require_field(data: Dict[str, Any], field: str) -> Any:
    """Return ``data[field]`` or raise MISSING_FIELD."""
    value = data.get(field)
    if value in (None, ""):
        raise ValidationError(
            message=f"Missing {field} in request",
            field=field,
            code=ErrorCode.MISSING_FIELD
        )
    return value


def get_session(data: Dict[str, Any]) -> UserSession:
    """Build the caller's session from the request body.

    In production, this would validate the Firebase Auth token.
    For now, we accept userId and email in the request body.
    """
    return UserSession.from_request(data)


def _handle(
    req: https_fn.Request,
    action,
    event: str,
    failure_code: str = ErrorCode.FIRESTORE_ERROR
) -> https_fn.Response:
    """Run an async endpoint body with the shared error mapping."""
    if req.method == "OPTIONS":
        return _cors_response()

    try:
        data = get_request_json(req)
        return asyncio.run(action(data))
    except ValidationError as e:
        return _json_response(
            error_response(e.code, e.message, e.details),
            status=400
        )
    except RoofReportError as e:
        logger.error(f"{event}_error", error=e.message, code=e.code)
        return _json_response(
            error_response(e.code, e.message, e.details),
            status=STATUS_BY_CODE.get(e.code, 500)
        )
    except Exception as e:
        logger.exception(f"{event}_exception", error=str(e))
        return _json_response(
            error_response(
                failure_code,
                f"Request failed: {str(e)}"
            ),
            status=500
        )


# ============================================================================
# Estimation
# ============================================================================


@https_fn.on_request(
    timeout_sec=30,
    memory=options.MemoryOption.MB_256,
    region="us-central1"
)
def estimate_cost(req: https_fn.Request) -> https_fn.Response:
    """Compute a cost breakdown for the submitted project.

    Request body:
    {
        "projectInput": {"projectType": "residential", "area": 2000, ...}
    }

    Response:
    {
        "success": true,
        "data": {
            "estimate": {"materialsCost": 117300, ..., "totalCost": ...},
            "regionalInsights": {"regionMultiplier": 1.15, ...}
        }
    }
    """
    async def _estimate(data: Dict[str, Any]) -> https_fn.Response:
        project = ReportPipeline.parse_input(require_field(data, "projectInput"))
        breakdown = estimate(project)
        return _json_response(success_response({
            "estimate": breakdown.to_dict(),
            "regionalInsights": regional_insights(project.location_display),
        }))

    return _handle(req, _estimate, "estimate_cost", ErrorCode.VALIDATION_ERROR)


@https_fn.on_request(
    timeout_sec=60,
    memory=options.MemoryOption.MB_256,
    region="us-central1"
)
def get_pricing(req: https_fn.Request) -> https_fn.Response:
    """Regional material, labor and permit prices.

    Request body:
    {
        "location": "Austin, TX"
    }
    """
    async def _pricing(data: Dict[str, Any]) -> https_fn.Response:
        location = require_field(data, "location")
        prices = await PricingService(cache=PRICE_CACHE).get_prices(location)
        return _json_response(success_response(prices.to_dict()))

    return _handle(req, _pricing, "get_pricing", ErrorCode.EXTERNAL_API_ERROR)


# ============================================================================
# Report Generation
# ============================================================================


@https_fn.on_request(
    timeout_sec=300,
    memory=options.MemoryOption.GB_1,
    region="us-central1"
)
def generate_report(req: https_fn.Request) -> https_fn.Response:
    """Generate a role-specific PDF report and store it for the user.

    Request body:
    {
        "userId": "user-123",          // Optional: report is not saved without it
        "email": "pat@example.com",    // Optional
        "username": "Pat",             // Optional: used in the file name
        "projectInput": {...},
        "aiPayload": {...},            // Optional: role-specific AI content
        "analyze": false               // Optional: request AI content when no payload is given
    }

    Response:
    {
        "success": true,
        "data": {
            "fileName": "pat_roof_2024-03-01_RoofReport.pdf",
            "pdfBase64": "data:application/pdf;base64,...",
            "documentId": "abc123",
            ...
        }
    }
    """
    async def _generate(data: Dict[str, Any]) -> https_fn.Response:
        project_input = require_field(data, "projectInput")
        session = get_session(data)
        report_options = ReportOptions(
            username=data.get("username"),
            analyze=bool(data.get("analyze")),
        )

        logger.info(
            "report_request_received",
            user_id=session.user_id,
            role=project_input.get("userRole") if isinstance(project_input, dict) else None,
        )

        result = await ReportPipeline().generate_report(
            project_input,
            session=session,
            ai_payload=data.get("aiPayload"),
            options=report_options,
        )
        return _json_response(success_response(result.to_dict()))

    return _handle(req, _generate, "generate_report", ErrorCode.RENDER_FAILED)


# ============================================================================
# Retrieval
# ============================================================================


@https_fn.on_request(
    timeout_sec=30,
    memory=options.MemoryOption.MB_256,
    region="us-central1"
)
def get_report(req: https_fn.Request) -> https_fn.Response:
    """Get a stored report with its metadata.

    Request body:
    {
        "reportId": "abc123"
    }
    """
    async def _get(data: Dict[str, Any]) -> https_fn.Response:
        outcome = await ReportStorage().retrieve(require_field(data, "reportId"))
        if not outcome.ok:
            return outcome_error_response(outcome)
        return _json_response(success_response(outcome.value.model_dump(by_alias=True)))

    return _handle(req, _get, "get_report")


@https_fn.on_request(
    timeout_sec=60,
    memory=options.MemoryOption.MB_512,
    region="us-central1"
)
def download_report(req: https_fn.Request) -> https_fn.Response:
    """Download a stored report as a PDF attachment.

    Request body:
    {
        "reportId": "abc123"
    }
    """
    async def _download(data: Dict[str, Any]) -> https_fn.Response:
        storage = ReportStorage()
        outcome = await storage.retrieve(require_field(data, "reportId"))
        if not outcome.ok:
            return outcome_error_response(outcome)

        document = outcome.value
        read = storage.read_pdf(document)
        if not read.ok:
            return outcome_error_response(read)

        logger.info("report_download_served", document_id=document.id, file_size=len(read.value))
        return _pdf_response(read.value, document.file_name)

    return _handle(req, _download, "download_report")


@https_fn.on_request(
    timeout_sec=60,
    memory=options.MemoryOption.MB_512,
    region="us-central1"
)
def view_report(req: https_fn.Request) -> https_fn.Response:
    """Inline data URI of a stored report for an embedded viewer.

    Request body:
    {
        "reportId": "abc123"
    }
    """
    async def _view(data: Dict[str, Any]) -> https_fn.Response:
        storage = ReportStorage()
        outcome = await storage.retrieve(require_field(data, "reportId"))
        if not outcome.ok:
            return outcome_error_response(outcome)

        viewed = storage.view(outcome.value)
        if not viewed.ok:
            return outcome_error_response(viewed)
        return _json_response(success_response(viewed.value))

    return _handle(req, _view, "view_report")


@https_fn.on_request(
    timeout_sec=30,
    memory=options.MemoryOption.MB_256,
    region="us-central1"
)
def list_reports(req: https_fn.Request) -> https_fn.Response:
    """List a user's reports, newest first, without their PDF payloads.

    Request body:
    {
        "userId": "user-123"
    }
    """
    async def _list(data: Dict[str, Any]) -> https_fn.Response:
        outcome = await ReportStorage().list_reports(require_field(data, "userId"))
        if not outcome.ok:
            return outcome_error_response(outcome)
        return _json_response(success_response({"reports": outcome.value}))

    return _handle(req, _list, "list_reports")


@https_fn.on_request(
    timeout_sec=60,
    memory=options.MemoryOption.MB_256,
    region="us-central1"
)
def delete_report(req: https_fn.Request) -> https_fn.Response:
    """Delete a report owned by the caller.

    Request body:
    {
        "reportId": "abc123",
        "userId": "user-123"  // For authorization check
    }

    Response:
    {
        "success": true,
        "data": {"deleted": true}
    }
    """
    async def _delete(data: Dict[str, Any]) -> https_fn.Response:
        report_id = require_field(data, "reportId")
        require_field(data, "userId")
        outcome = await ReportStorage().delete_report(report_id, get_session(data))
        if not outcome.ok:
            return outcome_error_response(outcome)
        return _json_response(success_response({"deleted": True}))

    return _handle(req, _delete, "delete_report")


@https_fn.on_request(
    timeout_sec=120,
    memory=options.MemoryOption.MB_256,
    region="us-central1"
)
def delete_user_data(req: https_fn.Request) -> https_fn.Response:
    """Remove every report and the stored role of the caller (account deletion).

    Request body:
    {
        "userId": "user-123"
    }

    Response:
    {
        "success": true,
        "data": {"deletedReports": 3}
    }
    """
    async def _delete_all(data: Dict[str, Any]) -> https_fn.Response:
        require_field(data, "userId")
        session = get_session(data)
        outcome = await ReportStorage().delete_user_reports(session.user_id)
        if not outcome.ok:
            return outcome_error_response(outcome)

        await RoleService().clear_role(session)
        logger.info("user_data_deleted", user_id=session.user_id, reports=outcome.value)
        return _json_response(success_response({"deletedReports": outcome.value}))

    return _handle(req, _delete_all, "delete_user_data")


# ============================================================================
# User Roles
# ============================================================================


@https_fn.on_request(
    timeout_sec=30,
    memory=options.MemoryOption.MB_256,
    region="us-central1"
)
def set_user_role(req: https_fn.Request) -> https_fn.Response:
    """Store the caller's report audience.

    Request body:
    {
        "userId": "user-123",
        "role": "contractor",
        "subscriptionId": "sub_123",  // Optional
        "billingPeriod": "monthly"    // Optional
    }
    """
    async def _set_role(data: Dict[str, Any]) -> https_fn.Response:
        role = require_field(data, "role")
        service = RoleService()
        parsed = await service.set_role(
            get_session(data),
            role,
            subscription_id=data.get("subscriptionId"),
            billing_period=data.get("billingPeriod"),
        )
        return _json_response(success_response({
            "role": parsed.value,
            "displayName": service.display_name(parsed),
            "description": service.description(parsed),
            "features": service.features(parsed),
        }))

    return _handle(req, _set_role, "set_user_role")


CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
    "Access-Control-Max-Age": "3600"
}


def _cors_response() -> https_fn.Response:
    """Return CORS preflight response."""
    return https_fn.Response(
        "",
        status=204,
        headers=CORS_HEADERS
    )


def _json_default(o: Any):
    """JSON serializer for Firestore timestamps and other stragglers."""
    if isinstance(o, (datetime, date)):
        return o.isoformat()
    if hasattr(o, "isoformat"):
        return o.isoformat()
    return str(o)


def _json_response(data: dict, status: int = 200) -> https_fn.Response:
    """Return JSON response with CORS headers."""
    return https_fn.Response(
        json.dumps(data, default=_json_default),
        status=status,
        mimetype="application/json",
        headers=CORS_HEADERS
    )


def _pdf_response(pdf_bytes: bytes, file_name: Optional[str]) -> https_fn.Response:
    """Return a PDF attachment with CORS headers."""
    return https_fn.Response(
        pdf_bytes,
        status=200,
        mimetype="application/pdf",
        headers={
            **CORS_HEADERS,
            "Content-Disposition": f'attachment; filename="{file_name or "report.pdf"}"',
        }
    )
