"""Shared machinery for the role-specific report assemblers.

Each assembler builds a fallback tree from the project input, layers the AI
payload over it once with ``merge_with_defaults`` and validates the result
into that role's report model. Assemblers never raise: a payload that cannot
be used is dropped in favour of the form-derived fallback and the decision is
recorded in the report's ``warnings``.
"""

import re
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

import structlog
from pydantic import ValidationError as PydanticValidationError

from config.settings import settings
from models.cost_breakdown import CostBreakdown
from models.project_input import ProjectInput
from models.reports import KeyValueRow, PhotoEntry, ReportBase
from services.cost_estimator import round_half_up
from services.localization import Localizer

logger = structlog.get_logger()

NOT_SPECIFIED = "Not specified"
NOT_PROVIDED = "Not provided"
SENTINELS = (NOT_SPECIFIED, NOT_PROVIDED)


# =============================================================================
# MERGE AND COERCION
# =============================================================================


def merge_with_defaults(primary: Any, fallback: Any) -> Any:
    """Layer ``primary`` over ``fallback``.

    Dicts merge key by key, recursively. A primary value wins whenever it is
    present (not None). Lists and scalars from the primary replace the
    fallback wholesale. Where the fallback is a dict the primary must be a
    dict too, otherwise the fallback is kept, so a malformed payload section
    cannot replace a structured default with a scalar.
    """
    if primary is None:
        return fallback
    if isinstance(fallback, dict):
        if not isinstance(primary, dict):
            return fallback
        merged = dict(fallback)
        for key, value in primary.items():
            merged[key] = merge_with_defaults(value, fallback.get(key))
        return merged
    return primary


def coerce_value(value: Any, default: str = NOT_SPECIFIED) -> Any:
    """Coerce a merged value into renderer-safe leaves.

    Strings stay, numbers and booleans become strings, lists become lists of
    strings with blank entries dropped, dicts are coerced recursively and any
    remaining None becomes ``default``.
    """
    if value is None:
        return default
    if isinstance(value, bool):
        return "Yes" if value else "No"
    if isinstance(value, (int, float)):
        return format_number(value)
    if isinstance(value, str):
        return value
    if isinstance(value, dict):
        return {k: coerce_value(v, default) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        items = []
        for item in value:
            if item is None:
                continue
            if isinstance(item, dict):
                items.append(coerce_value(item, default))
                continue
            text = coerce_value(item, default)
            if isinstance(text, str) and not text.strip():
                continue
            items.append(text)
        return items
    return str(value)


def format_number(value: Any) -> str:
    """Render a number without a trailing ``.0`` for whole values."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def to_number(value: Any) -> float:
    """Best-effort numeric conversion for payload amounts; 0 when unusable."""
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        cleaned = re.sub(r"[^0-9.\-]", "", value)
        try:
            return float(cleaned) if cleaned else 0.0
        except ValueError:
            return 0.0
    return 0.0


def capitalize_words(text: Optional[str]) -> str:
    """Title-case each whitespace-separated word; ``Not specified`` when blank."""
    if not text:
        return NOT_SPECIFIED
    return re.sub(r"\w\S*", lambda m: m.group(0)[0].upper() + m.group(0)[1:].lower(), text)


def is_meaningful(value: Any) -> bool:
    """True for a non-blank value that is not a sentinel placeholder."""
    if value is None:
        return False
    text = str(value).strip()
    return bool(text) and text not in SENTINELS


def join_list(values: Iterable[Any]) -> Optional[str]:
    parts = [str(v) for v in values or [] if v is not None and str(v).strip()]
    return ", ".join(parts) if parts else None


# =============================================================================
# BASE ASSEMBLER
# =============================================================================


class BaseAssembler(ABC):
    """Turns a project input and an optional AI payload into a report model.

    Subclasses provide the role name, the label keys they use, the fallback
    tree and the conversion of the merged tree into their report model.
    """

    role: str = ""
    title_key: str = ""
    label_keys: tuple = ()
    photo_title_key: str = ""
    photo_caption_key: Optional[str] = None
    annotation_key: str = "imageAnalysis"
    default_caption: str = ""

    def __init__(self, as_of: Optional[datetime] = None, brand_name: Optional[str] = None):
        self.as_of = as_of
        self.brand_name = brand_name or settings.brand_name

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    def assemble(
        self,
        project: ProjectInput,
        ai_payload: Optional[Dict[str, Any]] = None,
        cost: Optional[CostBreakdown] = None,
    ) -> ReportBase:
        """Assemble the report for this role. Never raises on payload problems."""
        localizer = Localizer.for_preferences(project.preferred_language, project.preferred_currency)
        warnings: List[str] = []
        payload = self._unwrap_payload(ai_payload, warnings)

        fallback = self.build_fallback(project, localizer, cost)
        merged = merge_with_defaults(payload, fallback)
        for key in fallback:
            if payload is not None and payload.get(key) is None:
                warnings.append(f"{key}: derived from form input")

        base = self._base_fields(project, localizer, cost, payload, warnings)
        try:
            report = self.build_report(project, merged, localizer, base)
        except (PydanticValidationError, TypeError, ValueError, AttributeError) as e:
            logger.warning(
                "assembler_payload_rejected",
                role=self.role,
                error=str(e),
            )
            warnings.append(f"ai payload rejected: {type(e).__name__}")
            base["photos"] = self.build_photos(project, None, localizer)
            report = self.build_report(project, fallback, localizer, base)

        logger.info(
            "report_assembled",
            role=self.role,
            has_ai_payload=payload is not None,
            warning_count=len(report.warnings),
        )
        return report

    # ------------------------------------------------------------------
    # Subclass hooks
    # ------------------------------------------------------------------

    @abstractmethod
    def build_fallback(
        self,
        project: ProjectInput,
        localizer: Localizer,
        cost: Optional[CostBreakdown],
    ) -> Dict[str, Any]:
        """Build the form-derived tree, keyed like the role's AI payload."""

    @abstractmethod
    def build_report(
        self,
        project: ProjectInput,
        merged: Dict[str, Any],
        localizer: Localizer,
        base: Dict[str, Any],
    ) -> ReportBase:
        """Convert the merged tree into the role's report model."""

    # ------------------------------------------------------------------
    # Shared pieces
    # ------------------------------------------------------------------

    def _unwrap_payload(self, ai_payload: Any, warnings: List[str]) -> Optional[Dict[str, Any]]:
        if ai_payload is None:
            warnings.append("ai payload absent: using form-derived content")
            return None
        if not isinstance(ai_payload, dict):
            warnings.append(f"ai payload ignored: expected object, got {type(ai_payload).__name__}")
            return None
        # Analysis responses sometimes nest the role report under "report"
        inner = ai_payload.get("report")
        if isinstance(inner, dict):
            return inner
        return ai_payload

    def _base_fields(
        self,
        project: ProjectInput,
        localizer: Localizer,
        cost: Optional[CostBreakdown],
        payload: Optional[Dict[str, Any]],
        warnings: List[str],
    ) -> Dict[str, Any]:
        labels = {key: localizer.t(key) for key in self.label_keys}
        return {
            "role": self.role,
            "title": localizer.t(self.title_key),
            "language": localizer.language,
            "currency": localizer.currency,
            "labels": labels,
            "cost_summary": self.build_cost_summary(cost, localizer),
            "photos": self.build_photos(project, payload, localizer),
            "warnings": warnings,
        }

    def inspection_date(self) -> str:
        return (self.as_of or datetime.now()).strftime("%m/%d/%Y")

    def build_cost_summary(self, cost: Optional[CostBreakdown], localizer: Localizer) -> List[KeyValueRow]:
        """Rows for the estimator breakdown, empty when no estimate was made."""
        if cost is None:
            return []
        return [
            KeyValueRow(label=localizer.t("materials_cost"), value=localizer.money(cost.materials_cost)),
            KeyValueRow(label=localizer.t("labor_cost"), value=localizer.money(cost.labor_cost)),
            KeyValueRow(label=localizer.t("permits_cost"), value=localizer.money(cost.permits_cost)),
            KeyValueRow(label=localizer.t("contingency_cost"), value=localizer.money(cost.contingency_cost)),
            KeyValueRow(label=localizer.t("total_cost"), value=localizer.money(cost.total_cost)),
        ]

    def caption_for(self, annotations: Any, index: int) -> str:
        """Pick the caption for photo ``index``.

        A list supplies one caption per photo, a single string applies to
        every photo; anything else falls back to the role's default caption.
        """
        if isinstance(annotations, list):
            if index < len(annotations) and is_meaningful(annotations[index]):
                return str(annotations[index])
            return self.default_caption
        if isinstance(annotations, str) and annotations.strip():
            return annotations
        return self.default_caption

    def build_photos(
        self,
        project: ProjectInput,
        payload: Optional[Dict[str, Any]],
        localizer: Localizer,
    ) -> List[PhotoEntry]:
        annotations = (payload or {}).get(self.annotation_key)
        photos = []
        for index, upload in enumerate(project.uploaded_files):
            photos.append(
                PhotoEntry(
                    title=localizer.t(self.photo_title_key, n=index + 1),
                    caption=self.caption_for(annotations, index),
                    name=upload.name or "Photo",
                    size_label=f"{round_half_up(upload.size / 1024)} KB",
                    data=upload.data or "",
                )
            )
        return photos

    @staticmethod
    def rows(pairs: Iterable[tuple], keep_blank: bool = True) -> List[KeyValueRow]:
        """Build key/value rows, optionally dropping blank and sentinel values."""
        result = []
        for label, value in pairs:
            if not keep_blank and not is_meaningful(value):
                continue
            result.append(KeyValueRow(label=label, value=coerce_value(value)))
        return result
