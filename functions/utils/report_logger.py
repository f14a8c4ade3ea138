"""Report generation logger for RoofReport.

Prints banner summaries around report generation so a single run is easy to
pick out of the emulator output, and mirrors each banner as a structured
event for log aggregation.
"""

import json
import structlog
from typing import Dict, Any, List, Optional
from datetime import datetime, timezone

logger = structlog.get_logger()

BANNER_WIDTH = 80
REPORT_BANNER_CHAR = "█"
PAYLOAD_BANNER_CHAR = "═"
FAILURE_BANNER_CHAR = "!"


def _create_banner(char: str, text: str, width: int = BANNER_WIDTH) -> str:
    """Create a centered banner with given character."""
    text_with_spaces = f" {text} "
    padding = (width - len(text_with_spaces)) // 2
    return char * padding + text_with_spaces + char * (width - padding - len(text_with_spaces))


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def _truncate_large_values(data: Any, max_length: int = 200) -> Any:
    """Shorten long strings (image payloads, PDF data) for display."""
    if isinstance(data, str) and len(data) > max_length:
        return data[:max_length] + f"... [truncated {len(data) - max_length} chars]"
    if isinstance(data, dict):
        return {key: _truncate_large_values(value, max_length) for key, value in data.items()}
    if isinstance(data, list):
        items = [_truncate_large_values(item, max_length) for item in data[:10]]
        if len(data) > 10:
            items.append(f"... and {len(data) - 10} more items")
        return items
    return data


def log_generation_start(role: Optional[str], project_name: Optional[str], photo_count: int) -> None:
    """Log report generation start with prominent banner."""
    print("\n")
    print(REPORT_BANNER_CHAR * BANNER_WIDTH)
    print(_create_banner(REPORT_BANNER_CHAR, "ROOFREPORT GENERATION STARTED"))
    print(REPORT_BANNER_CHAR * BANNER_WIDTH)
    print(f"║ Role      : {role or 'unknown'}")
    print(f"║ Project   : {project_name or 'unnamed'}")
    print(f"║ Photos    : {photo_count}")
    print(f"║ Timestamp : {_timestamp()}")
    print(REPORT_BANNER_CHAR * BANNER_WIDTH)

    logger.info("generation_start_logged", role=role, project_name=project_name, photo_count=photo_count)


def log_generation_complete(
    file_name: str,
    page_count: int,
    file_size: int,
    duration_ms: int,
    document_id: Optional[str] = None,
    warnings: Optional[List[str]] = None,
) -> None:
    """Log report generation completion with summary."""
    warnings = warnings or []

    print("\n")
    print(REPORT_BANNER_CHAR * BANNER_WIDTH)
    print(_create_banner(REPORT_BANNER_CHAR, "✓ REPORT GENERATED"))
    print(REPORT_BANNER_CHAR * BANNER_WIDTH)
    print(f"║ File        : {file_name}")
    print(f"║ Pages       : {page_count}")
    print(f"║ Size        : {file_size:,} bytes")
    print(f"║ Duration    : {duration_ms:,} ms ({duration_ms / 1000:.2f}s)")
    print(f"║ Document ID : {document_id or 'not saved'}")
    print(f"║ Warnings    : {len(warnings)}")
    for warning in warnings:
        print(f"║   - {warning}")
    print(REPORT_BANNER_CHAR * BANNER_WIDTH)
    print("\n")

    logger.info(
        "generation_complete_logged",
        file_name=file_name,
        page_count=page_count,
        file_size=file_size,
        duration_ms=duration_ms,
        document_id=document_id,
        warning_count=len(warnings),
    )


def log_generation_failed(stage: str, error: str, code: Optional[str] = None) -> None:
    """Log report generation failure with details."""
    print("\n")
    print(FAILURE_BANNER_CHAR * BANNER_WIDTH)
    print(_create_banner(FAILURE_BANNER_CHAR, "✗ REPORT GENERATION FAILED"))
    print(FAILURE_BANNER_CHAR * BANNER_WIDTH)
    print(f"║ Stage     : {stage}")
    print(f"║ Code      : {code or 'n/a'}")
    print(f"║ Error     : {error}")
    print(f"║ Timestamp : {_timestamp()}")
    print(FAILURE_BANNER_CHAR * BANNER_WIDTH)
    print("\n")

    logger.error("generation_failed_logged", stage=stage, code=code, error=error)


def log_payload_summary(label: str, payload: Optional[Dict[str, Any]]) -> None:
    """Print a truncated view of a form or AI payload."""
    print(PAYLOAD_BANNER_CHAR * BANNER_WIDTH)
    print(_create_banner(PAYLOAD_BANNER_CHAR, label.upper()))
    print(PAYLOAD_BANNER_CHAR * BANNER_WIDTH)
    if payload is None:
        print("  (none)")
    else:
        formatted = json.dumps(_truncate_large_values(payload), indent=2, default=str, ensure_ascii=False)
        for line in formatted.split("\n"):
            print(f"  {line}")
    print(PAYLOAD_BANNER_CHAR * BANNER_WIDTH)

    logger.debug(
        "payload_summary_logged",
        label=label,
        keys=sorted(payload.keys()) if isinstance(payload, dict) else None,
        size=len(json.dumps(payload, default=str)) if payload is not None else 0,
    )
