"""Utility modules for RoofReport functions."""

from utils.report_logger import (
    log_generation_start,
    log_generation_complete,
    log_generation_failed,
    log_payload_summary,
)

__all__ = [
    "log_generation_start",
    "log_generation_complete",
    "log_generation_failed",
    "log_payload_summary",
]
