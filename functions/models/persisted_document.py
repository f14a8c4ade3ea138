"""Stored report models for RoofReport.

``RenderedDocument`` is what the renderer hands back; ``PersistedDocument`` is
the view of a Firestore ``pdfs`` record used for retrieval.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


@dataclass(frozen=True)
class RenderedDocument:
    """A serialized PDF report.

    Attributes:
        pdf_bytes: The PDF file content
        page_count: Number of laid-out pages
        generated_at: ISO timestamp of serialization
        file_name: Download file name
        role: Report audience the document was built for
    """

    pdf_bytes: bytes
    page_count: int
    generated_at: str
    file_name: str
    role: str

    @property
    def file_size(self) -> int:
        return len(self.pdf_bytes)


class PersistedDocument(BaseModel):
    """A report record read back from the ``pdfs`` collection.

    ``pdf_base64`` may be empty when the record has no payload under either
    the current or the historical key.
    """

    id: str
    file_name: str = Field(default="report.pdf", alias="fileName")
    pdf_base64: str = Field(default="", alias="pdfBase64")
    file_size: int = Field(default=0, alias="fileSize")
    generated_at: Optional[str] = Field(default=None, alias="generatedAt")
    owner_id: Optional[str] = Field(default=None, alias="ownerId")
    metadata: Dict[str, Any] = Field(default_factory=dict)

    class Config:
        populate_by_name = True

    @property
    def has_payload(self) -> bool:
        return bool(self.pdf_base64)

    def summary(self) -> Dict[str, Any]:
        """Listing view without the payload."""
        project = self.metadata.get("project") or {}
        estimate = self.metadata.get("estimate") or {}
        return {
            "id": self.id,
            "fileName": self.file_name,
            "fileSize": self.file_size,
            "generatedAt": self.generated_at,
            "projectType": self.metadata.get("projectType"),
            "projectName": project.get("name"),
            "totalCost": estimate.get("totalCost"),
        }
