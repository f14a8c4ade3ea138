"""Role-specific report assemblers for RoofReport.

Usage:
    from assemblers import get_assembler

    assembler = get_assembler(project.user_role)
    if assembler is not None:
        report = assembler.assemble(project, ai_payload, cost)
"""

from datetime import datetime
from typing import Dict, Optional, Type

from assemblers.base_assembler import BaseAssembler, merge_with_defaults, coerce_value
from assemblers.homeowner_assembler import HomeownerAssembler
from assemblers.contractor_assembler import ContractorAssembler
from assemblers.inspector_assembler import InspectorAssembler
from assemblers.insurance_assembler import InsuranceAssembler

ASSEMBLERS: Dict[str, Type[BaseAssembler]] = {
    HomeownerAssembler.role: HomeownerAssembler,
    ContractorAssembler.role: ContractorAssembler,
    InspectorAssembler.role: InspectorAssembler,
    InsuranceAssembler.role: InsuranceAssembler,
}


def get_assembler(
    role: Optional[str],
    as_of: Optional[datetime] = None,
    brand_name: Optional[str] = None,
) -> Optional[BaseAssembler]:
    """Return the assembler for a role, or None when the role is not recognized."""
    cls = ASSEMBLERS.get((role or "").strip().lower())
    return cls(as_of=as_of, brand_name=brand_name) if cls else None


__all__ = [
    "ASSEMBLERS",
    "BaseAssembler",
    "ContractorAssembler",
    "HomeownerAssembler",
    "InspectorAssembler",
    "InsuranceAssembler",
    "coerce_value",
    "get_assembler",
    "merge_with_defaults",
]
