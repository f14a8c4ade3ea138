"""AI analysis service for RoofReport.

Asks an OpenAI chat model (through LangChain) for the role-specific report
content that the assemblers layer over their form-derived defaults. Analysis
is best effort: any failure is logged and ``None`` is returned, which the
assemblers treat as "no payload".
"""

import json
from typing import Any, Dict, List, Optional

import structlog
from langchain_openai import ChatOpenAI
from langchain_core.messages import BaseMessage, HumanMessage, SystemMessage

from config.errors import ErrorCode, RoofReportError
from config.settings import settings
from models.cost_breakdown import CostBreakdown
from models.project_input import ProjectInput

logger = structlog.get_logger()

BASE_PROMPT = """You are a senior roofing consultant preparing a written report.
Use only the project details provided. Leave out any field you cannot support
from the details rather than guessing."""

ROLE_PROMPTS: Dict[str, str] = {
    "homeowner": """Audience: a homeowner with no roofing background. Use plain language.
Return an object with these keys:
- welcomeMessage: {greeting, introduction, ourCommitment}
- roofOverview: {propertyType, roofAge, roofStyle, currentMaterials, overallCondition, keyFeatures[]}
- damageSummary: {inspectionFindings, priorityLevel (High|Medium|Low), mainConcerns[], whatThisMeans}
- repairSuggestions: {immediateActions[], shortTermPlanning[],
  longTermOutlook: {timeline, investmentGuidance, preventiveCare}}
- budgetGuidance: {financingOptions[], costSavingTips[]}
- imageAnalysis: one caption per photo, in upload order""",
    "contractor": """Audience: a roofing contractor preparing a bid.
Return an object with these keys:
- scopeOfWork: {preparationTasks[], removalTasks[], installationTasks[], finishingTasks[]}
- laborRequirements: {crewSize, estimatedDays, specialEquipment[], safetyRequirements[]}
- materialBreakdown: {lineItems: [{item, quantity, unit, notes}]}
- costEstimates: {materials: {total, breakdown: [{category, amount}]},
  labor: {total, ratePerHour, totalHours}, equipment: {total, items: [{item, cost}]}}
- imageAnalysis: one repair-indicator note per photo, in upload order""",
    "inspector": """Audience: a licensed roof inspector filing a formal record.
Return an object with these keys:
- structure: {type, roofPitch, age, materials}
- slopes: [{slope, damageType, severity, description}]
- equipmentUsed, ownerNotes
- annotatedPhotographicEvidence: one annotation per photo, in upload order""",
    "insurance-adjuster": """Audience: an insurance adjuster documenting a claim.
Return an object with these keys:
- inspectionSummary: {propertyAddress, structureType, roofAge, roofPitch, existingMaterials,
  totalArea, weatherConditions}
- coverageTable: {coveredItems[], nonCoveredItems[], maintenanceItems[]}
- stormDamageAssessment: {primaryDamageCause, affectedComponents[]}
- damageClassificationsTable: [{slope, damageType, severity, description}]
- legalCertificationNotes: {certificationStatement}
- annotatedPhotos: one claim note per photo, in upload order""",
}

JSON_INSTRUCTION = "IMPORTANT: You MUST respond with valid JSON only. No markdown, no explanation, just JSON."


def strip_code_fence(content: str) -> str:
    """Remove a surrounding markdown code fence, if any."""
    content = content.strip()
    if content.startswith("```json"):
        content = content[7:]
    if content.startswith("```"):
        content = content[3:]
    if content.endswith("```"):
        content = content[:-3]
    return content.strip()


class AnalysisService:
    """Generates AI report payloads.

    Usage:
        service = AnalysisService()
        payload = await service.analyze(project, cost)
    """

    def __init__(
        self,
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        api_key: Optional[str] = None,
        client: Optional[ChatOpenAI] = None,
    ):
        self.model = model or settings.llm_model
        self.temperature = temperature if temperature is not None else settings.llm_temperature
        self._api_key = api_key
        self._client = client
        self._total_tokens_used = 0

    @property
    def client(self) -> ChatOpenAI:
        """Get LangChain ChatOpenAI client (lazy initialization)."""
        if self._client is None:
            self._client = ChatOpenAI(
                model=self.model,
                temperature=self.temperature,
                api_key=self._api_key or settings.openai_api_key,
            )
        return self._client

    @property
    def total_tokens_used(self) -> int:
        return self._total_tokens_used

    async def generate_json(self, system_prompt: str, user_message: str) -> Dict[str, Any]:
        """Run one chat completion and parse the reply as a JSON object.

        Raises:
            RoofReportError: If the call fails or the reply is not a JSON object.
        """
        messages: List[BaseMessage] = [
            SystemMessage(content=f"{system_prompt}\n\n{JSON_INSTRUCTION}"),
            HumanMessage(content=user_message),
        ]
        try:
            response = await self.client.ainvoke(messages)
        except Exception as e:
            error_msg = str(e)
            if "rate_limit" in error_msg.lower():
                code = ErrorCode.LLM_RATE_LIMIT
            elif "context_length" in error_msg.lower() or "maximum context" in error_msg.lower():
                code = ErrorCode.LLM_CONTEXT_TOO_LONG
            else:
                code = ErrorCode.LLM_ERROR
            raise RoofReportError(
                code=code,
                message=f"LLM generation failed: {error_msg}",
                details={"original_error": error_msg},
            )

        metadata = getattr(response, "response_metadata", None) or {}
        tokens_used = (metadata.get("token_usage") or {}).get("total_tokens", 0)
        self._total_tokens_used += tokens_used

        content = response.content if isinstance(response.content, str) else str(response.content)
        try:
            parsed = json.loads(strip_code_fence(content))
        except json.JSONDecodeError as e:
            raise RoofReportError(
                code=ErrorCode.LLM_ERROR,
                message="LLM did not return valid JSON",
                details={"parse_error": str(e), "raw_content": content[:500]},
            )
        if not isinstance(parsed, dict):
            raise RoofReportError(
                code=ErrorCode.LLM_ERROR,
                message="LLM returned JSON that is not an object",
                details={"raw_content": content[:500]},
            )

        logger.info("llm_generated", model=self.model, tokens_used=tokens_used, content_length=len(content))
        return parsed

    @staticmethod
    def describe_project(project: ProjectInput, cost: Optional[CostBreakdown] = None) -> str:
        """Project summary sent to the model; uploaded image data is left out."""
        record = project.to_record()
        files = record.pop("uploadedFiles", None) or []
        record["photos"] = [{"name": f.get("name"), "size": f.get("size")} for f in files]
        if cost is not None:
            record["costEstimate"] = cost.to_dict()
        return json.dumps(record, indent=2, default=str)

    async def analyze(
        self,
        project: ProjectInput,
        cost: Optional[CostBreakdown] = None,
    ) -> Optional[Dict[str, Any]]:
        """Role-specific report payload for ``project``, or None on any failure."""
        role = project.user_role
        role_prompt = ROLE_PROMPTS.get(role or "")
        if role_prompt is None:
            logger.info("analysis_skipped", reason="unknown_role", role=role)
            return None

        try:
            payload = await self.generate_json(
                f"{BASE_PROMPT}\n\n{role_prompt}",
                self.describe_project(project, cost),
            )
        except RoofReportError as e:
            logger.warning("analysis_failed", role=role, code=e.code, error=e.message)
            return None
        except Exception as e:
            logger.warning("analysis_failed", role=role, error=str(e), error_type=type(e).__name__)
            return None

        logger.info("analysis_completed", role=role, keys=sorted(payload.keys()))
        return payload
