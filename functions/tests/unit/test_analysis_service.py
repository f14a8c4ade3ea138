"""Unit tests for the AI analysis service."""

import json

import pytest
from unittest.mock import MagicMock, patch

from config.errors import ErrorCode, RoofReportError
from models.project_input import ProjectInput
from services.analysis_service import AnalysisService, strip_code_fence
from services.cost_estimator import estimate
from tests.fixtures.sample_projects import HOMEOWNER_FORM


@pytest.fixture
def service(mock_chat_openai):
    return AnalysisService(client=mock_chat_openai)


class TestAnalysisService:
    """Tests for AnalysisService."""

    def test_initialization(self):
        """Client is built lazily from settings."""
        with patch("services.analysis_service.ChatOpenAI") as chat:
            service = AnalysisService(model="gpt-4o-mini", temperature=0.1, api_key="test-key")

            assert service.model == "gpt-4o-mini"
            chat.assert_not_called()
            service.client
            chat.assert_called_once_with(model="gpt-4o-mini", temperature=0.1, api_key="test-key")

    @pytest.mark.asyncio
    async def test_generate_json(self, service):
        result = await service.generate_json("Return JSON.", "Describe the roof.")

        assert result == {"imageAnalysis": ["Granule loss near the ridge"]}
        assert service.total_tokens_used == 100

    @pytest.mark.asyncio
    async def test_generate_json_handles_markdown(self, service, mock_chat_openai):
        mock_chat_openai.ainvoke.return_value = MagicMock(
            content='```json\n{"result": "success"}\n```',
            response_metadata={},
        )

        result = await service.generate_json("Return JSON.", "Go.")

        assert result == {"result": "success"}

    @pytest.mark.asyncio
    async def test_generate_json_rejects_non_object(self, service, mock_chat_openai):
        mock_chat_openai.ainvoke.return_value = MagicMock(content="[1, 2, 3]", response_metadata={})

        with pytest.raises(RoofReportError) as exc_info:
            await service.generate_json("Return JSON.", "Go.")

        assert exc_info.value.code == ErrorCode.LLM_ERROR

    @pytest.mark.asyncio
    async def test_rate_limit_error_code(self, service, mock_chat_openai):
        mock_chat_openai.ainvoke.side_effect = Exception("rate_limit_exceeded")

        with pytest.raises(RoofReportError) as exc_info:
            await service.generate_json("Return JSON.", "Go.")

        assert exc_info.value.code == ErrorCode.LLM_RATE_LIMIT

    @pytest.mark.asyncio
    async def test_analyze_returns_payload(self, service, mock_chat_openai):
        project = ProjectInput.model_validate(HOMEOWNER_FORM)

        payload = await service.analyze(project, estimate(project))

        assert payload == {"imageAnalysis": ["Granule loss near the ridge"]}
        messages = mock_chat_openai.ainvoke.call_args.args[0]
        assert "plain language" in messages[0].content
        assert json.loads(messages[1].content)["costEstimate"]["totalCost"] == 196388

    @pytest.mark.asyncio
    async def test_analyze_failure_returns_none(self, service, mock_chat_openai):
        mock_chat_openai.ainvoke.return_value = MagicMock(content="not json", response_metadata={})

        assert await service.analyze(ProjectInput.model_validate(HOMEOWNER_FORM)) is None

    @pytest.mark.asyncio
    async def test_unknown_role_skips_model(self, service, mock_chat_openai):
        project = ProjectInput.model_validate({"userRole": "architect"})

        assert await service.analyze(project) is None
        mock_chat_openai.ainvoke.assert_not_called()

    def test_describe_project_omits_image_data(self, png_base64):
        project = ProjectInput.model_validate({
            **HOMEOWNER_FORM,
            "uploadedFiles": [{"name": "ridge.png", "size": 2048, "data": png_base64}],
        })

        described = json.loads(AnalysisService.describe_project(project))

        assert described["photos"] == [{"name": "ridge.png", "size": 2048}]
        assert png_base64 not in json.dumps(described)


@pytest.mark.parametrize("content,expected", [
    ('```json\n{"a": 1}\n```', '{"a": 1}'),
    ('```\n{"a": 1}\n```', '{"a": 1}'),
    ('  {"a": 1} ', '{"a": 1}'),
])
def test_strip_code_fence(content, expected):
    assert strip_code_fence(content) == expected
