"""Unit tests for the HTTP entry points.

Handlers are called directly with a stand-in request; storage is backed by
the fake Firestore service.
"""

import json

import pytest
from unittest.mock import MagicMock

from services.report_storage import ReportStorage, encode_pdf
from services.session import RoleService
from tests.fixtures.sample_projects import AUSTIN_RESIDENTIAL, HOMEOWNER_FORM

PDF_BYTES = b"%PDF-1.4\n%fake\n"


def _request(body=None, method="POST"):
    req = MagicMock()
    req.method = method
    req.get_json.return_value = body
    return req


def _json(response):
    return json.loads(response.get_data(as_text=True))


@pytest.fixture
def main_module(monkeypatch, fake_firestore_service):
    import main

    def storage_factory(firestore_service=None):
        return ReportStorage(firestore_service=fake_firestore_service)

    def role_factory(firestore_service=None):
        return RoleService(firestore_service=fake_firestore_service)

    monkeypatch.setattr(main, "ReportStorage", storage_factory)
    monkeypatch.setattr("services.report_pipeline.ReportStorage", storage_factory)
    monkeypatch.setattr(main, "RoleService", role_factory)
    return main


class TestEstimateCost:

    def test_success(self, main_module):
        response = main_module.estimate_cost(_request({"projectInput": AUSTIN_RESIDENTIAL}))

        assert response.status_code == 200
        body = _json(response)
        assert body["success"] is True
        assert body["data"]["estimate"]["totalCost"] == 196388
        assert body["data"]["regionalInsights"]["regionMultiplier"] == 1.15

    def test_missing_project_input(self, main_module):
        response = main_module.estimate_cost(_request({}))

        assert response.status_code == 400
        assert _json(response)["error"]["code"] == "MISSING_FIELD"

    def test_unknown_project_type(self, main_module):
        response = main_module.estimate_cost(_request({"projectInput": {**AUSTIN_RESIDENTIAL, "projectType": "moon"}}))

        assert response.status_code == 400
        assert _json(response)["error"]["code"] == "UNKNOWN_PROJECT_TYPE"

    def test_preflight(self, main_module):
        response = main_module.estimate_cost(_request(method="OPTIONS"))

        assert response.status_code == 204
        assert response.headers["Access-Control-Allow-Origin"] == "*"


class TestGenerateReport:

    def test_generates_and_saves(self, main_module, fake_pdf_backend, fake_firestore_service):
        response = main_module.generate_report(_request({
            "userId": "user-1",
            "email": "pat.doe@example.com",
            "projectInput": HOMEOWNER_FORM,
        }))

        assert response.status_code == 200
        data = _json(response)["data"]
        assert data["documentId"] == "report-123"
        assert data["pdfBase64"].startswith("data:application/pdf;base64,")
        fake_firestore_service.add_report.assert_awaited_once()


class TestRetrieval:

    def test_get_report_not_found(self, main_module):
        response = main_module.get_report(_request({"reportId": "missing"}))

        assert response.status_code == 404
        assert _json(response)["error"]["code"] == "REPORT_NOT_FOUND"

    def test_download_report(self, main_module, fake_firestore_service):
        fake_firestore_service.get_report.return_value = {
            "id": "report-123",
            "fileName": "roof.pdf",
            "pdfBase64": encode_pdf(PDF_BYTES),
        }

        response = main_module.download_report(_request({"reportId": "report-123"}))

        assert response.status_code == 200
        assert response.get_data() == PDF_BYTES
        assert response.headers["Content-Disposition"] == 'attachment; filename="roof.pdf"'

    def test_download_corrupt_report_carries_alert(self, main_module, fake_firestore_service):
        fake_firestore_service.get_report.return_value = {"id": "r", "fileName": "roof.pdf", "pdfBase64": "%%%"}

        response = main_module.download_report(_request({"reportId": "r"}))

        assert response.status_code == 422
        error = _json(response)["error"]
        assert error["code"] == "DECODE_FAILED"
        assert error["details"]["alert"] == "Unable to download PDF. Please try again."

    def test_view_corrupt_report(self, main_module, fake_firestore_service):
        fake_firestore_service.get_report.return_value = {"id": "r", "pdfBase64": "%%%"}

        response = main_module.view_report(_request({"reportId": "r"}))

        assert response.status_code == 422
        assert _json(response)["error"]["code"] == "DECODE_FAILED"

    def test_list_reports(self, main_module, fake_firestore_service):
        fake_firestore_service.list_user_reports.return_value = [
            {"id": "a", "fileName": "a.pdf", "fileSize": 2048, "pdfBase64": encode_pdf(PDF_BYTES)},
        ]

        response = main_module.list_reports(_request({"userId": "user-1"}))

        reports = _json(response)["data"]["reports"]
        assert reports[0]["id"] == "a"
        assert reports[0]["fileSizeLabel"] == "2 KB"

    def test_delete_other_users_report(self, main_module, fake_firestore_service):
        fake_firestore_service.get_report.return_value = {"id": "r", "userId": "someone-else"}

        response = main_module.delete_report(_request({"reportId": "r", "userId": "user-1"}))

        assert response.status_code == 403


class TestDeleteUserData:

    def test_removes_reports_and_role(self, main_module, fake_firestore_service):
        fake_firestore_service.list_user_reports.return_value = [{"id": "a"}, {"id": "b"}]

        response = main_module.delete_user_data(_request({"userId": "user-1"}))

        assert response.status_code == 200
        assert _json(response)["data"]["deletedReports"] == 2
        assert fake_firestore_service.delete_report.await_count == 2
        fake_firestore_service.delete_user_role.assert_awaited_once_with("user-1")

    def test_requires_user(self, main_module, fake_firestore_service):
        response = main_module.delete_user_data(_request({}))

        assert response.status_code == 400
        assert _json(response)["error"]["code"] == "MISSING_FIELD"
        fake_firestore_service.delete_report.assert_not_awaited()
