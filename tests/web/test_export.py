"""Tests for the anonymized exports."""

import re

import pytest
from fastapi.testclient import TestClient

from anak_trials.domain.ports import Result
from anak_trials.domain.services.anonymizer import Anonymizer
from anak_trials.web.api.dependencies import get_anonymizer, get_storage_adapter
from anak_trials.web.api.main import app
from tests.conftest import TRIAL_NISN

TOKEN_CELL = re.compile(r"<code>([^<]*)</code>")


@pytest.fixture
def anonymizer():
    return Anonymizer(mode="salted", cost=4)


@pytest.fixture
def client(seeded_adapter, anonymizer):
    app.dependency_overrides[get_storage_adapter] = lambda: seeded_adapter
    app.dependency_overrides[get_anonymizer] = lambda: anonymizer
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.clear()


class TestRenderJSON:

    def test_every_record_anonymized(self, client, anonymizer):
        response = client.get("/renderJSON")

        assert response.status_code == 200
        records = response.json()
        assert [record["id"] for record in records] == [1, 2, 42]
        for record in records:
            assert "nisn" not in record
            assert record["hashed_nisn"]
            assert anonymizer.verify(TRIAL_NISN[record["id"]], record["hashed_nisn"])

    def test_other_fields_passed_through(self, client):
        record = client.get("/renderJSON").json()[0]

        assert record["medicine_kode"] == "PCT"
        assert record["heart_rate_24"] == 88
        assert record["blood_pressure_24"] == "110/70"
        assert record["temperature_24"] == 36.8

    def test_tokens_differ_between_exports(self, client):
        first = client.get("/renderJSON").json()[0]["hashed_nisn"]
        second = client.get("/renderJSON").json()[0]["hashed_nisn"]

        assert first != second

    def test_keyed_mode_is_stable(self, client):
        keyed = Anonymizer(mode="keyed", secret="export-secret")
        app.dependency_overrides[get_anonymizer] = lambda: keyed

        first = client.get("/renderJSON").json()
        second = client.get("/renderJSON").json()

        assert [r["hashed_nisn"] for r in first] == [r["hashed_nisn"] for r in second]
        # trials 1 and 2 belong to the same child
        assert first[0]["hashed_nisn"] == first[1]["hashed_nisn"]
        assert first[0]["hashed_nisn"] != first[2]["hashed_nisn"]

    def test_storage_failure(self, client, seeded_adapter, monkeypatch):
        monkeypatch.setattr(seeded_adapter, "list_all_trials", lambda: Result.failure_result("boom", error_type="StorageError"))

        response = client.get("/renderJSON")

        assert response.status_code == 500
        assert response.text == "Error fetching clinical trials data."


class TestBiofarma:

    def test_tokens_truncated_to_ten_characters(self, client):
        response = client.get("/biofarma")

        assert response.status_code == 200
        tokens = TOKEN_CELL.findall(response.text)
        assert len(tokens) == 3
        assert all(len(token) == 10 for token in tokens)

    def test_raw_identifier_not_rendered(self, client):
        response = client.get("/biofarma")

        assert "1234567890" not in response.text
        assert "2222222222" not in response.text

    def test_row_without_nisn_is_500(self, client, seeded_adapter, monkeypatch):
        monkeypatch.setattr(seeded_adapter, "list_all_trials", lambda: Result.success_result([{"id": 1}]))

        response = client.get("/biofarma")

        assert response.status_code == 500
        assert response.text == "Error fetching clinical trials data."
