"""Tests for the children and clinical trial pages."""

from unittest.mock import Mock

import pytest
from fastapi.testclient import TestClient

from anak_trials.domain.models import CHECKPOINT_FIELDS
from anak_trials.domain.ports import ClinicalStoragePort, Result, StorageError
from anak_trials.web.api.dependencies import get_storage_adapter
from anak_trials.web.api.main import app

SENTINELS = {
    "heart_rate_24": "99",
    "blood_pressure_24": "999/99",
    "respirate_24": "33",
    "temperature_24": "39.9",
    "pain_score_24": "7",
    "pain_location_24": "SENTINEL-location",
    "pain_quality_24": "SENTINEL-quality",
    "pain_quantity_24": "SENTINEL-quantity",
    "pain_frequency_24": "SENTINEL-frequency",
    "pain_situation_24": "SENTINEL-situation",
    "pain_factors_24": "SENTINEL-factors",
    "other_symptoms_24": "SENTINEL-other",
}

EXPECTED_SENTINELS = {
    **SENTINELS,
    "heart_rate_24": 99,
    "respirate_24": 33,
    "temperature_24": 39.9,
    "pain_score_24": 7,
}


@pytest.fixture
def client(seeded_adapter):
    """Test client backed by the seeded in-memory store."""
    app.dependency_overrides[get_storage_adapter] = lambda: seeded_adapter
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def failing_storage():
    """Storage whose every query fails."""
    failure = Result.failure_result(StorageError("connection lost", operation="query"), error_type="StorageError")
    storage = Mock(spec=ClinicalStoragePort)
    storage.list_children.return_value = failure
    storage.get_child.return_value = failure
    storage.list_trials_for_child.return_value = failure
    storage.update_trial_checkpoint.return_value = failure
    storage.list_all_trials.return_value = failure
    return storage


@pytest.fixture
def failing_client(failing_storage):
    app.dependency_overrides[get_storage_adapter] = lambda: failing_storage
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.clear()


def read_trial(adapter, trial_id):
    return next(row for row in adapter.list_all_trials().value if row["id"] == trial_id)


class TestChildrenList:

    def test_lists_children_in_enrollment_order(self, client):
        response = client.get("/")

        assert response.status_code == 200
        body = response.text
        positions = [body.index(nisn) for nisn in ("3333333333", "2222222222", "1234567890", "4444444444")]
        assert positions == sorted(positions)

    def test_birth_dates_in_indonesian(self, client):
        response = client.get("/")

        assert "1 Januari 2014" in response.text
        assert "17 Mei 2013" in response.text

    def test_query_failure_renders_error_page(self, failing_client):
        response = failing_client.get("/")

        assert response.status_code == 500
        assert "Error retrieving anak data." in response.text


class TestChildDetails:

    def test_child_with_matched_and_unmatched_medicine(self, client):
        response = client.get("/anak/1234567890")

        assert response.status_code == 200
        body = response.text
        assert "Budi Santoso" in body
        assert "January 1, 2014" in body
        assert "Paracetamol (PCT)" in body
        assert "Ibuprofen" not in body
        assert "115/75" in body

    def test_only_the_childs_trials_are_listed(self, client):
        response = client.get("/anak/2222222222")

        assert response.status_code == 200
        assert "Ibuprofen (IBU)" in response.text
        assert "Paracetamol" not in response.text

    def test_child_without_trials(self, client):
        response = client.get("/anak/4444444444")

        assert response.status_code == 200
        assert "No clinical trials recorded." in response.text

    def test_unknown_child_is_404(self, client):
        response = client.get("/anak/0000000000")

        assert response.status_code == 404
        assert "Child not found." in response.text

    def test_query_failure_is_500(self, failing_client):
        response = failing_client.get("/anak/1234567890")

        assert response.status_code == 500
        assert "Error retrieving anak data." in response.text

    def test_trial_query_failure_is_500(self, failing_client, failing_storage):
        failing_storage.get_child.return_value = Result.success_result({"nisn": "1234567890", "nama": "Budi"})

        response = failing_client.get("/anak/1234567890")

        assert response.status_code == 500
        assert "Error retrieving clinical trial data." in response.text


class TestAddClinicalTrialForm:

    def test_form_seeded_with_nisn(self, client):
        response = client.get("/addClinicalTrial/1234567890")

        assert response.status_code == 200
        assert "Clinical trial data (24) for 1234567890" in response.text
        for field in CHECKPOINT_FIELDS:
            assert f'name="{field}"' in response.text

    def test_form_does_not_touch_storage(self, failing_client, failing_storage):
        response = failing_client.get("/addClinicalTrial/1234567890")

        assert response.status_code == 200
        assert failing_storage.mock_calls == []


class TestUpdateClinicalTrial:

    def test_form_body_overwrites_checkpoint(self, client, seeded_adapter):
        before = read_trial(seeded_adapter, 42)

        response = client.post("/updateClinicalTrial/42", data=SENTINELS)

        assert response.status_code == 200
        assert response.text == "Clinical trial data submitted successfully."
        after = read_trial(seeded_adapter, 42)
        for field in CHECKPOINT_FIELDS:
            assert after[field] == EXPECTED_SENTINELS[field]
        assert after["nisn"] == before["nisn"]
        assert after["medicine_kode"] == before["medicine_kode"]

    def test_json_body(self, client, seeded_adapter):
        payload = dict(EXPECTED_SENTINELS, other_symptoms_24=None)

        response = client.post("/updateClinicalTrial/1", json=payload)

        assert response.status_code == 200
        trial = read_trial(seeded_adapter, 1)
        assert trial["pain_score_24"] == 7
        assert trial["other_symptoms_24"] is None

    def test_replay_is_idempotent(self, client, seeded_adapter):
        client.post("/updateClinicalTrial/42", data=SENTINELS)
        first = read_trial(seeded_adapter, 42)

        response = client.post("/updateClinicalTrial/42", data=SENTINELS)

        assert response.status_code == 200
        assert read_trial(seeded_adapter, 42) == first

    def test_invalid_field_rejected_before_query(self, failing_client, failing_storage):
        response = failing_client.post("/updateClinicalTrial/42", data=dict(SENTINELS, pain_score_24="11"))

        assert response.status_code == 422
        assert "pain_score_24" in response.text
        failing_storage.update_trial_checkpoint.assert_not_called()

    def test_missing_field_rejected(self, client):
        body = dict(SENTINELS)
        del body["heart_rate_24"]

        response = client.post("/updateClinicalTrial/42", json=body)

        assert response.status_code == 422
        assert "heart_rate_24" in response.text

    def test_malformed_json_rejected(self, client):
        response = client.post(
            "/updateClinicalTrial/42",
            content=b"{not json",
            headers={"content-type": "application/json"},
        )

        assert response.status_code == 422
        assert "Malformed request body" in response.text

    def test_non_integer_id_rejected(self, client):
        response = client.post("/updateClinicalTrial/abc", data=SENTINELS)

        assert response.status_code == 422

    def test_storage_failure_is_500(self, failing_client):
        response = failing_client.post("/updateClinicalTrial/42", data=SENTINELS)

        assert response.status_code == 500
        assert response.text == "Error submitting clinical trial data."

    def test_surrounding_whitespace_stored_as_submitted(self, client, seeded_adapter):
        body = dict(SENTINELS, pain_location_24="  left knee  ", other_symptoms_24="\nfever\n")

        response = client.post("/updateClinicalTrial/42", data=body)

        assert response.status_code == 200
        trial = read_trial(seeded_adapter, 42)
        assert trial["pain_location_24"] == "  left knee  "
        assert trial["other_symptoms_24"] == "\nfever\n"


class TestClinicalTrialFormFallback:

    def test_form_posts_back_to_add_page(self, client):
        response = client.get("/addClinicalTrial/12 34")

        assert 'action="/addClinicalTrial/12%2034"' in response.text
        assert 'href="/anak/12%2034"' in response.text

    def test_form_submission_updates_trial(self, client, seeded_adapter):
        response = client.post("/addClinicalTrial/2222222222", data=dict(SENTINELS, trial_id="42"))

        assert response.status_code == 200
        assert response.text == "Clinical trial data submitted successfully."
        trial = read_trial(seeded_adapter, 42)
        for field in CHECKPOINT_FIELDS:
            assert trial[field] == EXPECTED_SENTINELS[field]

    def test_missing_trial_id_rejected(self, failing_client, failing_storage):
        response = failing_client.post("/addClinicalTrial/2222222222", data=SENTINELS)

        assert response.status_code == 422
        assert "trial_id" in response.text
        failing_storage.update_trial_checkpoint.assert_not_called()

    def test_invalid_field_rejected(self, client):
        response = client.post(
            "/addClinicalTrial/2222222222",
            data=dict(SENTINELS, trial_id="42", pain_score_24="11"),
        )

        assert response.status_code == 422
        assert "pain_score_24" in response.text

    def test_storage_failure_is_500(self, failing_client):
        response = failing_client.post("/addClinicalTrial/2222222222", data=dict(SENTINELS, trial_id="42"))

        assert response.status_code == 500
        assert response.text == "Error submitting clinical trial data."
