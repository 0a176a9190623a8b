"""Children and clinical trial pages.

Handlers that query the database are plain functions, so FastAPI runs them
in its threadpool and a slow query only holds up its own request.
"""

import logging
from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, PlainTextResponse
from pydantic import ValidationError as PydanticValidationError
from starlette.concurrency import run_in_threadpool

from anak_trials.domain.models import CHECKPOINT_FIELDS, CheckpointUpdate
from anak_trials.domain.ports import ClinicalStoragePort, ValidationError
from anak_trials.domain.services.formatter import format_child, format_children
from anak_trials.web.api.dependencies import SettingsDep, StorageDep, templates

logger = logging.getLogger(__name__)

router = APIRouter(tags=["pages"])

UPDATE_SUCCESS_MESSAGE = "Clinical trial data submitted successfully."
UPDATE_FAILURE_MESSAGE = "Error submitting clinical trial data."


def render_error(request: Request, message: str, status_code: int) -> HTMLResponse:
    return templates.TemplateResponse(request, "error.html", {"message": message}, status_code=status_code)


def validate_checkpoint(payload: Any) -> CheckpointUpdate:
    """Validate a parsed body as a checkpoint update.

    Raises:
        ValidationError: If the body is not an object or a field is invalid
    """
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be an object")

    try:
        return CheckpointUpdate.model_validate(payload)
    except PydanticValidationError as e:
        errors = {
            ".".join(str(part) for part in error["loc"]) or "body": error["msg"]
            for error in e.errors()
        }
        raise ValidationError("Invalid clinical trial data", errors=errors)


async def read_checkpoint_body(request: Request) -> CheckpointUpdate:
    """Parse and validate the checkpoint update body.

    Accepts ``application/json`` and url-encoded form bodies.

    Raises:
        ValidationError: If the body is malformed or a field is invalid
    """
    content_type = request.headers.get("content-type", "")
    try:
        if content_type.startswith("application/json"):
            payload: Any = await request.json()
        else:
            payload = dict(await request.form())
    except ValueError:
        raise ValidationError("Malformed request body")

    return validate_checkpoint(payload)


def apply_checkpoint(storage: ClinicalStoragePort, trial_id: int, checkpoint: CheckpointUpdate) -> PlainTextResponse:
    result = storage.update_trial_checkpoint(trial_id, checkpoint.as_fields())
    if result.is_failure():
        logger.error(f"Error updating clinical trial {trial_id}: {result.error}")
        return PlainTextResponse(UPDATE_FAILURE_MESSAGE, status_code=500)

    return PlainTextResponse(UPDATE_SUCCESS_MESSAGE, status_code=200)


@router.get("/", response_class=HTMLResponse)
def list_children(request: Request, storage: StorageDep, settings: SettingsDep):
    """Render every child with a localized birth date."""
    result = storage.list_children()
    if result.is_failure():
        logger.error(f"Error retrieving anak data: {result.error}")
        return render_error(request, "Error retrieving anak data.", 500)

    anak_list = format_children(result.value, settings.list_locale)
    return templates.TemplateResponse(request, "main.html", {"anak_list": anak_list})


@router.get("/anak/{nisn}", response_class=HTMLResponse)
def anak_details(nisn: str, request: Request, storage: StorageDep, settings: SettingsDep):
    """Render one child with their clinical trials.

    Unknown children render the error page with 404; query failures with 500.
    """
    child_result = storage.get_child(nisn)
    if child_result.is_failure():
        logger.error(f"Error retrieving anak data: {child_result.error}")
        return render_error(request, "Error retrieving anak data.", 500)
    if child_result.value is None:
        return render_error(request, "Child not found.", 404)

    trials_result = storage.list_trials_for_child(nisn)
    if trials_result.is_failure():
        logger.error(f"Error retrieving clinical trial data: {trials_result.error}")
        return render_error(request, "Error retrieving clinical trial data.", 500)

    return templates.TemplateResponse(
        request,
        "anak_details.html",
        {
            "anak": format_child(child_result.value, settings.detail_locale),
            "clinical_trials_list": trials_result.value,
        },
    )


@router.get("/addClinicalTrial/{nisn}", response_class=HTMLResponse)
async def add_clinical_trial(nisn: str, request: Request):
    return templates.TemplateResponse(
        request,
        "add_clinical_trial.html",
        {"nisn": nisn, "checkpoint_fields": CHECKPOINT_FIELDS},
    )


@router.post("/updateClinicalTrial/{trial_id}", response_class=PlainTextResponse)
async def update_clinical_trial(
    trial_id: int,
    storage: StorageDep,
    checkpoint: CheckpointUpdate = Depends(read_checkpoint_body),
):
    """Overwrite the "24" checkpoint of one clinical trial.

    Replaying the same body leaves the same stored state.
    """
    return await run_in_threadpool(apply_checkpoint, storage, trial_id, checkpoint)


@router.post("/addClinicalTrial/{nisn}", response_class=PlainTextResponse)
async def submit_clinical_trial_form(nisn: str, request: Request, storage: StorageDep):
    """Plain form submission of the add page when scripts are disabled.

    The trial ID travels in the ``trial_id`` form field instead of the path.
    """
    form = dict(await request.form())
    raw_trial_id = form.pop("trial_id", "")
    try:
        trial_id = int(raw_trial_id)
    except (TypeError, ValueError):
        raise ValidationError("Invalid clinical trial data", errors={"trial_id": "must be an integer"})

    checkpoint = validate_checkpoint(form)
    return await run_in_threadpool(apply_checkpoint, storage, trial_id, checkpoint)
