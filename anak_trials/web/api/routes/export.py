"""Anonymized clinical trial exports.

Both endpoints export every trial with the child identifier replaced by a
one-way token: ``/renderJSON`` as JSON with the full token, ``/biofarma`` as
an HTML table with the token truncated for public sharing.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse, PlainTextResponse

from anak_trials.domain.ports import AnonymizationError, Result
from anak_trials.domain.services.anonymizer import Anonymizer
from anak_trials.web.api.dependencies import AnonymizerDep, SettingsDep, StorageDep, templates

logger = logging.getLogger(__name__)

router = APIRouter(tags=["export"])

EXPORT_FAILURE_MESSAGE = "Error fetching clinical trials data."


def anonymized_trials(result: Result, anonymizer: Anonymizer, prefix_length: Optional[int] = None):
    """Anonymize the rows of a successful query, or return None on failure."""
    if result.is_failure():
        logger.error(f"Error fetching clinical trials data: {result.error}")
        return None
    try:
        return anonymizer.anonymize_records(result.value, prefix_length=prefix_length)
    except AnonymizationError as e:
        logger.error(f"Error anonymizing clinical trials data: {str(e)}")
        return None


@router.get("/renderJSON")
def render_json(storage: StorageDep, anonymizer: AnonymizerDep):
    """Every clinical trial as JSON, ``nisn`` replaced by ``hashed_nisn``."""
    records = anonymized_trials(storage.list_all_trials(), anonymizer)
    if records is None:
        return PlainTextResponse(EXPORT_FAILURE_MESSAGE, status_code=500)
    return records


@router.get("/biofarma", response_class=HTMLResponse)
def biofarma(request: Request, storage: StorageDep, anonymizer: AnonymizerDep, settings: SettingsDep):
    """Every clinical trial as an HTML table with truncated tokens."""
    records = anonymized_trials(storage.list_all_trials(), anonymizer, prefix_length=settings.anon_prefix_length)
    if records is None:
        return PlainTextResponse(EXPORT_FAILURE_MESSAGE, status_code=500)
    return templates.TemplateResponse(
        request,
        "biofarma.html",
        {"hashed_clinical_trials_data": records},
    )
