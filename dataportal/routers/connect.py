"""The connect flow: store the Facebook pages a user connected and tell the operator."""

import logging
from typing import Any, Dict

import pydantic
from fastapi import APIRouter, Request, Response
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from dataportal.crud.connections import ensure_connections_table, save_connections
from dataportal.crud.schema import ConnectionSubmission
from dataportal.db import SUBMISSION_ENGINE
from dataportal.exceptions import DatabaseUnavailable, ValidationError
from dataportal.routers.send_emails import notify_submission
from dataportal.routers.utils import parse_json_body

logger = logging.getLogger(__name__)

router = APIRouter()

PREFIX = "/connect"


def parse_submission(payload: Dict[str, Any]) -> ConnectionSubmission:
    """Validate a submission before anything touches the database.

    Raises:
        ValidationError: If there are no pages or the body is malformed.
    """
    pages = payload.get("pages")
    if not isinstance(pages, list) or not pages:
        raise ValidationError("No pages provided")

    try:
        return ConnectionSubmission(**payload)
    except pydantic.ValidationError as exc:
        raise ValidationError("Invalid submission", detail=str(exc)) from exc


@router.options(PREFIX, include_in_schema=False)
async def connect_options() -> Response:
    """CORS preflight."""
    return Response(status_code=204)


@router.post(PREFIX)
async def connect(request: Request) -> JSONResponse:
    """Save a user's page connections and email the operator.

    The operator is emailed whether or not the pages could be saved.
    """
    submission = parse_submission(await parse_json_body(request))

    try:
        async with SUBMISSION_ENGINE.connect() as conn:
            await ensure_connections_table(conn)
            result = await save_connections(conn, submission)
    except Exception as exc:
        logger.exception("Warehouse connection error")
        await run_in_threadpool(notify_submission, submission, error=str(exc))
        raise DatabaseUnavailable(detail=str(exc)) from exc

    await run_in_threadpool(notify_submission, submission, result=result)

    body: Dict[str, Any] = {
        "success": True,
        "saved": result.saved_count,
        "total": len(submission.pages),
    }
    if result.errors:
        body["errors"] = [e.model_dump() for e in result.errors]

    return JSONResponse(content=body)
