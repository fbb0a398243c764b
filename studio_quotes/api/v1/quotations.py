"""Quotation authorization endpoint for API v1."""

from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Body, Depends, Path
from sqlalchemy.orm import Session

from studio_quotes.api.v1._errors import to_http_exception
from studio_quotes.collaborators import TaskDispatcher
from studio_quotes.core.dependencies import get_db_session, get_task_dispatcher
from studio_quotes.core.exceptions import StudioQuotesException
from studio_quotes.orchestration.authorization import AuthorizationOrchestrator
from studio_quotes.schemas.authorization import (
    AuthorizationResponse,
    AuthorizeQuotationBody,
)

router = APIRouter(tags=["quotations"])


@router.post(
    "/studios/{studio_id}/quotations/{quotation_id}/authorize",
    response_model=AuthorizationResponse,
)
def authorize_quotation(
    studio_id: int = Path(ge=1),
    quotation_id: int = Path(ge=1),
    payload: AuthorizeQuotationBody = Body(...),
    db: Session = Depends(get_db_session),
    dispatcher: TaskDispatcher = Depends(get_task_dispatcher),
) -> AuthorizationResponse:
    try:
        request = {"studio_id": studio_id, "quotation_id": quotation_id, **payload.model_dump()}
        result = AuthorizationOrchestrator(db, dispatcher=dispatcher).authorize_quotation(request)
    except StudioQuotesException as exc:
        raise to_http_exception(exc) from exc
    response = asdict(result)
    response["archived_quotation_ids"] = list(result.archived_quotation_ids)
    return AuthorizationResponse(**response)
