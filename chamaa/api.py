"""
HTTP surface for the Chamaa Ledger.

Thin request-handling layer: parse the body, call one LedgerFlow
operation, serialize the result. All rules live below this module.
Endpoints are sync; FastAPI runs them on its thread pool and the
LedgerFlow lock serializes them.
"""

from typing import List, Optional

import structlog
from fastapi import APIRouter, Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from chamaa.models.ledger import (
    Admin,
    Contribution,
    ContributionCreate,
    Group,
    GroupCreate,
    Member,
    MemberCreate,
)
from chamaa.orchestrator import LedgerFlow, create_app_components
from chamaa.services.storage import StorageError
from chamaa.validation import LedgerError, ViolationKind


logger = structlog.get_logger(__name__)

_STATUS_BY_KIND = {
    ViolationKind.VALIDATION_ERROR: status.HTTP_400_BAD_REQUEST,
    ViolationKind.REFERENCE_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ViolationKind.CONFLICT: status.HTTP_409_CONFLICT,
    ViolationKind.EMPTY_RESULT: status.HTTP_404_NOT_FOUND,
}

router = APIRouter()


def get_flow(request: Request) -> LedgerFlow:
    return request.app.state.flow


@router.post("/groups", response_model=Group, status_code=status.HTTP_201_CREATED)
def create_group(body: GroupCreate, flow: LedgerFlow = Depends(get_flow)):
    """Create a new group"""
    return flow.create_group(body.name, body.admin_id)


@router.get("/groups", response_model=List[Group])
def read_groups(flow: LedgerFlow = Depends(get_flow)):
    """Get all groups"""
    return flow.list_groups()


@router.post("/groups/{group_id}/members/{member_id}", response_model=Group)
def add_member(group_id: str, member_id: str, flow: LedgerFlow = Depends(get_flow)):
    """Add an existing member to a group"""
    return flow.add_member(group_id, member_id)


@router.get("/groups/{group_id}/contributions", response_model=List[Contribution])
def read_group_contributions(group_id: str, flow: LedgerFlow = Depends(get_flow)):
    """Get all contributions made to a group"""
    return flow.list_contributions_for_group(group_id)


@router.post("/members", response_model=Member, status_code=status.HTTP_201_CREATED)
def create_member(body: MemberCreate, flow: LedgerFlow = Depends(get_flow)):
    """Create a new member"""
    return flow.create_member(body.name, body.email)


@router.get("/members", response_model=List[Member])
def read_members(flow: LedgerFlow = Depends(get_flow)):
    """Get all members"""
    return flow.list_members()


@router.post("/contributions", response_model=Contribution, status_code=status.HTTP_201_CREATED)
def create_contribution(body: ContributionCreate, flow: LedgerFlow = Depends(get_flow)):
    """Record a contribution"""
    return flow.create_contribution(body.group_id, body.member_id, body.amount)


@router.get("/admins", response_model=List[Admin])
def read_admins(flow: LedgerFlow = Depends(get_flow)):
    """Get all admins"""
    return flow.list_admins()


def _ledger_error_handler(request: Request, exc: LedgerError) -> JSONResponse:
    return JSONResponse(
        status_code=_STATUS_BY_KIND[exc.kind],
        content={"error": exc.kind.value, "detail": exc.message},
    )


def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    detail = errors[0]["msg"] if errors else "Invalid request"
    if errors and errors[0].get("loc"):
        detail = f"{errors[0]['loc'][-1]}: {detail}"
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": ViolationKind.VALIDATION_ERROR.value, "detail": detail},
    )


def _storage_error_handler(request: Request, exc: StorageError) -> JSONResponse:
    logger.error("storage_failure", path=request.url.path, error=str(exc))
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "storage_failure", "detail": "Internal storage error"},
    )


def create_app(flow: Optional[LedgerFlow] = None) -> FastAPI:
    """
    Build the FastAPI app.

    Args:
        flow: Ledger to serve. Built from settings (and seeded) when omitted.
    """
    if flow is None:
        flow, _ = create_app_components()

    app = FastAPI(title="Chamaa Ledger")
    app.state.flow = flow
    app.include_router(router)

    app.add_exception_handler(LedgerError, _ledger_error_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.add_exception_handler(StorageError, _storage_error_handler)
    return app
