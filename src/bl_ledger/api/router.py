"""SubAdmin history API: read-only view of the transfer ledger."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.bl_account.domain.models import SubAdminAccount
from src.bl_common.database import get_db_session
from src.bl_common.response import ApiResponse, success_response, with_request_id
from src.bl_gateway.auth.dependencies import require_subadmin
from src.bl_ledger.application.service import HistoryApplicationService

router = APIRouter(prefix="/subadmin", tags=["history"])

_service = HistoryApplicationService()


@router.get("/history")
async def list_history(
    current: Annotated[SubAdminAccount, Depends(require_subadmin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.list_history(db, current.id, current.name)
    return with_request_id(success_response(data.model_dump()), request)
