"""bl_account REST API: account hierarchy CRUD, profile and funding reads.

Admins manage the admins and subadmins they created; subadmins manage the
users they created. Every route is scoped by `created_by`, so a foreign id
answers 404 exactly like a missing one.
"""

from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.bl_account.application.schemas import (
    AdminCreateRequest,
    SubAdminCreateRequest,
    UserCreateRequest,
)
from src.bl_account.application.service import AccountApplicationService
from src.bl_account.domain.models import (
    Account,
    AdminAccount,
    SubAdminAccount,
    UserAccount,
)
from src.bl_common.database import get_db_session
from src.bl_common.enums import Role
from src.bl_common.errors import ForbiddenRoleError
from src.bl_common.response import ApiResponse, success_response, with_request_id
from src.bl_gateway.auth.dependencies import (
    get_current_account,
    require_admin,
    require_subadmin,
    require_user,
)

router = APIRouter(tags=["accounts"])

_service = AccountApplicationService()

ChangeSet = Annotated[dict[str, Any], Body(examples=[{"name": "Bole Shop", "credit": 50000}])]


# ---------------------------------------------------------------------------
# Admins (admin only)
# ---------------------------------------------------------------------------


@router.post("/admins", status_code=status.HTTP_201_CREATED)
async def create_admin(
    body: AdminCreateRequest,
    current: Annotated[AdminAccount, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.create_admin(db, current, body)
    return with_request_id(success_response(data.model_dump(), "Admin created"), request)


@router.get("/admins")
async def list_admins(
    current: Annotated[AdminAccount, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.list_children(db, current, Role.ADMIN)
    return with_request_id(success_response(data.model_dump()), request)


@router.patch("/admins/{account_id}")
async def update_admin(
    account_id: str,
    changes: ChangeSet,
    current: Annotated[AdminAccount, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.update_child(db, current, Role.ADMIN, account_id, changes)
    return with_request_id(success_response(data.model_dump(), "Admin updated"), request)


@router.delete("/admins/{account_id}")
async def delete_admin(
    account_id: str,
    current: Annotated[AdminAccount, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    await _service.delete_child(db, current, Role.ADMIN, account_id)
    return with_request_id(success_response(message="Admin deleted"), request)


# ---------------------------------------------------------------------------
# SubAdmins (admin only)
# ---------------------------------------------------------------------------


@router.post("/subadmins", status_code=status.HTTP_201_CREATED)
async def create_subadmin(
    body: SubAdminCreateRequest,
    current: Annotated[AdminAccount, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.create_subadmin(db, current, body)
    return with_request_id(success_response(data.model_dump(), "SubAdmin created"), request)


@router.get("/subadmins")
async def list_subadmins(
    current: Annotated[AdminAccount, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.list_children(db, current, Role.SUBADMIN)
    return with_request_id(success_response(data.model_dump()), request)


@router.patch("/subadmins/{account_id}")
async def update_subadmin(
    account_id: str,
    changes: ChangeSet,
    current: Annotated[AdminAccount, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.update_child(db, current, Role.SUBADMIN, account_id, changes)
    return with_request_id(success_response(data.model_dump(), "SubAdmin updated"), request)


@router.delete("/subadmins/{account_id}")
async def delete_subadmin(
    account_id: str,
    current: Annotated[AdminAccount, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    await _service.delete_child(db, current, Role.SUBADMIN, account_id)
    return with_request_id(success_response(message="SubAdmin deleted"), request)


# ---------------------------------------------------------------------------
# Users (subadmin only)
# ---------------------------------------------------------------------------


@router.post("/users", status_code=status.HTTP_201_CREATED)
async def create_user(
    body: UserCreateRequest,
    current: Annotated[SubAdminAccount, Depends(require_subadmin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.create_user(db, current, body)
    return with_request_id(success_response(data.model_dump(), "User created"), request)


@router.get("/users")
async def list_users(
    current: Annotated[SubAdminAccount, Depends(require_subadmin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.list_children(db, current, Role.USER)
    return with_request_id(success_response(data.model_dump()), request)


@router.patch("/users/{account_id}")
async def update_user(
    account_id: str,
    changes: ChangeSet,
    current: Annotated[SubAdminAccount, Depends(require_subadmin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.update_child(db, current, Role.USER, account_id, changes)
    return with_request_id(success_response(data.model_dump(), "User updated"), request)


@router.delete("/users/{account_id}")
async def delete_user(
    account_id: str,
    current: Annotated[SubAdminAccount, Depends(require_subadmin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    await _service.delete_child(db, current, Role.USER, account_id)
    return with_request_id(success_response(message="User deleted"), request)


# ---------------------------------------------------------------------------
# Self-service
# ---------------------------------------------------------------------------


@router.get("/account/balance")
async def get_balance(
    current: Annotated[UserAccount, Depends(require_user)],
    request: Request,
) -> ApiResponse:
    data = _service.get_balance(current)
    return with_request_id(success_response(data.model_dump()), request)


@router.get("/account/status")
async def get_status(
    current: Annotated[Account, Depends(get_current_account)],
    request: Request,
) -> ApiResponse:
    if not isinstance(current, (SubAdminAccount, UserAccount)):
        raise ForbiddenRoleError()
    data = _service.get_status(current)
    return with_request_id(success_response(data.model_dump()), request)


@router.get("/profile")
async def get_profile(
    current: Annotated[Account, Depends(get_current_account)],
    request: Request,
) -> ApiResponse:
    data = _service.get_profile(current)
    return with_request_id(success_response(data.model_dump()), request)


@router.patch("/profile")
async def update_profile(
    changes: ChangeSet,
    current: Annotated[Account, Depends(get_current_account)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.update_profile(db, current, changes)
    message = "Profile updated" if not data.rejected else "Profile partially updated"
    return with_request_id(success_response(data.model_dump(), message), request)
