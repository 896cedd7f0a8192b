"""
api/routes/admin.py -- User management for admins.

Routes:
  POST   /api/admin/users             -- create a (non-admin) user
  GET    /api/admin/users             -- list users, newest first
  DELETE /api/admin/users/{username}  -- delete a user

Every route requires the Role Gate (router-level require_admin), which itself
runs the Session Guard first: 401 without a live session, 403 for a
non-admin token.

Deleting a user does not end that user's live sessions. Their tokens remain
usable until the session markers expire (10 minutes at most).
"""

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.exc import IntegrityError

from api.models import CreatedUser, MessageResponse, UserCreatedResponse, UserCredentials, UserSummary
from auth.dependencies import require_admin
from auth.models import Identity
from auth.store import UserStore
from auth.tokens import hash_password
from core.audit import log_admin_action

router = APIRouter(dependencies=[Depends(require_admin)])


def _username_taken() -> HTTPException:
    return HTTPException(
        status_code=400,
        detail={"code": "username_taken", "message": "Username already exists"},
    )


@router.post("/admin/users", response_model=UserCreatedResponse, status_code=201)
def create_user(
    request: Request,
    body: UserCredentials,
    admin: Identity = Depends(require_admin),
) -> UserCreatedResponse:
    user_store: UserStore = request.app.state.user_store
    if user_store.get_by_username(body.username) is not None:
        raise _username_taken()
    try:
        user = user_store.create_user(body.username, hash_password(body.password))
    except IntegrityError as exc:
        raise _username_taken() from exc
    log_admin_action("USER_CREATED", admin.username, user.username)
    return UserCreatedResponse(user=CreatedUser(id=user.id, username=user.username))


@router.get("/admin/users", response_model=list[UserSummary])
def list_users(request: Request) -> list[UserSummary]:
    user_store: UserStore = request.app.state.user_store
    return [UserSummary.from_user(u) for u in user_store.list_users()]


@router.delete("/admin/users/{username}", response_model=MessageResponse)
def delete_user(
    request: Request,
    username: str,
    admin: Identity = Depends(require_admin),
) -> MessageResponse:
    user_store: UserStore = request.app.state.user_store
    if not user_store.delete_user(username):
        raise HTTPException(
            status_code=404,
            detail={"code": "not_found", "message": "User not found"},
        )
    log_admin_action("USER_DELETED", admin.username, username)
    return MessageResponse(message="User deleted successfully")
