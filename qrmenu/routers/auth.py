from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Response, status

from qrmenu.core.errors import ConflictError
from qrmenu.deps import get_current_user_id, get_storage
from qrmenu.schemas.users import UserOut
from qrmenu.schemas.validation import validate_credentials, validate_user_create
from qrmenu.services.passwords import upgraded_hash, verify_password
from qrmenu.services.sessions import clear_session_cookie, set_session_cookie
from qrmenu.services.storage import Storage

router = APIRouter(prefix="/api", tags=["auth"])
logger = logging.getLogger(__name__)
AUTH_PREFIX = "[AUTH]"


@router.post("/register", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def register(
    response: Response,
    payload: dict[str, Any] = Body(...),
    storage: Storage = Depends(get_storage),
):
    new_user = validate_user_create(payload)
    if storage.get_user_by_username(new_user.username) is not None:
        raise ConflictError("Username already exists", field="username")

    user = storage.create_user(new_user)
    set_session_cookie(response, user.id)
    logger.info("%s registered user_id=%s", AUTH_PREFIX, user.id)
    return UserOut.model_validate(user)


@router.post("/login", response_model=UserOut)
def login(
    response: Response,
    payload: dict[str, Any] = Body(...),
    storage: Storage = Depends(get_storage),
):
    credentials = validate_credentials(payload)
    user = storage.get_user_by_username(credentials.username)
    if user is None or not verify_password(credentials.password, user.password_hash):
        logger.info("%s login rejected username=%s", AUTH_PREFIX, credentials.username)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    new_hash = upgraded_hash(credentials.password, user.password_hash)
    if new_hash:
        storage.update_user_password_hash(user, new_hash)

    set_session_cookie(response, user.id)
    return UserOut.model_validate(user)


@router.post("/logout")
def logout(response: Response):
    clear_session_cookie(response)
    return {"ok": True}


@router.get("/user", response_model=UserOut)
def current_user(
    user_id: Optional[int] = Depends(get_current_user_id),
    storage: Storage = Depends(get_storage),
):
    user = storage.get_user_by_id(user_id) if user_id is not None else None
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    return UserOut.model_validate(user)
