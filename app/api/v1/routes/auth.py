from fastapi import APIRouter, HTTPException

from app.core.config import settings
from app.core.security import create_access_token, verify_password
from app.schemas.admin import AdminLoginRequest, TokenOut

router = APIRouter(tags=["auth"])


@router.post("/admin/login", response_model=TokenOut)
def login(body: AdminLoginRequest):
    if not verify_password(body.passcode, settings.ADMIN_PASSCODE_HASH):
        raise HTTPException(status_code=401, detail="Invalid passcode")
    return TokenOut(access_token=create_access_token())
