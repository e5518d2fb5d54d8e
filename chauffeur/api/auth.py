from fastapi import APIRouter, Depends, HTTPException
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.ext.asyncio import AsyncSession
from chauffeur.schemas.auth import TokenOut
from chauffeur.db.session import get_db
from chauffeur.core.security import authenticate_user, create_access_token
from chauffeur.core.audit_log import log_audit
from chauffeur.core.enums import AuditAction

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=TokenOut)
async def login(form_data: OAuth2PasswordRequestForm = Depends(), db: AsyncSession = Depends(get_db)):
    user = await authenticate_user(db, form_data.username, form_data.password)
    if user is None:
        raise HTTPException(status_code=400, detail="Invalid credentials")

    await log_audit(db, user.id, AuditAction.LOGIN, {"username": user.username})
    await db.commit()

    return TokenOut(access_token=create_access_token(str(user.id), user.role))
