# shidduch/routers/auth_router.py
# Sign-up and sessions live with the hosted auth provider; this service only
# verifies the access tokens it issues.

from fastapi import APIRouter, Depends, HTTPException, Request, status
from dotenv import load_dotenv
from types import SimpleNamespace
from typing import Optional
import jwt, os

load_dotenv()

router = APIRouter()

SECRET_KEY = os.getenv("JWT_SECRET", "shidduch-dev-secret")
ALGORITHM = "HS256"
JWT_AUDIENCE = os.getenv("JWT_AUDIENCE", "authenticated")


def _extract_token(request: Request) -> Optional[str]:
    auth_header = request.headers.get("Authorization")
    if auth_header and auth_header.lower().startswith("bearer "):
        return auth_header.split(" ", 1)[1].strip()
    return request.cookies.get("token")


async def get_current_user(request: Request):
    """
    Dependency to extract and validate the provider JWT from the Authorization
    header or cookies. Returns user object with `.id` and `.email`.
    """
    token = _extract_token(request)
    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing authentication token")

    decode_kwargs = {"algorithms": [ALGORITHM]}
    if JWT_AUDIENCE:
        decode_kwargs["audience"] = JWT_AUDIENCE
    else:
        decode_kwargs["options"] = {"verify_aud": False}

    try:
        payload = jwt.decode(token, SECRET_KEY, **decode_kwargs)
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token expired")
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=401, detail="Invalid token")

    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(status_code=401, detail="Invalid token payload")

    return SimpleNamespace(id=str(user_id), email=payload.get("email"))


@router.get("/me")
async def me(current_user=Depends(get_current_user)):
    return {"id": current_user.id, "email": current_user.email}
