# dependencies.py
from fastapi import Depends, HTTPException, Request, status
import jwt

import config
import crud
from database import get_db
from pagouai import PagouAiService, pagouai_service
from rate_limit import LoginRateLimiter, login_rate_limiter


def get_payment_gateway() -> PagouAiService:
    return pagouai_service


def get_rate_limiter() -> LoginRateLimiter:
    return login_rate_limiter


def client_ip(request: Request) -> str:
    return request.client.host if request.client else "unknown"


async def get_current_admin(request: Request, db=Depends(get_db)) -> dict:
    token = request.cookies.get(config.SESSION_COOKIE_NAME)
    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Não autenticado")
    try:
        payload = jwt.decode(token, config.SECRET_KEY, algorithms=[config.ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Sessão expirada")
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Sessão inválida")

    admin_id = payload.get("sub")
    if admin_id is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Sessão inválida")

    admin = await crud.get_admin_user(db, admin_id)
    if admin is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Administrador não encontrado")
    return admin
