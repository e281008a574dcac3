from typing import Any

from fastapi import APIRouter, Body, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from article_api.database import get_db
from article_api.schemas import DataResponse, RegisterResponse, TokenResponse
from article_api.services import auth_service

router = APIRouter(prefix="/api", tags=["auth"])

@router.post("/register", status_code=201, response_model=DataResponse[RegisterResponse])
async def register(
    payload: dict[str, Any] | None = Body(None),
    db: AsyncSession = Depends(get_db),
):
    data = await auth_service.register(db, payload or {})
    return {"message": "User registered successfully", "data": data}

@router.post("/login", response_model=DataResponse[TokenResponse])
async def login(
    payload: dict[str, Any] | None = Body(None),
    db: AsyncSession = Depends(get_db),
):
    data = await auth_service.login(db, payload or {})
    return {"message": "Login successful", "data": data}
