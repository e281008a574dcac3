from typing import Any

from fastapi import APIRouter, Body, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from article_api.database import get_db
from article_api.dependencies import get_current_user
from article_api.exceptions import ResourceNotFound
from article_api.schemas import CategoryResponse, DataResponse, MessageResponse
from article_api.services import category_service

router = APIRouter(
    prefix="/api/categories",
    tags=["categories"],
    dependencies=[Depends(get_current_user)],
)

@router.get("", response_model=DataResponse[list[CategoryResponse]])
async def list_categories(db: AsyncSession = Depends(get_db)):
    categories = await category_service.list_categories(db)
    return {"message": "Categories retrieved successfully", "data": categories}

@router.post("", status_code=201, response_model=DataResponse[CategoryResponse])
async def create_category(
    payload: dict[str, Any] | None = Body(None),
    db: AsyncSession = Depends(get_db),
):
    category = await category_service.create_category(db, payload or {})
    return {"message": "Category created successfully", "data": category}

@router.put("/{category_id}", response_model=DataResponse[CategoryResponse])
async def update_category(
    category_id: int,
    payload: dict[str, Any] | None = Body(None),
    db: AsyncSession = Depends(get_db),
):
    category = await category_service.update_category(db, category_id, payload or {})
    if category is None:
        raise ResourceNotFound("Category not found")
    return {"message": "Category updated successfully", "data": category}

@router.delete("/{category_id}", response_model=MessageResponse)
async def delete_category(category_id: int, db: AsyncSession = Depends(get_db)):
    deleted = await category_service.delete_category(db, category_id)
    if not deleted:
        raise ResourceNotFound("Category not found")
    return {"message": "Category deleted successfully"}
