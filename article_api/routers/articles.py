from typing import Any

from fastapi import APIRouter, Body, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from article_api.database import get_db
from article_api.dependencies import ArticleListParams, get_current_user
from article_api.exceptions import ResourceNotFound
from article_api.schemas import ArticleResponse, DataResponse, MessageResponse, PaginatedResponse
from article_api.services import article_service

router = APIRouter(
    prefix="/api/articles",
    tags=["articles"],
    dependencies=[Depends(get_current_user)],
)

@router.get("", response_model=DataResponse[PaginatedResponse])
async def list_articles(
    params: ArticleListParams = Depends(),
    db: AsyncSession = Depends(get_db),
):
    page = await article_service.list_articles(db, params)
    return {"message": "Articles fetched successfully", "data": page}

@router.post("", status_code=201, response_model=DataResponse[ArticleResponse])
async def create_article(
    payload: dict[str, Any] | None = Body(None),
    db: AsyncSession = Depends(get_db),
):
    article = await article_service.create_article(db, payload or {})
    return {"message": "Article created successfully", "data": article}

@router.get("/{article_id}", response_model=DataResponse[ArticleResponse])
async def get_article(article_id: int, db: AsyncSession = Depends(get_db)):
    article = await article_service.get_article(db, article_id)
    if article is None:
        raise ResourceNotFound("Article not found")
    return {"message": "Article fetched successfully", "data": article}

@router.put("/{article_id}", response_model=DataResponse[ArticleResponse])
async def update_article(
    article_id: int,
    payload: dict[str, Any] | None = Body(None),
    db: AsyncSession = Depends(get_db),
):
    article = await article_service.update_article(db, article_id, payload or {})
    if article is None:
        raise ResourceNotFound("Article not found")
    return {"message": "Article updated successfully", "data": article}

@router.delete("/{article_id}", response_model=MessageResponse)
async def delete_article(article_id: int, db: AsyncSession = Depends(get_db)):
    deleted = await article_service.delete_article(db, article_id)
    if not deleted:
        raise ResourceNotFound("Article not found")
    return {"message": "Article deleted successfully"}
