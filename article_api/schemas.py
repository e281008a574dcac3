from datetime import datetime
from typing import Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


# --- Envelope ---

class MessageResponse(BaseModel):
    message: str


class DataResponse(BaseModel, Generic[T]):
    message: str
    data: T


# --- User / auth ---

class UserResponse(BaseModel):
    id: int
    name: str
    email: str
    created_at: datetime | None = None


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int


class RegisterResponse(TokenResponse):
    user: UserResponse


# --- Category ---

class CategoryResponse(BaseModel):
    id: int
    name: str
    created_at: datetime | None = None
    updated_at: datetime | None = None


# --- Article ---

class ArticleResponse(BaseModel):
    id: int
    title: str
    content: str
    author: str
    category_id: int
    created_at: datetime | None = None
    updated_at: datetime | None = None
    category: CategoryResponse | None = None


# --- Pagination ---

class PaginatedResponse(BaseModel):
    items: list[ArticleResponse]
    total: int
    page: int
    page_size: int
    pages: int
