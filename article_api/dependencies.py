import logging

from fastapi import Depends, Query
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from article_api.config import settings
from article_api.database import get_db
from article_api.exceptions import AuthenticationFailure
from article_api.models import MAX_ID, User
from article_api.repositories import UserRepository
from article_api.security import decode_access_token

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    Auth gate: resolve the bearer token to a live user or fail with 401.

    Attach to a router via ``dependencies=[Depends(get_current_user)]`` so
    it runs before any handler logic.
    """
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise AuthenticationFailure()

    user_id = decode_access_token(credentials.credentials)
    user = await UserRepository(db).find(user_id)
    if user is None:
        logger.warning("Token subject %s does not resolve to an active user", user_id)
        raise AuthenticationFailure()
    return user


class ArticleListParams:
    """
    Request-scoped parameters for the article listing.

    Usage in a router::

        @router.get("")
        async def list_articles(params: ArticleListParams = Depends()):
            ...

    Attributes
    ----------
    search:
        Substring matched against title and content; ``None`` disables
        filtering.  An empty string matches every article.
    page:
        1-based page number.  Values below 1 are treated as 1; values
        above ``MAX_ID`` are rejected with 422.
    per_page:
        Fixed page size, ``settings.ARTICLES_PER_PAGE``.
    offset:
        Computed SQL OFFSET derived from *page* and *per_page*.
    """

    def __init__(
        self,
        search: str | None = Query(
            None,
            description="Search articles by title or content.",
        ),
        page: int = Query(
            1,
            le=MAX_ID,
            description="Page number (1-based).",
        ),
    ) -> None:
        self.search = search
        self.page = max(page, 1)
        self.per_page = settings.ARTICLES_PER_PAGE

    @property
    def offset(self) -> int:
        """SQL OFFSET value computed from the current page and page size."""
        return (self.page - 1) * self.per_page
