"""Database seeder: a demo user, five categories and ten sample articles."""
import argparse
import asyncio
import random
import secrets
import string

from article_api.database import create_schema, engine, session_scope
from article_api.models import Article, Category, User
from article_api.security import hash_password

CATEGORIES = ["Technology", "Sport", "Education", "Travel", "Food"]

DEMO_USER = {"name": "Riana", "email": "riana@example.com", "password": "secret123"}


def _random_text(length: int = 100) -> str:
    alphabet = string.ascii_letters + string.digits
    return "".join(secrets.choice(alphabet) for _ in range(length))


async def seed(articles: int = 10, reset: bool = False) -> None:
    await create_schema(reset=reset)

    async with session_scope() as session:
        session.add(
            User(
                name=DEMO_USER["name"],
                email=DEMO_USER["email"],
                password=hash_password(DEMO_USER["password"]),
            )
        )

        categories = [Category(name=name) for name in CATEGORIES]
        session.add_all(categories)
        await session.flush()
        print(f"  Created {len(categories)} categories")

        for i in range(1, articles + 1):
            session.add(
                Article(
                    title=f"Sample Article {i}",
                    content=_random_text(),
                    author=f"Author {i}",
                    category_id=random.choice(categories).id,
                )
            )
        print(f"  Created {articles} articles")

    await engine.dispose()
    print(f"Login with {DEMO_USER['email']} / {DEMO_USER['password']}")


def main():
    parser = argparse.ArgumentParser(description="Seed the article database")
    parser.add_argument("--articles", type=int, default=10, help="Number of sample articles")
    parser.add_argument("--reset", action="store_true", help="Drop and recreate all tables first")
    args = parser.parse_args()
    asyncio.run(seed(articles=args.articles, reset=args.reset))


if __name__ == "__main__":
    main()
