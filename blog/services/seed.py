# blog/services/seed.py

"""
Демо-данные: два пользователя, два поста и ветка комментариев.

Включается настройкой SEED_DEMO_DATA. Пользователи создаются, если их нет;
посты и комментарии - только если коллекции еще ни разу не записывались.
"""

import logging
from datetime import datetime, timezone

from sqlalchemy.orm import Session

from blog.models import User
from blog.schemas import AuthorRef, Comment, Post, Role, UserCreate
from blog.services.auth_service import create_user
from blog.storage import COMMENTS_KEY, POSTS_KEY, StorageAdapter

logger = logging.getLogger(__name__)

DEMO_USERS = [
    ("admin@blog.com", "Admin User", "admin123", Role.ADMIN),
    ("author@blog.com", "John Author", "author123", Role.AUTHOR),
]

TYPESCRIPT_POST = """# Getting Started with React and TypeScript

React and TypeScript make a powerful combination for building robust web applications. \
In this post, we'll explore how to set up a new project and leverage TypeScript's type safety.

## Why TypeScript?

- **Type Safety**: Catch errors at compile time
- **Better IDE Support**: Enhanced autocomplete and refactoring
- **Improved Documentation**: Types serve as documentation

```bash
npx create-react-app my-app --template typescript
```
"""

REST_POST = """# Building RESTful APIs

REST uses standard HTTP methods:

- **GET**: Retrieve data
- **POST**: Create new resources
- **PUT**: Update existing resources
- **DELETE**: Remove resources

Use proper status codes, handle errors and document your API.
"""


def _at(value: str) -> datetime:
    return datetime.fromisoformat(value).replace(tzinfo=timezone.utc)


def seed_users(db: Session) -> dict:
    """Создать демо-пользователей; вернуть словарь role -> User"""
    users = {}
    for email, username, password, role in DEMO_USERS:
        db_user = db.query(User).filter(User.email == email).first()
        if db_user is None:
            db_user = create_user(
                db,
                UserCreate(email=email, username=username, password=password),
                role=role,
            )
            logger.info("Demo user %s created", email)
        users[role] = db_user
    return users


def seed_demo_data(db: Session, storage: StorageAdapter) -> None:
    users = seed_users(db)
    admin, author = users[Role.ADMIN], users[Role.AUTHOR]

    if storage.read(POSTS_KEY) is None:
        posts = [
            Post(
                id="1",
                title="Getting Started with React and TypeScript",
                content=TYPESCRIPT_POST,
                excerpt="Learn how to combine React with TypeScript for better "
                        "development experience and type safety.",
                author=AuthorRef(id=author.id, username=author.username),
                tags=["React", "TypeScript", "JavaScript"],
                created_at=_at("2024-01-15T10:00:00"),
                updated_at=_at("2024-01-15T10:00:00"),
            ),
            Post(
                id="2",
                title="Building RESTful APIs with Node.js and Express",
                content=REST_POST,
                excerpt="A comprehensive guide to building RESTful APIs.",
                author=AuthorRef(id=admin.id, username=admin.username),
                tags=["Node.js", "Express", "API", "Backend"],
                created_at=_at("2024-01-10T14:30:00"),
                updated_at=_at("2024-01-10T14:30:00"),
            ),
        ]
        storage.write(POSTS_KEY, [p.to_record() for p in posts])
        logger.info("Seeded %d demo posts", len(posts))

    if storage.read(COMMENTS_KEY) is None:
        reply = Comment(
            id="2",
            post_id="1",
            author=author.username,
            text="Thanks! I'm glad you found it useful.",
            created_at=_at("2024-01-16T10:00:00"),
        )
        thread = Comment(
            id="1",
            post_id="1",
            author="Jane Developer",
            text="Great introduction to TypeScript! The setup instructions helped.",
            created_at=_at("2024-01-16T09:00:00"),
            replies=[reply],
        )
        storage.write(COMMENTS_KEY, [thread.to_record()])
        logger.info("Seeded demo comments")
