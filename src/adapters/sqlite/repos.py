"""
SQLite repositories.

Every repository is bound to the connection of the unit of work that created
it and never commits on its own. Unique-constraint failures are translated
into UniqueViolationError carrying the constraint name SQLite reports
("table.column").
"""

from __future__ import annotations

import builtins
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from typing import Any
from uuid import UUID

from src.core.ports.db import PostListQuery, UniqueViolationError, UserListQuery
from src.domain.entities import (
    AuthorBrief,
    Comment,
    Post,
    PostBrief,
    PublishRequest,
    PublishRequestStatus,
    Tag,
    User,
    tag_name_key,
)

# -----------------------------------------------------------------------------
# Helper functions
# -----------------------------------------------------------------------------

_UNIQUE_PREFIX = "UNIQUE constraint failed: "

_SORT_COLUMNS = {
    "created_at": "p.created_at",
    "updated_at": "p.updated_at",
    "published_at": "p.published_at",
    "view_count": "p.view_count",
    "title": "p.title",
}


def dict_factory(cursor: sqlite3.Cursor, row: tuple[Any, ...]) -> dict[str, Any]:
    """Convert SQLite row to dictionary."""
    return {col[0]: row[idx] for idx, col in enumerate(cursor.description)}


def parse_dt(s: str | None) -> datetime | None:
    return datetime.fromisoformat(s) if s else None


def _iso(dt: datetime | None) -> str | None:
    return dt.isoformat() if dt else None


@contextmanager
def translate_integrity_errors() -> Iterator[None]:
    """Re-raise unique violations as UniqueViolationError; other integrity errors pass through."""
    try:
        yield
    except sqlite3.IntegrityError as e:
        message = str(e)
        if message.startswith(_UNIQUE_PREFIX):
            constraint = message[len(_UNIQUE_PREFIX):].strip()
            raise UniqueViolationError(constraint, message) from e
        raise


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class SQLiteRepoBase:
    """Base class for repositories sharing a unit of work's connection."""

    def __init__(self, conn: sqlite3.Connection):
        self._conn = conn


# -----------------------------------------------------------------------------
# Users
# -----------------------------------------------------------------------------


class SQLiteUserRepo(SQLiteRepoBase):
    def get_by_id(self, user_id: UUID) -> User | None:
        row = self._conn.execute("SELECT * FROM users WHERE id = ?", (str(user_id),)).fetchone()
        return self._map_row(row) if row else None

    def get_by_email(self, email: str) -> User | None:
        row = self._conn.execute("SELECT * FROM users WHERE email = ?", (email,)).fetchone()
        return self._map_row(row) if row else None

    def save(self, user: User) -> User:
        with translate_integrity_errors():
            self._conn.execute(
                """
                INSERT INTO users (id, email, name, role, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    email=excluded.email,
                    name=excluded.name,
                    role=excluded.role,
                    updated_at=excluded.updated_at
                """,
                (
                    str(user.id),
                    user.email,
                    user.name,
                    user.role,
                    user.created_at.isoformat(),
                    user.updated_at.isoformat(),
                ),
            )
        return user

    def list_with_counts(
        self, query: UserListQuery
    ) -> tuple[builtins.list[tuple[User, int, int]], int]:
        clauses: builtins.list[str] = []
        params: builtins.list[Any] = []

        if query.role:
            clauses.append("u.role = ?")
            params.append(query.role)
        if query.search:
            term = f"%{_escape_like(query.search)}%"
            clauses.append("(u.name LIKE ? ESCAPE '\\' OR u.email LIKE ? ESCAPE '\\')")
            params.extend([term, term])

        where = " AND ".join(clauses) if clauses else "1=1"
        total_row = self._conn.execute(
            f"SELECT COUNT(*) AS n FROM users u WHERE {where}", params
        ).fetchone()
        rows = self._conn.execute(
            f"""
            SELECT u.*,
                   (SELECT COUNT(*) FROM posts p WHERE p.author_id = u.id) AS posts_count,
                   (SELECT COUNT(*) FROM comments c WHERE c.author_id = u.id) AS comments_count
            FROM users u WHERE {where}
            ORDER BY u.created_at DESC, u.id ASC LIMIT ? OFFSET ?
            """,
            [*params, query.limit, query.offset],
        ).fetchall()

        users = [
            (self._map_row(r), int(r["posts_count"]), int(r["comments_count"])) for r in rows
        ]
        return users, int(total_row["n"])

    def count_content(self, user_id: UUID) -> tuple[int, int]:
        row = self._conn.execute(
            """
            SELECT (SELECT COUNT(*) FROM posts WHERE author_id = ?) AS posts_count,
                   (SELECT COUNT(*) FROM comments WHERE author_id = ?) AS comments_count
            """,
            (str(user_id), str(user_id)),
        ).fetchone()
        return int(row["posts_count"]), int(row["comments_count"])

    def _map_row(self, row: dict[str, Any]) -> User:
        return User(
            id=UUID(row["id"]),
            email=row["email"],
            name=row["name"],
            role=row["role"],
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )


# -----------------------------------------------------------------------------
# Tags
# -----------------------------------------------------------------------------


def _map_tag(row: dict[str, Any]) -> Tag:
    return Tag(
        id=UUID(row["id"]),
        name=row["name"],
        slug=row["slug"],
        created_at=datetime.fromisoformat(row["created_at"]),
        updated_at=datetime.fromisoformat(row["updated_at"]),
    )


class SQLiteTagRepo(SQLiteRepoBase):
    def get_by_id(self, tag_id: UUID) -> Tag | None:
        row = self._conn.execute("SELECT * FROM tags WHERE id = ?", (str(tag_id),)).fetchone()
        return _map_tag(row) if row else None

    def get_by_slug(self, slug: str) -> Tag | None:
        row = self._conn.execute("SELECT * FROM tags WHERE slug = ?", (slug,)).fetchone()
        return _map_tag(row) if row else None

    def get_by_name(self, name: str) -> Tag | None:
        row = self._conn.execute(
            "SELECT * FROM tags WHERE name_key = ?", (tag_name_key(name),)
        ).fetchone()
        return _map_tag(row) if row else None

    def slug_owner(self, slug: str) -> UUID | None:
        row = self._conn.execute("SELECT id FROM tags WHERE slug = ?", (slug,)).fetchone()
        return UUID(row["id"]) if row else None

    def insert(self, tag: Tag) -> Tag:
        with translate_integrity_errors():
            self._conn.execute(
                """
                INSERT INTO tags (id, name, name_key, slug, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    str(tag.id),
                    tag.name,
                    tag.name_key,
                    tag.slug,
                    tag.created_at.isoformat(),
                    tag.updated_at.isoformat(),
                ),
            )
        return tag

    def update(self, tag: Tag) -> Tag:
        with translate_integrity_errors():
            self._conn.execute(
                "UPDATE tags SET name = ?, name_key = ?, slug = ?, updated_at = ? WHERE id = ?",
                (tag.name, tag.name_key, tag.slug, tag.updated_at.isoformat(), str(tag.id)),
            )
        return tag

    def delete(self, tag_id: UUID) -> None:
        self._conn.execute("DELETE FROM tags WHERE id = ?", (str(tag_id),))

    def count_posts(self, tag_id: UUID) -> int:
        row = self._conn.execute(
            "SELECT COUNT(*) AS n FROM post_tags WHERE tag_id = ?", (str(tag_id),)
        ).fetchone()
        return int(row["n"])

    def list_with_counts(self) -> list[tuple[Tag, int]]:
        rows = self._conn.execute(
            """
            SELECT t.*, COUNT(pt.post_id) AS posts_count
            FROM tags t
            LEFT JOIN post_tags pt ON pt.tag_id = t.id
            GROUP BY t.id
            ORDER BY t.name_key ASC
            """
        ).fetchall()
        return [(_map_tag(r), int(r["posts_count"])) for r in rows]

    def list_published_posts(self, tag_id: UUID) -> list[Post]:
        rows = self._conn.execute(
            """
            SELECT p.* FROM posts p
            JOIN post_tags pt ON pt.post_id = p.id
            WHERE pt.tag_id = ? AND p.status = 'PUBLISHED'
            ORDER BY p.published_at DESC
            """,
            (str(tag_id),),
        ).fetchall()
        return _PostMapper(self._conn).map_rows(rows)


# -----------------------------------------------------------------------------
# Posts
# -----------------------------------------------------------------------------


class _PostMapper:
    """Maps post rows and attaches their tags in one query."""

    def __init__(self, conn: sqlite3.Connection):
        self._conn = conn

    def map_rows(self, rows: list[dict[str, Any]]) -> list[Post]:
        if not rows:
            return []

        ids = [r["id"] for r in rows]
        placeholders = ", ".join("?" for _ in ids)
        tag_rows = self._conn.execute(
            f"""
            SELECT pt.post_id AS post_id, t.*
            FROM post_tags pt
            JOIN tags t ON t.id = pt.tag_id
            WHERE pt.post_id IN ({placeholders})
            ORDER BY pt.position ASC
            """,
            ids,
        ).fetchall()

        tags_by_post: dict[str, list[Tag]] = {}
        for tr in tag_rows:
            tags_by_post.setdefault(tr["post_id"], []).append(_map_tag(tr))

        return [self._map_row(r, tags_by_post.get(r["id"], [])) for r in rows]

    def _map_row(self, row: dict[str, Any], tags: list[Tag]) -> Post:
        return Post(
            id=UUID(row["id"]),
            title=row["title"],
            slug=row["slug"],
            content=row["content"],
            excerpt=row["excerpt"],
            cover_image=row["cover_image"],
            status=row["status"],
            view_count=row["view_count"],
            is_featured=bool(row["is_featured"]),
            published_at=parse_dt(row["published_at"]),
            author_id=UUID(row["author_id"]),
            tags=tags,
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )


class SQLitePostRepo(SQLiteRepoBase):
    def __init__(self, conn: sqlite3.Connection):
        super().__init__(conn)
        self._mapper = _PostMapper(conn)

    def get_by_id(self, post_id: UUID) -> Post | None:
        row = self._conn.execute("SELECT * FROM posts WHERE id = ?", (str(post_id),)).fetchone()
        return self._mapper.map_rows([row])[0] if row else None

    def get_by_slug(self, slug: str) -> Post | None:
        row = self._conn.execute("SELECT * FROM posts WHERE slug = ?", (slug,)).fetchone()
        return self._mapper.map_rows([row])[0] if row else None

    def slug_owner(self, slug: str) -> UUID | None:
        row = self._conn.execute("SELECT id FROM posts WHERE slug = ?", (slug,)).fetchone()
        return UUID(row["id"]) if row else None

    def insert(self, post: Post) -> Post:
        with translate_integrity_errors():
            self._conn.execute(
                """
                INSERT INTO posts (
                    id, title, slug, content, excerpt, cover_image, status,
                    view_count, is_featured, published_at, author_id,
                    created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    str(post.id),
                    post.title,
                    post.slug,
                    post.content,
                    post.excerpt,
                    post.cover_image,
                    post.status,
                    post.view_count,
                    int(post.is_featured),
                    _iso(post.published_at),
                    str(post.author_id),
                    post.created_at.isoformat(),
                    post.updated_at.isoformat(),
                ),
            )
        return post

    def update(self, post: Post) -> Post:
        # view_count is owned by increment_view_count and never overwritten here
        with translate_integrity_errors():
            self._conn.execute(
                """
                UPDATE posts SET
                    title = ?, slug = ?, content = ?, excerpt = ?, cover_image = ?,
                    status = ?, is_featured = ?, published_at = ?, updated_at = ?
                WHERE id = ?
                """,
                (
                    post.title,
                    post.slug,
                    post.content,
                    post.excerpt,
                    post.cover_image,
                    post.status,
                    int(post.is_featured),
                    _iso(post.published_at),
                    post.updated_at.isoformat(),
                    str(post.id),
                ),
            )
        return post

    def delete(self, post_id: UUID) -> None:
        # Associations, requests and comments go with it (ON DELETE CASCADE)
        self._conn.execute("DELETE FROM posts WHERE id = ?", (str(post_id),))

    def replace_tags(self, post_id: UUID, tag_ids: builtins.list[UUID]) -> None:
        self._conn.execute("DELETE FROM post_tags WHERE post_id = ?", (str(post_id),))
        with translate_integrity_errors():
            for position, tag_id in enumerate(tag_ids):
                self._conn.execute(
                    "INSERT INTO post_tags (post_id, tag_id, position) VALUES (?, ?, ?)",
                    (str(post_id), str(tag_id), position),
                )

    def increment_view_count(self, post_id: UUID) -> int:
        self._conn.execute(
            "UPDATE posts SET view_count = view_count + 1 WHERE id = ?", (str(post_id),)
        )
        row = self._conn.execute(
            "SELECT view_count FROM posts WHERE id = ?", (str(post_id),)
        ).fetchone()
        return int(row["view_count"]) if row else 0

    def list(self, query: PostListQuery) -> tuple[builtins.list[Post], int]:
        clauses: builtins.list[str] = []
        params: builtins.list[Any] = []

        if query.status:
            clauses.append("p.status = ?")
            params.append(query.status)
        if query.author_id:
            clauses.append("p.author_id = ?")
            params.append(str(query.author_id))
        if query.visible_to:
            clauses.append("(p.status = 'PUBLISHED' OR p.author_id = ?)")
            params.append(str(query.visible_to))
        if query.tag_slug:
            clauses.append(
                "EXISTS (SELECT 1 FROM post_tags pt JOIN tags t ON t.id = pt.tag_id "
                "WHERE pt.post_id = p.id AND t.slug = ?)"
            )
            params.append(query.tag_slug)
        if query.is_featured is not None:
            clauses.append("p.is_featured = ?")
            params.append(int(query.is_featured))
        if query.search:
            # LIKE is case-insensitive for ASCII in SQLite
            term = f"%{_escape_like(query.search)}%"
            clauses.append(
                "(p.title LIKE ? ESCAPE '\\' OR p.content LIKE ? ESCAPE '\\' "
                "OR p.excerpt LIKE ? ESCAPE '\\')"
            )
            params.extend([term, term, term])

        where = " AND ".join(clauses) if clauses else "1=1"
        order_col = _SORT_COLUMNS[query.sort_by]
        direction = "ASC" if query.sort_order == "asc" else "DESC"

        total_row = self._conn.execute(
            f"SELECT COUNT(*) AS n FROM posts p WHERE {where}", params
        ).fetchone()
        rows = self._conn.execute(
            f"SELECT p.* FROM posts p WHERE {where} "
            f"ORDER BY {order_col} {direction}, p.id ASC LIMIT ? OFFSET ?",
            [*params, query.limit, query.offset],
        ).fetchall()

        return self._mapper.map_rows(rows), int(total_row["n"])


# -----------------------------------------------------------------------------
# Publish requests
# -----------------------------------------------------------------------------


class SQLitePublishRequestRepo(SQLiteRepoBase):
    # Requests are read together with summaries of their post and author.
    _SELECT = """
        SELECT r.*,
               p.title AS post_title, p.slug AS post_slug, p.excerpt AS post_excerpt,
               p.cover_image AS post_cover_image, p.status AS post_status,
               u.name AS author_name, u.email AS author_email
        FROM publish_requests r
        LEFT JOIN posts p ON p.id = r.post_id
        LEFT JOIN users u ON u.id = r.author_id
    """

    def get_by_id(self, request_id: UUID) -> PublishRequest | None:
        row = self._conn.execute(self._SELECT + " WHERE r.id = ?", (str(request_id),)).fetchone()
        return self._map_row(row) if row else None

    def get_pending_for_post(self, post_id: UUID) -> PublishRequest | None:
        row = self._conn.execute(
            self._SELECT + " WHERE r.post_id = ? AND r.status = 'PENDING'",
            (str(post_id),),
        ).fetchone()
        return self._map_row(row) if row else None

    def insert(self, request: PublishRequest) -> PublishRequest:
        with translate_integrity_errors():
            self._conn.execute(
                """
                INSERT INTO publish_requests (
                    id, post_id, author_id, status, message, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    str(request.id),
                    str(request.post_id),
                    str(request.author_id),
                    request.status,
                    request.message,
                    request.created_at.isoformat(),
                    request.updated_at.isoformat(),
                ),
            )
        return request

    def update(self, request: PublishRequest) -> PublishRequest:
        with translate_integrity_errors():
            self._conn.execute(
                "UPDATE publish_requests SET status = ?, message = ?, updated_at = ? WHERE id = ?",
                (request.status, request.message, request.updated_at.isoformat(), str(request.id)),
            )
        return request

    def delete(self, request_id: UUID) -> None:
        self._conn.execute("DELETE FROM publish_requests WHERE id = ?", (str(request_id),))

    def list(
        self,
        *,
        status: PublishRequestStatus | None = None,
        author_id: UUID | None = None,
    ) -> builtins.list[PublishRequest]:
        query = self._SELECT + " WHERE 1=1"
        params: builtins.list[str] = []
        if status:
            query += " AND r.status = ?"
            params.append(status)
        if author_id:
            query += " AND r.author_id = ?"
            params.append(str(author_id))
        query += " ORDER BY r.created_at DESC"

        rows = self._conn.execute(query, params).fetchall()
        return [self._map_row(r) for r in rows]

    def _map_row(self, row: dict[str, Any]) -> PublishRequest:
        post = None
        if row["post_title"] is not None:
            post = PostBrief(
                id=UUID(row["post_id"]),
                title=row["post_title"],
                slug=row["post_slug"],
                excerpt=row["post_excerpt"],
                cover_image=row["post_cover_image"],
                status=row["post_status"],
            )
        author = None
        if row["author_email"] is not None:
            author = AuthorBrief(
                id=UUID(row["author_id"]), name=row["author_name"], email=row["author_email"]
            )
        return PublishRequest(
            id=UUID(row["id"]),
            post_id=UUID(row["post_id"]),
            author_id=UUID(row["author_id"]),
            status=row["status"],
            message=row["message"],
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
            post=post,
            author=author,
        )


# -----------------------------------------------------------------------------
# Comments
# -----------------------------------------------------------------------------


class SQLiteCommentRepo(SQLiteRepoBase):
    def get_by_id(self, comment_id: UUID) -> Comment | None:
        row = self._conn.execute(
            "SELECT * FROM comments WHERE id = ?", (str(comment_id),)
        ).fetchone()
        return self._map_row(row) if row else None

    def insert(self, comment: Comment) -> Comment:
        self._conn.execute(
            """
            INSERT INTO comments (id, post_id, author_id, content, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (
                str(comment.id),
                str(comment.post_id),
                str(comment.author_id),
                comment.content,
                comment.created_at.isoformat(),
                comment.updated_at.isoformat(),
            ),
        )
        return comment

    def update(self, comment: Comment) -> Comment:
        self._conn.execute(
            "UPDATE comments SET content = ?, updated_at = ? WHERE id = ?",
            (comment.content, comment.updated_at.isoformat(), str(comment.id)),
        )
        return comment

    def delete(self, comment_id: UUID) -> None:
        self._conn.execute("DELETE FROM comments WHERE id = ?", (str(comment_id),))

    def list_for_post(self, post_id: UUID) -> list[Comment]:
        rows = self._conn.execute(
            "SELECT * FROM comments WHERE post_id = ? ORDER BY created_at DESC",
            (str(post_id),),
        ).fetchall()
        return [self._map_row(r) for r in rows]

    def list_by_author(self, author_id: UUID) -> list[Comment]:
        rows = self._conn.execute(
            "SELECT * FROM comments WHERE author_id = ? ORDER BY created_at DESC",
            (str(author_id),),
        ).fetchall()
        return [self._map_row(r) for r in rows]

    def _map_row(self, row: dict[str, Any]) -> Comment:
        return Comment(
            id=UUID(row["id"]),
            post_id=UUID(row["post_id"]),
            author_id=UUID(row["author_id"]),
            content=row["content"],
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )
