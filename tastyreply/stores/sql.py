"""SQLAlchemy-backed review store."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import case, delete, desc, func, select, text, true, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from tastyreply.core.errors import Forbidden, InternalError, NotFound
from tastyreply.core.logging import get_logger
from tastyreply.db.models import Base, GenerationSessionRow, Review, User, new_id
from tastyreply.db.session import create_session_factory
from tastyreply.domain.reviews.models import (
    GenerationSession,
    ReplyCandidate,
    ReplyInfo,
    ReviewRecord,
)
from tastyreply.stores.base import MUTABLE_REVIEW_FIELDS, ReviewStore, as_utc, review_fields

log = get_logger("tastyreply.store")

_DIALECT_INSERTS = {"sqlite": sqlite.insert, "postgresql": postgresql.insert}


def _review_record(row: Review) -> ReviewRecord:
    reply = None
    if row.replied and row.reply_text is not None:
        reply = ReplyInfo(
            text=row.reply_text, timestamp=as_utc(row.reply_at), author=row.reply_author
        )
    return ReviewRecord(
        id=row.id,
        user_id=row.user_id,
        platform=row.platform,
        platform_review_id=row.platform_review_id,
        business_id=row.business_id,
        customer_name=row.customer_name or "",
        rating=row.rating,
        text=row.text or "",
        review_date=as_utc(row.review_date),
        replied=bool(row.replied),
        reply=reply,
        sentiment=row.sentiment,
        keywords=list(row.keywords or []),
        synced_at=as_utc(row.synced_at),
    )


def _dump_candidates(replies: list[ReplyCandidate]) -> list[dict[str, Any]]:
    return [{**r, "generated_at": r["generated_at"].isoformat()} for r in replies]


def _load_candidates(raw: list[dict[str, Any]]) -> list[ReplyCandidate]:
    return [
        ReplyCandidate(
            text=r["text"],
            tone=r["tone"],
            source=r.get("source", "ai"),
            generated_at=as_utc(datetime.fromisoformat(r["generated_at"])),
        )
        for r in raw
    ]


def _session_record(row: GenerationSessionRow) -> GenerationSession:
    return GenerationSession(
        id=row.id,
        review_id=row.review_id,
        user_id=row.user_id,
        generated_replies=_load_candidates(row.generated_replies or []),
        selected_reply=row.selected_reply,
        edited=bool(row.edited),
        final_reply=row.final_reply,
        posted=bool(row.posted),
        posted_at=as_utc(row.posted_at),
        created_at=as_utc(row.created_at),
    )


def _user_dict(row: User) -> dict[str, Any]:
    return {
        "id": row.id,
        "google_id": row.google_id,
        "email": row.email,
        "name": row.name,
        "picture": row.picture,
        "created_at": as_utc(row.created_at),
        "last_login": as_utc(row.last_login),
    }


class SqlReviewStore(ReviewStore):
    backend = "sql"

    def __init__(self, engine: Engine, session_factory: sessionmaker | None = None):
        if engine.dialect.name not in _DIALECT_INSERTS:
            raise ValueError(f"Unsupported database dialect: {engine.dialect.name}")
        self.engine = engine
        self._session_factory = session_factory or create_session_factory(engine)

    def create_schema(self) -> None:
        Base.metadata.create_all(self.engine)

    @contextmanager
    def _session(self) -> Iterator[Session]:
        db = self._session_factory()
        try:
            yield db
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            log.error("store_error", extra={"error": str(e)}, exc_info=True)
            raise InternalError("Database unavailable") from e
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def ping(self) -> bool:
        try:
            with self._session() as db:
                db.execute(text("SELECT 1"))
            return True
        except InternalError:
            return False

    def _upsert(self, db: Session, model, values: dict, keys: list[str], set_: dict) -> None:
        """INSERT ... ON CONFLICT (keys) DO UPDATE SET set_."""
        insert = _DIALECT_INSERTS[db.get_bind().dialect.name]
        stmt = insert(model).values(**values)
        stmt = stmt.on_conflict_do_update(
            index_elements=keys,
            set_={k: fn(stmt.excluded) for k, fn in set_.items()},
        )
        db.execute(stmt)

    # --- reviews ---

    def upsert_review(self, record: dict[str, Any]) -> tuple[ReviewRecord, bool]:
        now = datetime.now(timezone.utc)
        existing_reply = record.get("existing_reply")
        key = {
            "platform": record["platform"],
            "platform_review_id": record["platform_review_id"],
            "user_id": record["user_id"],
        }
        values = {
            **key,
            "id": record.get("id") or new_id(),
            **review_fields(record, now),
            "replied": bool(existing_reply),
            "reply_text": existing_reply,
            "reply_at": now if existing_reply else None,
            "reply_author": None,
        }

        # Existing replies win over whatever the platform sends
        keep_reply = Review.replied == true()
        set_: dict[str, Any] = {
            field: (lambda ex, f=field: ex[f]) for field in MUTABLE_REVIEW_FIELDS
        }
        for field in ("replied", "reply_text", "reply_at", "reply_author"):
            set_[field] = lambda ex, f=field: case(
                (keep_reply, getattr(Review, f)), else_=ex[f]
            )

        with self._session() as db:
            exists = db.execute(
                select(Review.id).where(*(getattr(Review, k) == v for k, v in key.items()))
            ).first()
            self._upsert(db, Review, values, list(key), set_)
            row = db.execute(
                select(Review).where(*(getattr(Review, k) == v for k, v in key.items()))
            ).scalar_one()
            return _review_record(row), exists is None

    def list_reviews(
        self, user_id: str, limit: int | None = 50, offset: int = 0
    ) -> list[ReviewRecord]:
        stmt = (
            select(Review)
            .where(Review.user_id == user_id)
            .order_by(desc(func.coalesce(Review.review_date, Review.synced_at)))
            .offset(offset)
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        with self._session() as db:
            return [_review_record(r) for r in db.execute(stmt).scalars()]

    def count_reviews(self, user_id: str) -> int:
        with self._session() as db:
            return db.execute(
                select(func.count()).select_from(Review).where(Review.user_id == user_id)
            ).scalar_one()

    def _owned(self, db: Session, review_id: str, user_id: str) -> Review:
        row = db.get(Review, review_id)
        if row is None:
            raise NotFound("Review not found")
        if row.user_id != user_id:
            raise Forbidden("Unauthorized")
        return row

    def get_review(self, review_id: str, user_id: str) -> ReviewRecord:
        with self._session() as db:
            return _review_record(self._owned(db, review_id, user_id))

    def attach_reply(
        self, review_id: str, user_id: str, text: str, author: str | None
    ) -> ReviewRecord:
        with self._session() as db:
            result = db.execute(
                update(Review)
                .where(Review.id == review_id, Review.user_id == user_id)
                .values(
                    replied=True,
                    reply_text=text,
                    reply_at=datetime.now(timezone.utc),
                    reply_author=author,
                )
            )
            if result.rowcount == 0:
                # Nothing matched: distinguish a foreign review from a missing one
                self._owned(db, review_id, user_id)
            row = db.get(Review, review_id, populate_existing=True)
            return _review_record(row)

    def delete_review(self, review_id: str, user_id: str) -> None:
        with self._session() as db:
            self._owned(db, review_id, user_id)
            db.execute(delete(GenerationSessionRow).where(GenerationSessionRow.review_id == review_id))
            db.execute(delete(Review).where(Review.id == review_id))

    # --- generation sessions ---

    def save_generation(
        self, review_id: str, user_id: str, replies: list[ReplyCandidate]
    ) -> GenerationSession:
        now = datetime.now(timezone.utc)
        values = {
            "id": new_id(),
            "review_id": review_id,
            "user_id": user_id,
            "generated_replies": _dump_candidates(replies),
            "selected_reply": None,
            "edited": False,
            "final_reply": None,
            "posted": False,
            "posted_at": None,
            "created_at": now,
        }
        overwrite = (
            "generated_replies",
            "selected_reply",
            "edited",
            "final_reply",
            "posted",
            "posted_at",
            "created_at",
        )
        with self._session() as db:
            self._owned(db, review_id, user_id)
            self._upsert(
                db,
                GenerationSessionRow,
                values,
                ["review_id", "user_id"],
                {f: (lambda ex, f=f: ex[f]) for f in overwrite},
            )
            row = db.execute(
                select(GenerationSessionRow).where(
                    GenerationSessionRow.review_id == review_id,
                    GenerationSessionRow.user_id == user_id,
                )
            ).scalar_one()
            return _session_record(row)

    def resolve_generation(
        self,
        session_id: str,
        user_id: str,
        *,
        selected_reply: str | None,
        edited: bool,
        final_reply: str | None,
    ) -> GenerationSession:
        with self._session() as db:
            result = db.execute(
                update(GenerationSessionRow)
                .where(
                    GenerationSessionRow.id == session_id,
                    GenerationSessionRow.user_id == user_id,
                )
                .values(selected_reply=selected_reply, edited=edited, final_reply=final_reply)
            )
            if result.rowcount == 0:
                raise NotFound("AI reply not found")
            row = db.get(GenerationSessionRow, session_id, populate_existing=True)
            return _session_record(row)

    def mark_generation_posted(self, review_id: str, user_id: str) -> None:
        with self._session() as db:
            db.execute(
                update(GenerationSessionRow)
                .where(
                    GenerationSessionRow.review_id == review_id,
                    GenerationSessionRow.user_id == user_id,
                )
                .values(posted=True, posted_at=datetime.now(timezone.utc))
            )

    # --- users ---

    def upsert_user(
        self, *, google_id: str, email: str | None, name: str | None, picture: str | None
    ) -> dict[str, Any]:
        now = datetime.now(timezone.utc)
        values = {
            "id": new_id(),
            "google_id": google_id,
            "email": email,
            "name": name,
            "picture": picture,
            "created_at": now,
            "last_login": now,
        }
        with self._session() as db:
            self._upsert(
                db,
                User,
                values,
                ["google_id"],
                {f: (lambda ex, f=f: ex[f]) for f in ("email", "name", "picture", "last_login")},
            )
            row = db.execute(select(User).where(User.google_id == google_id)).scalar_one()
            return _user_dict(row)

    def get_user(self, user_id: str) -> dict[str, Any] | None:
        with self._session() as db:
            row = db.get(User, user_id)
            return _user_dict(row) if row else None


__all__ = ["SqlReviewStore"]
