"""SQLAlchemy ORM models for the modification ledger.

``modifications`` and ``prompt_history`` are the ledger proper. ``users``,
``sites``, ``site_members`` and ``site_pages`` are the minimal shape of the
surrounding site database they reference.
"""

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.ext.hybrid import hybrid_property
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


def utc_now() -> datetime:
    return datetime.now(UTC)


def truncate(text: str, length: int) -> str:
    return text if len(text) <= length else text[:length] + "..."


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


@dataclass(frozen=True)
class Unapplied:
    """The modification has not been published to any page."""


@dataclass(frozen=True)
class Applied:
    """The modification's HTML is live on ``page_id``."""

    page_id: int


ModificationStatus = Unapplied | Applied


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255))
    is_super_admin: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)


class Site(Base):
    __tablename__ = "sites"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    site_name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)

    pages: Mapped[list["SitePage"]] = relationship(back_populates="site", cascade="all, delete-orphan")


class SiteMember(Base):
    """Team membership: who may edit a site's pages."""

    __tablename__ = "site_members"

    site_id: Mapped[int] = mapped_column(ForeignKey("sites.id", ondelete="CASCADE"), primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)


class SitePage(Base):
    __tablename__ = "site_pages"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    site_id: Mapped[int] = mapped_column(ForeignKey("sites.id", ondelete="CASCADE"), index=True)
    title: Mapped[str] = mapped_column(String(255))
    # Live page HTML.
    description: Mapped[str] = mapped_column(Text, default="", nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now, onupdate=utc_now)

    site: Mapped[Site] = relationship(back_populates="pages")


class ModificationRecord(Base):
    """One create-or-edit outcome.

    ``page_id`` is the page the HTML has been applied to; it is the only
    source of the applied/published state, so a record is either unapplied
    (no page, not published) or applied (page set, published).
    ``source_page_id`` is the page the edit was requested against, if any.
    """

    __tablename__ = "modifications"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int | None] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    site_id: Mapped[int] = mapped_column(ForeignKey("sites.id", ondelete="CASCADE"), index=True)
    page_id: Mapped[int | None] = mapped_column(
        ForeignKey("site_pages.id", ondelete="SET NULL"), nullable=True, index=True
    )
    source_page_id: Mapped[int | None] = mapped_column(
        ForeignKey("site_pages.id", ondelete="SET NULL"), nullable=True
    )
    title: Mapped[str] = mapped_column(String(255))
    prompt: Mapped[str] = mapped_column(Text)
    original_html: Mapped[str | None] = mapped_column(Text, nullable=True)
    modified_html: Mapped[str] = mapped_column(Text)
    storage_path: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    session_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    meta: Mapped[dict[str, Any]] = mapped_column("metadata", JSON, default=dict)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now, onupdate=utc_now)

    history: Mapped[list["PromptHistoryEntry"]] = relationship(
        back_populates="modification", cascade="all, delete-orphan", passive_deletes=True
    )

    @property
    def status(self) -> ModificationStatus:
        return Applied(self.page_id) if self.page_id is not None else Unapplied()

    @hybrid_property
    def is_published(self) -> bool:
        return self.page_id is not None

    @is_published.inplace.expression
    @classmethod
    def _is_published_expression(cls):
        return cls.page_id.is_not(None)

    def mark_applied(self, page_id: int) -> None:
        self.page_id = page_id

    def __repr__(self) -> str:
        return f"<ModificationRecord id={self.id} site={self.site_id} status={self.status}>"


class PromptHistoryEntry(Base):
    """Append-only log of agent invocation attempts, successful or not."""

    __tablename__ = "prompt_history"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int | None] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    modification_id: Mapped[int | None] = mapped_column(
        ForeignKey("modifications.id", ondelete="CASCADE"), nullable=True, index=True
    )
    prompt: Mapped[str] = mapped_column(Text)
    response: Mapped[str | None] = mapped_column(Text, nullable=True)
    session_id: Mapped[str | None] = mapped_column(String(255), nullable=True, index=True)
    meta: Mapped[dict[str, Any] | None] = mapped_column("metadata", JSON, nullable=True)
    success: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    error_message: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)

    modification: Mapped[ModificationRecord | None] = relationship(back_populates="history")

    def truncated_prompt(self, length: int = 100) -> str:
        return truncate(self.prompt, length)

    def truncated_response(self, length: int = 100) -> str | None:
        return truncate(self.response, length) if self.response else None
