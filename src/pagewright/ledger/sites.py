"""Read/write access to users, sites, memberships and pages."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from pagewright.core.errors import LedgerFailure, NotFound

from .models import Site, SiteMember, SitePage, User

if TYPE_CHECKING:
    from sqlalchemy.orm import Session, sessionmaker

logger = logging.getLogger(__name__)


class SiteRepository:
    """The site database the ledger and artifact store refer to."""

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self.session_factory = session_factory

    def create_user(self, name: str, is_super_admin: bool = False) -> User:
        try:
            with self.session_factory.begin() as session:
                user = User(name=name, is_super_admin=is_super_admin)
                session.add(user)
        except SQLAlchemyError as e:
            raise LedgerFailure(f"Could not create user {name!r}: {e}") from e
        return user

    def create_site(self, site_name: str) -> Site:
        try:
            with self.session_factory.begin() as session:
                site = Site(site_name=site_name)
                session.add(site)
        except IntegrityError as e:
            raise LedgerFailure(f"A site named {site_name!r} already exists") from e
        except SQLAlchemyError as e:
            raise LedgerFailure(f"Could not create site {site_name!r}: {e}") from e
        logger.info("Created site %r (#%d)", site.site_name, site.id)
        return site

    def create_page(self, site_id: int, title: str, description: str = "") -> SitePage:
        try:
            with self.session_factory.begin() as session:
                if session.get(Site, site_id) is None:
                    raise NotFound(f"Site {site_id} not found")
                page = SitePage(site_id=site_id, title=title, description=description)
                session.add(page)
        except SQLAlchemyError as e:
            raise LedgerFailure(f"Could not create page {title!r}: {e}") from e
        return page

    def add_member(self, site_id: int, user_id: int) -> None:
        try:
            with self.session_factory.begin() as session:
                if session.get(Site, site_id) is None:
                    raise NotFound(f"Site {site_id} not found")
                if session.get(User, user_id) is None:
                    raise NotFound(f"User {user_id} not found")
                session.merge(SiteMember(site_id=site_id, user_id=user_id))
        except SQLAlchemyError as e:
            raise LedgerFailure(f"Could not add user {user_id} to site {site_id}: {e}") from e

    def get_user(self, user_id: int) -> User | None:
        with self.session_factory() as session:
            return session.get(User, user_id)

    def get_page(self, page_id: int) -> SitePage | None:
        with self.session_factory() as session:
            return session.get(SitePage, page_id)

    def get_site_name(self, site_id: int) -> str | None:
        with self.session_factory() as session:
            return session.scalar(select(Site.site_name).where(Site.id == site_id))

    def is_member(self, user_id: int, site_id: int) -> bool:
        with self.session_factory() as session:
            return session.get(SiteMember, (site_id, user_id)) is not None
