"""Who may publish modifications to which pages."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from pagewright.ledger.models import SitePage
    from pagewright.ledger.sites import SiteRepository


class Authorizer(Protocol):
    def can_modify(self, actor_id: int | None, page: SitePage) -> bool: ...


class TeamAuthorizer:
    """Super admins may modify any page; other users need membership in the page's site."""

    def __init__(self, sites: SiteRepository) -> None:
        self.sites = sites

    def can_modify(self, actor_id: int | None, page: SitePage) -> bool:
        if actor_id is None:
            return False

        user = self.sites.get_user(actor_id)
        if user is None:
            return False
        if user.is_super_admin:
            return True

        return self.sites.is_member(actor_id, page.site_id)
