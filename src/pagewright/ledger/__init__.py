"""Modification ledger: records, prompt history and the apply transition."""

from .database import create_session_factory
from .ledger import AppliedModification, ModificationContext, ModificationLedger
from .models import Applied, ModificationRecord, PromptHistoryEntry, Site, SitePage, Unapplied, User
from .sites import SiteRepository

__all__ = [
    "Applied",
    "AppliedModification",
    "ModificationContext",
    "ModificationLedger",
    "ModificationRecord",
    "PromptHistoryEntry",
    "Site",
    "SitePage",
    "SiteRepository",
    "Unapplied",
    "User",
    "create_session_factory",
]
