from __future__ import annotations

import logging
from typing import Optional

from fastapi import Depends, HTTPException, status

from .entities import RESERVED_NAME_SUFFIXES
from .storage import KeyValueStore, get_store

logger = logging.getLogger(__name__)

SESSION_KEY = "loggedInUserName"


# PUBLIC_INTERFACE
class Session:
    """
    The single logged-in display name, kept as a plain string under SESSION_KEY.

    There is no registry or password: logging in under another name simply
    switches every entity to that name's records.

    Names ending in a reserved suffix such as "-college" are rejected because
    their storage keys would overlap another name's keys.
    """

    def __init__(self, store: KeyValueStore) -> None:
        self._store = store

    def current_user(self) -> Optional[str]:
        try:
            name = self._store.get_item(SESSION_KEY)
        except Exception as e:
            logger.error("Error reading storage key %r: %s", SESSION_KEY, e)
            return None
        return name or None

    def login(self, name: str) -> str:
        cleaned = name.strip()
        if not cleaned:
            raise ValueError("name must not be empty")
        if cleaned.endswith(RESERVED_NAME_SUFFIXES):
            raise ValueError(f"name must not end with {', '.join(RESERVED_NAME_SUFFIXES)}")
        self._store.set_item(SESSION_KEY, cleaned)
        logger.info("Logged in as %r", cleaned)
        return cleaned

    def logout(self) -> None:
        self._store.remove_item(SESSION_KEY)
        logger.info("Logged out")


def initials(name: Optional[str]) -> str:
    """First and last initials of a display name, upper-cased."""
    parts = [p for p in (name or "").split() if p]
    if not parts:
        return ""
    if len(parts) == 1:
        return parts[0][0].upper()
    return (parts[0][0] + parts[-1][0]).upper()


# PUBLIC_INTERFACE
def get_session(store: KeyValueStore = Depends(get_store)) -> Session:
    """Dependency returning the session bound to the configured store."""
    return Session(store)


# PUBLIC_INTERFACE
def require_user(session: Session = Depends(get_session)) -> str:
    """
    Dependency returning the logged-in display name.

    Raises:
        HTTPException(401) if nobody is logged in.
    """
    name = session.current_user()
    if name is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication Required",
        )
    return name
