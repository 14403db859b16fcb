# doc_catalog/core/session.py

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

logger = logging.getLogger(__name__)

ANONYMOUS_LABEL = "User"


@dataclass(frozen=True)
class Session:
    """
    The authenticated user handed to the catalog by the identity provider.

    The token is opaque: the catalog stores it but never interprets it.
    """
    user_id: str
    email: str
    token: str = ""
    display_name: Optional[str] = None

    @property
    def display_label(self) -> str:
        """The profile display name, else the part of the email before '@'."""
        if self.display_name:
            return self.display_name
        local_part = self.email.split('@')[0]
        return local_part or ANONYMOUS_LABEL

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> Optional["Session"]:
        """Builds a session from DOC_CATALOG_* variables; None when no user is signed in."""
        env = os.environ if environ is None else environ
        email = env.get("DOC_CATALOG_USER_EMAIL", "").strip()
        if not email:
            logger.debug("No signed-in user found in the environment.")
            return None
        return cls(
            user_id=env.get("DOC_CATALOG_USER_ID", "").strip() or email,
            email=email,
            token=env.get("DOC_CATALOG_TOKEN", ""),
            display_name=env.get("DOC_CATALOG_DISPLAY_NAME", "").strip() or None,
        )


def display_label(session: Optional[Session]) -> str:
    return session.display_label if session else ANONYMOUS_LABEL
