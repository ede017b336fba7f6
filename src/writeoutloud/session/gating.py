"""Access gating for features that want a signed-in user.

Protected features are never hard-blocked: a user who chose "continue
without login" keeps full access, and everyone else is shown the login
overlay instead of the feature.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from writeoutloud.session.manager import SessionManager


class Feature(BaseModel):
    """An entry point the gating policy is consulted for."""

    model_config = ConfigDict(frozen=True)

    name: str
    requires_auth: bool = False


PRACTICE = Feature(name="practice", requires_auth=False)
PROFILE = Feature(name="profile", requires_auth=True)
PROGRESS = Feature(name="progress", requires_auth=True)

FEATURES: dict[str, Feature] = {f.name: f for f in (PRACTICE, PROFILE, PROGRESS)}


class GatingPolicy:
    """Decides per feature whether to pass through or prompt for login.

    Reads the manager's live session on every call; nothing is cached.
    """

    def __init__(self, session_manager: SessionManager) -> None:
        self._sessions = session_manager

    def can_access(self, feature: Feature) -> bool:
        if not feature.requires_auth:
            return True
        session = self._sessions.session
        return session.is_authenticated or session.skipped

    def enter(self, feature: Feature) -> bool:
        """Gate an entry point, raising the login overlay when denied."""
        if self.can_access(feature):
            return True
        self._sessions.show_login_overlay()
        return False
