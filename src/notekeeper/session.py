"""
Session handling for Notekeeper front ends.

AuthSession keeps the logged-in user in memory next to the store's
current-user record and checks form input before touching the store.
"""

import logging

from notekeeper.models import User
from notekeeper.store import LocalDataStore

logger = logging.getLogger(__name__)


def _require(*values: str | None) -> None:
    if any(not (v or "").strip() for v in values):
        raise ValueError("Please fill in all fields")


class AuthSession:
    """The logged-in user of one front end."""

    def __init__(self, store: LocalDataStore):
        self.store = store
        self.user: User | None = None

    @property
    def logged_in(self) -> bool:
        return self.user is not None

    async def load(self) -> User | None:
        """Restore the remembered user, if any."""
        self.user = await self.store.get_current_user()
        return self.user

    async def login(self, email: str, password: str) -> bool:
        _require(email, password)
        user = await self.store.login_user(email.strip(), password)
        if user:
            self.user = user
            return True
        return False

    async def register(self, email: str, password: str, username: str) -> bool:
        """Create the account, then log into it."""
        _require(email, password, username)
        email = email.strip()
        if not await self.store.register_user(email, password, username.strip()):
            return False
        return await self.login(email, password)

    async def logout(self) -> None:
        await self.store.logout()
        self.user = None

    async def update_profile(self, email: str, username: str, password: str | None = None) -> bool:
        """Change email/username (and optionally password) of the logged-in user."""
        if self.user is None:
            return False
        _require(email, username)

        if not await self.store.update_user(self.user.id, email.strip(), username.strip(), password):
            return False
        self.user = await self.store.get_current_user()
        return True

    async def change_password(self, current: str, new: str, confirm: str) -> bool:
        """
        Replace the logged-in user's password.

        Raises:
            ValueError: A field is blank, the new passwords differ, or the
                current password is wrong
        """
        if self.user is None:
            return False
        if any(not v for v in (current, new, confirm)):
            raise ValueError("Please fill in all password fields")
        if new != confirm:
            raise ValueError("New passwords do not match")
        if not await self.store.verify_password(self.user, current):
            raise ValueError("Current password is incorrect")

        return await self.update_profile(self.user.email, self.user.username, new)
