"""Identity directory: user profiles for embedding in views."""

import logging

from core.errors import ConflictError, NotFoundError
from core.store.base import DocumentExistsError, DocumentStore
from verticals.bookxchange.repository import UserRepository

logger = logging.getLogger(__name__)

_PROFILE_FIELDS = ("id", "email", "name", "department", "student_id", "created_at", "updated_at")


class IdentityDirectory:
    """Resolves user ids to profiles."""

    def __init__(self, store: DocumentStore):
        self.users = UserRepository(store)

    async def _require(self, user_id: str) -> dict:
        user = await self.users.get(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    async def get_public_profile(self, user_id: str) -> dict:
        """{id, name, department}. Raises NotFoundError."""
        user = await self._require(user_id)
        return {"id": user["id"], "name": user["name"], "department": user["department"]}

    async def get_profile(self, user_id: str) -> dict:
        user = await self._require(user_id)
        return {k: user.get(k) for k in _PROFILE_FIELDS}

    async def create_user(
        self,
        email: str,
        name: str,
        department: str,
        student_id: str,
        user_id: str | None = None,
    ) -> dict:
        """Add a user record. Credentials live with the upstream authenticator.

        ``user_id`` is the id the authenticator forwards in X-User-ID; a fresh
        id is generated when it is omitted (seeding).
        """
        if await self.users.find_by_email(email) is not None:
            raise ConflictError("Email already registered")

        try:
            user = await self.users.create(
                {
                    "email": email,
                    "name": name,
                    "department": department,
                    "student_id": student_id,
                },
                item_id=user_id,
            )
        except DocumentExistsError as exc:
            raise ConflictError("User already registered") from exc
        logger.info("Registered user %s", user["id"])
        return {k: user.get(k) for k in _PROFILE_FIELDS}

    async def update_profile(self, user_id: str, patch: dict) -> dict:
        """Apply name/department changes; absent or None fields are left alone."""
        await self._require(user_id)
        fields = {k: v for k, v in patch.items() if k in ("name", "department") and v is not None}
        user = await self.users.update(user_id, fields)
        if user is None:
            raise NotFoundError("User not found")
        return {k: user.get(k) for k in _PROFILE_FIELDS}
