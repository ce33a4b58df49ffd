# dye_budget/storage/user_preferences.py

"""Persistent per-user world preference for budget searches."""

import json
import logging
from datetime import datetime, timezone

from dye_budget.config.settings import Settings
from dye_budget.models.budget import WorldPreference
from dye_budget.storage.kv_store import KeyValueStore

logger = logging.getLogger("dye_budget.preferences")


def build_world_pref_key(user_id: str) -> str:
    """Storage key holding *user_id*'s preferred world."""
    return f"budget:world:{Settings.CACHE_SCHEMA_VERSION}:{user_id}"


class UserPreferences:
    """World preferences stored without expiry until cleared."""

    def __init__(self, store: KeyValueStore) -> None:
        self._store = store

    async def get_world(self, user_id: str) -> WorldPreference | None:
        """Return the saved preference, or ``None`` if unset or unreadable."""
        try:
            raw = await self._store.get(build_world_pref_key(user_id))
            if raw is None:
                return None
            data = json.loads(raw)
            return WorldPreference(world=data["world"], set_at=data["set_at"])
        except Exception:
            logger.error(
                "Failed to get world preference for %s",
                user_id,
                exc_info=True,
            )
            return None

    async def set_world(self, user_id: str, world: str) -> bool:
        """Save *world* for *user_id*.  Returns ``True`` on success."""
        preference = {
            "world": world,
            "set_at": datetime.now(timezone.utc).isoformat(),
        }
        try:
            await self._store.put(
                build_world_pref_key(user_id), json.dumps(preference),
            )
        except Exception:
            logger.error(
                "Failed to set world preference for %s",
                user_id,
                exc_info=True,
            )
            return False
        logger.info("World preference for %s set to %s", user_id, world)
        return True

    async def clear_world(self, user_id: str) -> bool:
        """Remove the preference; clearing an unset one also succeeds."""
        try:
            await self._store.delete(build_world_pref_key(user_id))
        except Exception:
            logger.error(
                "Failed to clear world preference for %s",
                user_id,
                exc_info=True,
            )
            return False
        return True
