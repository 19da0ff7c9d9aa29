"""Session registry — one production store per browser session, held in memory only."""

from __future__ import annotations

import uuid
from typing import Optional

from scene_director.state.store import ProductionStore, new_production


class SessionRegistry:
    """In-memory map of session id to production store. Nothing survives a restart."""

    def __init__(self):
        self._store: dict[str, ProductionStore] = {}

    def create(
        self,
        script: str = "",
        aspect_ratio: Optional[str] = None,
        voice: Optional[str] = None,
    ) -> tuple[str, ProductionStore]:
        production = new_production(aspect_ratio=aspect_ratio, voice=voice)
        store = ProductionStore({**production, "script": script})
        session_id = str(uuid.uuid4())
        self._store[session_id] = store
        return session_id, store

    def get(self, session_id: str) -> Optional[ProductionStore]:
        return self._store.get(session_id)

    def delete(self, session_id: str) -> bool:
        return self._store.pop(session_id, None) is not None

    def __len__(self) -> int:
        return len(self._store)
