# Conversation handles for the provider that keeps threads server-side.

from __future__ import annotations
import logging
import threading
from typing import Callable, Dict, List, Optional, TypeVar

from .errors import ConversationNotFound
from .types import ConversationHandle

logger = logging.getLogger("qbot.conversations")

T = TypeVar("T")

LOCK_STRIPES = 64


class ConversationStore:
    """Maps a requester key to one live ConversationHandle.

    Creation is serialized per key so two concurrent first calls for the same
    requester end up sharing one provider thread. Keys hash onto a fixed pool
    of lock stripes, so the lock table never grows with the number of users.
    """

    def __init__(self, stripes: int = LOCK_STRIPES):
        self._handles: Dict[str, ConversationHandle] = {}
        self._locks: List[threading.Lock] = [threading.Lock() for _ in range(max(1, stripes))]

    def __len__(self) -> int:
        return len(self._handles)

    def _lock_for(self, key: str) -> threading.Lock:
        return self._locks[hash(key) % len(self._locks)]

    def get(self, key: str) -> Optional[ConversationHandle]:
        return self._handles.get(key)

    def get_or_create(self, key: str, create: Callable[[], str]) -> ConversationHandle:
        with self._lock_for(key):
            handle = self._handles.get(key)
            if handle is None:
                handle = ConversationHandle(requester_key=key, provider_thread_id=create())
                self._handles[key] = handle
                logger.info("Created conversation %s for %s", handle.provider_thread_id, key)
            return handle

    def replace(self, key: str, stale: ConversationHandle, create: Callable[[], str]) -> ConversationHandle:
        """Swap out a rejected handle unless another caller already did."""
        with self._lock_for(key):
            current = self._handles.get(key)
            if current is not None and current.provider_thread_id != stale.provider_thread_id:
                return current
            handle = ConversationHandle(requester_key=key, provider_thread_id=create())
            self._handles[key] = handle
            logger.info("Recreated conversation for %s (%s -> %s)",
                        key, stale.provider_thread_id, handle.provider_thread_id)
            return handle

    def forget(self, key: str) -> bool:
        """Drop the requester's handle; the next call starts a fresh thread."""
        with self._lock_for(key):
            handle = self._handles.pop(key, None)
        if handle is not None:
            logger.info("Cleared conversation %s for %s", handle.provider_thread_id, key)
        return handle is not None

    def call_with_handle(
        self,
        key: str,
        create: Callable[[], str],
        call: Callable[[ConversationHandle], T],
    ) -> T:
        handle = self.get_or_create(key, create)
        try:
            return call(handle)
        except ConversationNotFound:
            logger.warning("Conversation %s rejected for %s; retrying once", handle.provider_thread_id, key)
            handle = self.replace(key, handle, create)
            return call(handle)
