"""Long-lived registry state guarded by a single-writer lock.

The document is loaded once at startup. Every mutation works on a copy
inside `transaction()`; the copy is checkpointed to the document store and
only then becomes the live document. If the mutation or the checkpoint
raises, the copy is dropped and the live document is unchanged.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from .domain.entities import RegistryDocument
from .domain.ports import IDocumentStore

logger = logging.getLogger(__name__)


class RegistryState:
    """Holds the live RegistryDocument for the lifetime of the process."""

    def __init__(self, store: IDocumentStore):
        self.store = store
        self._document: Optional[RegistryDocument] = None
        self._lock = asyncio.Lock()

    @property
    def loaded(self) -> bool:
        return self._document is not None

    @property
    def document(self) -> RegistryDocument:
        """The live document. Treat as read-only; mutate via transaction()."""
        if self._document is None:
            raise RuntimeError("Registry state not loaded. Call load() first.")
        return self._document

    async def load(self) -> RegistryDocument:
        async with self._lock:
            self._document = await self.store.load()
        return self._document

    def snapshot(self) -> RegistryDocument:
        """Deep copy of the live document, safe to hand out."""
        return self.document.copy()

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[RegistryDocument]:
        """Serialize a mutation and checkpoint it on success.

        Usage:
            async with state.transaction() as doc:
                doc.assign("D1", "alice")
        """
        async with self._lock:
            working = self.document.copy()
            yield working
            await self.store.save(working)
            self._document = working
