"""Unit of Work Interface

One unit of work spans one use case invocation. Every multi-step mutation
runs inside it and is either committed as a whole or rolled back.
"""

from abc import ABC, abstractmethod


class UnitOfWork(ABC):

    async def __aenter__(self):
        await self.begin()
        return self

    async def __aexit__(self, *args):
        await self.rollback()

    @abstractmethod
    async def begin(self):
        """Start the transaction and apply the configured timeout"""
        pass

    @abstractmethod
    async def commit(self):
        pass

    @abstractmethod
    async def rollback(self):
        pass
