"""Reference Validator Interface

Customers, drivers, addresses, cylinder categories and products live in other
services. Documents only store their IDs and check that they exist.
"""

from abc import ABC, abstractmethod
from enum import Enum


class ReferenceKind(str, Enum):
    CUSTOMER = "customer"
    DRIVER = "driver"
    ADDRESS = "address"
    CYLINDER_CATEGORY = "cylinder_category"
    PRODUCT = "product"


class ReferenceValidator(ABC):

    @abstractmethod
    async def exists(self, kind: ReferenceKind, ref_id: int) -> bool:
        """
        Check that a referenced entity exists

        Args:
            kind: Kind of entity
            ref_id: Its ID

        Returns:
            True if it exists, False otherwise
        """
        pass
