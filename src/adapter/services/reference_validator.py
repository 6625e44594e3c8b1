"""Reference Validator Implementations"""

import logging
from typing import Optional
import httpx
from src.app.services.reference_validator import ReferenceKind, ReferenceValidator

logger = logging.getLogger(__name__)

RESOURCE_PATHS = {
    ReferenceKind.CUSTOMER: "customers",
    ReferenceKind.DRIVER: "drivers",
    ReferenceKind.ADDRESS: "addresses",
    ReferenceKind.CYLINDER_CATEGORY: "cylinder-categories",
    ReferenceKind.PRODUCT: "products",
}


class PermissiveReferenceValidator(ReferenceValidator):
    """
    Accepts every positive ID

    Used when no reference service is configured (local development, tests).
    """

    async def exists(self, kind: ReferenceKind, ref_id: int) -> bool:
        logger.debug(f"Reference check skipped for {kind.value} {ref_id}")
        return ref_id is not None and ref_id > 0


class HttpReferenceValidator(ReferenceValidator):
    """
    Checks references against the reference service

    GET {base_url}/{resource}/{id} -> 200 exists, 404 missing, anything
    else is an error.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 5.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize HTTP reference validator

        Args:
            base_url: Reference service base URL
            timeout: Request timeout in seconds
            transport: Optional httpx transport (tests use MockTransport)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    async def exists(self, kind: ReferenceKind, ref_id: int) -> bool:
        url = f"{self.base_url}/{RESOURCE_PATHS[kind]}/{ref_id}"
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            response = await client.get(url)
        if response.status_code == 404:
            logger.info(f"{kind.value} {ref_id} not found at {url}")
            return False
        response.raise_for_status()
        return True


def create_reference_validator(
    base_url: Optional[str] = None, timeout: float = 5.0
) -> ReferenceValidator:
    """
    Factory function to create the reference validator

    Args:
        base_url: Reference service URL. If unset, every positive ID is accepted.
        timeout: Request timeout in seconds

    Returns:
        Configured ReferenceValidator
    """
    if base_url:
        return HttpReferenceValidator(base_url, timeout=timeout)
    return PermissiveReferenceValidator()
