"""Unit tests for reference validators"""

import httpx
import pytest

from src.adapter.services.reference_validator import (
    HttpReferenceValidator,
    PermissiveReferenceValidator,
    create_reference_validator,
)
from src.app.services.reference_validator import ReferenceKind


def make_validator(handler) -> HttpReferenceValidator:
    return HttpReferenceValidator("http://refs.test/api/", transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
class TestHttpReferenceValidator:

    async def test_existing_reference(self):
        requested = []

        def handler(request: httpx.Request) -> httpx.Response:
            requested.append(str(request.url))
            return httpx.Response(200, json={"id": 3})

        assert await make_validator(handler).exists(ReferenceKind.CYLINDER_CATEGORY, 3) is True
        assert requested == ["http://refs.test/api/cylinder-categories/3"]

    async def test_missing_reference(self):
        validator = make_validator(lambda request: httpx.Response(404))

        assert await validator.exists(ReferenceKind.CUSTOMER, 42) is False

    async def test_server_error_raises(self):
        validator = make_validator(lambda request: httpx.Response(503))

        with pytest.raises(httpx.HTTPStatusError):
            await validator.exists(ReferenceKind.DRIVER, 1)


@pytest.mark.asyncio
class TestPermissiveReferenceValidator:

    async def test_positive_ids_exist(self):
        assert await PermissiveReferenceValidator().exists(ReferenceKind.ADDRESS, 1) is True

    async def test_non_positive_ids_do_not_exist(self):
        assert await PermissiveReferenceValidator().exists(ReferenceKind.ADDRESS, 0) is False


class TestCreateReferenceValidator:

    def test_without_url_is_permissive(self):
        assert isinstance(create_reference_validator(None), PermissiveReferenceValidator)

    def test_with_url_uses_http(self):
        validator = create_reference_validator("http://refs.test", timeout=2.0)

        assert isinstance(validator, HttpReferenceValidator)
        assert validator.timeout == 2.0
