"""Unit tests for order use cases

Tests cover:
- Order creation with computed total
- Validation and reference failures roll back without writes
- Unexpected errors are wrapped as DATABASE_ERROR
- Status transitions, same-status no-op, complete and cancel side effects
- Header edits and detail removal on locked orders
"""

import pytest
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

from src.app.services.reference_validator import ReferenceKind
from src.app.use_cases.orders import (
    AddOrderDetail,
    CancelOrder,
    CompleteOrder,
    CreateOrder,
    CreateOrderCommandDTO,
    DeleteOrder,
    OrderDetailInputDTO,
    RemoveOrderDetail,
    UpdateOrder,
    UpdateOrderCommandDTO,
    UpdateOrderDetail,
    UpdateOrderDetailCommandDTO,
    UpdateOrderStatus,
)
from src.domain.order import DeliveryMethod, Order, OrderStatus, PaymentStatus
from src.domain.order_detail import OrderDetail, TransactionType


class FakeOrderStore:
    """Order and detail repository mocks backed by dicts"""

    def __init__(self):
        self.orders = {}
        self.details = {}

        self.order_repo = MagicMock()
        self.order_repo.create = AsyncMock(side_effect=self._create_order)
        self.order_repo.get_by_id = AsyncMock(side_effect=lambda order_id, for_update=False: self.orders.get(order_id))
        self.order_repo.update = AsyncMock(side_effect=self._update_order)

        self.detail_repo = MagicMock()
        self.detail_repo.create = AsyncMock(side_effect=self._create_detail)
        self.detail_repo.bulk_create = AsyncMock(side_effect=self._bulk_create)
        self.detail_repo.get_by_id = AsyncMock(side_effect=lambda detail_id: self.details.get(detail_id))
        self.detail_repo.get_by_order_id = AsyncMock(
            side_effect=lambda order_id: [d for d in self.details.values() if d.order_id == order_id]
        )
        self.detail_repo.delete = AsyncMock(side_effect=lambda detail_id: self.details.pop(detail_id, None) is not None)

    def add_order(self, **overrides) -> Order:
        order = Order(id=len(self.orders) + 1, customer_id=42, **overrides)
        self.orders[order.id] = order
        return order

    async def _create_order(self, order):
        order.id = len(self.orders) + 1
        self.orders[order.id] = order
        return order

    async def _update_order(self, order_id, fields):
        order = self.orders[order_id]
        for name, value in fields.items():
            setattr(order, name, value)
        return order

    async def _create_detail(self, detail):
        detail.id = len(self.details) + 1
        self.details[detail.id] = detail
        return detail

    async def _bulk_create(self, details):
        return [await self._create_detail(d) for d in details]


@pytest.fixture
def store():
    return FakeOrderStore()


def detail_input(quantity, unit_price, category=3):
    return OrderDetailInputDTO(
        cylinder_category_id=category,
        transaction_type=TransactionType.REFILL,
        quantity=quantity,
        unit_price=Decimal(unit_price),
    )


@pytest.mark.asyncio
class TestCreateOrder:

    async def test_total_is_computed_from_details(self, store, mock_uow, mock_cache):
        """
        Given: Details 2 x 10.00 and 1 x 5.00
        When: The order is created
        Then: total_amount is 25.00 and the order is pending / unpaid
        """
        use_case = CreateOrder(mock_uow, store.order_repo, store.detail_repo, cache=mock_cache)
        command = CreateOrderCommandDTO(
            customer_id=42,
            details=[detail_input(2, "10.00"), detail_input(1, "5.00", category=5)],
        )

        result = await use_case.execute(command)

        assert result.is_ok()
        order = result.value
        assert order.total_amount == Decimal("25.00")
        assert order.order_status == "pending"
        assert order.payment_status == "unpaid"
        assert [d.subtotal for d in order.details] == [Decimal("20.00"), Decimal("5.00")]
        mock_uow.commit.assert_awaited_once()
        mock_uow.rollback.assert_not_called()
        mock_cache.invalidate.assert_awaited_once_with("order:1")

    async def test_delivery_without_address_rejected(self, store, mock_uow):
        use_case = CreateOrder(mock_uow, store.order_repo, store.detail_repo)
        command = CreateOrderCommandDTO(
            customer_id=42,
            delivery_method=DeliveryMethod.DELIVERY,
            details=[detail_input(1, "10.00")],
        )

        result = await use_case.execute(command)

        assert result.is_err()
        assert result.error.code == "DELIVERY_ADDRESS_REQUIRED"
        assert result.error.details["category"] == "VALIDATION_ERROR"
        store.order_repo.create.assert_not_called()
        mock_uow.rollback.assert_awaited_once()

    async def test_order_without_details_rejected(self, store, mock_uow):
        use_case = CreateOrder(mock_uow, store.order_repo, store.detail_repo)

        result = await use_case.execute(CreateOrderCommandDTO(customer_id=42, details=[]))

        assert result.error.code == "VALIDATION_ERROR"
        assert store.orders == {}

    async def test_unknown_customer_rejected(self, store, mock_uow):
        validator = MagicMock()
        validator.exists = AsyncMock(side_effect=lambda kind, ref_id: kind != ReferenceKind.CUSTOMER)
        use_case = CreateOrder(mock_uow, store.order_repo, store.detail_repo, reference_validator=validator)

        result = await use_case.execute(CreateOrderCommandDTO(customer_id=42, details=[detail_input(1, "1.00")]))

        assert result.error.code == "CUSTOMER_NOT_FOUND"
        store.order_repo.create.assert_not_called()

    async def test_unknown_cylinder_category_rejected(self, store, mock_uow):
        validator = MagicMock()
        validator.exists = AsyncMock(side_effect=lambda kind, ref_id: kind != ReferenceKind.CYLINDER_CATEGORY)
        use_case = CreateOrder(mock_uow, store.order_repo, store.detail_repo, reference_validator=validator)

        result = await use_case.execute(CreateOrderCommandDTO(customer_id=42, details=[detail_input(1, "1.00")]))

        assert result.error.code == "CYLINDER_CATEGORY_NOT_FOUND"

    async def test_database_failure_is_wrapped(self, store, mock_uow, mock_cache):
        store.detail_repo.bulk_create = AsyncMock(side_effect=RuntimeError("connection reset"))
        use_case = CreateOrder(mock_uow, store.order_repo, store.detail_repo, cache=mock_cache)

        result = await use_case.execute(CreateOrderCommandDTO(customer_id=42, details=[detail_input(1, "1.00")]))

        assert result.error.code == "DATABASE_ERROR"
        assert result.error.message == "Failed to create order"
        assert "connection reset" not in str(result.error.model_dump())
        assert result.error.details["correlation_id"]
        mock_uow.rollback.assert_awaited_once()
        mock_uow.commit.assert_not_called()
        mock_cache.invalidate.assert_not_called()


@pytest.mark.asyncio
class TestOrderStatus:

    async def test_completed_to_processing_rejected(self, store, mock_uow):
        order = store.add_order(order_status=OrderStatus.COMPLETED)
        use_case = UpdateOrderStatus(mock_uow, store.order_repo)

        result = await use_case.execute(order.id, "processing")

        assert result.error.code == "INVALID_TRANSITION"
        assert result.error.details["category"] == "INVALID_TRANSITION"
        store.order_repo.update.assert_not_called()
        mock_uow.rollback.assert_awaited_once()

    async def test_pending_to_processing(self, store, mock_uow, mock_cache):
        order = store.add_order()
        use_case = UpdateOrderStatus(mock_uow, store.order_repo, cache=mock_cache)

        result = await use_case.execute(order.id, "processing", notes="Driver dispatched")

        assert result.value.order_status == "processing"
        assert result.value.notes == "Driver dispatched"
        mock_cache.invalidate.assert_awaited_once_with("order:1")

    async def test_same_status_is_noop(self, store, mock_uow, mock_cache):
        order = store.add_order(order_status=OrderStatus.PROCESSING)
        use_case = UpdateOrderStatus(mock_uow, store.order_repo, cache=mock_cache)

        result = await use_case.execute(order.id, "processing")

        assert result.is_ok()
        store.order_repo.update.assert_not_called()
        mock_cache.invalidate.assert_not_called()

    async def test_unknown_status_rejected(self, store, mock_uow):
        order = store.add_order()

        result = await UpdateOrderStatus(mock_uow, store.order_repo).execute(order.id, "shipped")

        assert result.error.code == "VALIDATION_ERROR"

    async def test_missing_order(self, store, mock_uow):
        result = await UpdateOrderStatus(mock_uow, store.order_repo).execute(99, "processing")

        assert result.error.code == "ORDER_NOT_FOUND"
        assert result.error.details["category"] == "NOT_FOUND"

    async def test_complete_sets_completed_at(self, store, mock_uow):
        order = store.add_order(order_status=OrderStatus.PROCESSING)

        result = await CompleteOrder(mock_uow, store.order_repo).execute(order.id)

        assert result.value.order_status == "completed"
        assert result.value.completed_at is not None

    async def test_cancel_sets_payment_status_and_reason(self, store, mock_uow):
        order = store.add_order(notes="Call before arrival")

        result = await CancelOrder(mock_uow, store.order_repo).execute(order.id, reason="Customer request")

        assert result.value.order_status == "cancelled"
        assert result.value.payment_status == PaymentStatus.CANCELLED.value
        assert result.value.notes == "Call before arrival\nCANCELLATION: Customer request"

    async def test_completed_order_cannot_be_cancelled(self, store, mock_uow):
        order = store.add_order(order_status=OrderStatus.COMPLETED)

        result = await CancelOrder(mock_uow, store.order_repo).execute(order.id)

        assert result.error.code == "INVALID_TRANSITION"
        assert order.payment_status == PaymentStatus.UNPAID


@pytest.mark.asyncio
class TestOrderEdits:

    async def test_completed_order_is_locked(self, store, mock_uow):
        order = store.add_order(order_status=OrderStatus.COMPLETED)

        result = await UpdateOrder(mock_uow, store.order_repo).execute(order.id, UpdateOrderCommandDTO(notes="late"))

        assert result.error.code == "ORDER_LOCKED"
        assert result.error.details["category"] == "INVALID_STATE"

    async def test_switching_to_delivery_requires_address(self, store, mock_uow):
        order = store.add_order()
        command = UpdateOrderCommandDTO(delivery_method=DeliveryMethod.DELIVERY)

        result = await UpdateOrder(mock_uow, store.order_repo).execute(order.id, command)

        assert result.error.code == "DELIVERY_ADDRESS_REQUIRED"

    async def test_null_delivery_method_rejected(self, store, mock_uow):
        order = store.add_order()

        result = await UpdateOrder(mock_uow, store.order_repo).execute(
            order.id, UpdateOrderCommandDTO(delivery_method=None)
        )

        assert result.error.code == "VALIDATION_ERROR"
        assert result.error.details["field"] == "delivery_method"
        store.order_repo.update.assert_not_called()

    async def test_null_driver_unassigns(self, store, mock_uow):
        order = store.add_order(driver_id=9)

        result = await UpdateOrder(mock_uow, store.order_repo).execute(order.id, UpdateOrderCommandDTO(driver_id=None))

        assert result.value.driver_id is None

    @pytest.mark.parametrize("field", ["cylinder_category_id", "transaction_type", "quantity", "unit_price"])
    async def test_null_for_required_detail_field_rejected(self, store, mock_uow, field):
        order = store.add_order()
        detail = await store._create_detail(
            OrderDetail(order_id=order.id, cylinder_category_id=3, transaction_type=TransactionType.SALE,
                        quantity=1, unit_price=Decimal("5.00"), subtotal=Decimal("5.00"))
        )
        use_case = UpdateOrderDetail(mock_uow, store.order_repo, store.detail_repo)

        result = await use_case.execute(order.id, detail.id, UpdateOrderDetailCommandDTO(**{field: None}))

        assert result.error.code == "VALIDATION_ERROR"
        assert result.error.details["field"] == field

    async def test_add_detail_recomputes_total(self, store, mock_uow):
        order = store.add_order()
        await store._create_detail(
            OrderDetail(order_id=order.id, cylinder_category_id=3, transaction_type=TransactionType.SALE,
                        quantity=1, unit_price=Decimal("5.00"), subtotal=Decimal("5.00"))
        )
        use_case = AddOrderDetail(mock_uow, store.order_repo, store.detail_repo)

        result = await use_case.execute(order.id, detail_input(2, "10.00"))

        assert result.value.total_amount == Decimal("25.00")
        assert len(result.value.details) == 2

    async def test_add_detail_to_cancelled_order_rejected(self, store, mock_uow):
        order = store.add_order(order_status=OrderStatus.CANCELLED)

        result = await AddOrderDetail(mock_uow, store.order_repo, store.detail_repo).execute(
            order.id, detail_input(1, "1.00")
        )

        assert result.error.code == "ORDER_LOCKED"
        store.detail_repo.create.assert_not_called()

    async def test_remove_detail_only_on_pending_orders(self, store, mock_uow):
        order = store.add_order(order_status=OrderStatus.PROCESSING)
        detail = await store._create_detail(
            OrderDetail(order_id=order.id, cylinder_category_id=3, transaction_type=TransactionType.SALE,
                        quantity=1, unit_price=Decimal("5.00"), subtotal=Decimal("5.00"))
        )

        result = await RemoveOrderDetail(mock_uow, store.order_repo, store.detail_repo).execute(order.id, detail.id)

        assert result.error.code == "ORDER_NOT_PENDING"
        assert detail.id in store.details

    async def test_remove_detail_of_another_order(self, store, mock_uow):
        order = store.add_order()
        other = store.add_order()
        detail = await store._create_detail(
            OrderDetail(order_id=other.id, cylinder_category_id=3, transaction_type=TransactionType.SALE,
                        quantity=1, unit_price=Decimal("5.00"), subtotal=Decimal("5.00"))
        )

        result = await RemoveOrderDetail(mock_uow, store.order_repo, store.detail_repo).execute(order.id, detail.id)

        assert result.error.code == "ORDER_DETAIL_NOT_FOUND"

    async def test_delete_pending_order_cancels_it(self, store, mock_uow):
        order = store.add_order()

        result = await DeleteOrder(mock_uow, store.order_repo).execute(order.id)

        assert result.value.order_status == "cancelled"
        assert result.value.payment_status == PaymentStatus.CANCELLED

    async def test_delete_and_cancel_leave_the_same_state(self, store, mock_uow):
        deleted = store.add_order()
        cancelled = store.add_order()

        await DeleteOrder(mock_uow, store.order_repo).execute(deleted.id)
        await CancelOrder(mock_uow, store.order_repo).execute(cancelled.id)

        assert (deleted.order_status, deleted.payment_status) == (cancelled.order_status, cancelled.payment_status)

    async def test_delete_processing_order_rejected(self, store, mock_uow):
        order = store.add_order(order_status=OrderStatus.PROCESSING)

        result = await DeleteOrder(mock_uow, store.order_repo).execute(order.id)

        assert result.error.code == "ORDER_NOT_PENDING"
