from __future__ import annotations

from datetime import datetime

from sqlalchemy import Engine, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from orderdesk.application.errors import ConflictError
from orderdesk.application.ports.repositories import OptimisticConcurrencyError, OrderRepository
from orderdesk.domain.common.ids import MenuItemId, OrderId, OrderItemId, OrderNumber
from orderdesk.domain.order.delivery import DeliveryLocation, OrderType
from orderdesk.domain.order.entities import (
    CustomerDetails,
    NewOrder,
    Order,
    OrderItem,
    OrderStatus,
    PaymentMethod,
)
from orderdesk.domain.order.pricing import PriceBreakdown
from orderdesk.infrastructure.db.models.order import OrderItemModel, OrderModel
from orderdesk.infrastructure.db.session import get_engine
from orderdesk.infrastructure.db.support import ensure_utc, translate_errors


class SqlAlchemyOrderRepository(OrderRepository):
    def __init__(self, engine: Engine | None = None) -> None:
        self._engine = engine or get_engine()

    def create(self, new_order: NewOrder) -> Order:
        order_model = self._to_model(new_order)
        with translate_errors("create order"), Session(self._engine) as session:
            session.add(order_model)
            try:
                session.commit()
            except IntegrityError as exc:
                session.rollback()
                raise ConflictError(
                    f"order number already used: {new_order.order_number}",
                    details={"orderNumber": new_order.order_number},
                ) from exc
            order_id = order_model.id

        created = self.get(OrderId(order_id))
        if created is None:
            raise RuntimeError(f"order {order_id} not found after insert")
        return created

    def get(self, order_id: OrderId) -> Order | None:
        statement = (
            select(OrderModel)
            .options(joinedload(OrderModel.items))
            .where(OrderModel.id == int(order_id))
            .limit(1)
        )
        with translate_errors("get order"), Session(self._engine) as session:
            model = session.execute(statement).unique().scalar_one_or_none()
            return self._to_domain(model) if model is not None else None

    def get_by_number(self, order_number: OrderNumber) -> Order | None:
        statement = (
            select(OrderModel)
            .options(joinedload(OrderModel.items))
            .where(OrderModel.order_number == str(order_number))
            .limit(1)
        )
        with translate_errors("get order by number"), Session(self._engine) as session:
            model = session.execute(statement).unique().scalar_one_or_none()
            return self._to_domain(model) if model is not None else None

    def list_all(self, status: OrderStatus | None = None) -> list[Order]:
        statement = select(OrderModel).options(joinedload(OrderModel.items))
        if status is not None:
            statement = statement.where(OrderModel.status == status.value)
        statement = statement.order_by(OrderModel.created_at.desc(), OrderModel.id.desc())

        with translate_errors("list orders"), Session(self._engine) as session:
            models = list(session.execute(statement).unique().scalars().all())
            return [self._to_domain(model) for model in models]

    def update_status(
        self,
        order_id: OrderId,
        new_status: OrderStatus,
        updated_at: datetime,
        expected_version: int,
    ) -> Order:
        statement = (
            update(OrderModel)
            .where(
                OrderModel.id == int(order_id),
                OrderModel.version == expected_version,
            )
            .values(
                status=new_status.value,
                updated_at=updated_at,
                version=OrderModel.version + 1,
            )
        )
        with translate_errors("update order status"), Session(self._engine) as session:
            result = session.execute(statement)
            if result.rowcount != 1:
                session.rollback()
                raise OptimisticConcurrencyError(f"order {order_id} version conflict")
            session.commit()

        updated = self.get(order_id)
        if updated is None:
            raise RuntimeError(f"order {order_id} not found after status update")
        return updated

    def _to_model(self, new_order: NewOrder) -> OrderModel:
        customer = new_order.customer
        order_model = OrderModel(
            order_number=str(new_order.order_number),
            order_type=new_order.order_type.value,
            customer_name=customer.name,
            customer_phone=customer.phone,
            delivery_location=(
                customer.delivery_location.value if customer.delivery_location else None
            ),
            detail_address=customer.detail_address,
            custom_address=customer.custom_address,
            payment_method=new_order.payment_method.value,
            subtotal=new_order.pricing.subtotal,
            delivery_fee=new_order.pricing.delivery_fee,
            tax=new_order.pricing.tax,
            total=new_order.pricing.total,
            status=new_order.status.value,
            estimated_delivery_time=new_order.estimated_delivery_time,
            created_at=new_order.created_at,
            updated_at=new_order.created_at,
            version=1,
        )
        order_model.items = [
            OrderItemModel(
                menu_item_id=int(line.menu_item_id),
                menu_item_name=line.menu_item_name,
                price=line.unit_price,
                quantity=line.quantity,
            )
            for line in new_order.lines
        ]
        return order_model

    def _to_domain(self, model: OrderModel) -> Order:
        order_id = OrderId(model.id)
        items = [
            OrderItem(
                item_id=OrderItemId(item.id),
                order_id=order_id,
                menu_item_id=MenuItemId(item.menu_item_id),
                menu_item_name=item.menu_item_name,
                price=item.price,
                quantity=item.quantity,
            )
            for item in model.items
        ]
        return Order(
            order_id=order_id,
            order_number=OrderNumber(model.order_number),
            order_type=OrderType(model.order_type),
            customer=CustomerDetails(
                phone=model.customer_phone,
                name=model.customer_name,
                delivery_location=DeliveryLocation.parse(model.delivery_location),
                detail_address=model.detail_address,
                custom_address=model.custom_address,
            ),
            payment_method=PaymentMethod(model.payment_method),
            pricing=PriceBreakdown(
                subtotal=model.subtotal,
                delivery_fee=model.delivery_fee,
                tax=model.tax,
                total=model.total,
            ),
            status=OrderStatus(model.status),
            estimated_delivery_time=model.estimated_delivery_time,
            created_at=ensure_utc(model.created_at),
            updated_at=ensure_utc(model.updated_at),
            items=items,
            version=model.version,
        )
