"""FastAPI routes for the storefront: cart, addresses and orders.

Every route acts on behalf of the caller named in the ``X-Owner-Id`` header.
"""

import json

from fastapi import APIRouter, Depends, Header
from protean.utils.globals import current_domain

from storefront.addresses.management import (
    AddAddress,
    RemoveAddress,
    SetDefaultAddress,
    UpdateAddress,
    list_addresses,
)
from storefront.api.schemas import (
    AddressIdResponse,
    AddressRequest,
    AddressResponse,
    AddToCartRequest,
    CancelOrderRequest,
    CartLineResponse,
    CartQuantityResponse,
    CheckoutLineSchema,
    CheckoutResponse,
    FinalizeOrderRequest,
    OrderHistoryEntry,
    OrderHistoryResponse,
    OrderPlacedResponse,
    PaymentStatusRequest,
    RemoveAddressResponse,
    RemoveFromCartResponse,
    StatusResponse,
    UpdateAddressRequest,
)
from storefront.cart.checkout_view import list_for_checkout
from storefront.cart.items import AddToCart, DecreaseCartItem, IncreaseCartItem, RemoveFromCart
from storefront.errors import EmptyCart
from storefront.ordering.finalization import FinalizeOrder
from storefront.ordering.history import order_history
from storefront.ordering.order import mask_account_number
from storefront.ordering.status import CancelOrder, DeliverOrder, ShipOrder, UpdatePaymentStatus
from storefront.store import store_operation


def current_owner(x_owner_id: str = Header(..., min_length=1)) -> str:
    return x_owner_id


def _process(command):
    with store_operation(type(command).__name__):
        return current_domain.process(command, asynchronous=False)


# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/cart", tags=["cart"])


@cart_router.post("/items", status_code=201, response_model=CartLineResponse)
async def add_to_cart(body: AddToCartRequest, owner_id: str = Depends(current_owner)) -> CartLineResponse:
    line_id = _process(AddToCart(owner_id=owner_id, product_id=body.product_id, quantity=body.quantity))
    return CartLineResponse(line_id=line_id)


@cart_router.post("/items/{line_id}/increase", response_model=CartQuantityResponse)
async def increase_cart_item(line_id: str, owner_id: str = Depends(current_owner)) -> CartQuantityResponse:
    quantity = _process(IncreaseCartItem(owner_id=owner_id, line_id=line_id))
    return CartQuantityResponse(line_id=line_id, quantity=quantity)


@cart_router.post("/items/{line_id}/decrease", response_model=CartQuantityResponse)
async def decrease_cart_item(line_id: str, owner_id: str = Depends(current_owner)) -> CartQuantityResponse:
    quantity = _process(DecreaseCartItem(owner_id=owner_id, line_id=line_id))
    return CartQuantityResponse(line_id=line_id, quantity=quantity, removed=quantity == 0)


@cart_router.delete("/items/{line_id}", response_model=RemoveFromCartResponse)
async def remove_from_cart(line_id: str, owner_id: str = Depends(current_owner)) -> RemoveFromCartResponse:
    removed = _process(RemoveFromCart(owner_id=owner_id, line_id=line_id))
    return RemoveFromCartResponse(removed=removed)


@cart_router.get("/checkout", response_model=CheckoutResponse)
async def checkout_view(owner_id: str = Depends(current_owner)) -> CheckoutResponse:
    with store_operation("list_for_checkout", owner_id=owner_id):
        summary = list_for_checkout(owner_id)
    return CheckoutResponse(
        lines=[
            CheckoutLineSchema(
                line_id=line.line_id,
                product_id=line.product_id,
                name=line.name,
                category=line.category,
                unit_price=line.unit_price,
                quantity=line.quantity,
                requested_quantity=line.requested_quantity,
                subtotal=line.subtotal,
                adjusted=line.adjusted,
            )
            for line in summary.lines
        ],
        adjusted=summary.adjusted,
        subtotal=summary.subtotal,
    )


# ---------------------------------------------------------------------------
# Address Router
# ---------------------------------------------------------------------------
address_router = APIRouter(prefix="/addresses", tags=["addresses"])


@address_router.get("", response_model=list[AddressResponse])
async def get_addresses(owner_id: str = Depends(current_owner)) -> list[AddressResponse]:
    with store_operation("list_addresses", owner_id=owner_id):
        addresses = list_addresses(owner_id)
    return [
        AddressResponse(
            address_id=str(address.id),
            street=address.street,
            additional_info=address.additional_info,
            city=address.city,
            state=address.state,
            postal_code=address.postal_code,
            country=address.country,
            is_default=bool(address.is_default),
        )
        for address in addresses
    ]


@address_router.post("", status_code=201, response_model=AddressIdResponse)
async def add_address(body: AddressRequest, owner_id: str = Depends(current_owner)) -> AddressIdResponse:
    address_id = _process(AddAddress(owner_id=owner_id, **body.model_dump()))
    return AddressIdResponse(address_id=address_id)


@address_router.put("/{address_id}", response_model=StatusResponse)
async def update_address(
    address_id: str, body: UpdateAddressRequest, owner_id: str = Depends(current_owner)
) -> StatusResponse:
    _process(UpdateAddress(owner_id=owner_id, address_id=address_id, **body.model_dump(exclude_none=True)))
    return StatusResponse()


@address_router.delete("/{address_id}", response_model=RemoveAddressResponse)
async def remove_address(address_id: str, owner_id: str = Depends(current_owner)) -> RemoveAddressResponse:
    result = _process(RemoveAddress(owner_id=owner_id, address_id=address_id))
    return RemoveAddressResponse(**result)


@address_router.put("/{address_id}/default", response_model=StatusResponse)
async def set_default_address(address_id: str, owner_id: str = Depends(current_owner)) -> StatusResponse:
    _process(SetDefaultAddress(owner_id=owner_id, address_id=address_id))
    return StatusResponse()


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("", status_code=201, response_model=OrderPlacedResponse)
async def place_order(body: FinalizeOrderRequest, owner_id: str = Depends(current_owner)) -> OrderPlacedResponse:
    with store_operation("list_for_checkout", owner_id=owner_id):
        summary = list_for_checkout(owner_id)
    if not summary.lines:
        raise EmptyCart("Your cart is empty")

    command = FinalizeOrder(
        owner_id=owner_id,
        items=json.dumps(summary.snapshot()),
        shipping_address_id=body.shipping_address_id,
        payment_channel=body.payment.channel,
        payment_account_number=mask_account_number(body.payment.account_number),
        payment_account_name=body.payment.account_name,
        amount_paid=body.payment.amount_paid,
        paid_on=body.payment.paid_on,
        tax_amount=body.tax_amount,
        shipping_amount=body.shipping_amount,
        total_amount=body.total_amount,
    )
    result = _process(command)
    return OrderPlacedResponse(**result, cart_adjusted=summary.adjusted)


@order_router.get("/me", response_model=OrderHistoryResponse)
async def my_orders(limit: int = 10, page: int = 1, owner_id: str = Depends(current_owner)) -> OrderHistoryResponse:
    with store_operation("order_history", owner_id=owner_id):
        history = order_history(owner_id, limit=limit, page=page)
    return OrderHistoryResponse(
        orders=[
            OrderHistoryEntry(
                order_id=str(entry.order_id),
                order_number=entry.order_number,
                order_status=entry.order_status,
                payment_status=entry.payment_status,
                item_count=entry.item_count,
                total_amount=entry.total_amount,
                created_at=entry.created_at,
            )
            for entry in history["orders"]
        ],
        total=history["total"],
        page=history["page"],
        limit=history["limit"],
    )


@order_router.put("/{order_id}/ship", response_model=StatusResponse)
async def ship_order(order_id: str, owner_id: str = Depends(current_owner)) -> StatusResponse:
    _process(ShipOrder(owner_id=owner_id, order_id=order_id))
    return StatusResponse()


@order_router.put("/{order_id}/deliver", response_model=StatusResponse)
async def deliver_order(order_id: str, owner_id: str = Depends(current_owner)) -> StatusResponse:
    _process(DeliverOrder(owner_id=owner_id, order_id=order_id))
    return StatusResponse()


@order_router.put("/{order_id}/cancel", response_model=StatusResponse)
async def cancel_order(order_id: str, body: CancelOrderRequest, owner_id: str = Depends(current_owner)) -> StatusResponse:
    _process(CancelOrder(owner_id=owner_id, order_id=order_id, reason=body.reason))
    return StatusResponse()


@order_router.put("/{order_id}/payment-status", response_model=StatusResponse)
async def update_payment_status(
    order_id: str, body: PaymentStatusRequest, owner_id: str = Depends(current_owner)
) -> StatusResponse:
    _process(UpdatePaymentStatus(owner_id=owner_id, order_id=order_id, payment_status=body.payment_status))
    return StatusResponse()
