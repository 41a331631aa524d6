"""
Unit tests for pure helpers: slugs, pagination, enums, totals, order transitions,
payments, rate limiting and API key parsing.
"""
import dataclasses
from decimal import Decimal

import pytest
from pydantic import ValidationError

from multistore.db import base  # noqa: F401
from multistore.core.constants import AppConstants, app_constants
from multistore.core.exceptions import BusinessException, InvalidStateException
from multistore.core.rate_limiter import RateLimiter
from multistore.core.security import extract_api_key, get_password_hash, is_valid_api_key, verify_password
from multistore.db.models.category_model import Category
from multistore.db.models.inventory_model import MovementType
from multistore.db.models.order_model import (
    Order,
    OrderStatus,
    PaymentStatus,
    cancel_changes,
    deliver_changes,
    payment_status_changes,
    ship_changes,
)
from multistore.db.models.product_model import Product
from multistore.db.models.payment_model import (
    Payment,
    PaymentMethod,
    TransactionStatus,
    WalletType,
    complete_changes,
    fail_changes,
    refund_changes,
)
from multistore.db.models.user_model import User, UserRole
from multistore.schemas.category_schema import CategoryResponse, CategoryTreeResponse
from multistore.schemas.common_schema import PageInfo
from multistore.schemas.order_schema import OrderItemCreate
from multistore.schemas.payment_schema import PaymentCreate
from multistore.services.order_service import calculate_order_totals
from multistore.utils.pagination import calculate_total_pages, create_page_request, order_by_clauses
from multistore.utils.slug import generate_slug, generate_unique_slug, is_valid_slug, truncate_slug


# ===================== SLUGS =====================


@pytest.mark.parametrize(
    "text, expected",
    [
        ("Smart Watch Pro", "smart-watch-pro"),
        ("  Café  Olé! ", "cafe-ole"),
        ("ساعة", "saah"),
        ("a -- b", "a-b"),
        ("!!!", ""),
        (None, ""),
    ],
)
def test_generate_slug(text, expected):
    assert generate_slug(text) == expected


def test_is_valid_slug():
    assert is_valid_slug("smart-watch")
    assert is_valid_slug("item_2")
    assert not is_valid_slug("Smart Watch")
    assert not is_valid_slug("-leading")
    assert not is_valid_slug("")


def test_truncate_slug_drops_trailing_dash():
    assert truncate_slug("abc-def", 4) == "abc"
    assert truncate_slug("short", 10) == "short"


async def test_generate_unique_slug_appends_counter():
    taken = {"nova", "nova-2"}

    async def exists(slug):
        return slug in taken

    assert await generate_unique_slug("Nova", exists) == "nova-3"
    assert await generate_unique_slug("Other", exists) == "other"
    assert await generate_unique_slug("???", exists, fallback="BRD-1A2B") == "brd-1a2b"


# ===================== PAGINATION =====================


def test_create_page_request_defaults_and_clamping():
    request = create_page_request(-1, 0)
    assert (request.page, request.size) == (0, app_constants.DEFAULT_PAGE_SIZE)
    assert request.sort_by == "created_at"
    assert request.sort_dir == "desc"

    request = create_page_request(3, 1000, "name", "ASC")
    assert (request.page, request.size) == (3, app_constants.MAX_PAGE_SIZE)
    assert request.sort_dir == "asc"
    assert request.offset == 3 * app_constants.MAX_PAGE_SIZE


def test_order_by_rejects_unsortable_columns():
    with pytest.raises(BusinessException) as exc_info:
        order_by_clauses(User, create_page_request(0, 10, "password_hash"))
    assert exc_info.value.status_code == 400
    assert len(order_by_clauses(User, create_page_request(0, 10, "email"))) == 2


def test_calculate_total_pages():
    assert calculate_total_pages(0, 20) == 0
    assert calculate_total_pages(41, 20) == 3
    assert calculate_total_pages(10, 0) == 0


def test_page_info_for_empty_result():
    info = PageInfo.from_counts(0, 20, 0)
    assert info.total_pages == 0
    assert info.is_first is True
    assert info.is_last is True
    assert info.has_next is False
    assert info.has_previous is False


# ===================== ENUMS =====================


def test_user_role_from_value():
    assert UserRole.from_value("ADMIN") is UserRole.ADMIN
    assert UserRole.from_value(" super_admin ") is UserRole.SUPER_ADMIN
    with pytest.raises(ValueError):
        UserRole.from_value("root")
    with pytest.raises(ValueError):
        UserRole.from_value(None)


@pytest.mark.parametrize(
    "movement_type, effective, inbound, outbound",
    [
        (MovementType.IN, 5, True, False),
        (MovementType.RELEASED, 5, True, False),
        (MovementType.OUT, -5, False, True),
        (MovementType.RESERVED, -5, False, True),
        (MovementType.ADJUSTMENT, 5, False, False),
    ],
)
def test_movement_type_semantics(movement_type, effective, inbound, outbound):
    assert movement_type.effective_quantity(5) == effective
    assert movement_type.is_inbound is inbound
    assert movement_type.is_outbound is outbound


def test_movement_type_arabic_labels():
    assert MovementType.IN.label_ar == "دخول"
    assert MovementType.OUT.label_ar == "خروج"
    assert MovementType.ADJUSTMENT.effective_quantity(-7) == -7


# ===================== CATEGORY TREE =====================


def _node(node_id, parent_id=None, is_active=True, children=None):
    return CategoryResponse(
        id=node_id,
        display_id=f"CAT-{node_id}",
        slug=f"cat-{node_id}",
        name=f"Category {node_id}",
        parent_id=parent_id,
        is_active=is_active,
        children=children or [],
    )


def test_category_is_parent():
    assert Category(parent_id=None).is_parent is True
    assert Category(parent_id=3).is_parent is False


def test_category_tree_counts_every_node():
    grandchild = _node(4, parent_id=2)
    child = _node(2, parent_id=1, children=[grandchild])
    roots = [_node(1, children=[child]), _node(3, is_active=False)]

    tree = CategoryTreeResponse.from_roots(roots)
    assert tree.total_categories == 4
    assert tree.parent_categories == 2
    assert tree.child_categories == 2
    assert tree.active_categories == 3
    assert [root.id for root in tree.categories] == [1, 3]


# ===================== ORDER TOTALS / TRANSITIONS =====================


def test_calculate_order_totals():
    items = [
        OrderItemCreate(product_id=1, product_name="A", quantity=3, unit_price=0.1),
        OrderItemCreate(product_id=2, product_name="B", quantity=1, unit_price=19.99),
    ]
    constants = dataclasses.replace(app_constants, DEFAULT_SHIPPING_COST=10)
    lines, totals = calculate_order_totals(items, constants)

    assert [line["total_price"] for line in lines] == [Decimal("0.30"), Decimal("19.99")]
    assert totals["subtotal"] == Decimal("20.29")
    assert totals["shipping_amount"] == Decimal("10.00")
    assert totals["tax_amount"] == Decimal("0.00")
    assert totals["total_amount"] == Decimal("30.29")


def _order(status, payment_status=PaymentStatus.PENDING):
    return Order(status=status, payment_status=payment_status)


def test_payment_status_changes_confirms_only_pending():
    changes = payment_status_changes(_order(OrderStatus.PENDING), PaymentStatus.PAID)
    assert changes["status"] == OrderStatus.CONFIRMED
    assert "updated_at" in changes

    changes = payment_status_changes(_order(OrderStatus.PROCESSING), PaymentStatus.PAID)
    assert "status" not in changes

    changes = payment_status_changes(_order(OrderStatus.PENDING), PaymentStatus.FAILED)
    assert "status" not in changes


def test_ship_changes_requires_paid_processing_order():
    order = _order(OrderStatus.PROCESSING, PaymentStatus.PAID)
    changes = ship_changes(order, "TRK-1")
    assert changes["status"] == OrderStatus.SHIPPED
    assert changes["tracking_number"] == "TRK-1"
    assert changes["shipped_at"] is not None
    # el pedido original no se modifica
    assert order.status == OrderStatus.PROCESSING

    with pytest.raises(InvalidStateException):
        ship_changes(_order(OrderStatus.PROCESSING), "TRK-1")
    with pytest.raises(InvalidStateException):
        ship_changes(_order(OrderStatus.CONFIRMED, PaymentStatus.PAID), "TRK-1")


def test_deliver_and_cancel_changes():
    assert deliver_changes(_order(OrderStatus.SHIPPED))["status"] == OrderStatus.DELIVERED
    with pytest.raises(InvalidStateException):
        deliver_changes(_order(OrderStatus.PROCESSING))

    assert cancel_changes(_order(OrderStatus.CONFIRMED))["status"] == OrderStatus.CANCELLED
    with pytest.raises(InvalidStateException) as exc_info:
        cancel_changes(_order(OrderStatus.SHIPPED))
    assert exc_info.value.status_code == 409


# ===================== PRODUCT =====================


def test_product_discount_percentage():
    assert Product(price=Decimal("150"), compare_price=Decimal("200")).discount_percentage == Decimal("25.00")
    assert Product(price=Decimal("10"), compare_price=None).discount_percentage == Decimal("0")
    assert Product(price=Decimal("10"), compare_price=Decimal("30")).discount_percentage == Decimal("66.67")


def test_product_stock_flags():
    product = Product(is_active=True, stock_quantity=0, min_stock_level=5)
    assert product.is_available is False
    assert product.is_low_stock is True
    assert product.is_out_of_stock is True


# ===================== PAYMENTS =====================


@pytest.mark.parametrize(
    "wallet, phone, expected",
    [
        (WalletType.JEEB, "771234567", True),
        (WalletType.JEEB, "+967 77 123 4567", True),
        (WalletType.JEEB, "00967771234567", True),
        (WalletType.JEEB, "731234567", False),
        (WalletType.FLOUSI, "73-123-4567", True),
        (WalletType.MOBILE_MONEY, "701234567", True),
        (WalletType.MOBILE_MONEY, "711234567", True),
        (WalletType.MOBILE_MONEY, "781234567", True),
        (WalletType.MOBILE_MONEY, "771234567", False),
        (WalletType.JEEB, "7712345", False),
        (WalletType.JEEB, "7712345678", False),
        (WalletType.JEEB, None, False),
    ],
)
def test_wallet_supports_phone(wallet, phone, expected):
    assert wallet.supports_phone(phone) is expected


def test_payment_method_flags():
    assert PaymentMethod.JEEB.is_e_wallet is True
    assert PaymentMethod.BANK_TRANSFER.is_e_wallet is False
    assert PaymentMethod.BANK_TRANSFER.is_electronic is True
    assert PaymentMethod.CASH_ON_DELIVERY.is_electronic is False
    assert WalletType.FLOUSI.label_ar == "فلوسي"


def test_payment_create_requires_valid_wallet_phone():
    with pytest.raises(ValidationError):
        PaymentCreate(order_id=1, payment_method=PaymentMethod.JEEB)
    with pytest.raises(ValidationError):
        PaymentCreate(order_id=1, payment_method=PaymentMethod.JEEB, wallet_phone="731234567")
    assert PaymentCreate(order_id=1, payment_method=PaymentMethod.CASH_ON_DELIVERY).wallet_phone is None


def test_payment_transitions():
    pending = Payment(status=TransactionStatus.PENDING)
    changes = complete_changes(pending, "GW-9")
    assert changes["status"] == TransactionStatus.COMPLETED
    assert changes["gateway_transaction_id"] == "GW-9"
    assert changes["processed_at"] is not None
    assert pending.status == TransactionStatus.PENDING

    assert complete_changes(Payment(status=TransactionStatus.PROCESSING))["status"] == TransactionStatus.COMPLETED
    assert fail_changes(pending, "nope")["failure_reason"] == "nope"

    completed = Payment(status=TransactionStatus.COMPLETED)
    assert refund_changes(completed)["status"] == TransactionStatus.REFUNDED
    with pytest.raises(InvalidStateException):
        complete_changes(completed)
    with pytest.raises(InvalidStateException):
        fail_changes(completed, "late")
    with pytest.raises(InvalidStateException) as exc_info:
        refund_changes(pending)
    assert exc_info.value.status_code == 409


# ===================== RATE LIMITER =====================


def test_rate_limiter_fixed_window():
    now = [1000.0]
    limiter = RateLimiter(limit=2, period_seconds=60, clock=lambda: now[0])

    assert limiter.hit("1.1.1.1") == (True, 1, 60.0)
    assert limiter.hit("1.1.1.1")[:2] == (True, 0)
    allowed, remaining, reset_in = limiter.hit("1.1.1.1")
    assert (allowed, remaining) == (False, 0)
    assert reset_in == 60.0

    # otra IP tiene su propia ventana
    assert limiter.hit("2.2.2.2")[0] is True

    now[0] += 60
    assert limiter.hit("1.1.1.1")[:2] == (True, 1)


def test_rate_limiter_cleanup_drops_stale_windows():
    now = [0.0]
    limiter = RateLimiter(limit=1, period_seconds=10, clock=lambda: now[0])
    limiter.hit("old")
    now[0] = 100.0
    limiter.hit("new")
    limiter.cleanup()
    assert set(limiter._windows) == {"new"}


# ===================== CONSTANTS / SECURITY =====================


def test_app_constants_are_frozen():
    with pytest.raises(dataclasses.FrozenInstanceError):
        app_constants.MAX_PAGE_SIZE = 5
    assert AppConstants().DEFAULT_CURRENCY == "YER"


def test_extract_api_key():
    assert extract_api_key("abc", "Bearer xyz", app_constants) == "abc"
    assert extract_api_key(None, "Bearer xyz", app_constants) == "xyz"
    assert extract_api_key(None, "Basic xyz", app_constants) is None
    assert extract_api_key(None, None, app_constants) is None


def test_is_valid_api_key():
    assert is_valid_api_key("secret", "secret") is True
    assert is_valid_api_key("other", "secret") is False
    assert is_valid_api_key(None, "secret") is False


def test_password_hashing():
    hashed = get_password_hash("secret123")
    assert hashed != "secret123"
    assert verify_password("secret123", hashed) is True
    assert verify_password("nope", hashed) is False


def test_business_exception_factories():
    assert BusinessException.conflict("x").status_code == 409
    assert BusinessException.bad_request("x", "س").message_ar == "س"
    assert BusinessException.forbidden("x").status_code == 403
