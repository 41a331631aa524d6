# backend/multistore/schemas/order_schema.py
"""
Se encarga de definir los esquemas Pydantic para los modelos Order y OrderItem.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from multistore.db.models.order_model import OrderStatus, PaymentStatus


class OrderItemCreate(BaseModel):
    """Línea de pedido tal como la envía el cliente."""
    product_id: int = Field(..., description="ID del producto")
    product_name: str = Field(..., min_length=1, max_length=255, description="Nombre del producto")
    product_name_ar: Optional[str] = Field(None, max_length=255)
    product_sku: Optional[str] = Field(None, max_length=100)
    quantity: int = Field(..., description="Cantidad del producto", ge=1)
    unit_price: float = Field(..., description="Precio unitario al momento de la compra", gt=0)
    attributes: Optional[Dict[str, Any]] = None


class OrderItemResponse(BaseModel):
    """Esquema de respuesta para una línea de pedido."""
    id: int
    product_id: int
    product_name: str
    product_name_ar: Optional[str] = None
    product_sku: Optional[str] = None
    quantity: int
    unit_price: float
    total_price: float
    attributes: Optional[Dict[str, Any]] = None

    model_config = ConfigDict(from_attributes=True)


class OrderCreate(BaseModel):
    """Esquema para crear un nuevo pedido con su lista de líneas."""
    user_id: Optional[int] = None
    customer_email: EmailStr = Field(..., description="Email del cliente")
    customer_phone: Optional[str] = Field(None, max_length=50)
    customer_name: str = Field(..., max_length=255, description="Nombre del cliente")
    shipping_address: Dict[str, Any] = Field(..., description="Dirección de envío")
    billing_address: Optional[Dict[str, Any]] = None
    items: List[OrderItemCreate] = Field(..., min_length=1, description="Líneas del pedido")
    shipping_method: Optional[str] = Field(None, max_length=100)
    coupon_code: Optional[str] = Field(None, max_length=50)
    notes: Optional[str] = Field(None, max_length=5000)

    @field_validator("customer_name")
    @classmethod
    def validate_customer_name(cls, v):
        if not v or not v.strip():
            raise ValueError("customer name is required")
        return v.strip()

    @field_validator("shipping_address")
    @classmethod
    def validate_shipping_address(cls, v):
        if not v:
            raise ValueError("shipping address is required")
        return v


class OrderResponse(BaseModel):
    """Esquema completo de respuesta para un pedido."""
    id: int
    display_id: str
    order_number: str
    user_id: Optional[int] = None
    status: OrderStatus
    payment_status: PaymentStatus
    customer_email: str
    customer_phone: Optional[str] = None
    customer_name: str
    shipping_address: Dict[str, Any]
    billing_address: Optional[Dict[str, Any]] = None
    subtotal: float
    tax_amount: float
    shipping_amount: float
    discount_amount: float
    total_amount: float
    currency: str
    shipping_method: Optional[str] = None
    tracking_number: Optional[str] = None
    shipped_at: Optional[datetime] = None
    delivered_at: Optional[datetime] = None
    notes: Optional[str] = None
    coupon_code: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    items: List[OrderItemResponse] = []

    model_config = ConfigDict(from_attributes=True)


class OrderStatusUpdate(BaseModel):
    """Esquema para actualizar únicamente el estado de un pedido."""
    status: OrderStatus = Field(..., description="Nuevo estado del pedido")


class PaymentStatusUpdate(BaseModel):
    """Esquema para actualizar el estado del pago."""
    payment_status: PaymentStatus = Field(..., description="Nuevo estado del pago")


class OrderShipRequest(BaseModel):
    tracking_number: str = Field(..., min_length=1, max_length=100, description="Número de seguimiento")
