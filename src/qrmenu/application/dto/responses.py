from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class MoneyResponse(BaseModel):
    amountCents: int
    currency: str


class CategoryResponse(BaseModel):
    categoryId: str
    name: str


class MenuItemResponse(BaseModel):
    itemId: str
    name: str
    description: str | None = None
    priceMoney: MoneyResponse
    isAvailable: bool
    categoryId: str | None = None


class MenuResponse(BaseModel):
    menuId: str
    restaurantId: str
    menuVersion: int
    categories: list[CategoryResponse] = Field(default_factory=list)
    items: list[MenuItemResponse] = Field(default_factory=list)
    updatedAt: datetime


class CurrencyResponse(BaseModel):
    code: str
    symbol: str


class ProfileResponse(BaseModel):
    restaurantId: str
    name: str
    location: str
    orderStyle: str
    currency: CurrencyResponse


class MenuLinkResponse(BaseModel):
    restaurantId: str
    url: str


class OrderItemResponse(BaseModel):
    itemId: str
    name: str
    quantity: int
    unitPrice: MoneyResponse
    lineTotal: MoneyResponse


class OrderResponse(BaseModel):
    orderId: str
    restaurantId: str
    orderNumber: int
    customerIdentifier: str
    status: str
    phase: str
    items: list[OrderItemResponse] = Field(default_factory=list)
    total: MoneyResponse
    createdAt: datetime
    version: int


class RestaurantOrdersResponse(BaseModel):
    restaurantId: str
    pendingCount: int
    activeOrders: list[OrderResponse] = Field(default_factory=list)
    pastOrders: list[OrderResponse] = Field(default_factory=list)


class OrderStatusItemResponse(BaseModel):
    name: str
    quantity: int
    lineTotal: MoneyResponse


class OrderStatusResponse(BaseModel):
    orderId: str
    orderNumber: int
    status: str
    label: str
    icon: str
    message: str
    step: int
    totalSteps: int
    progressPercentage: float | None = None
    isCanceled: bool
    isServed: bool
    customerLabel: str
    currencySymbol: str
    items: list[OrderStatusItemResponse] = Field(default_factory=list)
    total: MoneyResponse
    createdAt: datetime


class StatusErrorResponse(BaseModel):
    code: str
    message: str


class OrderStatusMessage(BaseModel):
    type: str
    status: OrderStatusResponse | None = None
    error: StatusErrorResponse | None = None


class RevenueBucketResponse(BaseModel):
    label: str
    revenue: MoneyResponse


class RecentOrderResponse(BaseModel):
    orderId: str
    orderNumber: int
    customerIdentifier: str
    total: MoneyResponse
    createdAt: datetime


class StatisticsResponse(BaseModel):
    restaurantId: str
    window: str
    windowStart: datetime
    windowEnd: datetime
    totalRevenue: MoneyResponse
    totalOrders: int
    averageOrderValue: MoneyResponse
    buckets: list[RevenueBucketResponse] = Field(default_factory=list)
    recentOrders: list[RecentOrderResponse] = Field(default_factory=list)
