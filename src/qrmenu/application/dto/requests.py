from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


def _to_camel(value: str) -> str:
    parts = value.split("_")
    return parts[0] + "".join(part.capitalize() for part in parts[1:])


class CamelBaseModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=_to_camel,
        populate_by_name=True,
    )


class PlaceOrderItemRequest(CamelBaseModel):
    item_id: str
    quantity: int = Field(ge=1)


class PlaceOrderRequest(CamelBaseModel):
    customer_identifier: str = Field(min_length=1, max_length=120)
    items: list[PlaceOrderItemRequest] = Field(min_length=1)


class UpdateOrderStatusRequest(CamelBaseModel):
    status: str
