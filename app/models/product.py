from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator, model_validator


def now_millis() -> int:
    """Current UTC time as epoch milliseconds, the format stored in createdAt/updatedAt"""
    return int(datetime.now(timezone.utc).timestamp() * 1000)


class Product(BaseModel):
    """
    Product document as stored in MongoDB and indexed by Atlas Search.

    name/description are analyzed text fields; category, brand and tags are
    also indexed untokenized (token type) for exact filtering and sorting.
    """
    id: Optional[str] = None
    name: str
    description: Optional[str] = None
    category: str
    brand: Optional[str] = None
    price: Decimal = Field(..., gt=0)
    stockQuantity: int = Field(0, ge=0)
    rating: float = Field(0.0, ge=0.0, le=5.0)
    reviewCount: int = 0
    tags: Tuple[str, ...] = ()
    active: bool = True
    featured: bool = False
    createdAt: Optional[int] = None
    updatedAt: Optional[int] = None

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "name": "iPhone 15 Pro",
                "description": "Latest Apple iPhone with A17 chip",
                "category": "Smartphones",
                "brand": "Apple",
                "price": 999.00,
                "stockQuantity": 100,
                "rating": 4.7,
                "reviewCount": 200,
                "tags": ["smartphone", "apple", "5G"],
                "active": True,
                "featured": True
            }
        }
    )

    @field_validator("name", "category")
    @classmethod
    def not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value

    @model_validator(mode="before")
    @classmethod
    def set_timestamps(cls, data: Any) -> Any:
        # Both timestamps start from the same instant
        if isinstance(data, dict) and (data.get("createdAt") is None or data.get("updatedAt") is None):
            data = dict(data)
            now = now_millis()
            if data.get("createdAt") is None:
                data["createdAt"] = now
            if data.get("updatedAt") is None:
                data["updatedAt"] = now
        return data

    @field_serializer("price")
    def serialize_price(self, price: Decimal) -> float:
        return float(price)

    def to_document(self) -> Dict[str, Any]:
        """MongoDB document for this product; _id is assigned by storage"""
        document = self.model_dump()
        document["tags"] = list(self.tags)
        return document

    @classmethod
    def from_document(cls, document: Dict[str, Any]) -> "Product":
        data = dict(document)
        object_id = data.pop("_id", None)
        if not data.get("id") and object_id is not None:
            data["id"] = str(object_id)
        return cls.model_validate(data)
