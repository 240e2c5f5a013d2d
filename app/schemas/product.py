# app/schemas/product.py
from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field


class Category(SQLModel):
    id: str
    name: str
    image_url: str | None = None


class SellerSummary(SQLModel):
    """
    Seller block embedded in product views.
    """

    id: str
    name: str = ""
    logo_url: str | None = None


class ProductVariant(SQLModel):
    """
    A purchasable configuration of a product (size, paper type, ...).
    """

    model_config = ConfigDict(extra="ignore")

    id: str
    name: str
    paper_type: str | None = None
    price_per_unit: float = Field(ge=0)


class ProductFaq(SQLModel):
    question: str
    answer: str


class Review(SQLModel):
    id: str
    author: str = ""
    rating: int = Field(ge=1, le=5)
    comment: str | None = None
    created_at: str | None = None


class Product(SQLModel):
    """
    Flat product view model.

    List views only fill the summary fields; the detail view also fills
    description, images, variants, faqs and reviews.
    """

    model_config = ConfigDict(extra="ignore")

    id: str
    name: str
    image_url: str | None = None
    min_order_quantity: int = Field(default=1, ge=1)
    category: str | None = None
    seller: SellerSummary | None = None
    description: str = ""
    images: list[str] = Field(default_factory=list)
    variants: list[ProductVariant] = Field(default_factory=list)
    faqs: list[ProductFaq] = Field(default_factory=list)
    reviews: list[Review] = Field(default_factory=list)

    @property
    def starting_price(self) -> float | None:
        if not self.variants:
            return None
        return min(v.price_per_unit for v in self.variants)


class VariantCreate(SQLModel):
    model_config = ConfigDict(extra="forbid")

    name: str = Field(max_length=100)
    paper_type: str | None = None
    price_per_unit: float = Field(gt=0)


class ProductCreate(SQLModel):
    """
    Payload for publishing a product.

    At least one variant is required: a product without variants
    cannot be added to a cart.
    """

    model_config = ConfigDict(extra="forbid")

    name: str = Field(max_length=255)
    description: str = ""
    category_id: str
    min_order_quantity: int = Field(default=1, ge=1)
    variants: list[VariantCreate] = Field(min_length=1)
    faqs: list[ProductFaq] = Field(default_factory=list)

    @field_validator("name", "category_id")
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("field cannot be empty")
        return v
