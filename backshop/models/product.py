"""Product catalog models"""

from sqlalchemy import Column, String, Text, Numeric, Integer, Boolean, ForeignKey, Index, CheckConstraint, Uuid
from sqlalchemy.orm import relationship

from .base import Base, TimestampedModel, UUIDModel

class Product(Base, TimestampedModel, UUIDModel):
    """Catalog product referenced by carts and orders"""

    __tablename__ = "products"

    name = Column(String(255), nullable=False, index=True)
    slug = Column(String(255), unique=True, nullable=False, index=True)
    description = Column(Text, nullable=True)

    # Pricing
    price_current = Column(Numeric(10, 2), nullable=False)
    price_old = Column(Numeric(10, 2), nullable=True)
    currency = Column(String(10), nullable=False, default="zł")

    # Inventory and stats
    stock = Column(Integer, nullable=False, default=0)
    views = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)

    images = relationship(
        "ProductImage",
        back_populates="product",
        cascade="all, delete-orphan",
        order_by="ProductImage.order",
        lazy="selectin",
    )

    __table_args__ = (
        CheckConstraint("price_current >= 0", name="check_positive_price"),
        Index("idx_products_active", "is_active"),
    )

    @property
    def primary_image(self):
        """URL of the first image, if any"""
        return self.images[0].url if self.images else None

class ProductImage(Base, UUIDModel):
    """Ordered product image"""

    __tablename__ = "product_images"

    product_id = Column(Uuid, ForeignKey("products.id", ondelete="CASCADE"), nullable=False)
    url = Column(String(500), nullable=False)
    alt = Column(String(255), nullable=True)
    order = Column(Integer, nullable=False, default=0)

    product = relationship("Product", back_populates="images")
