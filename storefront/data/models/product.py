# storefront/data/models/product.py
from sqlalchemy import Column, Integer, ForeignKey, String, Text
from sqlalchemy.orm import relationship

from storefront.data.database import Base


class ProductModel(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    # major currency unit
    price = Column(Integer, nullable=False)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False)

    category = relationship("CategoryModel", back_populates="products")
    features = relationship("ProductFeatureModel", back_populates="product")
    images = relationship("ProductImageModel", back_populates="product")


class ProductFeatureModel(Base):
    __tablename__ = "product_features"

    id = Column(Integer, primary_key=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False, index=True)
    feature = Column(String, nullable=False)

    product = relationship("ProductModel", back_populates="features")


class ProductImageModel(Base):
    __tablename__ = "product_images"

    id = Column(Integer, primary_key=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False, index=True)
    image_url = Column(String, nullable=False)

    product = relationship("ProductModel", back_populates="images")
