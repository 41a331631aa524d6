# backend/multistore/db/models/category_model.py
"""
Se encarga de definir el modelo de categoría para la aplicación.

Las categorías forman un árbol mediante `parent_id`; una categoría sin padre
es una categoría raíz ("padre").
"""

from sqlalchemy import Column, Integer, String, Text, Boolean, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from sqlalchemy.types import TIMESTAMP

from multistore.db.database import Base


class Category(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True)
    display_id = Column(String(20), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=False, index=True)
    name_ar = Column(String(255), nullable=True)
    slug = Column(String(255), unique=True, nullable=False, index=True)
    description = Column(Text, nullable=True)
    description_ar = Column(Text, nullable=True)
    parent_id = Column(Integer, ForeignKey("categories.id", ondelete="SET NULL"), nullable=True, index=True)
    image_url = Column(String(500), nullable=True)
    icon = Column(String(100), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    sort_order = Column(Integer, nullable=False, default=0)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now())

    children = relationship("Category", back_populates="parent", passive_deletes=True)
    parent = relationship("Category", remote_side=[id], back_populates="children")
    products = relationship("Product", back_populates="category", passive_deletes=True)

    @property
    def is_parent(self) -> bool:
        return self.parent_id is None

    def __repr__(self):
        return f"<Category(id={self.id}, slug='{self.slug}', parent_id={self.parent_id})>"
