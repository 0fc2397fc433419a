# pricewatch/models/product.py

"""Catalog product model."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Product:
    """A catalog product that can be listed on several marketplaces."""

    id: int
    name: str
    description: str | None = None
    image_url: str | None = None
    brand: str | None = None
    category: str | None = None
