"""
Product record models for the Product Page Scraper.
Attribute names are the JSON keys served by the polling endpoint.
"""
from typing import Dict, List, Optional
from pydantic import BaseModel, Field


class ColorOption(BaseModel):
    """Color swatch as rendered on initial page load."""
    name: Optional[str] = None
    image: Optional[str] = None
    isSelected: bool = False


class SizeOption(BaseModel):
    """Size option as rendered on initial page load."""
    size: Optional[str] = None
    isSelected: bool = False


class Variant(BaseModel):
    """
    One concrete (color, size) selection and the price shown for it.

    `color` and `size` are None when the page offers no such selector.
    """
    color: Optional[str] = None
    size: Optional[str] = None
    currentPrice: Optional[str] = None
    originalPrice: Optional[str] = None
    discount: Optional[str] = None


class DescriptionData(BaseModel):
    """Description section content."""
    text: List[str] = Field(default_factory=list)
    images: List[str] = Field(default_factory=list)


class StaticPageData(BaseModel):
    """
    Everything read from the page without interacting with it.

    This is the contract between the Field Extractor and the Result Assembler.
    """
    title: Optional[str] = None
    bulkPrice: Optional[str] = None
    coupon: Optional[str] = None
    mainImages: List[str] = Field(default_factory=list)
    availableColors: List[ColorOption] = Field(default_factory=list)
    availableSizes: List[SizeOption] = Field(default_factory=list)
    selectedColor: Optional[str] = None
    selectedSize: Optional[str] = None
    specifications: Dict[str, str] = Field(default_factory=dict)
    description: DescriptionData = Field(default_factory=DescriptionData)
    productHTML: Optional[str] = None


class ProductRecord(BaseModel):
    """
    Canonical output record of a scrape job.

    `currentPrice`, `originalPrice` and `discount` mirror the first entry of
    `priceVariations`, which is the representative price of the product.
    """
    title: Optional[str] = None
    currentPrice: Optional[str] = None
    originalPrice: Optional[str] = None
    discount: Optional[str] = None
    bulkPrice: Optional[str] = None
    images: List[str] = Field(default_factory=list)
    priceVariations: List[Variant] = Field(default_factory=list)
    selectedColor: Optional[str] = None
    availableColors: List[ColorOption] = Field(default_factory=list)
    selectedSize: Optional[str] = None
    availableSizes: List[SizeOption] = Field(default_factory=list)
    coupon: Optional[str] = None
    specifications: Dict[str, str] = Field(default_factory=dict)
    description: DescriptionData = Field(default_factory=DescriptionData)
    productHTML: Optional[str] = None
