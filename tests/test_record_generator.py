"""
Unit tests for the record generator.
"""
from pdp_scraper.generators.record_generator import RecordGenerator
from pdp_scraper.models.product import (
    ColorOption,
    DescriptionData,
    SizeOption,
    StaticPageData,
    Variant,
)


def static_data():
    return StaticPageData(
        title="Desk Lamp",
        bulkPrice="3+ pieces: US $7.00",
        coupon=None,
        mainImages=["https://i/1.jpg", "https://i/2.jpg"],
        availableColors=[ColorOption(name="Black", isSelected=True)],
        availableSizes=[SizeOption(size="EU Plug", isSelected=False)],
        selectedColor="Black",
        selectedSize=None,
        specifications={"Power": "5W"},
        description=DescriptionData(text=["Bright."], images=["https://i/1.jpg"]),
        productHTML="<div></div>",
    )


def test_headline_price_mirrors_first_variant():
    variants = [
        Variant(color="Black", size="EU Plug", currentPrice="US $8.00", originalPrice="US $16.00", discount="50% off"),
        Variant(color="Black", size="US Plug", currentPrice="US $9.00", originalPrice="US $18.00", discount="50% off"),
    ]

    record = RecordGenerator().assemble(static_data(), variants)

    assert record.currentPrice == variants[0].currentPrice
    assert record.originalPrice == "US $16.00"
    assert record.discount == "50% off"
    assert record.priceVariations == variants


def test_static_fields_copied():
    record = RecordGenerator().assemble(static_data(), [Variant()])

    assert record.title == "Desk Lamp"
    assert record.bulkPrice == "3+ pieces: US $7.00"
    assert record.images == ["https://i/1.jpg", "https://i/2.jpg"]
    assert record.selectedColor == "Black"
    assert record.availableSizes[0].size == "EU Plug"
    assert record.specifications == {"Power": "5W"}
    assert record.description.text == ["Bright."]
    assert record.productHTML == "<div></div>"


def test_no_variants_leaves_prices_null():
    record = RecordGenerator().assemble(static_data(), [])

    assert record.currentPrice is None
    assert record.originalPrice is None
    assert record.discount is None
    assert record.priceVariations == []


def test_serialized_keys():
    record = RecordGenerator().assemble(static_data(), [Variant(currentPrice="US $1.00")])
    payload = record.model_dump(mode="json")

    assert payload["priceVariations"][0]["currentPrice"] == "US $1.00"
    assert payload["availableColors"][0]["isSelected"] is True
    assert set(payload) >= {"title", "images", "priceVariations", "specifications", "description", "productHTML"}
