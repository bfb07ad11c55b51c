"""
Unit tests for the variant walker.
"""
import pytest

from pdp_scraper.layers.variants import VariantWalker
from tests.fakes import SEL, FakeElement, FakePage, make_variant_page


class TestColorsAndSizes:

    @pytest.mark.asyncio
    async def test_full_matrix_in_color_major_order(self):
        page = make_variant_page(["Black", "White"], ["S", "M", "L"])

        variants = await VariantWalker().walk(page)

        assert [(v.color, v.size) for v in variants] == [
            ("Black", "S"), ("Black", "M"), ("Black", "L"),
            ("White", "S"), ("White", "M"), ("White", "L"),
        ]
        assert variants[0].currentPrice == "US $10.00"
        assert variants[4].currentPrice == "US $21.00"
        assert variants[4].originalPrice == "US $31.00"
        assert all(v.discount == "50% off" for v in variants)

    @pytest.mark.asyncio
    async def test_settle_delay_after_each_color(self):
        page = make_variant_page(["Black", "White"], ["S"])

        await VariantWalker().walk(page)

        assert page.pauses == [300, 300]
        assert page.waits.count(SEL.current_price) == 2

    @pytest.mark.asyncio
    async def test_price_timeout_skips_rest_of_color(self):
        page = make_variant_page(
            ["Black", "White", "Red"],
            ["S", "M", "L"],
            unavailable={("White", "M")},
        )

        variants = await VariantWalker().walk(page)

        assert [(v.color, v.size) for v in variants] == [
            ("Black", "S"), ("Black", "M"), ("Black", "L"),
            ("White", "S"),
            ("Red", "S"), ("Red", "M"), ("Red", "L"),
        ]

    @pytest.mark.asyncio
    async def test_never_more_than_colors_times_sizes(self):
        colors, sizes = ["A", "B", "C", "D"], ["1", "2"]
        page = make_variant_page(colors, sizes, unavailable={("B", "1"), ("D", "2")})

        variants = await VariantWalker().walk(page)

        assert 1 <= len(variants) <= len(colors) * len(sizes)
        assert [v.color for v in variants] == ["A", "A", "C", "C", "D"]

    @pytest.mark.asyncio
    async def test_all_combinations_unavailable_falls_back_to_rendered_price(self):
        page = make_variant_page(["Black", "White"], ["S", "M"])
        page.elements[SEL.current_price] = []

        variants = await VariantWalker().walk(page)

        assert len(variants) == 1
        assert variants[0].color is None
        assert variants[0].size is None
        assert variants[0].currentPrice is None


class TestColorsOnly:

    @pytest.mark.asyncio
    async def test_one_variant_per_color(self):
        page = make_variant_page(["Black", "White", "Red"], [])

        variants = await VariantWalker().walk(page)

        assert [v.color for v in variants] == ["Black", "White", "Red"]
        assert all(v.size is None for v in variants)
        assert [v.currentPrice for v in variants] == ["US $10.00", "US $20.00", "US $30.00"]
        assert page.pauses == [500, 500, 500]
        assert SEL.current_price not in page.waits


class TestNoColors:

    @pytest.mark.asyncio
    async def test_single_variant_without_selectors(self):
        page = FakePage(elements={
            SEL.current_price: [FakeElement(text="US $4.20")],
            SEL.original_price: [FakeElement(text="US $8.40")],
        })

        variants = await VariantWalker().walk(page)

        assert len(variants) == 1
        assert variants[0].color is None
        assert variants[0].size is None
        assert variants[0].currentPrice == "US $4.20"
        assert variants[0].originalPrice == "US $8.40"
        assert variants[0].discount is None
        assert page.clicked == []

    @pytest.mark.asyncio
    async def test_sizes_without_colors_yield_single_variant(self):
        page = make_variant_page([], ["S", "M"])

        variants = await VariantWalker().walk(page)

        assert len(variants) == 1
        assert variants[0].color is None
        assert variants[0].size is None
        assert page.clicked == []
