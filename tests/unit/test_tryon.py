"""Tests for virtual try-on generation."""

from __future__ import annotations

import pytest

from craftstudio.models import AssetRole, ImageAsset, TryOnParameters, TryOnProduct
from craftstudio.pipeline.config import GenerationSettings, TimeoutsConfig
from craftstudio.pipeline.marketing import MarketingGenerationFailed
from craftstudio.pipeline.prompt_optimizer import PromptSource
from craftstudio.pipeline.tryon import (
    VirtualTryOnGenerator,
    fallback_tryon_prompt,
    tryon_requirements,
)
from craftstudio.providers import ImageProviderError
from tests.fixtures.fakes import FakeImageProvider, FakeReasoner, make_asset


@pytest.fixture
def dress() -> TryOnProduct:
    return TryOnProduct(make_asset("dress"), product_type="dress", name="linen")


@pytest.fixture
def single() -> TryOnParameters:
    return TryOnParameters(mode="single", garment="full")


def test_single_mode_replaces_only_the_garment(
    single: TryOnParameters, dress: TryOnProduct
) -> None:
    text = tryon_requirements(single, [dress])

    assert "Replace ONLY the full on the person" in text
    assert "POSE PRESERVATION" in text
    assert "2. Product image: dress (linen)" in text


def test_multi_mode_lists_every_product(dress: TryOnProduct) -> None:
    options = TryOnParameters(mode="multi", preserve_pose=False)
    bag = TryOnProduct(make_asset("bag"), product_type="bag")

    text = tryon_requirements(options, [dress, bag])

    assert "ALL 2 provided products" in text
    assert "- Product 2: bag" in text
    assert "POSE FLEXIBILITY" in text


def test_fallback_follows_style() -> None:
    text = fallback_tryon_prompt(TryOnParameters(mode="multi", style="editorial"))

    assert "Fashion Editorial" in text
    assert "Aspect Ratio: 3:4" in text


@pytest.mark.asyncio
async def test_person_goes_first(single: TryOnParameters, dress: TryOnProduct) -> None:
    provider = FakeImageProvider()
    person = make_asset("person")

    result = await VirtualTryOnGenerator(FakeReasoner(), provider).generate(
        person, [dress], single
    )

    assert result.source is PromptSource.OPTIMIZED
    (call,) = provider.calls
    assert [i.role for i in call.images] == [AssetRole.PERSON, AssetRole.PRODUCT]
    assert call.images[0].data == person.data
    assert "WATERMARK REMOVAL" in call.prompt
    assert "MODE: Single Product Precise Replacement" in call.prompt


@pytest.mark.asyncio
async def test_reasoning_timeout_falls_back(single: TryOnParameters, dress: TryOnProduct) -> None:
    provider = FakeImageProvider()
    reasoner = FakeReasoner(delay=0.2)
    settings = GenerationSettings(timeouts=TimeoutsConfig(prompt_optimization=0.01))
    generator = VirtualTryOnGenerator(reasoner, provider, settings=settings)

    result = await generator.generate(make_asset("person"), [dress], single)

    assert result.source is PromptSource.FALLBACK
    assert provider.calls[0].prompt.startswith("Generate a photorealistic image")


@pytest.mark.asyncio
async def test_single_mode_takes_one_product(single: TryOnParameters, dress: TryOnProduct) -> None:
    generator = VirtualTryOnGenerator(FakeReasoner(), FakeImageProvider())

    with pytest.raises(ValueError, match="use multi mode"):
        await generator.generate(make_asset("person"), [dress, dress], single)
    with pytest.raises(ValueError, match="at least one product"):
        await generator.generate_variants(make_asset("person"), [], single, count=2)


@pytest.mark.asyncio
async def test_tiny_person_photo_is_a_client_error(
    single: TryOnParameters, dress: TryOnProduct
) -> None:
    provider = FakeImageProvider()

    with pytest.raises(MarketingGenerationFailed, match="Person photo") as exc_info:
        await VirtualTryOnGenerator(FakeReasoner(), provider).generate(
            ImageAsset(data=b"tiny"), [dress], single
        )

    assert exc_info.value.is_client_error
    assert provider.calls == []


@pytest.mark.asyncio
async def test_variants_keep_going_after_a_failure(
    single: TryOnParameters, dress: TryOnProduct
) -> None:
    provider = FakeImageProvider(failures={1: ImageProviderError("gemini", "boom")})
    generator = VirtualTryOnGenerator(
        FakeReasoner(), provider, settings=GenerationSettings(max_variant_concurrency=1)
    )

    outcomes = await generator.generate_variants(make_asset("person"), [dress], single, count=2)

    assert [o.ok for o in outcomes] == [False, True]
    assert outcomes[0].error is not None
    assert "virtual try-on (variant 1)" in str(outcomes[0].error)
    assert outcomes[1].image is not None
    assert outcomes[1].image.variant == 2
