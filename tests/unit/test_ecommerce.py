"""Tests for e-commerce scene generation."""

from __future__ import annotations

import pytest

from craftstudio.models import (
    AssetRole,
    EcommerceSceneParameters,
    ImageAsset,
    SceneAsset,
    SceneAssetKind,
)
from craftstudio.pipeline.config import GenerationSettings
from craftstudio.pipeline.ecommerce import (
    EcommerceSceneGenerator,
    fallback_ecommerce_prompt,
    scene_constraints,
    scene_images,
)
from craftstudio.pipeline.marketing import MarketingGenerationFailed
from craftstudio.pipeline.prompt_optimizer import PromptSource
from craftstudio.providers import ImageProviderConnectionError
from tests.fixtures.fakes import FakeImageProvider, FakeReasoner, make_asset


@pytest.fixture
def assets() -> list[SceneAsset]:
    return [
        SceneAsset(make_asset("vase"), SceneAssetKind.PROP, "vase"),
        SceneAsset(make_asset("mug"), SceneAssetKind.PRODUCT, "mug"),
    ]


def test_images_put_model_then_products_then_props(assets: list[SceneAsset]) -> None:
    model = make_asset("model")

    images = scene_images(assets, model)

    assert [i.role for i in images] == [AssetRole.PERSON, AssetRole.PRODUCT, AssetRole.PROP]
    assert images[1].data == assets[1].image.data


def test_constraints_number_the_elements(assets: list[SceneAsset]) -> None:
    options = EcommerceSceneParameters(scene_type="cafe", description="Morning light")

    text = scene_constraints(options, assets, has_model=True, variant=2, total=3)

    assert "1. Model (provided image)" in text
    assert "2. Product: mug" in text
    assert "3. Prop: vase" in text
    assert "- User Notes: Morning light" in text
    assert "image 2 of 3" in text
    assert "watermark" in text.lower()


def test_fallback_uses_custom_setting() -> None:
    options = EcommerceSceneParameters(scene_type="custom", custom_scene="rooftop garden")

    text = fallback_ecommerce_prompt(options, has_model=False)

    assert "Create a rooftop garden setting" in text
    assert "CUSTOM SCENE:" in text


@pytest.mark.asyncio
async def test_generate_optimizes_then_appends_constraints(assets: list[SceneAsset]) -> None:
    reasoner, provider = FakeReasoner(), FakeImageProvider()

    result = await EcommerceSceneGenerator(reasoner, provider).generate(
        assets, EcommerceSceneParameters(scene_type="home")
    )

    assert result.source is PromptSource.OPTIMIZED
    assert "- Props (1): vase" in reasoner.calls[0].user
    (call,) = provider.calls
    assert "SCENE CONSTRAINTS (DO NOT IGNORE)" in call.prompt
    assert [i.role for i in call.images] == [AssetRole.PRODUCT, AssetRole.PROP]


@pytest.mark.asyncio
async def test_custom_prompt_skips_the_optimizer(assets: list[SceneAsset]) -> None:
    reasoner, provider = FakeReasoner(), FakeImageProvider()
    options = EcommerceSceneParameters(custom_prompt="A mug on a marble counter.")

    result = await EcommerceSceneGenerator(reasoner, provider).generate(assets, options)

    assert result.source is PromptSource.CUSTOM
    assert reasoner.calls == []
    assert provider.calls[0].prompt.startswith("A mug on a marble counter.")


@pytest.mark.asyncio
async def test_props_alone_are_not_enough() -> None:
    props = [SceneAsset(make_asset("vase"), SceneAssetKind.PROP)]

    with pytest.raises(ValueError, match="at least one product"):
        await EcommerceSceneGenerator(FakeReasoner(), FakeImageProvider()).generate(
            props, EcommerceSceneParameters()
        )


@pytest.mark.asyncio
async def test_tiny_prop_names_its_position(assets: list[SceneAsset]) -> None:
    provider = FakeImageProvider()
    broken = [*assets, SceneAsset(ImageAsset(data=b"tiny"), SceneAssetKind.PROP)]

    with pytest.raises(MarketingGenerationFailed, match="Prop image 3"):
        await EcommerceSceneGenerator(FakeReasoner(), provider).generate(
            broken, EcommerceSceneParameters()
        )

    assert provider.calls == []


@pytest.mark.asyncio
async def test_unreachable_provider_marks_every_variant(assets: list[SceneAsset]) -> None:
    down = ImageProviderConnectionError("gemini", "unreachable")
    provider = FakeImageProvider(failures={1: down, 2: down})
    generator = EcommerceSceneGenerator(
        FakeReasoner(), provider, settings=GenerationSettings(max_variant_concurrency=2)
    )

    outcomes = await generator.generate_variants(
        assets, EcommerceSceneParameters(), count=2, model_image=make_asset("model")
    )

    assert [o.ok for o in outcomes] == [False, False]
    assert all(o.error is not None and o.error.connectivity for o in outcomes)
