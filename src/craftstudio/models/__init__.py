"""Data models for design generation requests and results."""

from craftstudio.models.assets import AssetRole, ImageAsset
from craftstudio.models.design import (
    AngleRequest,
    DesignParameters,
    DesignSpecification,
    GenerationResult,
    IncompleteResultError,
    SceneParameters,
)
from craftstudio.models.marketing import (
    EcommerceSceneParameters,
    EcommerceSceneType,
    PosterParameters,
    SceneAsset,
    SceneAssetKind,
    TryOnGarment,
    TryOnMode,
    TryOnParameters,
    TryOnProduct,
    TryOnStyle,
)
from craftstudio.models.product import (
    PRODUCT_CONFIGS,
    ProductConfig,
    ProductType,
    angle_label,
    get_product_config,
    product_display_name,
)

__all__ = [
    "PRODUCT_CONFIGS",
    "AngleRequest",
    "AssetRole",
    "DesignParameters",
    "DesignSpecification",
    "EcommerceSceneParameters",
    "EcommerceSceneType",
    "GenerationResult",
    "ImageAsset",
    "IncompleteResultError",
    "PosterParameters",
    "ProductConfig",
    "ProductType",
    "SceneAsset",
    "SceneAssetKind",
    "SceneParameters",
    "TryOnGarment",
    "TryOnMode",
    "TryOnParameters",
    "TryOnProduct",
    "TryOnStyle",
    "angle_label",
    "get_product_config",
    "product_display_name",
]
