"""Image synthesis stage: fixed input ordering and failure classification."""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from typing import TYPE_CHECKING

from craftstudio.models.assets import AssetRole, ImageAsset
from craftstudio.observability.logging import get_logger
from craftstudio.pipeline.errors import ErrorKind, SynthesisError, classify_failure
from craftstudio.providers.image import (
    ImageContentPolicyError,
    ImageInvalidInputError,
    ImageNoDataError,
)

if TYPE_CHECKING:
    from craftstudio.providers.image import ImageProvider

log = get_logger(__name__)

# Templates smaller than this cannot be a real image
MIN_TEMPLATE_BYTES = 100


def order_inputs(
    template: ImageAsset,
    *,
    canonical: ImageAsset | None = None,
    reference: ImageAsset | None = None,
    logo: ImageAsset | None = None,
) -> list[ImageAsset]:
    """Arrange synthesis inputs in the order the image model expects.

    With a canonical image: canonical, template, reference, logo.
    Without one: template, reference, logo. Absent optional images are
    skipped.
    """
    ordered: list[ImageAsset] = []
    if canonical is not None:
        ordered.append(canonical.with_role(AssetRole.CANONICAL))
    ordered.append(template.with_role(AssetRole.TEMPLATE))
    if reference is not None:
        ordered.append(reference.with_role(AssetRole.REFERENCE))
    if logo is not None:
        ordered.append(logo.with_role(AssetRole.LOGO))
    return ordered


class ImageSynthesizer:
    """Generate one image from a prompt and ordered inputs.

    Args:
        provider: Image synthesis backend.
        timeout: Seconds allowed for one synthesis call.
    """

    def __init__(self, provider: ImageProvider, *, timeout: float = 180.0) -> None:
        self._provider = provider
        self._timeout = timeout

    async def synthesize(self, prompt: str, images: Sequence[ImageAsset]) -> ImageAsset:
        """Run one synthesis call.

        Args:
            prompt: Instruction text.
            images: Inputs, already in :func:`order_inputs` order.

        Returns:
            Generated image with role ``result``.

        Raises:
            SynthesisError: Classified failure. Raised before any remote call
                when a template is too small to be an image.
        """
        for image in images:
            if image.role is AssetRole.TEMPLATE and image.size_bytes < MIN_TEMPLATE_BYTES:
                raise SynthesisError(
                    ErrorKind.CLIENT,
                    f"Template image is not valid ({image.size_bytes} bytes). "
                    "Upload a clear PNG or JPG template.",
                )

        log.debug(
            "synthesis_start",
            prompt_length=len(prompt),
            inputs=[image.role.value for image in images],
        )

        try:
            result = await asyncio.wait_for(
                self._provider.generate(prompt, list(images)),
                timeout=self._timeout,
            )
        except TimeoutError as e:
            raise SynthesisError(
                ErrorKind.SERVER, f"Image synthesis timed out after {self._timeout:g}s"
            ) from e
        except ImageInvalidInputError as e:
            raise SynthesisError(ErrorKind.CLIENT, str(e)) from e
        except (ImageContentPolicyError, ImageNoDataError) as e:
            raise SynthesisError(ErrorKind.SERVER, str(e)) from e
        except Exception as e:
            raise SynthesisError(classify_failure(e), str(e) or type(e).__name__) from e

        if not result.image_data:
            raise SynthesisError(ErrorKind.SERVER, "Image synthesis returned no image data")

        log.info(
            "synthesis_complete",
            size_bytes=result.size_bytes,
            content_type=result.content_type,
            finish_reason=result.finish_reason,
        )
        return ImageAsset(
            data=result.image_data,
            mime_type=result.content_type,
            role=AssetRole.RESULT,
        )
