"""Shared machinery for marketing images built from product photos.

Posters, virtual try-ons and e-commerce scenes all follow the same two
steps: optimize a prompt (falling back deterministically), then run one
synthesis call with the product photos as inputs. Several variants of
the same request run through :func:`fan_out` and fail independently.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

from craftstudio.observability.logging import bound_run_id, generate_run_id, get_logger
from craftstudio.pipeline.batching import fan_out, is_connectivity_error
from craftstudio.pipeline.config import MAX_VARIANTS, GenerationSettings
from craftstudio.pipeline.consistency import WATERMARK_GUARD
from craftstudio.pipeline.errors import ErrorKind, PipelineError, SynthesisError, classify_failure
from craftstudio.pipeline.prompt_optimizer import PromptOptimizer, PromptSource
from craftstudio.pipeline.synthesizer import MIN_TEMPLATE_BYTES, ImageSynthesizer

if TYPE_CHECKING:
    from craftstudio.models.assets import ImageAsset
    from craftstudio.providers.image import ImageProvider
    from craftstudio.providers.reasoning import TextReasoner

log = get_logger(__name__)

WATERMARK_BLOCK = (
    "WATERMARK REMOVAL (CRITICAL):\n"
    f"- {WATERMARK_GUARD}\n"
    "- Generate a clean, professional image free of any third-party markings."
)


class MarketingGenerationFailed(PipelineError):
    """A poster, try-on or e-commerce scene could not be generated.

    Attributes:
        kind_label: What was being generated (``poster``, ``virtual try-on``...).
        stage: Pipeline stage name, e.g. ``generating_poster``.
        variant: 1-based variant number, when several were requested.
        cause: Underlying failure.
        connectivity: Whether the failure was a lost connection to a provider.
    """

    def __init__(
        self,
        kind_label: str,
        stage: str,
        cause: Exception,
        *,
        variant: int | None = None,
    ) -> None:
        self.kind_label = kind_label
        self.variant = variant
        self.cause = cause
        self.connectivity = is_connectivity_error(cause)
        where = f" (variant {variant})" if variant is not None else ""
        super().__init__(
            stage,
            classify_failure(cause),
            f"Failed to generate {kind_label}{where}: {cause}",
        )


@dataclass(frozen=True)
class MarketingImage:
    """One generated marketing image and how its prompt was produced."""

    image: ImageAsset
    prompt: str
    source: PromptSource
    variant: int = 1


@dataclass(frozen=True)
class MarketingOutcome:
    """Result of one variant: an image or the error that stopped it."""

    variant: int
    image: MarketingImage | None = None
    error: MarketingGenerationFailed | None = None

    def __post_init__(self) -> None:
        if (self.image is None) == (self.error is None):
            raise ValueError("MarketingOutcome needs exactly one of image or error")

    @property
    def ok(self) -> bool:
        return self.error is None


def variation_note(variant: int, total: int) -> str:
    """Instruction that keeps variants of one request from repeating each other."""
    if total <= 1:
        return ""
    return (
        f"VARIATION: This is image {variant} of {total}. Keep products, branding and "
        "subject identity consistent, but vary the framing, camera angle, lighting mood "
        "or arrangement. Do NOT repeat the exact same composition across images."
    )


def require_image(asset: ImageAsset, what: str) -> None:
    """Reject payloads too small to be an image before any remote call.

    Raises:
        SynthesisError: Client error naming ``what``.
    """
    if asset.size_bytes < MIN_TEMPLATE_BYTES:
        raise SynthesisError(
            ErrorKind.CLIENT,
            f"{what} is not a valid image ({asset.size_bytes} bytes). "
            "Upload a clear PNG or JPG.",
        )


class MarketingGenerator:
    """Base for generators that dress product photos in marketing context.

    Args:
        reasoner: Reasoning backend for prompt optimization.
        image_provider: Image synthesis backend.
        settings: Timeouts and variant concurrency.
    """

    kind_label = "marketing image"
    stage = "generating_marketing_image"

    def __init__(
        self,
        reasoner: TextReasoner,
        image_provider: ImageProvider,
        *,
        settings: GenerationSettings | None = None,
    ) -> None:
        self.settings = settings or GenerationSettings()
        timeouts = self.settings.timeouts
        self._optimizer = PromptOptimizer(reasoner, timeout=timeouts.prompt_optimization)
        self._synthesizer = ImageSynthesizer(image_provider, timeout=timeouts.synthesis)

    async def _synthesize(
        self,
        prompt: str,
        images: Sequence[ImageAsset],
        source: PromptSource,
        variant: int,
    ) -> MarketingImage:
        image = await self._synthesizer.synthesize(prompt, images)
        log.info(
            "marketing_image_generated",
            kind=self.kind_label,
            variant=variant,
            prompt_source=source.value,
            size_bytes=image.size_bytes,
        )
        return MarketingImage(image=image, prompt=prompt, source=source, variant=variant)

    def _check(self, check_inputs: Callable[[], None]) -> None:
        try:
            check_inputs()
        except SynthesisError as e:
            error = MarketingGenerationFailed(self.kind_label, self.stage, e)
            log.error("marketing_inputs_rejected", kind=self.kind_label, error=str(error))
            raise error from e

    async def _run_one(
        self,
        make_one: Callable[[int, int], Awaitable[MarketingImage]],
        check_inputs: Callable[[], None],
    ) -> MarketingImage:
        self._check(check_inputs)
        with bound_run_id(generate_run_id()):
            try:
                return await make_one(1, 1)
            except SynthesisError as e:
                error = MarketingGenerationFailed(self.kind_label, self.stage, e)
                log.error(
                    "marketing_image_failed",
                    kind=self.kind_label,
                    error_kind=error.kind.value,
                    error=str(error),
                )
                raise error from e

    async def _run_variants(
        self,
        make_one: Callable[[int, int], Awaitable[MarketingImage]],
        check_inputs: Callable[[], None],
        count: int,
    ) -> list[MarketingOutcome]:
        """Run ``make_one(variant, total)`` for each variant with bounded concurrency.

        Inputs are checked once, before any variant starts.

        Raises:
            ValueError: If ``count`` is not between 1 and 8.
            MarketingGenerationFailed: If an input image is rejected.
        """
        if not 1 <= count <= MAX_VARIANTS:
            raise ValueError(f"count must be between 1 and {MAX_VARIANTS}, got {count}")
        self._check(check_inputs)

        async def _variant(number: int) -> MarketingImage:
            with bound_run_id(generate_run_id()):
                return await make_one(number, count)

        concurrency = min(self.settings.max_variant_concurrency, MAX_VARIANTS)
        log.info("marketing_variants_start", kind=self.kind_label, count=count)
        images, errors = await fan_out(list(range(1, count + 1)), _variant, concurrency)

        outcomes = [
            MarketingOutcome(variant=number, image=image)
            for number, image in enumerate(images, start=1)
            if image is not None
        ]
        for index, exc in errors:
            outcomes.append(
                MarketingOutcome(
                    variant=index + 1,
                    error=MarketingGenerationFailed(
                        self.kind_label, self.stage, exc, variant=index + 1
                    ),
                )
            )
        outcomes.sort(key=lambda o: o.variant)

        log.info(
            "marketing_variants_complete",
            kind=self.kind_label,
            count=count,
            succeeded=sum(1 for o in outcomes if o.ok),
        )
        return outcomes
