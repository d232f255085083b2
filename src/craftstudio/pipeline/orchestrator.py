"""Multi-angle design generation pipeline.

One run moves through::

    resolving_angles -> generating_canonical -> extracting_spec
        -> generating_remaining_angles -> complete

and can enter ``failed`` from any state. The canonical (first) angle is
generated from an optimized prompt; its image is then described as a
DesignSpecification and both are used to pin every later angle to the
same design. Failure of the canonical angle or of any later angle ends
the run; spec extraction only ever degrades.
"""

from __future__ import annotations

import time
from collections.abc import Mapping
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

from craftstudio.models.design import GenerationResult, IncompleteResultError
from craftstudio.models.product import angle_label
from craftstudio.observability.logging import bound_run_id, generate_run_id, get_logger
from craftstudio.pipeline.angles import resolve_templates
from craftstudio.pipeline.batching import fan_out
from craftstudio.pipeline.config import MAX_VARIANTS, GenerationSettings
from craftstudio.pipeline.consistency import build_angle_prompt, build_canonical_prompt
from craftstudio.pipeline.errors import (
    AngleGenerationFailed,
    CanonicalGenerationFailed,
    IncompleteGenerationError,
    MissingTemplateError,
    PipelineError,
    SynthesisError,
    VariantRunError,
)
from craftstudio.pipeline.prompt_optimizer import PromptOptimizer, PromptRole
from craftstudio.pipeline.spec_extractor import SpecExtractor
from craftstudio.pipeline.synthesizer import ImageSynthesizer, order_inputs

if TYPE_CHECKING:
    from craftstudio.models.assets import ImageAsset
    from craftstudio.models.design import AngleRequest, DesignParameters
    from craftstudio.pipeline.config import StudioConfig
    from craftstudio.providers.image import ImageProvider
    from craftstudio.providers.reasoning import TextReasoner

log = get_logger(__name__)


class PipelineState(StrEnum):
    """States of one pipeline run."""

    RESOLVING_ANGLES = "resolving_angles"
    GENERATING_CANONICAL = "generating_canonical"
    EXTRACTING_SPEC = "extracting_spec"
    GENERATING_REMAINING_ANGLES = "generating_remaining_angles"
    COMPLETE = "complete"
    FAILED = "failed"


@dataclass
class PipelineOutcome:
    """Result of one pipeline run: either a full result or a typed error.

    Attributes:
        state: ``complete`` on success, ``failed`` otherwise.
        result: Angle to image mapping covering every requested angle.
        error: Terminal failure naming the stage (and angle) that failed.
        failed_stage: State the run was in when it failed.
        run_id: Correlation ID bound to every log event of the run.
        duration_seconds: Wall-clock duration of the run.
        spec_degraded_reason: Why no design specification was used, if so.
    """

    state: PipelineState
    result: GenerationResult | None = None
    error: PipelineError | None = None
    failed_stage: PipelineState | None = None
    run_id: str | None = None
    duration_seconds: float = 0.0
    spec_degraded_reason: str | None = None

    def __post_init__(self) -> None:
        if (self.result is None) == (self.error is None):
            raise ValueError("PipelineOutcome needs exactly one of result or error")

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> GenerationResult:
        """Return the result, or raise the pipeline error."""
        if self.error is not None:
            raise self.error
        assert self.result is not None
        return self.result


class PipelineOrchestrator:
    """Run the multi-angle generation pipeline against injected backends.

    Args:
        reasoner: Reasoning backend for prompt optimization.
        image_provider: Image synthesis backend.
        extraction_reasoner: Vision-capable reasoning backend for spec
            extraction; defaults to ``reasoner``.
        settings: Timeouts and concurrency limits.
    """

    def __init__(
        self,
        reasoner: TextReasoner,
        image_provider: ImageProvider,
        *,
        extraction_reasoner: TextReasoner | None = None,
        settings: GenerationSettings | None = None,
    ) -> None:
        self.settings = settings or GenerationSettings()
        timeouts = self.settings.timeouts
        self._optimizer = PromptOptimizer(reasoner, timeout=timeouts.prompt_optimization)
        self._synthesizer = ImageSynthesizer(image_provider, timeout=timeouts.synthesis)
        self._extractor = SpecExtractor(
            extraction_reasoner or reasoner,
            timeout=timeouts.spec_extraction,
            temperature=self.settings.extraction_temperature,
        )

    @classmethod
    def from_config(
        cls,
        config: StudioConfig,
        *,
        text_provider: str | None = None,
        image_provider: str | None = None,
    ) -> PipelineOrchestrator:
        """Build an orchestrator with the providers named in ``config``.

        Args:
            config: Loaded studio configuration.
            text_provider: Overrides the configured text provider.
            image_provider: Overrides the configured image provider.

        Raises:
            ProviderError: If a reasoning provider is misconfigured.
            ImageProviderError: If the image provider is misconfigured.
        """
        from craftstudio.providers.image_factory import create_image_provider
        from craftstudio.providers.reasoning import create_reasoner

        text_spec = text_provider or config.providers.get_text_provider()
        extraction_spec = config.providers.get_extraction_provider(text_spec)
        reasoner = create_reasoner(text_spec)
        extraction_reasoner = (
            create_reasoner(extraction_spec) if extraction_spec != text_spec else None
        )
        image_spec = image_provider or config.providers.get_image_provider()
        log.info(
            "providers_selected",
            text=text_spec,
            extraction=extraction_spec,
            image=image_spec,
        )
        return cls(
            reasoner,
            create_image_provider(image_spec),
            extraction_reasoner=extraction_reasoner,
            settings=config.generation,
        )

    async def run_pipeline(
        self,
        request: AngleRequest,
        params: DesignParameters,
        templates_by_angle: Mapping[str, ImageAsset],
        generic_template: ImageAsset | None = None,
    ) -> PipelineOutcome:
        """Generate every requested angle of one design.

        Never raises for stage failures: the returned outcome carries either
        a result covering exactly the requested angles or a PipelineError.

        Args:
            request: Ordered angles; the first is canonical.
            params: Validated design parameters.
            templates_by_angle: Uploaded templates keyed by angle.
            generic_template: Optional template not tied to an angle.
        """
        run_id = generate_run_id()
        start = time.perf_counter()

        with bound_run_id(run_id):
            log.info(
                "pipeline_start",
                angles=list(request.angles),
                product=params.product_type.value,
            )

            def failed(state: PipelineState, error: PipelineError) -> PipelineOutcome:
                duration = time.perf_counter() - start
                log.error(
                    "pipeline_failed",
                    stage=state.value,
                    kind=error.kind.value,
                    error=str(error),
                    duration=f"{duration:.2f}s",
                )
                return PipelineOutcome(
                    state=PipelineState.FAILED,
                    error=error,
                    failed_stage=state,
                    run_id=run_id,
                    duration_seconds=duration,
                )

            state = PipelineState.RESOLVING_ANGLES
            try:
                resolved = resolve_templates(request, templates_by_angle, generic_template)
            except MissingTemplateError as e:
                return failed(state, e)

            state = PipelineState.GENERATING_CANONICAL
            canonical = request.canonical
            result = GenerationResult(canonical_angle=canonical)
            try:
                prompt, canonical_image = await self._generate_canonical(
                    params, canonical, resolved[canonical]
                )
            except SynthesisError as e:
                return failed(state, CanonicalGenerationFailed(canonical, e))
            result.add(canonical, canonical_image, prompt)
            log.info("canonical_generated", angle=canonical, size_bytes=canonical_image.size_bytes)

            state = PipelineState.EXTRACTING_SPEC
            extraction = await self._extractor.extract(canonical_image, params.product_name)
            result.spec = extraction.spec
            log.info(
                "consistency_mode",
                mode="visual_reference" if extraction.degraded else "specification",
            )

            state = PipelineState.GENERATING_REMAINING_ANGLES
            total = len(request.angles)
            for index, angle in enumerate(request.remaining, start=2):
                prompt = build_angle_prompt(
                    params=params,
                    angle=angle,
                    canonical_angle=canonical,
                    spec=extraction.spec,
                )
                images = order_inputs(
                    resolved[angle],
                    canonical=canonical_image,
                    reference=params.style_reference,
                    logo=params.brand_logo,
                )
                try:
                    image = await self._synthesizer.synthesize(prompt, images)
                except SynthesisError as e:
                    log.warning("angle_failed", index=index, total=total, angle=angle)
                    return failed(
                        state, AngleGenerationFailed(index, angle, total, result.angles, e)
                    )
                result.add(angle, image, prompt)
                log.info("angle_generated", index=index, total=total, angle=angle)

            state = PipelineState.COMPLETE
            try:
                result.assert_covers(request)
            except IncompleteResultError as e:
                return failed(state, IncompleteGenerationError(e.missing, e.extra))

            duration = time.perf_counter() - start
            log.info(
                "pipeline_complete",
                angles=result.angles,
                spec_used=result.spec is not None,
                duration=f"{duration:.2f}s",
            )
            return PipelineOutcome(
                state=PipelineState.COMPLETE,
                result=result,
                run_id=run_id,
                duration_seconds=duration,
                spec_degraded_reason=extraction.degraded_reason,
            )

    async def _generate_canonical(
        self,
        params: DesignParameters,
        angle: str,
        template: ImageAsset,
    ) -> tuple[str, ImageAsset]:
        optimized = await self._optimizer.optimize(params, PromptRole.PRODUCT_DESIGN, angle=angle)
        log.debug(
            "canonical_prompt_ready",
            source=optimized.source.value,
            notes=optimized.debug_notes,
        )
        prompt = build_canonical_prompt(
            optimized.text, params.product_type, angle_label(params.product_type, angle)
        )
        images = order_inputs(
            template, reference=params.style_reference, logo=params.brand_logo
        )
        return prompt, await self._synthesizer.synthesize(prompt, images)

    async def run_variants(
        self,
        request: AngleRequest,
        params: DesignParameters,
        templates_by_angle: Mapping[str, ImageAsset],
        generic_template: ImageAsset | None = None,
        *,
        count: int,
    ) -> list[PipelineOutcome]:
        """Run ``count`` independent pipelines over the same inputs.

        Variants run concurrently, at most ``settings.max_variant_concurrency``
        at a time. Each run is internally sequential and succeeds or fails on
        its own; a run that raises becomes a failed outcome with no
        ``failed_stage``.

        Raises:
            ValueError: If ``count`` is not between 1 and 8.
        """
        if not 1 <= count <= MAX_VARIANTS:
            raise ValueError(f"count must be between 1 and {MAX_VARIANTS}, got {count}")

        async def _run(_variant: int) -> PipelineOutcome:
            return await self.run_pipeline(request, params, templates_by_angle, generic_template)

        concurrency = min(self.settings.max_variant_concurrency, MAX_VARIANTS)
        log.info("variants_start", count=count, max_concurrency=concurrency)
        outcomes, errors = await fan_out(list(range(count)), _run, concurrency)
        for index, exc in errors:
            outcomes[index] = PipelineOutcome(
                state=PipelineState.FAILED,
                error=VariantRunError(index + 1, exc),
            )

        finished = [o for o in outcomes if o is not None]
        log.info(
            "variants_complete",
            count=count,
            succeeded=sum(1 for o in finished if o.ok),
        )
        return finished
