"""Model-wearing scenes generated from a finished product design."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

from craftstudio.models.assets import AssetRole, ImageAsset
from craftstudio.models.design import SceneParameters
from craftstudio.models.product import ProductType, product_display_name
from craftstudio.observability.logging import bound_run_id, generate_run_id, get_logger
from craftstudio.pipeline.config import GenerationSettings
from craftstudio.pipeline.errors import ErrorKind, PipelineError, SynthesisError, classify_failure
from craftstudio.pipeline.prompt_optimizer import PromptOptimizer, scene_brief
from craftstudio.pipeline.synthesizer import MIN_TEMPLATE_BYTES, ImageSynthesizer

if TYPE_CHECKING:
    from craftstudio.providers.image import ImageProvider
    from craftstudio.providers.reasoning import TextReasoner

log = get_logger(__name__)

_CAMERA_INSTRUCTIONS: tuple[tuple[tuple[str, ...], str], ...] = (
    (
        ("front",),
        "CAMERA ANGLE: Front-facing view. Photograph the model from directly in front, "
        "showing the face and the front of the body clearly, in a standard portrait orientation.",
    ),
    (
        ("back",),
        "CAMERA ANGLE: Back view. Photograph the model from directly behind, showing the "
        "back of the head and body. The model's face must not be visible.",
    ),
    (
        ("side",),
        "CAMERA ANGLE: Side profile view. Photograph the model from exactly 90 degrees to the "
        "side, showing a true profile with only one side of the face and body visible.",
    ),
    (
        ("45", "three-quarter", "3/4"),
        "CAMERA ANGLE: Three-quarter view (45-degree angle). Photograph the model from a "
        "45-degree angle, showing the front and one side partially.",
    ),
)


def camera_instruction(view_angle: str | None) -> str:
    """Camera placement text for a view angle; empty when no angle is given."""
    if not view_angle or not view_angle.strip():
        return ""
    normalized = view_angle.lower().strip()
    for keywords, instruction in _CAMERA_INSTRUCTIONS:
        if any(k in normalized for k in keywords):
            return instruction
    return (
        f"CAMERA ANGLE: {view_angle.strip()}. Position the camera to capture this "
        "specific viewing angle as requested."
    )


class SceneGenerationFailed(PipelineError):
    """A scene image could not be generated.

    Attributes:
        view_angle: Camera angle of the failed scene, if any.
        angle_index: 1-based position among the requested camera angles.
        completed: Camera angles finished before the failure.
    """

    def __init__(
        self,
        view_angle: str | None,
        cause: Exception,
        *,
        angle_index: int | None = None,
        completed: Sequence[str] = (),
    ) -> None:
        self.view_angle = view_angle
        self.angle_index = angle_index
        self.completed = list(completed)
        self.cause = cause
        where = f" at angle {angle_index} ('{view_angle}')" if angle_index else ""
        super().__init__(
            "generating_scene",
            classify_failure(cause),
            f"Failed to generate model scene{where}: {cause}",
        )


@dataclass(frozen=True)
class SceneImage:
    """One generated scene and the prompt that produced it."""

    view_angle: str | None
    image: ImageAsset
    prompt: str


class SceneGenerator:
    """Place a finished design on models in a styled scene.

    Args:
        reasoner: Reasoning backend for scene prompt optimization.
        image_provider: Image synthesis backend.
        settings: Timeouts.
    """

    def __init__(
        self,
        reasoner: TextReasoner,
        image_provider: ImageProvider,
        *,
        settings: GenerationSettings | None = None,
    ) -> None:
        settings = settings or GenerationSettings()
        self._optimizer = PromptOptimizer(reasoner, timeout=settings.timeouts.prompt_optimization)
        self._synthesizer = ImageSynthesizer(image_provider, timeout=settings.timeouts.synthesis)

    async def generate(
        self,
        design_image: ImageAsset,
        scene: SceneParameters,
        *,
        product_type: ProductType = ProductType.CUSTOM,
        custom_product_name: str | None = None,
    ) -> SceneImage:
        """Generate one scene. The design image is the only synthesis input.

        Raises:
            SceneGenerationFailed: On an invalid design image or synthesis failure.
        """
        with bound_run_id(generate_run_id()):
            try:
                return await self._generate(design_image, scene, product_type, custom_product_name)
            except SynthesisError as e:
                error = SceneGenerationFailed(scene.view_angle, e)
                log.error("scene_failed", kind=error.kind.value, error=str(error))
                raise error from e

    async def generate_angles(
        self,
        design_image: ImageAsset,
        scene: SceneParameters,
        angles: Sequence[str],
        *,
        product_type: ProductType = ProductType.CUSTOM,
        custom_product_name: str | None = None,
    ) -> dict[str, SceneImage]:
        """Generate the same scene once per camera angle, sequentially.

        Any failure ends the run; no partial mapping is returned.

        Raises:
            ValueError: If ``angles`` is empty.
            SceneGenerationFailed: Naming the 1-based index of the failed angle.
        """
        if not angles:
            raise ValueError("at least one camera angle is required")

        results: dict[str, SceneImage] = {}
        with bound_run_id(generate_run_id()):
            for index, angle in enumerate(angles, start=1):
                angle_scene = scene.model_copy(update={"view_angle": angle})
                try:
                    results[angle] = await self._generate(
                        design_image, angle_scene, product_type, custom_product_name
                    )
                except SynthesisError as e:
                    error = SceneGenerationFailed(
                        angle, e, angle_index=index, completed=list(results)
                    )
                    log.error("scene_failed", index=index, angle=angle, error=str(error))
                    raise error from e
                log.info("scene_generated", index=index, total=len(angles), angle=angle)
        return results

    async def _generate(
        self,
        design_image: ImageAsset,
        scene: SceneParameters,
        product_type: ProductType,
        custom_product_name: str | None,
    ) -> SceneImage:
        if design_image.size_bytes < MIN_TEMPLATE_BYTES:
            raise SynthesisError(
                ErrorKind.CLIENT,
                f"Product design image is not valid ({design_image.size_bytes} bytes). "
                "Use a generated product design image.",
            )

        product_name = product_display_name(product_type, custom_product_name)
        summary = (
            f"The provided {product_name.lower()} design with its exact colors, "
            "patterns, and materials"
        )
        optimized = await self._optimizer.optimize_brief(
            scene_brief(product_type, scene, product_name=product_name, design_summary=summary)
        )
        prompt = optimized.text
        instruction = camera_instruction(scene.view_angle)
        if instruction:
            prompt = f"{prompt}\n\n{instruction}"

        image = await self._synthesizer.synthesize(
            prompt, [design_image.with_role(AssetRole.CANONICAL)]
        )
        return SceneImage(view_angle=scene.view_angle, image=image, prompt=prompt)
