"""Multi-angle design generation pipeline."""

from craftstudio.pipeline.angles import ResolvedTemplates, TemplateSource, resolve_templates
from craftstudio.pipeline.config import (
    GenerationSettings,
    StudioConfig,
    StudioConfigError,
    load_studio_config,
)
from craftstudio.pipeline.ecommerce import EcommerceSceneGenerator
from craftstudio.pipeline.errors import (
    AngleGenerationFailed,
    CanonicalGenerationFailed,
    ErrorKind,
    IncompleteGenerationError,
    MissingTemplateError,
    PipelineError,
    SynthesisError,
    VariantRunError,
    classify_failure,
)
from craftstudio.pipeline.marketing import (
    MarketingGenerationFailed,
    MarketingImage,
    MarketingOutcome,
)
from craftstudio.pipeline.orchestrator import PipelineOrchestrator, PipelineOutcome, PipelineState
from craftstudio.pipeline.posters import PosterGenerator
from craftstudio.pipeline.prompt_optimizer import (
    OptimizedPrompt,
    PromptBrief,
    PromptOptimizer,
    PromptRole,
    PromptSource,
)
from craftstudio.pipeline.scenes import SceneGenerationFailed, SceneGenerator, SceneImage
from craftstudio.pipeline.spec_extractor import ExtractionResult, SpecExtractor
from craftstudio.pipeline.synthesizer import ImageSynthesizer, order_inputs
from craftstudio.pipeline.tryon import VirtualTryOnGenerator

__all__ = [
    "AngleGenerationFailed",
    "CanonicalGenerationFailed",
    "EcommerceSceneGenerator",
    "ErrorKind",
    "ExtractionResult",
    "GenerationSettings",
    "ImageSynthesizer",
    "IncompleteGenerationError",
    "MarketingGenerationFailed",
    "MarketingImage",
    "MarketingOutcome",
    "MissingTemplateError",
    "OptimizedPrompt",
    "PipelineError",
    "PipelineOrchestrator",
    "PipelineOutcome",
    "PipelineState",
    "PosterGenerator",
    "PromptBrief",
    "PromptOptimizer",
    "PromptRole",
    "PromptSource",
    "ResolvedTemplates",
    "SceneGenerationFailed",
    "SceneGenerator",
    "SceneImage",
    "SpecExtractor",
    "StudioConfig",
    "StudioConfigError",
    "SynthesisError",
    "TemplateSource",
    "VariantRunError",
    "VirtualTryOnGenerator",
    "classify_failure",
    "load_studio_config",
    "order_inputs",
    "resolve_templates",
]
