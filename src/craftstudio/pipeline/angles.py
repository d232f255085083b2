"""Map requested view angles to template images."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from enum import StrEnum

from craftstudio.models.assets import AssetRole, ImageAsset
from craftstudio.models.design import AngleRequest
from craftstudio.observability.logging import get_logger
from craftstudio.pipeline.errors import MissingTemplateError

log = get_logger(__name__)


class TemplateSource(StrEnum):
    """Where an angle's template came from."""

    DEDICATED = "dedicated"
    GENERIC = "generic"
    FALLBACK = "fallback"


@dataclass(frozen=True)
class ResolvedTemplates:
    """Total mapping from each requested angle to its template.

    Attributes:
        templates: Angle to template image, in request order.
        sources: Angle to how its template was chosen.
    """

    templates: dict[str, ImageAsset]
    sources: dict[str, TemplateSource]

    def __getitem__(self, angle: str) -> ImageAsset:
        return self.templates[angle]

    def __iter__(self) -> Iterator[str]:
        return iter(self.templates)

    def __len__(self) -> int:
        return len(self.templates)


def resolve_templates(
    request: AngleRequest,
    templates_by_angle: Mapping[str, ImageAsset],
    generic: ImageAsset | None = None,
) -> ResolvedTemplates:
    """Give every requested angle a template image.

    Dedicated templates win. When no requested angle has one, a generic
    upload is used for every angle. Other angles get the fallback
    template, chosen in this order:

    1. the canonical angle's own template;
    2. the first dedicated template in request order;
    3. the first uploaded template for an angle that was not requested;
    4. the generic template.

    Args:
        request: Requested angles.
        templates_by_angle: Uploaded templates keyed by angle; may include
            angles that were not requested.
        generic: Optional template not tied to any angle.

    Returns:
        ResolvedTemplates covering every requested angle.

    Raises:
        MissingTemplateError: If no template of any kind was supplied.
    """
    dedicated = {a: templates_by_angle[a] for a in request.angles if a in templates_by_angle}

    if not dedicated and generic is not None:
        template = generic.with_role(AssetRole.TEMPLATE)
        log.debug("templates_resolved", strategy="generic", angles=list(request.angles))
        return ResolvedTemplates(
            templates={a: template for a in request.angles},
            sources={a: TemplateSource.GENERIC for a in request.angles},
        )

    fallback = _pick_fallback(request, dedicated, templates_by_angle, generic)
    if fallback is None:
        raise MissingTemplateError(request.angles)

    templates: dict[str, ImageAsset] = {}
    sources: dict[str, TemplateSource] = {}
    for angle in request.angles:
        if angle in dedicated:
            templates[angle] = dedicated[angle].with_role(AssetRole.TEMPLATE)
            sources[angle] = TemplateSource.DEDICATED
        else:
            templates[angle] = fallback.with_role(AssetRole.TEMPLATE)
            sources[angle] = TemplateSource.FALLBACK

    log.debug(
        "templates_resolved",
        strategy="dedicated",
        sources={a: s.value for a, s in sources.items()},
    )
    return ResolvedTemplates(templates=templates, sources=sources)


def _pick_fallback(
    request: AngleRequest,
    dedicated: dict[str, ImageAsset],
    uploaded: Mapping[str, ImageAsset],
    generic: ImageAsset | None,
) -> ImageAsset | None:
    if request.canonical in dedicated:
        return dedicated[request.canonical]
    if dedicated:
        # dict preserves request order
        return next(iter(dedicated.values()))
    if uploaded:
        return next(iter(uploaded.values()))
    return generic
