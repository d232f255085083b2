"""Craft Studio CLI - typer application entry point."""

from __future__ import annotations

import asyncio
import atexit
import re
from pathlib import Path
from typing import TYPE_CHECKING, Annotated, Any, NoReturn

import typer
from dotenv import load_dotenv
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from craftstudio.observability import close_file_logging, configure_logging, get_logger

if TYPE_CHECKING:
    from collections.abc import Callable, Coroutine

    from craftstudio.models import GenerationResult, ImageAsset
    from craftstudio.pipeline import (
        MarketingGenerationFailed,
        MarketingOutcome,
        PipelineOutcome,
        StudioConfig,
    )
    from craftstudio.pipeline.marketing import MarketingGenerator

# Load environment variables from .env file
load_dotenv()

app = typer.Typer(
    name="craft",
    help="Craft Studio: consistent multi-angle product design generation.",
    no_args_is_help=True,
)
console = Console()
log = get_logger(__name__)

DEFAULT_OUTPUT_DIR = Path("output")

# Global state for logging flags (set by callback, used by commands)
_verbose: int = 0
_log_enabled: bool = False


@app.callback()
def main(
    verbose: Annotated[
        int,
        typer.Option(
            "-v",
            "--verbose",
            count=True,
            help="Increase verbosity: -v for INFO, -vv for DEBUG.",
        ),
    ] = 0,
    log_: Annotated[
        bool,
        typer.Option(
            "--log",
            help="Enable file logging to {out}/logs/debug.jsonl.",
        ),
    ] = False,
) -> None:
    """Craft Studio: consistent multi-angle product design generation."""
    global _verbose, _log_enabled
    _verbose = verbose
    _log_enabled = log_

    # File logging is configured later, once the output directory is known
    configure_logging(verbosity=verbose)


def _configure_output_logging(out_dir: Path) -> None:
    """Configure file logging if --log flag was set."""
    if _log_enabled:
        configure_logging(verbosity=_verbose, log_to_file=True, log_dir=out_dir / "logs")
        atexit.register(close_file_logging)


def _load_config(config_path: Path | None) -> StudioConfig:
    from craftstudio.pipeline import StudioConfigError, load_studio_config

    try:
        return load_studio_config(config_path if config_path is not None else Path.cwd())
    except StudioConfigError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from None


def _parse_templates(values: list[str]) -> dict[str, ImageAsset]:
    """Parse repeated ``ANGLE=PATH`` options into templates keyed by angle."""
    from craftstudio.models import ImageAsset

    templates: dict[str, ImageAsset] = {}
    for value in values:
        angle, sep, raw_path = value.partition("=")
        angle = angle.strip()
        if not sep or not angle or not raw_path.strip():
            raise typer.BadParameter(f"expected ANGLE=PATH, got '{value}'", param_hint="--template")
        path = Path(raw_path.strip())
        if not path.is_file():
            raise typer.BadParameter(f"file not found: {path}", param_hint="--template")
        if angle in templates:
            raise typer.BadParameter(f"angle '{angle}' given twice", param_hint="--template")
        templates[angle] = ImageAsset.from_path(path)
    return templates


def _slug(value: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", value.lower()).strip("-") or "view"


def _unique_stem(stem: str, taken: set[str]) -> str:
    """Return ``stem``, or ``stem-2``, ``stem-3``... when already taken."""
    candidate, n = stem, 1
    while candidate in taken:
        n += 1
        candidate = f"{stem}-{n}"
    taken.add(candidate)
    return candidate


def _write_result(result: GenerationResult, out_dir: Path) -> list[Path]:
    from craftstudio.models.assets import extension_for

    out_dir.mkdir(parents=True, exist_ok=True)
    written: list[Path] = []
    taken: set[str] = set()
    for angle in result.angles:
        image = result[angle]
        path = out_dir / f"{_unique_stem(_slug(angle), taken)}{extension_for(image.mime_type)}"
        path.write_bytes(image.data)
        written.append(path)
    return written


def _exit_invalid(error: ValidationError, what: str) -> NoReturn:
    console.print(f"[red]Error:[/red] Invalid {what}")
    for err in error.errors():
        loc = ".".join(str(p) for p in err["loc"]) or "options"
        console.print(f"  [red]•[/red] {loc}: {err['msg']}")
    raise typer.Exit(1) from None


def _print_failure(outcome: PipelineOutcome, label: str = "Generation") -> None:
    from craftstudio.pipeline import AngleGenerationFailed

    error = outcome.error
    assert error is not None
    stage = outcome.failed_stage.value if outcome.failed_stage else error.stage
    console.print(f"[red]✗[/red] {label} failed during [bold]{stage}[/bold]")
    console.print(f"  [red]•[/red] {error}")
    if isinstance(error, AngleGenerationFailed) and error.completed:
        console.print(f"  [dim]Completed before failure: {', '.join(error.completed)}[/dim]")
    if error.is_client_error:
        console.print("  [yellow]Check the uploaded images and options, then retry.[/yellow]")


@app.command()
def version() -> None:
    """Show version information."""
    from craftstudio import __version__

    console.print(f"Craft Studio v{__version__}")


@app.command()
def generate(
    theme: Annotated[str, typer.Option("--theme", help="Season or theme of the design.")],
    style: Annotated[str, typer.Option("--style", help="Style direction.")],
    color: Annotated[str, typer.Option("--color", help="Color palette.")],
    material: Annotated[str, typer.Option("--material", help="Material feel.")],
    template: Annotated[
        list[str] | None,
        typer.Option(
            "--template",
            "-t",
            help="Angle template as ANGLE=PATH (repeatable).",
        ),
    ] = None,
    generic: Annotated[
        Path | None,
        typer.Option("--generic", exists=True, dir_okay=False, help="Template for any angle."),
    ] = None,
    angles: Annotated[
        str | None,
        typer.Option("--angles", help="Comma-separated angles; first is canonical."),
    ] = None,
    description: Annotated[
        str | None, typer.Option("--description", help="Free-text design notes.")
    ] = None,
    reference: Annotated[
        Path | None,
        typer.Option("--reference", exists=True, dir_okay=False, help="Style reference image."),
    ] = None,
    logo: Annotated[
        Path | None,
        typer.Option("--logo", exists=True, dir_okay=False, help="Brand logo image."),
    ] = None,
    product: Annotated[
        str,
        typer.Option("--product", help="Product type: shoes, slippers, clothes, bags, custom."),
    ] = "custom",
    custom_product: Annotated[
        str | None,
        typer.Option("--custom-product", help="Product name when --product is custom."),
    ] = None,
    prompt: Annotated[
        str | None,
        typer.Option("--prompt", help="Use this prompt instead of optimizing one."),
    ] = None,
    out: Annotated[
        Path, typer.Option("--out", "-o", help="Output directory.")
    ] = DEFAULT_OUTPUT_DIR,
    variants: Annotated[
        int,
        typer.Option("--variants", min=1, max=8, help="Independent design variants (1-8)."),
    ] = 1,
    text_provider: Annotated[
        str | None,
        typer.Option("--text-provider", help="Reasoning provider, e.g. google/gemini-2.5-flash."),
    ] = None,
    image_provider: Annotated[
        str | None,
        typer.Option("--image-provider", help="Image provider, e.g. gemini, openai, placeholder."),
    ] = None,
    config: Annotated[
        Path | None,
        typer.Option("--config", help="Path to studio.yaml (default: ./studio.yaml)."),
    ] = None,
) -> None:
    """Generate a consistent set of product views from template images."""
    from craftstudio.models import AngleRequest, AssetRole, DesignParameters, ImageAsset
    from craftstudio.models.product import ProductType, get_product_config
    from craftstudio.pipeline import PipelineOrchestrator
    from craftstudio.providers import ImageProviderError, ProviderError

    _configure_output_logging(out)
    studio_config = _load_config(config)

    try:
        product_type = ProductType(product.lower())
    except ValueError:
        choices = ", ".join(p.value for p in ProductType)
        raise typer.BadParameter(f"choose one of: {choices}", param_hint="--product") from None

    templates = _parse_templates(template or [])
    generic_asset = ImageAsset.from_path(generic) if generic else None

    try:
        request = AngleRequest(angles=angles or get_product_config(product_type).angles)
        params = DesignParameters(
            theme=theme,
            style=style,
            color=color,
            material=material,
            description=description,
            style_reference=ImageAsset.from_path(reference, AssetRole.REFERENCE)
            if reference
            else None,
            brand_logo=ImageAsset.from_path(logo, AssetRole.LOGO) if logo else None,
            product_type=product_type,
            custom_product_name=custom_product,
            custom_prompt=prompt,
        )
    except ValidationError as e:
        _exit_invalid(e, "design options")

    try:
        orchestrator = PipelineOrchestrator.from_config(
            studio_config, text_provider=text_provider, image_provider=image_provider
        )
    except (ProviderError, ImageProviderError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from None

    console.print(
        f"[dim]Generating {len(request.angles)} angle(s) of {params.product_name}: "
        f"{', '.join(request.angles)}[/dim]"
    )

    if variants == 1:
        with console.status("Generating design..."):
            outcomes = [
                asyncio.run(
                    orchestrator.run_pipeline(request, params, templates, generic_asset)
                )
            ]
    else:
        with console.status(f"Generating {variants} variants..."):
            outcomes = asyncio.run(
                orchestrator.run_variants(
                    request, params, templates, generic_asset, count=variants
                )
            )

    table = Table(title="Generated Views")
    table.add_column("Variant", justify="right")
    table.add_column("Angle")
    table.add_column("File")
    table.add_column("Consistency")

    failures = 0
    for number, outcome in enumerate(outcomes, start=1):
        label = "Generation" if variants == 1 else f"Variant {number}"
        if not outcome.ok:
            failures += 1
            _print_failure(outcome, label)
            continue
        result = outcome.unwrap()
        target = out if variants == 1 else out / f"variant-{number}"
        mode = "specification" if result.spec is not None else "visual reference"
        for angle, path in zip(result.angles, _write_result(result, target), strict=True):
            role = "canonical" if angle == result.canonical_angle else mode
            table.add_row(str(number), angle, str(path), role)
        log.info("results_written", variant=number, out=str(target), run_id=outcome.run_id)

    if failures < len(outcomes):
        console.print(table)
    if failures:
        raise typer.Exit(1)
    written = len(request.angles) * len(outcomes)
    console.print(f"[green]✓[/green] Wrote {written} image(s) to {out}")


@app.command()
def scene(
    image: Annotated[
        Path,
        typer.Option("--image", "-i", exists=True, dir_okay=False, help="Finished design image."),
    ],
    nationality: Annotated[str, typer.Option("--nationality", help="Model nationality.")],
    family: Annotated[str, typer.Option("--family", help="Family or group combination.")],
    scenario: Annotated[str, typer.Option("--scenario", help="Scene scenario.")],
    location: Annotated[str, typer.Option("--location", help="Scene location.")],
    presentation: Annotated[
        str,
        typer.Option("--presentation", help="Presentation style, e.g. Realistic photography."),
    ] = "Realistic photography",
    angle: Annotated[
        list[str] | None,
        typer.Option("--angle", "-a", help="Camera angle (repeatable): front, back, side, 45."),
    ] = None,
    product: Annotated[str, typer.Option("--product", help="Product type.")] = "custom",
    custom_product: Annotated[
        str | None, typer.Option("--custom-product", help="Product name when custom.")
    ] = None,
    out: Annotated[
        Path, typer.Option("--out", "-o", help="Output directory.")
    ] = DEFAULT_OUTPUT_DIR,
    text_provider: Annotated[
        str | None, typer.Option("--text-provider", help="Reasoning provider.")
    ] = None,
    image_provider: Annotated[
        str | None, typer.Option("--image-provider", help="Image provider.")
    ] = None,
    config: Annotated[
        Path | None, typer.Option("--config", help="Path to studio.yaml.")
    ] = None,
) -> None:
    """Generate model-wearing scenes from a finished design image."""
    from craftstudio.models import ImageAsset, SceneParameters
    from craftstudio.models.assets import extension_for
    from craftstudio.models.product import ProductType
    from craftstudio.pipeline import SceneGenerationFailed, SceneGenerator
    from craftstudio.providers import (
        ImageProviderError,
        ProviderError,
        create_image_provider,
        create_reasoner,
    )

    _configure_output_logging(out)
    studio_config = _load_config(config)

    try:
        product_type = ProductType(product.lower())
    except ValueError:
        choices = ", ".join(p.value for p in ProductType)
        raise typer.BadParameter(f"choose one of: {choices}", param_hint="--product") from None

    try:
        scene_params = SceneParameters(
            nationality=nationality,
            family_combination=family,
            scenario=scenario,
            location=location,
            presentation_style=presentation,
        )
    except ValidationError as e:
        console.print(f"[red]Error:[/red] Invalid scene options: {e.error_count()} error(s)")
        raise typer.Exit(1) from None

    try:
        generator = SceneGenerator(
            create_reasoner(text_provider or studio_config.providers.get_text_provider()),
            create_image_provider(image_provider or studio_config.providers.get_image_provider()),
            settings=studio_config.generation,
        )
    except (ProviderError, ImageProviderError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from None

    design = ImageAsset.from_path(image)
    try:
        with console.status("Generating scene..."):
            if angle:
                scenes = asyncio.run(
                    generator.generate_angles(
                        design,
                        scene_params,
                        angle,
                        product_type=product_type,
                        custom_product_name=custom_product,
                    )
                )
                results = list(scenes.values())
            else:
                results = [
                    asyncio.run(
                        generator.generate(
                            design,
                            scene_params,
                            product_type=product_type,
                            custom_product_name=custom_product,
                        )
                    )
                ]
    except SceneGenerationFailed as e:
        console.print(f"[red]✗[/red] Scene generation failed: {e}")
        if e.completed:
            console.print(f"  [dim]Completed before failure: {', '.join(e.completed)}[/dim]")
        raise typer.Exit(1) from None

    out.mkdir(parents=True, exist_ok=True)
    taken: set[str] = set()
    for item in results:
        stem = f"scene-{_slug(item.view_angle)}" if item.view_angle else "scene"
        path = out / f"{_unique_stem(stem, taken)}{extension_for(item.image.mime_type)}"
        path.write_bytes(item.image.data)
        console.print(f"[green]✓[/green] {path}")


def _parse_size(value: str | None) -> tuple[int, int] | None:
    """Parse ``WIDTHxHEIGHT`` into a pixel size."""
    if value is None:
        return None
    match = re.fullmatch(r"\s*(\d+)\s*[xX×]\s*(\d+)\s*", value)
    if match is None:
        raise typer.BadParameter(f"expected WIDTHxHEIGHT, got '{value}'", param_hint="--size")
    return int(match.group(1)), int(match.group(2))


def _marketing_generator(
    factory: Callable[..., MarketingGenerator],
    studio_config: StudioConfig,
    text_provider: str | None,
    image_provider: str | None,
) -> MarketingGenerator:
    from craftstudio.providers import (
        ImageProviderError,
        ProviderError,
        create_image_provider,
        create_reasoner,
    )

    try:
        return factory(
            create_reasoner(text_provider or studio_config.providers.get_text_provider()),
            create_image_provider(image_provider or studio_config.providers.get_image_provider()),
            settings=studio_config.generation,
        )
    except (ProviderError, ImageProviderError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from None


def _print_marketing_failure(error: MarketingGenerationFailed) -> None:
    console.print(f"[red]✗[/red] {error}")
    if error.connectivity:
        console.print("  [yellow]Could not reach the provider. Check the connection.[/yellow]")
    elif error.is_client_error:
        console.print("  [yellow]Check the uploaded images and options, then retry.[/yellow]")


def _write_marketing(outcomes: list[MarketingOutcome], out: Path, stem: str) -> None:
    """Write every successful variant; exit 1 if any variant failed."""
    from craftstudio.models.assets import extension_for

    out.mkdir(parents=True, exist_ok=True)
    failures = 0
    for outcome in outcomes:
        if outcome.error is not None:
            failures += 1
            _print_marketing_failure(outcome.error)
            continue
        assert outcome.image is not None
        image = outcome.image.image
        name = stem if len(outcomes) == 1 else f"{stem}-{outcome.variant}"
        path = out / f"{name}{extension_for(image.mime_type)}"
        path.write_bytes(image.data)
        console.print(f"[green]✓[/green] {path} [dim]({outcome.image.source.value} prompt)[/dim]")
    if failures:
        raise typer.Exit(1)


def _run_marketing(
    run: Coroutine[Any, Any, list[MarketingOutcome]], label: str
) -> list[MarketingOutcome]:
    from craftstudio.pipeline import MarketingGenerationFailed

    try:
        with console.status(f"Generating {label}..."):
            outcomes = asyncio.run(run)
    except ValueError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from None
    except MarketingGenerationFailed as e:
        _print_marketing_failure(e)
        raise typer.Exit(1) from None
    return outcomes


@app.command()
def poster(
    product: Annotated[
        list[Path],
        typer.Option(
            "--product", "-p", exists=True, dir_okay=False, help="Product image (repeatable)."
        ),
    ],
    campaign: Annotated[str, typer.Option("--campaign", help="Campaign type, e.g. Summer sale.")],
    visual_style: Annotated[str, typer.Option("--style", help="Visual style of the poster.")],
    background: Annotated[
        str, typer.Option("--background", help="Background scene.")
    ] = "Clean studio backdrop",
    layout: Annotated[str, typer.Option("--layout", help="Layout.")] = "Hero product centered",
    aspect_ratio: Annotated[str, typer.Option("--aspect-ratio", help="Aspect ratio.")] = "3:4",
    size: Annotated[
        str | None, typer.Option("--size", help="Exact size as WIDTHxHEIGHT pixels.")
    ] = None,
    headline: Annotated[
        str | None, typer.Option("--headline", help="Headline text; generated when omitted.")
    ] = None,
    headline_style: Annotated[
        str, typer.Option("--headline-style", help="Headline tone.")
    ] = "bold",
    selling_point: Annotated[
        list[str] | None, typer.Option("--selling-point", help="Selling point (repeatable).")
    ] = None,
    price_style: Annotated[str | None, typer.Option("--price-style", help="Price display.")] = None,
    original_price: Annotated[str | None, typer.Option("--original-price")] = None,
    current_price: Annotated[str | None, typer.Option("--current-price")] = None,
    discount: Annotated[str | None, typer.Option("--discount", help="Discount text.")] = None,
    product_name: Annotated[
        list[str] | None, typer.Option("--product-name", help="Product name (repeatable).")
    ] = None,
    reference: Annotated[
        Path | None,
        typer.Option("--reference", exists=True, dir_okay=False, help="Reference poster."),
    ] = None,
    reference_level: Annotated[
        str, typer.Option("--reference-level", help="What to take from the reference.")
    ] = "layout",
    logo: Annotated[
        Path | None, typer.Option("--logo", exists=True, dir_okay=False, help="Brand logo.")
    ] = None,
    logo_position: Annotated[str, typer.Option("--logo-position")] = "top-left",
    tagline: Annotated[str | None, typer.Option("--tagline", help="Brand tagline.")] = None,
    variants: Annotated[
        int, typer.Option("--variants", min=1, max=8, help="Poster variations (1-8).")
    ] = 1,
    out: Annotated[
        Path, typer.Option("--out", "-o", help="Output directory.")
    ] = DEFAULT_OUTPUT_DIR,
    text_provider: Annotated[
        str | None, typer.Option("--text-provider", help="Reasoning provider.")
    ] = None,
    image_provider: Annotated[
        str | None, typer.Option("--image-provider", help="Image provider.")
    ] = None,
    config: Annotated[Path | None, typer.Option("--config", help="Path to studio.yaml.")] = None,
) -> None:
    """Generate promotional posters around product photos."""
    from craftstudio.models import ImageAsset, PosterParameters
    from craftstudio.pipeline import PosterGenerator

    _configure_output_logging(out)
    studio_config = _load_config(config)

    try:
        options = PosterParameters(
            campaign_type=campaign,
            visual_style=visual_style,
            background_scene=background,
            layout=layout,
            aspect_ratio=aspect_ratio,
            custom_size=_parse_size(size),
            headline=headline,
            headline_style=headline_style,
            selling_points=selling_point or (),
            price_style=price_style,
            original_price=original_price,
            current_price=current_price,
            discount_text=discount,
            logo_position=logo_position,
            brand_tagline=tagline,
            reference_level=reference_level,
        )
    except ValidationError as e:
        _exit_invalid(e, "poster options")

    generator = _marketing_generator(PosterGenerator, studio_config, text_provider, image_provider)
    assert isinstance(generator, PosterGenerator)
    products = [ImageAsset.from_path(p) for p in product]
    outcomes = _run_marketing(
        generator.generate_variants(
            products,
            options,
            count=variants,
            product_names=product_name or (),
            reference=ImageAsset.from_path(reference) if reference else None,
            logo=ImageAsset.from_path(logo) if logo else None,
        ),
        "poster",
    )
    _write_marketing(outcomes, out, "poster")


@app.command()
def tryon(
    person: Annotated[
        Path,
        typer.Option("--person", exists=True, dir_okay=False, help="Photo of the person."),
    ],
    product: Annotated[
        list[Path],
        typer.Option(
            "--product", "-p", exists=True, dir_okay=False, help="Product image (repeatable)."
        ),
    ],
    product_type: Annotated[
        list[str] | None,
        typer.Option("--product-type", help="Product type per --product, e.g. dress."),
    ] = None,
    mode: Annotated[str, typer.Option("--mode", help="single or multi.")] = "single",
    garment: Annotated[
        str | None,
        typer.Option("--garment", help="Single mode: top, bottom, full or accessory."),
    ] = None,
    preserve_pose: Annotated[
        bool, typer.Option("--preserve-pose/--free-pose", help="Keep the original pose.")
    ] = True,
    style: Annotated[str, typer.Option("--style", help="natural or editorial.")] = "natural",
    aspect_ratio: Annotated[str, typer.Option("--aspect-ratio", help="Aspect ratio.")] = "3:4",
    size: Annotated[
        str | None, typer.Option("--size", help="Exact size as WIDTHxHEIGHT pixels.")
    ] = None,
    notes: Annotated[str | None, typer.Option("--notes", help="Free-text notes.")] = None,
    variants: Annotated[
        int, typer.Option("--variants", min=1, max=8, help="Try-on variations (1-8).")
    ] = 1,
    out: Annotated[
        Path, typer.Option("--out", "-o", help="Output directory.")
    ] = DEFAULT_OUTPUT_DIR,
    text_provider: Annotated[
        str | None, typer.Option("--text-provider", help="Reasoning provider.")
    ] = None,
    image_provider: Annotated[
        str | None, typer.Option("--image-provider", help="Image provider.")
    ] = None,
    config: Annotated[Path | None, typer.Option("--config", help="Path to studio.yaml.")] = None,
) -> None:
    """Show the person in a photo wearing the given products."""
    from craftstudio.models import ImageAsset, TryOnParameters, TryOnProduct
    from craftstudio.pipeline import VirtualTryOnGenerator

    _configure_output_logging(out)
    studio_config = _load_config(config)

    types = product_type or []
    if len(types) > len(product):
        raise typer.BadParameter("more product types than products", param_hint="--product-type")

    try:
        options = TryOnParameters(
            mode=mode.lower(),
            garment=garment.lower() if garment else None,
            preserve_pose=preserve_pose,
            style=style.lower(),
            aspect_ratio=aspect_ratio,
            custom_size=_parse_size(size),
            description=notes,
        )
    except ValidationError as e:
        _exit_invalid(e, "try-on options")

    products = [
        TryOnProduct(
            image=ImageAsset.from_path(path),
            product_type=types[i] if i < len(types) else "garment",
            name=path.stem,
        )
        for i, path in enumerate(product)
    ]
    generator = _marketing_generator(
        VirtualTryOnGenerator, studio_config, text_provider, image_provider
    )
    assert isinstance(generator, VirtualTryOnGenerator)
    outcomes = _run_marketing(
        generator.generate_variants(
            ImageAsset.from_path(person), products, options, count=variants
        ),
        "virtual try-on",
    )
    _write_marketing(outcomes, out, "tryon")


@app.command()
def ecommerce(
    product: Annotated[
        list[Path],
        typer.Option(
            "--product", "-p", exists=True, dir_okay=False, help="Product image (repeatable)."
        ),
    ],
    prop: Annotated[
        list[Path] | None,
        typer.Option("--prop", exists=True, dir_okay=False, help="Prop image (repeatable)."),
    ] = None,
    model: Annotated[
        Path | None,
        typer.Option("--model", exists=True, dir_okay=False, help="Model photo to include."),
    ] = None,
    scene_type: Annotated[
        str,
        typer.Option(
            "--scene", help="home, office, outdoor, cafe, studio, white-bg or custom."
        ),
    ] = "studio",
    custom_scene: Annotated[
        str | None, typer.Option("--custom-scene", help="Setting for --scene custom.")
    ] = None,
    lighting: Annotated[
        str, typer.Option("--lighting", help="natural, warm, bright or soft.")
    ] = "natural",
    composition: Annotated[
        str, typer.Option("--composition", help="center, rule-of-thirds or diagonal.")
    ] = "center",
    aspect_ratio: Annotated[str, typer.Option("--aspect-ratio", help="Aspect ratio.")] = "1:1",
    size: Annotated[
        str | None, typer.Option("--size", help="Exact size as WIDTHxHEIGHT pixels.")
    ] = None,
    notes: Annotated[str | None, typer.Option("--notes", help="Free-text design notes.")] = None,
    prompt: Annotated[
        str | None, typer.Option("--prompt", help="Use this prompt instead of optimizing one.")
    ] = None,
    variants: Annotated[
        int, typer.Option("--variants", min=1, max=8, help="Distinct scenes (1-8).")
    ] = 1,
    out: Annotated[
        Path, typer.Option("--out", "-o", help="Output directory.")
    ] = DEFAULT_OUTPUT_DIR,
    text_provider: Annotated[
        str | None, typer.Option("--text-provider", help="Reasoning provider.")
    ] = None,
    image_provider: Annotated[
        str | None, typer.Option("--image-provider", help="Image provider.")
    ] = None,
    config: Annotated[Path | None, typer.Option("--config", help="Path to studio.yaml.")] = None,
) -> None:
    """Stage products and props as a commercial product photograph."""
    from craftstudio.models import (
        EcommerceSceneParameters,
        ImageAsset,
        SceneAsset,
        SceneAssetKind,
    )
    from craftstudio.pipeline import EcommerceSceneGenerator

    _configure_output_logging(out)
    studio_config = _load_config(config)

    try:
        options = EcommerceSceneParameters(
            scene_type=scene_type.lower(),
            custom_scene=custom_scene,
            lighting=lighting,
            composition=composition,
            aspect_ratio=aspect_ratio,
            custom_size=_parse_size(size),
            description=notes,
            custom_prompt=prompt,
        )
    except ValidationError as e:
        _exit_invalid(e, "scene options")

    assets = [
        SceneAsset(ImageAsset.from_path(path), SceneAssetKind.PRODUCT, path.stem)
        for path in product
    ]
    assets += [
        SceneAsset(ImageAsset.from_path(path), SceneAssetKind.PROP, path.stem)
        for path in prop or []
    ]
    generator = _marketing_generator(
        EcommerceSceneGenerator, studio_config, text_provider, image_provider
    )
    assert isinstance(generator, EcommerceSceneGenerator)
    outcomes = _run_marketing(
        generator.generate_variants(
            assets,
            options,
            count=variants,
            model_image=ImageAsset.from_path(model) if model else None,
        ),
        "e-commerce scene",
    )
    _write_marketing(outcomes, out, "ecommerce")


if __name__ == "__main__":
    app()
