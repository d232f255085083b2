"""Tests for prompt template loading and rendering."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from craftstudio.prompts import (
    PromptLoader,
    PromptTemplate,
    TemplateNotFoundError,
    TemplateParseError,
    get_loader,
)
from craftstudio.prompts.loader import DEFAULT_TEMPLATES_PATH

if TYPE_CHECKING:
    from pathlib import Path


BUNDLED = [
    "design_optimizer",
    "ecommerce_optimizer",
    "poster_optimizer",
    "scene_optimizer",
    "spec_extraction",
    "tryon_optimizer",
]


def test_bundled_templates_ship_with_package() -> None:
    shipped = sorted(p.stem for p in DEFAULT_TEMPLATES_PATH.glob("*.yaml"))
    assert shipped == BUNDLED


@pytest.mark.parametrize("name", BUNDLED)
def test_bundled_templates_render(name: str) -> None:
    template = get_loader().load(name)

    system, user = template.render(
        designer_expertise="footwear design",
        product_name="Shoes",
        shape_rules="Keep the sole.",
        model_scene_context="Model wearing shoes",
        inputs="- Theme: Spring",
    )

    assert system
    assert user
    assert "{product_name}" not in system


def test_literal_braces_survive_rendering() -> None:
    system, _ = get_loader().load("design_optimizer").render(
        designer_expertise="x", product_name="Bags", shape_rules="y", inputs="z"
    )
    assert '"prompt": "<final image prompt>"' in system
    assert "{{" not in system


def test_render_ignores_unused_values() -> None:
    template = PromptTemplate(name="t", description="", system="Hi {name}", user="")
    assert template.render(name="Ada", other="unused") == ("Hi Ada", "")


def test_load_is_cached(tmp_path: Path) -> None:
    (tmp_path / "greet.yaml").write_text("system: Hello {who}\nuser: Go\n")
    loader = PromptLoader(tmp_path)

    first = loader.load("greet")
    (tmp_path / "greet.yaml").write_text("system: Changed\n")

    assert loader.load("greet") is first
    assert PromptLoader(tmp_path).load("greet").system == "Changed"


def test_from_dict_defaults_name() -> None:
    template = PromptTemplate.from_dict({"system": "s"}, "fallback")
    assert template.name == "fallback"
    assert template.user == ""


def test_missing_template(tmp_path: Path) -> None:
    loader = PromptLoader(tmp_path)
    with pytest.raises(TemplateNotFoundError):
        loader.load("nope")


@pytest.mark.parametrize(
    ("content", "reason"),
    [
        ("- just\n- a list\n", "Expected a mapping"),
        ("user: only user\n", "Missing 'system'"),
        ("system: [unclosed\n", ""),
    ],
)
def test_invalid_template(tmp_path: Path, content: str, reason: str) -> None:
    (tmp_path / "bad.yaml").write_text(content)
    with pytest.raises(TemplateParseError, match=reason):
        PromptLoader(tmp_path).load("bad")

