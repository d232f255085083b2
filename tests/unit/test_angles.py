"""Tests for template resolution across requested angles."""

from __future__ import annotations

import pytest

from craftstudio.models import AngleRequest, AssetRole
from craftstudio.pipeline.angles import TemplateSource, resolve_templates
from craftstudio.pipeline.errors import ErrorKind, MissingTemplateError
from tests.fixtures.fakes import make_asset


def test_single_template_covers_all_angles() -> None:
    """A template for "top" only is used for every requested angle."""
    top = make_asset("top")
    request = AngleRequest.of("top", "side", "bottom")

    resolved = resolve_templates(request, {"top": top})

    assert list(resolved) == ["top", "side", "bottom"]
    assert all(resolved[a].data == top.data for a in request.angles)
    assert resolved.sources == {
        "top": TemplateSource.DEDICATED,
        "side": TemplateSource.FALLBACK,
        "bottom": TemplateSource.FALLBACK,
    }


def test_dedicated_templates_win() -> None:
    top, side = make_asset("top"), make_asset("side")
    resolved = resolve_templates(AngleRequest.of("top", "side"), {"top": top, "side": side})

    assert resolved["top"].data == top.data
    assert resolved["side"].data == side.data
    assert len(resolved) == 2


def test_fallback_prefers_canonical_template() -> None:
    request = AngleRequest.of("top", "side", "bottom")
    top, side = make_asset("top"), make_asset("side")

    # "side" is listed first in the upload mapping but "top" is canonical
    resolved = resolve_templates(request, {"side": side, "top": top})

    assert resolved["bottom"].data == top.data


def test_fallback_uses_first_dedicated_in_request_order() -> None:
    """Without a canonical template, the earliest requested angle's template is used."""
    request = AngleRequest.of("top", "side", "bottom", "45degree")
    side, bottom = make_asset("side"), make_asset("bottom")

    resolved = resolve_templates(request, {"bottom": bottom, "side": side})

    assert resolved["top"].data == side.data
    assert resolved["45degree"].data == side.data
    assert resolved["bottom"].data == bottom.data


def test_generic_template_used_when_no_angle_is_dedicated() -> None:
    generic = make_asset("generic", AssetRole.REFERENCE)
    request = AngleRequest.of("front", "back")

    resolved = resolve_templates(request, {}, generic)

    assert all(resolved[a].data == generic.data for a in request.angles)
    assert all(resolved[a].role is AssetRole.TEMPLATE for a in request.angles)
    assert set(resolved.sources.values()) == {TemplateSource.GENERIC}


def test_generic_ignored_when_a_dedicated_template_exists() -> None:
    top, generic = make_asset("top"), make_asset("generic")
    resolved = resolve_templates(AngleRequest.of("side", "top"), {"top": top}, generic)

    assert resolved["side"].data == top.data


def test_unrequested_upload_is_last_resort_before_generic() -> None:
    heel, generic = make_asset("heel"), make_asset("generic")
    resolved = resolve_templates(AngleRequest.of("top", "side"), {"heel": heel})

    assert resolved["top"].data == heel.data
    assert "heel" not in resolved.templates

    # With a generic template available the generic one is preferred
    resolved = resolve_templates(AngleRequest.of("top"), {"heel": heel}, generic)
    assert resolved["top"].data == generic.data


def test_no_templates_raises_client_error() -> None:
    with pytest.raises(MissingTemplateError) as exc_info:
        resolve_templates(AngleRequest.of("top", "side"), {})

    assert exc_info.value.kind is ErrorKind.CLIENT
    assert exc_info.value.stage == "resolving_angles"
    assert "top, side" in str(exc_info.value)
