"""Template loading for reasoning prompts."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from langchain_core.prompts import PromptTemplate as LCPromptTemplate
from ruamel.yaml import YAML

DEFAULT_TEMPLATES_PATH = Path(__file__).parent / "templates"


@dataclass(frozen=True)
class PromptTemplate:
    """A loaded prompt template.

    ``system`` and ``user`` use ``{name}`` placeholders; literal braces
    are written doubled (``{{``).
    """

    name: str
    description: str
    system: str
    user: str

    @classmethod
    def from_dict(cls, data: dict[str, Any], name: str) -> PromptTemplate:
        """Create a template from dictionary data.

        Args:
            data: Dictionary containing template fields.
            name: Template name (usually from filename).

        Returns:
            PromptTemplate instance.
        """
        return cls(
            name=data.get("name", name),
            description=data.get("description", ""),
            system=data.get("system", ""),
            user=data.get("user", ""),
        )

    def render(self, **values: Any) -> tuple[str, str]:
        """Render ``(system, user)`` with the given placeholder values."""
        return _format(self.system, values), _format(self.user, values)


def _format(text: str, values: dict[str, Any]) -> str:
    if not text:
        return ""
    template = LCPromptTemplate.from_template(text)
    return template.format(**{k: v for k, v in values.items() if k in template.input_variables})


class TemplateNotFoundError(Exception):
    """Raised when a template file cannot be found."""

    def __init__(self, template_name: str, path: Path) -> None:
        self.template_name = template_name
        self.path = path
        super().__init__(f"Template not found: {template_name} at {path}")


class TemplateParseError(Exception):
    """Raised when a template file cannot be parsed."""

    def __init__(self, template_name: str, reason: str) -> None:
        self.template_name = template_name
        self.reason = reason
        super().__init__(f"Failed to parse template '{template_name}': {reason}")


class PromptLoader:
    """Load prompt templates from ``<name>.yaml`` files.

    Attributes:
        templates_path: Directory holding the YAML templates.
    """

    def __init__(self, templates_path: Path = DEFAULT_TEMPLATES_PATH) -> None:
        self.templates_path = templates_path
        self._yaml = YAML(typ="safe")
        self._cache: dict[str, PromptTemplate] = {}

    def _get_template_path(self, template_name: str) -> Path:
        return self.templates_path / f"{template_name}.yaml"

    def load(self, template_name: str) -> PromptTemplate:
        """Load a template by name.

        Args:
            template_name: Name of the template (without .yaml extension).

        Returns:
            Loaded PromptTemplate.

        Raises:
            TemplateNotFoundError: If the template file doesn't exist.
            TemplateParseError: If the template cannot be parsed.
        """
        if template_name in self._cache:
            return self._cache[template_name]

        path = self._get_template_path(template_name)
        if not path.exists():
            raise TemplateNotFoundError(template_name, path)

        try:
            with path.open("r", encoding="utf-8") as f:
                data = self._yaml.load(f)
        except Exception as e:
            raise TemplateParseError(template_name, str(e)) from e

        if not isinstance(data, dict):
            raise TemplateParseError(template_name, "Expected a mapping at top level")
        if not data.get("system"):
            raise TemplateParseError(template_name, "Missing 'system' field")

        template = PromptTemplate.from_dict(data, template_name)
        self._cache[template_name] = template
        return template


_default_loader: PromptLoader | None = None


def get_loader() -> PromptLoader:
    """Get or create the module-level PromptLoader for the bundled templates."""
    global _default_loader
    if _default_loader is None:
        _default_loader = PromptLoader()
    return _default_loader
