"""
shotboard.images.prompts - Generator prompt rendering.

Uses Jinja2 to render the configured prompt template around a shot's
visual description.
"""

from __future__ import annotations

from jinja2 import Environment, StrictUndefined, Template, TemplateSyntaxError

from shotboard.config import DEFAULT_PROMPT_TEMPLATE
from shotboard.exceptions import ConfigError


class PromptBuilder:
    """Renders generator prompts from a template string."""

    def __init__(self, template: str = DEFAULT_PROMPT_TEMPLATE) -> None:
        self.source = template
        self.env = Environment(
            autoescape=False,
            keep_trailing_newline=False,
            undefined=StrictUndefined,
        )
        try:
            self._template: Template = self.env.from_string(template)
        except TemplateSyntaxError as e:
            raise ConfigError(f"Invalid prompt template: {e}") from e

    def render(self, description: str) -> str:
        """Render the prompt for one visual description.

        Args:
            description: The shot's visual description

        Returns:
            Prompt string sent to the image generator
        """
        return self._template.render(description=description.strip()).strip()
