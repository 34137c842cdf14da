"""Renders the built-in email templates with a sandboxed Jinja2 environment."""

from functools import lru_cache
from typing import Any

from jinja2 import StrictUndefined, Template, TemplateError
from jinja2.sandbox import SandboxedEnvironment

from quillify.core.logging import get_logger

logger = get_logger(__name__)


class TemplateRenderer:
    """Compiles each template source once and renders it with strict variables.

    A variable missing from the context raises ``UndefinedError`` instead of
    rendering as an empty string, so a half-filled email is never sent.
    HTML bodies are rendered with autoescaping; subjects and plain text
    bodies are not.
    """

    def __init__(self, autoescape: bool = True) -> None:
        self.env = SandboxedEnvironment(
            autoescape=autoescape,
            undefined=StrictUndefined,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self._compiled: dict[str, Template] = {}

    def _template(self, source: str) -> Template:
        if source not in self._compiled:
            self._compiled[source] = self.env.from_string(source)
        return self._compiled[source]

    def render(self, template_string: str, variables: dict[str, Any]) -> str:
        """Render ``template_string`` with ``variables``.

        Raises:
            TemplateSyntaxError: If the template does not parse.
            UndefinedError: If the template uses a variable not supplied.
        """
        try:
            return self._template(template_string).render(**variables)
        except TemplateError as e:
            logger.error(
                "Email template failed to render",
                error_type=type(e).__name__,
                error=str(e),
                variables=sorted(variables),
            )
            raise


@lru_cache(maxsize=2)
def get_template_renderer(html: bool = True) -> TemplateRenderer:
    """Shared renderer for HTML bodies (``html=True``) or for subjects and text."""
    return TemplateRenderer(autoescape=html)
