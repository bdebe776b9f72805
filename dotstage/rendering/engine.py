"""Template rendering engine.

Templates reference variables as ``${NAME}``. Names resolve against the
merged variable mapping first, then the environment snapshot of the run,
and otherwise render empty (or fail, in strict mode).
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Mapping

from jinja2 import (
    BaseLoader,
    Environment,
    FileSystemLoader,
    StrictUndefined,
    Template,
    TemplateError,
    Undefined,
)

from .io import atomic_write_text, file_mode

logger = logging.getLogger(__name__)

VARIABLE_START = "${"
VARIABLE_END = "}"
# Moved out of the way so literal {{ }}, {% %} and {# #} in dotfiles pass through.
BLOCK_START, BLOCK_END = "{%%", "%%}"
COMMENT_START, COMMENT_END = "{##", "##}"
# Expressions inside ${...} can fail at render time with plain Python errors.
# UnicodeDecodeError (a ValueError) covers non-UTF-8 template files.
EVALUATION_ERRORS = (TemplateError, ArithmeticError, LookupError, TypeError, ValueError)


class TemplateRenderError(RuntimeError):
    """Raised when a single template cannot be rendered."""

    def __init__(self, template: str, reason: str) -> None:
        super().__init__(f"Failed to render {template}: {reason}")
        self.template = template
        self.reason = reason


def make_environment(
    loader: BaseLoader | None = None,
    *,
    strict: bool = False,
    newline: str = "\n",
) -> Environment:
    """Create a Jinja2 environment using ``${NAME}`` variable syntax.

    Jinja2 globals are removed so only the render context resolves names.
    """
    env = Environment(
        loader=loader,
        undefined=StrictUndefined if strict else Undefined,
        autoescape=False,
        variable_start_string=VARIABLE_START,
        variable_end_string=VARIABLE_END,
        block_start_string=BLOCK_START,
        block_end_string=BLOCK_END,
        comment_start_string=COMMENT_START,
        comment_end_string=COMMENT_END,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
        newline_sequence=newline,
    )
    env.globals.clear()
    return env


def detect_newline(text: str) -> str:
    """Return the line ending a template uses, CRLF or LF."""
    return "\r\n" if "\r\n" in text else "\n"


def build_context(
    variables: Mapping[str, str], environ: Mapping[str, str]
) -> dict[str, Any]:
    """Layer template variables over the environment snapshot.

    Args:
        variables: Merged default and host variables
        environ: Environment snapshot used as fallback

    Returns:
        Context dictionary for template rendering
    """
    context: dict[str, Any] = dict(environ)
    context.update(variables)
    return context


def load_template(template_path: Path, *, strict: bool = False) -> Template:
    """Load a template from a file path.

    Args:
        template_path: Path to the template file
        strict: Raise on unresolved variables instead of rendering empty

    Returns:
        Compiled Jinja2 template
    """
    if not template_path.exists():
        raise FileNotFoundError(f"Template not found: {template_path}")

    # Use template's parent directory as loader search path
    loader = FileSystemLoader(str(template_path.parent))
    newline = "\r\n" if b"\r\n" in template_path.read_bytes() else "\n"
    env = make_environment(loader, strict=strict, newline=newline)
    return env.get_template(template_path.name)


def render_text(
    text: str,
    context: Mapping[str, Any],
    *,
    strict: bool = False,
    name: str = "<string>",
) -> str:
    """Render template text against a context."""
    try:
        env = make_environment(strict=strict, newline=detect_newline(text))
        template = env.from_string(text)
        return template.render(dict(context))
    except EVALUATION_ERRORS as exc:
        raise TemplateRenderError(name, str(exc)) from exc


def render_template(
    template_path: Path,
    output_path: Path,
    context: Mapping[str, Any],
    *,
    strict: bool = False,
) -> Path:
    """Render a single template file to its destination.

    The destination is only replaced once rendering succeeded, and it
    inherits the template's permission bits.

    Args:
        template_path: Template source
        output_path: Rendered file path
        context: Template context data
        strict: Raise on unresolved variables

    Returns:
        Output file path
    """
    logger.debug(f"Rendering template: {template_path}")

    try:
        template = load_template(template_path, strict=strict)
        rendered_text = template.render(dict(context))
    except EVALUATION_ERRORS as exc:
        raise TemplateRenderError(str(template_path), str(exc)) from exc

    atomic_write_text(output_path, rendered_text, mode=file_mode(template_path))
    logger.debug(f"Rendered {template_path} → {output_path}")

    return output_path
