# =============================================================================
# Body Template Rendering
# =============================================================================
# Produces the message body from a template.
#
# The template is taken from, in order:
#   - the workspace file named by the task's "_command" parameter
#     (the file given to the operator, e.g. `mail>: body.txt`)
#   - the task's inline "body" parameter
#
# Templating itself belongs to the workflow engine; TemplateEngine is the
# seam it plugs into. StringTemplateEngine is the built-in fallback and only
# substitutes ${name} placeholders with top-level task parameters.
# =============================================================================

import logging
from string import Template
from typing import Any, Protocol

from mailtask.errors import BodyTemplateError, MissingRequiredFieldError
from mailtask.resolve import TaskParams
from mailtask.workspace import Workspace

logger = logging.getLogger(__name__)

# Parameter naming the body template file in the workspace
COMMAND_KEY = "_command"

# Parameter holding an inline body template
BODY_KEY = "body"


class TemplateEngine(Protocol):
    """Renders template text with the task's parameters."""

    def render(self, template: str, params: dict[str, Any]) -> str:
        ...


class StringTemplateEngine:
    """
    ${name} substitution with :class:`string.Template`.

    Unknown placeholders are left in place rather than raising.
    """

    def render(self, template: str, params: dict[str, Any]) -> str:
        return Template(template).safe_substitute(params)


def render_body(
    params: TaskParams,
    workspace: Workspace,
    engine: TemplateEngine,
    encoding: str = "utf-8",
) -> str:
    """
    Load and render the body template.

    Raises:
        MissingRequiredFieldError: If neither "_command" nor "body" is set.
        BodyTemplateError: If the template file can't be read or decoded.
    """
    command = params.plain_only(COMMAND_KEY)
    if command is not None:
        path = str(command)
        logger.debug(f"Loading body template from workspace file {path}")
        try:
            template = workspace.read_text(path, encoding=encoding)
        except (OSError, UnicodeDecodeError) as e:
            raise BodyTemplateError(path, str(e)) from e
    else:
        template = params.plain_only(BODY_KEY)
        if template is None:
            raise MissingRequiredFieldError(BODY_KEY, "Either a body template file or 'body' is required")
        template = str(template)

    return engine.render(template, params.template_params())
