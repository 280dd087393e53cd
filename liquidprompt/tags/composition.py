"""
Composition tags: ``extends`` and ``include``.

Placeholders for template composition. Both require a template id
argument and render their own body; they never load other templates.
Composition across templates is left to the caller, which renders
each template and passes results in as context variables.
"""

from __future__ import annotations

import logging

from ..errors import TagError, TemplateError
from .control import operand_value

logger = logging.getLogger(__name__)


def _placeholder(tag_name: str):
    def handler(args, body, context, render) -> str:
        if not args:
            raise TagError(f"{tag_name} tag requires a template ID argument", tag_name)

        template_id = operand_value(args[0], context, tag_name)
        logger.debug(f"Rendering {tag_name} placeholder for template '{template_id}'")

        try:
            return render(body, context)
        except TemplateError as e:
            raise TagError(f"Render error in {tag_name} tag: {e.message}", tag_name, cause=e) from e

    handler.__name__ = f"{tag_name}_tag"
    return handler


extends_tag = _placeholder("extends")
include_tag = _placeholder("include")

__all__ = ["extends_tag", "include_tag"]
