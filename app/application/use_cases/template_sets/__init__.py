"""Template set use cases."""

from app.application.use_cases.template_sets.template_set_operations import (
    TemplateSetService,
)

__all__ = ["TemplateSetService"]
