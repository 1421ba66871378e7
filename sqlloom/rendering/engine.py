"""Template rendering engine."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

from jinja2 import (
    Environment,
    FileSystemLoader,
    StrictUndefined,
    Template,
    TemplateError,
    TemplateNotFound,
    TemplateSyntaxError,
)

from ..core.errors import RenderError
from ..core.models import Placeholder, Queries, QueryTemplate

if TYPE_CHECKING:
    from ..manifest import Metadata

logger = logging.getLogger(__name__)


def make_environment(search_path: Path) -> Environment:
    """Create a Jinja2 environment rooted at ``search_path``."""
    return Environment(
        loader=FileSystemLoader(str(search_path)),
        undefined=StrictUndefined,
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )


def load_template(
    template_path: Path,
    env: Environment | None = None,
    root: Path | None = None,
) -> Template:
    """Load a Jinja2 template from a file path.

    Args:
        template_path: Path to the template file
        env: Environment whose loader is rooted at ``root``
        root: Templates directory; includes and extends resolve against it

    Returns:
        Compiled Jinja2 template

    Raises:
        RenderError: If the file is missing, unreadable or has invalid syntax
    """
    if not template_path.is_file():
        raise RenderError(template_path, "template not found")

    if env is not None and root is not None and _is_within(template_path, root):
        name = template_path.resolve().relative_to(root.resolve()).as_posix()
    else:
        # Outside any templates directory: search its parent only
        env = make_environment(template_path.parent)
        name = template_path.name
    try:
        return env.get_template(name)
    except TemplateNotFound as exc:
        raise RenderError(template_path, f"template not found: {exc.name}") from exc
    except TemplateSyntaxError as exc:
        raise RenderError(template_path, f"line {exc.lineno}: {exc.message}") from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise RenderError(template_path, f"cannot read template: {exc}") from exc


def _is_within(path: Path, root: Path) -> bool:
    return path.resolve().is_relative_to(root.resolve())


def render_template(
    template_path: Path,
    context: dict[str, Any],
    env: Environment | None = None,
    root: Path | None = None,
) -> str:
    template = load_template(template_path, env, root)
    try:
        return template.render(**context)
    except TemplateError as exc:
        raise RenderError(template_path, str(exc)) from exc
    except (ArithmeticError, TypeError, ValueError) as exc:
        raise RenderError(template_path, f"{type(exc).__name__}: {exc}") from exc


def query_context(
    query_id: str,
    conds: tuple[str, ...],
    placeholder: Placeholder,
    declared: QueryTemplate | None = None,
) -> dict[str, Any]:
    """Build the context a query template is rendered with.

    Each condition is exposed as a ``cond__<name>`` boolean. Conditions
    declared for the template but not enabled by the query are ``False``.
    """
    context: dict[str, Any] = {
        "query_id": query_id,
        "placeholder": placeholder.value,
        "conds": frozenset(conds),
    }
    if declared is not None:
        context.update({f"cond__{c}": False for c in declared.all_conds})
    context.update({f"cond__{c}": True for c in conds})
    return context


class Engine:
    """Renders query and test templates for one manifest.

    Rendering is a pure function of the manifest and the template files:
    nothing is written here. Each templates directory gets one Jinja2
    environment, so templates can include or extend any template under it.
    """

    def __init__(
        self,
        queries: Queries,
        placeholder: Placeholder,
        query_templates: dict[Path, QueryTemplate] | None = None,
        *,
        query_templates_dir: Path | None = None,
        test_templates_dir: Path | None = None,
    ) -> None:
        self.queries = queries
        self.placeholder = placeholder
        self.query_templates = query_templates or {}
        self.query_templates_dir = query_templates_dir
        self.test_templates_dir = test_templates_dir
        self._environments: dict[Path, Environment] = {}

    @classmethod
    def from_metadata(cls, metadata: Metadata) -> Engine:
        return cls(
            metadata.queries,
            metadata.placeholder,
            metadata.query_templates,
            query_templates_dir=metadata.query_templates_dir,
            test_templates_dir=metadata.test_templates_dir,
        )

    def environment(self, root: Path | None) -> Environment | None:
        if root is None:
            return None
        if root not in self._environments:
            self._environments[root] = make_environment(root)
        return self._environments[root]

    def render_query(self, query_id: str) -> str:
        query = self.queries.get(query_id)
        logger.debug(f"Rendering query '{query_id}' from {query.template}")
        context = query_context(
            query.id,
            query.conds,
            self.placeholder,
            self.query_templates.get(query.template),
        )
        root = self.query_templates_dir
        return render_template(query.template, context, self.environment(root), root)

    def render_test(self, template_path: Path, prepared_statement: str | None = None) -> str:
        logger.debug(f"Rendering test template {template_path}")
        context: dict[str, Any] = {"placeholder": self.placeholder.value}
        if prepared_statement is not None:
            context["prepared_statement"] = prepared_statement
        root = self.test_templates_dir
        return render_template(template_path, context, self.environment(root), root)
