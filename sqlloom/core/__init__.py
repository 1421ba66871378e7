from .errors import (
    DecodeError,
    DuplicateQueryId,
    FormatterError,
    ManifestError,
    Mistake,
    OutputError,
    RenderError,
    SqlloomError,
    UnknownQueryId,
)
from .models import (
    Placeholder,
    Queries,
    Query,
    QueryTemplate,
    TestTemplate,
    TestTemplates,
)

__all__ = [
    "DecodeError",
    "DuplicateQueryId",
    "FormatterError",
    "ManifestError",
    "Mistake",
    "OutputError",
    "Placeholder",
    "Queries",
    "Query",
    "QueryTemplate",
    "RenderError",
    "SqlloomError",
    "TestTemplate",
    "TestTemplates",
    "UnknownQueryId",
]
