"""Canonical data shapes shared across all specforge modules.

This is the single source of truth for data shapes in the project. Every other
module imports from here rather than defining its own models. The shapes fall
into two groups:

**Configuration models** -- Pydantic v2 models validated from JSON (project
file, environment, CLI flags, template output headers):
    :class:`MockDataConfig`, :class:`GeneratorConfig`, :class:`APIInfo`, and
    :class:`WriteFileConfig`.

**Schema graph nodes** -- plain dataclasses produced by the extractor and
mutated in place by every enrichment pass:
    :class:`ModelKind`, :class:`ParameterLocation`, :class:`EnumValue`,
    :class:`Model`, :class:`Operation`, :class:`Service`,
    :class:`ParsedApi`, and :class:`RenderData`.

Graph nodes are dataclasses rather than Pydantic models because the graph is
cyclic: a model may be reachable from itself through ``link`` or
``properties``. They compare by identity (``eq=False``) and their ``repr``
never follows edges.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Optional

from pydantic import BaseModel, ConfigDict, Field

if TYPE_CHECKING:
    from specforge.graph import ModelGraph


# --- Configuration ---


class MockDataConfig(BaseModel):
    """Settings for the Faker-backed sample values attached to every node."""

    enabled: bool = Field(default=True, description="Generate mock data for nodes")
    seed: int = Field(default=1337, description="Faker seed, fixed for stable output")
    locale: str = Field(default="en_US", description="Faker locale")
    max_array_length: int = Field(default=3, ge=0)
    max_circular_reference_depth: int = Field(default=2, ge=0)


class GeneratorConfig(BaseModel):
    """Effective configuration for one ``specforge generate`` run.

    Assembled by :func:`~specforge.config.resolve_config` from (highest
    precedence first) CLI flags, ``SPECFORGE_*`` environment variables, the
    project file ``./specforge.json`` and the defaults declared here.

    Example::

        GeneratorConfig(
            spec_path="openapi.yaml",
            template_dirs=["models-summary"],
            output_path="generated",
            metadata={"srcDir": "src"},
        )
    """

    model_config = ConfigDict(extra="forbid")

    spec_path: Optional[str] = Field(
        default=None, description="File path, http(s) URL, or '-' for stdin"
    )
    template_dirs: list[str] = Field(
        default_factory=list,
        description="Built-in template set names or directories relative to the cwd",
    )
    output_path: str = Field(default=".", description="Root directory for emitted files")
    metadata: dict[str, Any] = Field(
        default_factory=dict, description="Free-form data exposed to templates"
    )
    print_data: bool = Field(
        default=False, description="Print the compiled render data to stdout"
    )
    render_workers: int = Field(
        default=4, ge=1, description="Threads used to render templates"
    )
    mock_data: MockDataConfig = Field(default_factory=MockDataConfig)


class APIInfo(BaseModel):
    """API metadata taken from the document's *Info Object*."""

    model_config = ConfigDict(extra="allow", populate_by_name=True, coerce_numbers_to_str=True)

    title: str = ""
    version: str = ""
    description: Optional[str] = None
    terms_of_service: Optional[str] = Field(default=None, alias="termsOfService")
    contact: Optional[dict[str, Any]] = None
    license: Optional[dict[str, Any]] = None


class WriteFileConfig(BaseModel):
    """Header of one file segment in rendered template output.

    Parsed from the JSON object that immediately follows the start sentinel.
    Keys use the camelCase spelling that templates write.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = None
    dir: str
    name: str
    ext: str
    overwrite: bool = False
    kebab_case_file_name: bool = Field(default=False, alias="kebabCaseFileName")
    generate_conditionally_id: Optional[str] = Field(
        default=None, alias="generateConditionallyId"
    )


# --- Schema graph ---


class HTTPMethod(str, enum.Enum):
    """HTTP methods recognised by OpenAPI 3.x path-item objects."""

    GET = "get"
    PUT = "put"
    POST = "post"
    DELETE = "delete"
    OPTIONS = "options"
    HEAD = "head"
    PATCH = "patch"
    TRACE = "trace"


class ParameterLocation(str, enum.Enum):
    """Where an operation parameter travels, per the OpenAPI ``in`` field.

    ``BODY`` is synthesised for the request body, which OpenAPI 3 models
    separately from parameters.
    """

    QUERY = "query"
    HEADER = "header"
    PATH = "path"
    COOKIE = "cookie"
    BODY = "body"


class ModelKind(str, enum.Enum):
    """Closed set of shapes a schema graph node can take.

    ``GENERIC`` is a primitive (or ``any``/``void``) value and ``INTERFACE``
    an object with declared properties. The values match the ``export``
    names that templates have always switched on.
    """

    INTERFACE = "interface"
    ENUM = "enum"
    GENERIC = "generic"
    REFERENCE = "reference"
    ARRAY = "array"
    DICTIONARY = "dictionary"
    ONE_OF = "one-of"
    ANY_OF = "any-of"
    ALL_OF = "all-of"


COMPOSED_KINDS = frozenset({ModelKind.ONE_OF, ModelKind.ANY_OF, ModelKind.ALL_OF})


@dataclass
class EnumValue:
    """One member of an enum model."""

    name: str
    value: Any
    type: str
    description: Optional[str] = None


@dataclass(eq=False)
class Model:
    """A node of the compiled schema graph.

    The same type represents named schemas, object properties, array and
    dictionary element types, composite branches, operation parameters and
    responses. Fields are grouped by the stage that fills them in; nothing
    is attached dynamically later.

    Attributes:
        node_id: Stable index assigned by :class:`~specforge.graph.ModelGraph`.
        kind: The node's shape, see :class:`ModelKind`.
        type: Raw type as extracted (``string``, ``number``, ``boolean``,
            ``binary``, ``any``, ``void`` or a model name).
        link: Element model of an array, value model of a dictionary.
        properties: Object properties, or branches of a composite.
        location: Set on operation parameters only.
        code: Set on operation responses only; ``0`` is the aliased
            ``default`` response.
    """

    node_id: int = -1
    name: str = ""
    kind: ModelKind = ModelKind.INTERFACE
    type: str = "any"
    base: str = "any"
    description: Optional[str] = None
    is_definition: bool = False
    is_required: bool = False
    is_nullable: bool = False
    is_read_only: bool = False
    unique_items: bool = False
    default: Any = None
    enum: list[EnumValue] = field(default_factory=list)
    link: Optional[Model] = None
    properties: list[Model] = field(default_factory=list)
    imports: list[str] = field(default_factory=list)

    # Parameters and responses
    location: Optional[ParameterLocation] = None
    prop: str = ""
    media_type: Optional[str] = None
    media_types: list[str] = field(default_factory=list)
    collection_format: Optional[str] = None
    code: Optional[int] = None

    # Enrichment
    format: Optional[str] = None
    openapi_type: Optional[str] = None
    deprecated: bool = False
    is_enum: bool = False
    is_integer: bool = False
    is_short: bool = False
    is_long: bool = False
    is_not_schema: bool = False
    is_hoisted: bool = False
    vendor_extensions: dict[str, Any] = field(default_factory=dict)
    composed_models: list[Model] = field(default_factory=list)
    composed_primitives: list[Model] = field(default_factory=list)
    mock_data: Any = None

    # Projection
    typescript_name: str = ""
    typescript_type: str = ""
    java_name: str = ""
    java_type: str = ""
    python_name: str = ""
    python_type: str = ""
    is_primitive: bool = False

    # Assembly
    name_snake_case: str = ""
    unique_imports: list[str] = field(default_factory=list)
    additional_properties_property: Optional[Model] = None

    @property
    def is_composed(self) -> bool:
        return self.kind in COMPOSED_KINDS

    def __repr__(self) -> str:
        return f"Model(node_id={self.node_id}, name={self.name!r}, kind={self.kind.value})"


@dataclass(eq=False)
class Operation:
    """A single path + method pair, grouped into a :class:`Service`."""

    service: str
    name: str
    method: str
    path: str
    operation_id: Optional[str] = None
    summary: Optional[str] = None
    description: Optional[str] = None
    deprecated: bool = False
    parameters: list[Model] = field(default_factory=list)
    imports: list[str] = field(default_factory=list)
    responses: list[Model] = field(default_factory=list)
    results: list[Model] = field(default_factory=list)
    vendor_extensions: dict[str, Any] = field(default_factory=dict)
    operation_id_pascal_case: str = ""
    operation_id_kebab_case: str = ""
    operation_id_snake_case: str = ""

    def _parameters_in(self, location: ParameterLocation) -> list[Model]:
        return [p for p in self.parameters if p.location == location]

    @property
    def parameters_path(self) -> list[Model]:
        return self._parameters_in(ParameterLocation.PATH)

    @property
    def parameters_query(self) -> list[Model]:
        return self._parameters_in(ParameterLocation.QUERY)

    @property
    def parameters_header(self) -> list[Model]:
        return self._parameters_in(ParameterLocation.HEADER)

    @property
    def parameters_cookie(self) -> list[Model]:
        return self._parameters_in(ParameterLocation.COOKIE)

    @property
    def parameters_body(self) -> Optional[Model]:
        body = self._parameters_in(ParameterLocation.BODY)
        return body[0] if body else None

    def __repr__(self) -> str:
        return f"Operation(name={self.name!r}, method={self.method}, path={self.path!r})"


@dataclass(eq=False)
class Service:
    """Operations sharing the same (first) tag."""

    name: str
    operations: list[Operation] = field(default_factory=list)
    imports: list[str] = field(default_factory=list)
    class_name: str = ""
    class_name_snake_case: str = ""
    name_snake_case: str = ""
    model_imports: list[str] = field(default_factory=list)

    def __repr__(self) -> str:
        return f"Service(name={self.name!r}, operations={len(self.operations)})"


@dataclass(eq=False)
class ParsedApi:
    """Output of the extractor, enriched in place by later passes."""

    graph: ModelGraph
    models: list[Model] = field(default_factory=list)
    services: list[Service] = field(default_factory=list)
    info: dict[str, Any] = field(default_factory=dict)

    def models_by_name(self) -> dict[str, Model]:
        return {m.name: m for m in self.models}


@dataclass(eq=False)
class RenderData:
    """The finished, read-only data graph handed to templates."""

    models: list[Model]
    services: list[Service]
    all_operations: list[Operation]
    info: APIInfo
    vendor_extensions: dict[str, Any] = field(default_factory=dict)
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_context(self) -> dict[str, Any]:
        """Return the template context using the key names templates expect."""
        return {
            "models": self.models,
            "services": self.services,
            "allOperations": self.all_operations,
            "info": self.info,
            "vendorExtensions": self.vendor_extensions,
            "metadata": self.metadata,
        }
