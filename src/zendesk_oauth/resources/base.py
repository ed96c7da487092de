"""Resource protocol and the data exchanged with the declarative host.

The host owns plan diffing, state persistence and import. Resources only see
plain dicts of attribute values and hand back new state plus diagnostics.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Optional, Protocol, TypeVar, runtime_checkable

from pydantic import BaseModel, ValidationError

from zendesk_oauth.diagnostics import Diagnostics

_Model = TypeVar("_Model", bound=BaseModel)

_ID_PATTERN = re.compile(r"-?[0-9]+")
# Zendesk IDs are signed 64-bit integers
_ID_MIN = -(2**63)
_ID_MAX = 2**63 - 1


class _Unknown:
    """Value not known until apply time."""

    _instance: Optional["_Unknown"] = None

    def __new__(cls) -> "_Unknown":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNKNOWN"


UNKNOWN = _Unknown()


@dataclass(frozen=True)
class Attribute:
    """Schema entry for one resource or provider attribute."""

    description: str
    required: bool = False
    optional: bool = False
    computed: bool = False
    sensitive: bool = False
    # Keep the prior state value in the plan instead of marking it unknown
    use_state_for_unknown: bool = False
    element_type: Optional[str] = None


@dataclass(frozen=True)
class Schema:
    description: str
    attributes: dict[str, Attribute]

    def required(self) -> list[str]:
        return [name for name, attr in self.attributes.items() if attr.required]

    def sensitive(self) -> list[str]:
        return [name for name, attr in self.attributes.items() if attr.sensitive]


@dataclass
class ResourceResponse:
    """Outcome of a resource operation.

    ``state`` is the new state to persist. After a read, ``None`` means the
    resource is gone and the host should stop tracking it.
    """

    state: Optional[dict[str, Any]] = None
    diagnostics: Diagnostics = field(default_factory=Diagnostics)


@runtime_checkable
class Resource(Protocol):
    """Protocol implemented by every managed resource type."""

    def metadata(self, provider_type_name: str) -> str:
        """Return the full resource type name, e.g. ``zendesk_oauth_client``."""
        ...

    def schema(self) -> Schema:
        ...

    def configure(self, provider_data: Any) -> Diagnostics:
        """Receive the shared API client built by the provider."""
        ...

    def create(self, plan: dict[str, Any]) -> ResourceResponse:
        ...

    def read(self, state: dict[str, Any]) -> ResourceResponse:
        ...

    def update(self, plan: dict[str, Any], state: dict[str, Any]) -> ResourceResponse:
        ...

    def delete(self, state: dict[str, Any]) -> ResourceResponse:
        ...

    def import_state(self, import_id: str) -> ResourceResponse:
        ...


def import_state_passthrough_id(import_id: str, attribute: str = "id") -> ResourceResponse:
    """Seed state with the imported identifier; the next read fills in the rest."""
    response = ResourceResponse()
    if not import_id:
        response.diagnostics.add_error(
            "Missing Import Identifier",
            f"Expected a non-empty identifier to import into the {attribute!r} attribute.",
        )
        return response
    response.state = {attribute: import_id}
    return response


def check_required(schema: Schema, plan: Any, diagnostics: Diagnostics) -> None:
    """Add an attribute error for each required attribute absent from the plan."""
    if not isinstance(plan, dict):
        diagnostics.add_error(
            "Invalid Plan",
            f"Expected a mapping of attribute values, got: {type(plan).__name__}.",
        )
        return
    for name in schema.required():
        if plan.get(name) is None or plan.get(name) is UNKNOWN:
            diagnostics.add_attribute_error(
                name,
                "Missing Required Attribute",
                f"The attribute {name!r} must be set.",
            )


def parse_id(value: Any) -> int:
    """Parse a stored decimal ID.

    Raises:
        ValueError: If the value is not a plain base-10 integer string
    """
    if isinstance(value, bool) or not isinstance(value, (str, int)):
        raise ValueError(f"invalid ID {value!r}")
    if isinstance(value, str):
        if not _ID_PATTERN.fullmatch(value):
            raise ValueError(f"invalid ID {value!r}")
        value = int(value)
    if not _ID_MIN <= value <= _ID_MAX:
        raise ValueError(f"ID {value} is out of range")
    return value


def load_model(
    model_cls: type[_Model],
    data: Any,
    diagnostics: Diagnostics,
    summary: str,
) -> _Model | None:
    """Validate plan or state data, reporting failures as a diagnostic.

    Unknown values are dropped first so computed attributes fall back to
    their model defaults.
    """
    if isinstance(data, dict):
        data = {key: value for key, value in data.items() if value is not UNKNOWN}
    try:
        return model_cls.model_validate(data)
    except ValidationError as e:
        diagnostics.add_error(summary, str(e))
        return None
