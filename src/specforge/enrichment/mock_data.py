"""Generate sample values for schemas with Faker.

Each graph node carries a ``mock_data`` value that templates use for
documentation examples and generated test fixtures. Values must be stable
across runs, so the Faker instance is seeded once per compilation and the
schemas are visited in a fixed order; dates are drawn from a fixed window
instead of relative to "now".

Generation reads the hoisted document and resolves references lazily, so
shared schemas are never copied. Each reference is followed at most
``max_circular_reference_depth`` times along a path before the value is cut
off with ``None``, which bounds the walk on cyclic schemas.
"""

from __future__ import annotations

import base64
import copy
from datetime import date, datetime, timezone
from typing import Any

from faker import Faker

from specforge.models import MockDataConfig
from specforge.parser.extractor import schema_type
from specforge.parser.resolver import is_ref, resolve_ref

REFERENCE_START_DATE = date(2000, 1, 1)
REFERENCE_END_DATE = date(2021, 6, 10)

_DEFAULT_INTEGER_RANGE = 10_000


class MockDataGenerator:
    """Pure function from a schema to a sample value, backed by a seeded Faker.

    Args:
        document: The hoisted document. It is only read.
        config: Generation limits and Faker seed/locale.
    """

    def __init__(self, document: dict[str, Any], config: MockDataConfig | None = None) -> None:
        self.document = document
        self.config = config or MockDataConfig()
        self.faker = Faker(self.config.locale)
        self.faker.seed_instance(self.config.seed)

    def generate(self, schema: Any) -> Any:
        """Return a sample value for *schema*, or ``None`` if none can be made."""
        return self._generate(schema, {})

    def _generate(self, schema: Any, depth: dict[str, int]) -> Any:
        if not isinstance(schema, dict):
            return None

        if is_ref(schema):
            ref = schema["$ref"]
            followed = depth.get(ref, 0)
            if followed >= self.config.max_circular_reference_depth:
                return None
            return self._generate(resolve_ref(self.document, ref), {**depth, ref: followed + 1})

        if "example" in schema:
            return copy.deepcopy(schema["example"])
        if schema.get("enum"):
            return self.faker.random_element(schema["enum"])
        if schema.get("allOf"):
            merged: dict[str, Any] = {}
            for member in schema["allOf"]:
                value = self._generate(member, depth)
                if isinstance(value, dict):
                    merged.update(value)
            return merged
        for keyword in ("oneOf", "anyOf"):
            if schema.get(keyword):
                return self._generate(schema[keyword][0], depth)

        raw_type, _ = schema_type(schema)
        if raw_type == "string":
            return self._string(schema)
        if raw_type == "integer":
            return self._integer(schema)
        if raw_type == "number":
            return self._number(schema)
        if raw_type == "boolean":
            return self.faker.pybool()
        if raw_type == "array":
            return self._array(schema, depth)
        if raw_type == "object" or "properties" in schema or "additionalProperties" in schema:
            return self._object(schema, depth)
        return None

    def _string(self, schema: dict[str, Any]) -> str:
        fmt = schema.get("format")
        if fmt == "date":
            return self.faker.date_between_dates(
                date_start=REFERENCE_START_DATE, date_end=REFERENCE_END_DATE
            ).isoformat()
        if fmt == "date-time":
            return self.faker.date_time_between_dates(
                datetime_start=datetime.combine(REFERENCE_START_DATE, datetime.min.time()),
                datetime_end=datetime.combine(REFERENCE_END_DATE, datetime.min.time()),
                tzinfo=timezone.utc,
            ).isoformat()
        if fmt == "uuid":
            return self.faker.uuid4()
        if fmt == "email":
            return self.faker.email()
        if fmt in ("uri", "url"):
            return self.faker.url()
        if fmt == "hostname":
            return self.faker.hostname()
        if fmt == "ipv4":
            return self.faker.ipv4()
        if fmt == "ipv6":
            return self.faker.ipv6()
        if fmt == "password":
            return self.faker.password()
        if fmt == "byte":
            return base64.b64encode(self.faker.binary(length=8)).decode("ascii")

        min_length = schema.get("minLength")
        max_length = schema.get("maxLength")
        if min_length is not None or max_length is not None:
            low = min_length or 0
            high = max_length if max_length is not None else max(low, 20)
            return self.faker.pystr(min_chars=low, max_chars=max(low, high))
        return self.faker.word()

    def _integer(self, schema: dict[str, Any]) -> int:
        low = schema.get("minimum")
        high = schema.get("maximum")
        low = int(low) if low is not None else (int(high) - _DEFAULT_INTEGER_RANGE if high is not None else 0)
        high = int(high) if high is not None else low + _DEFAULT_INTEGER_RANGE
        if low >= high:
            return low
        return self.faker.random_int(min=low, max=high)

    def _number(self, schema: dict[str, Any]) -> float:
        low = schema.get("minimum")
        high = schema.get("maximum")
        if low is not None and high is not None and low >= high:
            return float(low)
        return self.faker.pyfloat(right_digits=2, min_value=low, max_value=high)

    def _array(self, schema: dict[str, Any], depth: dict[str, int]) -> list[Any]:
        if self.config.max_array_length < 1:
            return []
        length = self.faker.random_int(min=1, max=self.config.max_array_length)
        return [self._generate(schema.get("items"), depth) for _ in range(length)]

    def _object(self, schema: dict[str, Any], depth: dict[str, int]) -> dict[str, Any]:
        value = {
            name: self._generate(property_schema, depth)
            for name, property_schema in (schema.get("properties") or {}).items()
        }
        additional = schema.get("additionalProperties")
        if isinstance(additional, dict) and self.config.max_array_length > 0:
            for _ in range(self.faker.random_int(min=1, max=self.config.max_array_length)):
                value[self.faker.word()] = self._generate(additional, depth)
        return value
