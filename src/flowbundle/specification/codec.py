"""JSON record codecs for flow and flowlet specifications.

Every codec maps a specification object to a plain ``dict`` of JSON-compatible
values and back. Reading is strict: each key the record format defines is
required, fields are checked in wire order, and the first missing or invalid
field raises ``DeserializationError`` naming it. Keys the format does not
define are ignored.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Mapping

from flowbundle.errors import DeserializationError
from flowbundle.specification.models import (
    FailurePolicy,
    FlowletConnection,
    FlowletDefinition,
    FlowletSpecification,
    FlowSpecification,
    ResourceSpecification,
)

_FAILURE_POLICIES: dict[str, FailurePolicy] = {policy.name: policy for policy in FailurePolicy}


def _require(record: Mapping[str, Any], key: str) -> Any:
    if key not in record or record[key] is None:
        raise DeserializationError(key, "missing required field")
    return record[key]


def _require_str(record: Mapping[str, Any], key: str) -> str:
    value = _require(record, key)
    if not isinstance(value, str):
        raise DeserializationError(key, f"expected string, got {type(value).__name__}")
    return value


def _require_positive_int(record: Mapping[str, Any], key: str) -> int:
    value = _require(record, key)
    if isinstance(value, bool) or not isinstance(value, int):
        raise DeserializationError(key, f"expected integer, got {type(value).__name__}")
    if value < 1:
        raise DeserializationError(key, f"expected positive integer, got {value}")
    return value


def _require_object(record: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = _require(record, key)
    if not isinstance(value, Mapping):
        raise DeserializationError(key, f"expected object, got {type(value).__name__}")
    return value


def _ensure_record(record: object, label: str) -> Mapping[str, Any]:
    if not isinstance(record, Mapping):
        raise DeserializationError(label, f"expected object, got {type(record).__name__}")
    return record


def serialize_string_map(values: Mapping[str, str]) -> dict[str, str]:
    return {str(key): str(value) for key, value in values.items()}


def deserialize_string_map(record: Mapping[str, Any], key: str) -> dict[str, str]:
    raw = _require_object(record, key)
    result: dict[str, str] = {}
    for map_key, map_value in raw.items():
        if not isinstance(map_key, str) or not isinstance(map_value, str):
            raise DeserializationError(key, f"entry '{map_key}' must map a string to a string")
        result[map_key] = map_value
    return result


def deserialize_failure_policy(record: Mapping[str, Any], key: str) -> FailurePolicy:
    name = _require_str(record, key)
    policy = _FAILURE_POLICIES.get(name)
    if policy is None:
        raise DeserializationError(
            key,
            f"unknown failure policy '{name}'; expected one of {sorted(_FAILURE_POLICIES)}",
        )
    return policy


class ResourceSpecificationCodec:
    @staticmethod
    def serialize(spec: ResourceSpecification) -> dict[str, Any]:
        return {"virtualCores": spec.virtual_cores, "memoryMB": spec.memory_mb}

    @staticmethod
    def deserialize(record: object) -> ResourceSpecification:
        obj = _ensure_record(record, "resources")
        return ResourceSpecification(
            virtual_cores=_require_positive_int(obj, "virtualCores"),
            memory_mb=_require_positive_int(obj, "memoryMB"),
        )


class FlowletSpecificationCodec:
    @staticmethod
    def serialize(spec: FlowletSpecification) -> dict[str, Any]:
        return {
            "className": spec.class_name,
            "name": spec.name,
            "description": spec.description,
            "failurePolicy": spec.failure_policy.name,
            "properties": serialize_string_map(spec.properties),
            "resources": ResourceSpecificationCodec.serialize(spec.resources),
            "maxInstances": spec.max_instances,
        }

    @staticmethod
    def deserialize(record: object) -> FlowletSpecification:
        obj = _ensure_record(record, "flowletSpec")
        class_name = _require_str(obj, "className")
        name = _require_str(obj, "name")
        description = _require_str(obj, "description")
        policy = deserialize_failure_policy(obj, "failurePolicy")
        properties = deserialize_string_map(obj, "properties")
        resources = ResourceSpecificationCodec.deserialize(_require_object(obj, "resources"))
        max_instances = _require_positive_int(obj, "maxInstances")
        return FlowletSpecification(
            class_name=class_name,
            name=name,
            description=description,
            failure_policy=policy,
            properties=properties,
            resources=resources,
            max_instances=max_instances,
        )


class FlowletDefinitionCodec:
    @staticmethod
    def serialize(definition: FlowletDefinition) -> dict[str, Any]:
        return {
            "flowletSpec": FlowletSpecificationCodec.serialize(definition.flowlet_spec),
            "instances": definition.instances,
            "inputs": serialize_string_map(definition.inputs),
            "outputs": serialize_string_map(definition.outputs),
        }

    @staticmethod
    def deserialize(record: object) -> FlowletDefinition:
        obj = _ensure_record(record, "flowlet")
        flowlet_spec = FlowletSpecificationCodec.deserialize(_require_object(obj, "flowletSpec"))
        instances = _require_positive_int(obj, "instances")
        inputs = deserialize_string_map(obj, "inputs")
        outputs = deserialize_string_map(obj, "outputs")
        try:
            return FlowletDefinition(
                flowlet_spec=flowlet_spec,
                instances=instances,
                inputs=inputs,
                outputs=outputs,
            )
        except ValueError as exc:
            raise DeserializationError("instances", str(exc)) from exc


class FlowSpecificationCodec:
    @staticmethod
    def serialize(spec: FlowSpecification) -> dict[str, Any]:
        return {
            "className": spec.class_name,
            "name": spec.name,
            "description": spec.description,
            "flowlets": {
                name: FlowletDefinitionCodec.serialize(definition)
                for name, definition in spec.flowlets.items()
            },
            "connections": [
                {"sourceName": conn.source_name, "targetName": conn.target_name}
                for conn in spec.connections
            ],
        }

    @staticmethod
    def deserialize(record: object) -> FlowSpecification:
        obj = _ensure_record(record, "flow")
        class_name = _require_str(obj, "className")
        name = _require_str(obj, "name")
        description = _require_str(obj, "description")
        flowlets = {
            str(flowlet_name): FlowletDefinitionCodec.deserialize(definition)
            for flowlet_name, definition in _require_object(obj, "flowlets").items()
        }
        raw_connections = _require(obj, "connections")
        if not isinstance(raw_connections, list):
            raise DeserializationError(
                "connections", f"expected array, got {type(raw_connections).__name__}"
            )
        connections = []
        for item in raw_connections:
            conn = _ensure_record(item, "connections")
            connections.append(
                FlowletConnection(
                    source_name=_require_str(conn, "sourceName"),
                    target_name=_require_str(conn, "targetName"),
                )
            )
        try:
            return FlowSpecification(
                class_name=class_name,
                name=name,
                description=description,
                flowlets=flowlets,
                connections=tuple(connections),
            )
        except ValueError as exc:
            raise DeserializationError("connections", str(exc)) from exc


class FlowSpecificationAdapter:
    """Reads and writes whole flow specification documents as JSON text."""

    @staticmethod
    def to_json(spec: FlowSpecification, *, indent: int | None = 2) -> str:
        return json.dumps(FlowSpecificationCodec.serialize(spec), indent=indent, sort_keys=True)

    @staticmethod
    def from_json(text: str) -> FlowSpecification:
        try:
            document = json.loads(text)
        except json.JSONDecodeError as exc:
            raise DeserializationError("<document>", f"invalid JSON: {exc}") from exc
        except RecursionError as exc:
            raise DeserializationError("<document>", "document is nested too deeply") from exc
        return FlowSpecificationCodec.deserialize(document)

    @classmethod
    def from_bytes(cls, data: bytes) -> FlowSpecification:
        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise DeserializationError("<document>", f"not valid UTF-8: {exc}") from exc
        return cls.from_json(text)

    @classmethod
    def from_file(cls, path: str | Path) -> FlowSpecification:
        return cls.from_bytes(Path(path).read_bytes())

    @classmethod
    def to_file(cls, spec: FlowSpecification, path: str | Path) -> Path:
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(cls.to_json(spec), encoding="utf-8")
        return target
