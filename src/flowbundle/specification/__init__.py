from __future__ import annotations

from flowbundle.specification.codec import (
    FlowletDefinitionCodec,
    FlowletSpecificationCodec,
    FlowSpecificationAdapter,
    FlowSpecificationCodec,
    ResourceSpecificationCodec,
)
from flowbundle.specification.models import (
    FailurePolicy,
    FlowletConnection,
    FlowletDefinition,
    FlowletSpecification,
    FlowSpecification,
    ResourceSpecification,
)

__all__ = [
    "FailurePolicy",
    "FlowletConnection",
    "FlowletDefinition",
    "FlowletDefinitionCodec",
    "FlowletSpecification",
    "FlowletSpecificationCodec",
    "FlowSpecification",
    "FlowSpecificationAdapter",
    "FlowSpecificationCodec",
    "ResourceSpecification",
    "ResourceSpecificationCodec",
]
