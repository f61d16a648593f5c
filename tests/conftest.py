from __future__ import annotations

import os
import zipfile
from pathlib import Path
from typing import Callable

import pytest
from hypothesis import HealthCheck, settings

from flowbundle.program import write_bundle
from flowbundle.specification import (
    FailurePolicy,
    FlowletConnection,
    FlowletDefinition,
    FlowletSpecification,
    FlowSpecification,
    ResourceSpecification,
)

settings.register_profile(
    "ci_smoke",
    max_examples=30,
    derandomize=True,
    deadline=None,
    suppress_health_check=(HealthCheck.too_slow,),
)
settings.register_profile(
    "nightly_deep",
    max_examples=300,
    derandomize=True,
    deadline=None,
    suppress_health_check=(HealthCheck.too_slow,),
)
settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "ci_smoke"))


MAIN_CLASS = "wordcount.app:WordCountFlow"

PROGRAM_FILES: dict[str, str] = {
    "wordcount/__init__.py": "",
    "wordcount/helpers.py": (
        "def greeting() -> str:\n"
        "    return 'hello from wordcount'\n"
    ),
    "wordcount/app.py": (
        "from flowbundle.api import Flow\n"
        "\n"
        "from .helpers import greeting\n"
        "\n"
        "GREETING = greeting()\n"
        "\n"
        "\n"
        "class WordCountFlow(Flow):\n"
        "    pass\n"
    ),
}


@pytest.fixture()
def flowlet_spec() -> FlowletSpecification:
    return FlowletSpecification(
        class_name="wordcount.app:Reader",
        name="reader",
        description="Reads lines of text",
        failure_policy=FailurePolicy.RETRY,
        properties={"batch.size": "10", "charset": "UTF-8"},
        resources=ResourceSpecification(virtual_cores=2, memory_mb=256),
        max_instances=4,
    )


@pytest.fixture()
def flow_spec(flowlet_spec: FlowletSpecification) -> FlowSpecification:
    counter = FlowletSpecification(
        class_name="wordcount.app:Counter",
        name="counter",
        description="Counts words",
        failure_policy=FailurePolicy.IGNORE,
        properties={},
        resources=ResourceSpecification(),
        max_instances=2,
    )
    return FlowSpecification(
        class_name=MAIN_CLASS,
        name="WordCount",
        description="Counts words in a stream of text",
        flowlets={
            "reader": FlowletDefinition(flowlet_spec, instances=2, outputs={"out": "text"}),
            "counter": FlowletDefinition(counter, instances=1, inputs={"reader.out": "text"}),
        },
        connections=(FlowletConnection(source_name="reader", target_name="counter"),),
    )


@pytest.fixture()
def bundle_path(flow_spec: FlowSpecification, tmp_path: Path) -> Path:
    return write_bundle(
        tmp_path / "bundles" / "wordcount.zip",
        MAIN_CLASS,
        flow_spec,
        files=PROGRAM_FILES,
    )


@pytest.fixture()
def raw_bundle(tmp_path: Path) -> Callable[[dict[str, str | bytes]], Path]:
    """Build a bundle from raw entries, for malformed-bundle cases."""
    counter = {"n": 0}

    def _build(entries: dict[str, str | bytes]) -> Path:
        counter["n"] += 1
        path = tmp_path / f"raw_{counter['n']}.zip"
        with zipfile.ZipFile(path, "w") as archive:
            for name, content in entries.items():
                archive.writestr(name, content)
        return path

    return _build


@pytest.fixture()
def platform_config_path(tmp_path: Path) -> Path:
    text = """
[bundle]
working_root = "work"

[engine]
stage_timeout_seconds = 5

[logging]
level = "info"
""".strip()
    path = tmp_path / "platform.toml"
    path.write_text(text, encoding="utf-8")
    return path
