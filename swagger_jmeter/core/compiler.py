"""Test plan compilation pipeline.

Runs spec text through parsing, operation extraction, body synthesis and
JMX assembly. Every call builds its own resolver and sample generator, so
independent compiles share no state.
"""

import random
from typing import Any, Optional

from swagger_jmeter.core.data_structures import TestPlanConfig
from swagger_jmeter.core.jmx_generator import JMXGenerator
from swagger_jmeter.core.openapi_parser import OpenAPIParser
from swagger_jmeter.core.ref_resolver import RefResolver
from swagger_jmeter.core.sample_generator import SampleGenerator, serialize_body


class TestPlanCompiler:
    """Compile OpenAPI/Swagger text into a JMeter test plan."""

    __test__ = False

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        """Initialize compiler.

        Args:
            rng: Random source for month/day sample fields (default: a new
                 Random per compile)
        """
        self._rng = rng
        self._parser = OpenAPIParser()
        self._generator = JMXGenerator()

    def describe(self, raw_text: str, filename: Optional[str] = None) -> dict[str, Any]:
        """Parse spec text without generating a test plan.

        Returns:
            Parsed spec data from OpenAPIParser.parse()
        """
        return self._parser.parse(raw_text, filename)

    def compile(
        self, raw_text: str, config: TestPlanConfig, filename: Optional[str] = None
    ) -> str:
        """Compile spec text into JMX test plan text.

        When config.base_url is empty, the base URL derived from the spec's
        servers/host declaration is used. An explicit base URL always wins.

        Args:
            raw_text: Spec document text (JSON or YAML)
            config: Test plan configuration
            filename: Optional file name used as encoding hint

        Returns:
            JMX document text

        Raises:
            CompileError: Any parse, shape or reference failure

        Example:
            >>> compiler = TestPlanCompiler()
            >>> config = TestPlanConfig(10, 10, 1, "http://localhost:8080", "API Test")
            >>> jmx = compiler.compile('{"openapi": "3.0.0", "paths": {}}', config)
        """
        spec_data = self._parser.parse(raw_text, filename)

        if not config.base_url and spec_data["base_url"]:
            config = config.replace(base_url=spec_data["base_url"])

        resolver = RefResolver(spec_data["spec"])
        sample_generator = SampleGenerator(resolver, rng=self._rng or random.Random())

        planned = []
        for operation in spec_data["operations"]:
            body = None
            if operation.needs_body:
                sample = sample_generator.generate_body(
                    operation.request_body_schema, operation.schema_refs
                )
                body = serialize_body(sample)
            planned.append((operation, body))

        return self._generator.assemble(config, planned)


def compile_test_plan(
    raw_text: str, config: TestPlanConfig, filename: Optional[str] = None
) -> str:
    """Compile spec text into JMX test plan text.

    Convenience wrapper around TestPlanCompiler().compile().
    """
    return TestPlanCompiler().compile(raw_text, config, filename)
