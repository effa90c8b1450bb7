"""Swagger to JMeter - Compile OpenAPI specs into JMeter test plans."""

__version__ = "1.0.0"

from swagger_jmeter.core.compiler import TestPlanCompiler, compile_test_plan
from swagger_jmeter.core.data_structures import TestPlanConfig
from swagger_jmeter.core.jmx_generator import JMXGenerator
from swagger_jmeter.core.openapi_parser import OpenAPIParser

__all__ = [
    "TestPlanCompiler",
    "TestPlanConfig",
    "compile_test_plan",
    "OpenAPIParser",
    "JMXGenerator",
]
