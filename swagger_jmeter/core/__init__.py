"""Core modules for Swagger to JMeter converter."""

from swagger_jmeter.core.compiler import TestPlanCompiler, compile_test_plan
from swagger_jmeter.core.data_structures import OperationDescriptor, TestPlanConfig
from swagger_jmeter.core.jmx_generator import JMXGenerator, convert_path_parameters
from swagger_jmeter.core.openapi_parser import OpenAPIParser
from swagger_jmeter.core.ref_resolver import RefResolver
from swagger_jmeter.core.sample_generator import SampleGenerator, serialize_body
from swagger_jmeter.core.xml_writer import escape_attribute, escape_xml, render_xml

__all__ = [
    "TestPlanCompiler",
    "compile_test_plan",
    "OperationDescriptor",
    "TestPlanConfig",
    "JMXGenerator",
    "convert_path_parameters",
    "OpenAPIParser",
    "RefResolver",
    "SampleGenerator",
    "serialize_body",
    "escape_attribute",
    "escape_xml",
    "render_xml",
]
