"""JMX Generator for creating JMeter test plans from extracted operations.

This module provides the JMXGenerator class for assembling JMeter JMX
documents. It creates XML-based test plans with a Thread Group, HTTP
Request Defaults, a shared HTTP Header Manager, one HTTP Sampler per
operation and two result listeners.
"""

import re
import xml.etree.ElementTree as ET
from collections.abc import Sequence
from typing import Optional
from urllib.parse import urlparse

from swagger_jmeter.core.data_structures import OperationDescriptor, TestPlanConfig
from swagger_jmeter.core.xml_writer import render_xml

# JMeter version written to the root element
JMETER_VERSION = "5.4.1"

# Connect and response timeout in milliseconds
HTTP_TIMEOUT_MS = "60000"

DEFAULT_HEADERS = (
    ("Content-Type", "application/json"),
    ("Accept", "application/json"),
    ("User-Agent", "JMeter Performance Test"),
)

# SampleSaveConfiguration shared by both result listeners
SAVE_CONFIG_FIELDS = (
    ("time", "true"),
    ("latency", "true"),
    ("timestamp", "true"),
    ("success", "true"),
    ("label", "true"),
    ("code", "true"),
    ("message", "true"),
    ("threadName", "true"),
    ("dataType", "true"),
    ("encoding", "false"),
    ("assertions", "true"),
    ("subresults", "true"),
    ("responseData", "false"),
    ("samplerData", "false"),
    ("xml", "false"),
    ("fieldNames", "true"),
    ("responseHeaders", "false"),
    ("requestHeaders", "false"),
    ("responseDataOnError", "false"),
    ("saveAssertionResultsFailureMessage", "true"),
    ("assertionsResultsToSave", "0"),
    ("bytes", "true"),
    ("sentBytes", "true"),
    ("url", "true"),
    ("threadCounts", "true"),
    ("idleTime", "true"),
    ("connectTime", "true"),
)

# {name} not already preceded by "$"
_PATH_PARAMETER = re.compile(r"(?<!\$)\{([^{}]+)\}")

_SCHEME_PREFIX = re.compile(r"^[A-Za-z][A-Za-z0-9+.-]*://")


def convert_path_parameters(path: str) -> str:
    """Convert OpenAPI path parameters to JMeter variable syntax.

    Already converted ${name} placeholders are left unchanged.

    Example:
        >>> convert_path_parameters("/users/{id}/items/{itemId}")
        '/users/${id}/items/${itemId}'
    """
    return _PATH_PARAMETER.sub(lambda match: f"${{{match.group(1)}}}", path)


class JMXGenerator:
    """Assembles JMeter JMX test plans.

    This class creates JMeter test plans with the following structure:
    - Test Plan (root container, BASE_URL user defined variable)
    - Thread Group (load profile: threads, ramp-up, loop count)
    - HTTP Request Defaults (server configuration parsed from base URL)
    - HTTP Header Manager (JSON content negotiation headers)
    - HTTP Samplers (one per operation, in extraction order)
    - View Results Tree and Summary Report listeners
    """

    def assemble(
        self,
        config: TestPlanConfig,
        operations: Sequence[tuple[OperationDescriptor, Optional[str]]],
    ) -> str:
        """Assemble and render a complete test plan.

        Args:
            config: Test plan configuration
            operations: (operation, body text or None) pairs in sampler order

        Returns:
            JMX document text
        """
        return render_xml(self.build(config, operations))

    def build(
        self,
        config: TestPlanConfig,
        operations: Sequence[tuple[OperationDescriptor, Optional[str]]],
    ) -> ET.Element:
        """Build the test plan element tree.

        Args:
            config: Test plan configuration
            operations: (operation, body text or None) pairs in sampler order

        Returns:
            Root jmeterTestPlan element
        """
        url_parts = self._parse_url(config.base_url)

        jmeter_test_plan = ET.Element(
            "jmeterTestPlan", {"version": "1.2", "properties": "5.0", "jmeter": JMETER_VERSION}
        )
        main_hashtree = ET.SubElement(jmeter_test_plan, "hashTree")

        main_hashtree.append(self._create_test_plan(config.test_plan_name, config.base_url))
        test_plan_hashtree = ET.SubElement(main_hashtree, "hashTree")

        test_plan_hashtree.append(self._create_thread_group(config))
        thread_group_hashtree = ET.SubElement(test_plan_hashtree, "hashTree")

        thread_group_hashtree.append(self._create_http_defaults(url_parts))
        ET.SubElement(thread_group_hashtree, "hashTree")

        thread_group_hashtree.append(self._create_header_manager(DEFAULT_HEADERS))
        ET.SubElement(thread_group_hashtree, "hashTree")

        for operation, body in operations:
            thread_group_hashtree.append(self._create_http_sampler(operation, body, url_parts))
            ET.SubElement(thread_group_hashtree, "hashTree")

        thread_group_hashtree.append(
            self._create_result_collector("ViewResultsFullVisualizer", "View Results Tree")
        )
        ET.SubElement(thread_group_hashtree, "hashTree")

        thread_group_hashtree.append(
            self._create_result_collector("SummaryReport", "Summary Report")
        )
        ET.SubElement(thread_group_hashtree, "hashTree")

        return jmeter_test_plan

    def _parse_url(self, url: str) -> dict[str, str]:
        """Parse base URL into protocol, domain, port and path prefix.

        Args:
            url: Base URL (e.g., "https://api.example.com/v1")

        Returns:
            Dictionary with "protocol", "domain", "port" and "path" keys.
            Example: {"protocol": "https", "domain": "api.example.com",
                      "port": "443", "path": "/v1"}
        """
        try:
            parsed = urlparse(url)
            port = parsed.port
        except ValueError:
            return self._fallback_url_parts(url)

        if not parsed.scheme or not parsed.hostname:
            return self._fallback_url_parts(url)

        protocol = parsed.scheme.lower()
        if port is None:
            port = 443 if protocol == "https" else 80

        return {
            "protocol": protocol,
            "domain": parsed.hostname,
            "port": str(port),
            "path": parsed.path.rstrip("/"),
        }

    def _fallback_url_parts(self, url: str) -> dict[str, str]:
        """URL parts for a base URL that does not parse as an absolute URL."""
        return {
            "protocol": "https",
            "domain": _SCHEME_PREFIX.sub("", url).split("/")[0],
            "port": "",
            "path": "",
        }

    def _create_test_plan(self, name: str, base_url: str) -> ET.Element:
        """Create JMeter Test Plan element.

        Args:
            name: Test plan name
            base_url: Value of the BASE_URL user defined variable

        Returns:
            TestPlan XML Element
        """
        test_plan = ET.Element(
            "TestPlan",
            {
                "guiclass": "TestPlanGui",
                "testclass": "TestPlan",
                "testname": name,
                "enabled": "true",
            },
        )

        ET.SubElement(test_plan, "stringProp", {"name": "TestPlan.comments"}).text = (
            "Generated from OpenAPI/Swagger specification"
        )
        ET.SubElement(test_plan, "boolProp", {"name": "TestPlan.functional_mode"}).text = "false"
        ET.SubElement(
            test_plan, "boolProp", {"name": "TestPlan.tearDown_on_shutdown"}
        ).text = "true"
        ET.SubElement(
            test_plan, "boolProp", {"name": "TestPlan.serialize_threadgroups"}
        ).text = "false"

        elem_prop = ET.SubElement(
            test_plan,
            "elementProp",
            {
                "name": "TestPlan.arguments",
                "elementType": "Arguments",
                "guiclass": "ArgumentsPanel",
                "testclass": "Arguments",
                "testname": "User Defined Variables",
                "enabled": "true",
            },
        )
        coll_prop = ET.SubElement(elem_prop, "collectionProp", {"name": "Arguments.arguments"})

        base_url_arg = ET.SubElement(
            coll_prop, "elementProp", {"name": "BASE_URL", "elementType": "Argument"}
        )
        ET.SubElement(base_url_arg, "stringProp", {"name": "Argument.name"}).text = "BASE_URL"
        ET.SubElement(base_url_arg, "stringProp", {"name": "Argument.value"}).text = base_url
        ET.SubElement(base_url_arg, "stringProp", {"name": "Argument.metadata"}).text = "="

        ET.SubElement(test_plan, "stringProp", {"name": "TestPlan.user_define_classpath"}).text = ""

        return test_plan

    def _create_thread_group(self, config: TestPlanConfig) -> ET.Element:
        """Create JMeter Thread Group element.

        Iteration based: no scheduler, loop count from config, sampler
        errors do not stop the thread.

        Args:
            config: Test plan configuration

        Returns:
            ThreadGroup XML Element
        """
        thread_group = ET.Element(
            "ThreadGroup",
            {
                "guiclass": "ThreadGroupGui",
                "testclass": "ThreadGroup",
                "testname": "API Thread Group",
                "enabled": "true",
            },
        )

        ET.SubElement(thread_group, "stringProp", {"name": "ThreadGroup.on_sample_error"}).text = (
            "continue"
        )

        loop_controller = ET.SubElement(
            thread_group,
            "elementProp",
            {
                "name": "ThreadGroup.main_controller",
                "elementType": "LoopController",
                "guiclass": "LoopControlPanel",
                "testclass": "LoopController",
                "testname": "Loop Controller",
                "enabled": "true",
            },
        )
        ET.SubElement(
            loop_controller, "boolProp", {"name": "LoopController.continue_forever"}
        ).text = "false"
        ET.SubElement(loop_controller, "stringProp", {"name": "LoopController.loops"}).text = str(
            config.loop_count
        )

        ET.SubElement(thread_group, "stringProp", {"name": "ThreadGroup.num_threads"}).text = str(
            config.thread_count
        )
        ET.SubElement(thread_group, "stringProp", {"name": "ThreadGroup.ramp_time"}).text = str(
            config.ramp_up_seconds
        )
        ET.SubElement(thread_group, "boolProp", {"name": "ThreadGroup.scheduler"}).text = "false"
        ET.SubElement(thread_group, "stringProp", {"name": "ThreadGroup.duration"}).text = ""
        ET.SubElement(thread_group, "stringProp", {"name": "ThreadGroup.delay"}).text = ""
        ET.SubElement(
            thread_group, "boolProp", {"name": "ThreadGroup.same_user_on_next_iteration"}
        ).text = "true"

        return thread_group

    def _create_empty_arguments(self, parent: ET.Element) -> ET.Element:
        """Add an empty HTTPsampler.Arguments panel to parent."""
        elem_prop = ET.SubElement(
            parent,
            "elementProp",
            {
                "name": "HTTPsampler.Arguments",
                "elementType": "Arguments",
                "guiclass": "HTTPArgumentsPanel",
                "testclass": "Arguments",
                "testname": "User Defined Variables",
                "enabled": "true",
            },
        )
        ET.SubElement(elem_prop, "collectionProp", {"name": "Arguments.arguments"})
        return elem_prop

    def _create_http_defaults(self, url_parts: dict[str, str]) -> ET.Element:
        """Create HTTP Request Defaults (ConfigTestElement).

        Args:
            url_parts: Parsed base URL from _parse_url()

        Returns:
            ConfigTestElement XML Element for HTTP Request Defaults
        """
        config = ET.Element(
            "ConfigTestElement",
            {
                "guiclass": "HttpDefaultsGui",
                "testclass": "ConfigTestElement",
                "testname": "HTTP Request Defaults",
                "enabled": "true",
            },
        )

        self._create_empty_arguments(config)

        ET.SubElement(config, "stringProp", {"name": "HTTPSampler.domain"}).text = url_parts["domain"]
        ET.SubElement(config, "stringProp", {"name": "HTTPSampler.port"}).text = url_parts["port"]
        ET.SubElement(config, "stringProp", {"name": "HTTPSampler.protocol"}).text = (
            url_parts["protocol"]
        )
        ET.SubElement(config, "stringProp", {"name": "HTTPSampler.contentEncoding"}).text = "UTF-8"
        ET.SubElement(config, "stringProp", {"name": "HTTPSampler.path"}).text = url_parts["path"]
        ET.SubElement(config, "stringProp", {"name": "HTTPSampler.concurrentPool"}).text = "6"
        ET.SubElement(config, "stringProp", {"name": "HTTPSampler.connect_timeout"}).text = (
            HTTP_TIMEOUT_MS
        )
        ET.SubElement(config, "stringProp", {"name": "HTTPSampler.response_timeout"}).text = (
            HTTP_TIMEOUT_MS
        )

        return config

    def _create_header_manager(self, headers: Sequence[tuple[str, str]]) -> ET.Element:
        """Create HTTP Header Manager with multiple headers.

        Args:
            headers: (name, value) pairs in output order

        Returns:
            HeaderManager XML Element
        """
        header_manager = ET.Element(
            "HeaderManager",
            {
                "guiclass": "HeaderPanel",
                "testclass": "HeaderManager",
                "testname": "HTTP Header Manager",
                "enabled": "true",
            },
        )

        coll_prop = ET.SubElement(header_manager, "collectionProp", {"name": "HeaderManager.headers"})

        for header_name, header_value in headers:
            elem_prop = ET.SubElement(coll_prop, "elementProp", {"name": "", "elementType": "Header"})
            ET.SubElement(elem_prop, "stringProp", {"name": "Header.name"}).text = header_name
            ET.SubElement(elem_prop, "stringProp", {"name": "Header.value"}).text = header_value

        return header_manager

    def _create_http_sampler(
        self,
        operation: OperationDescriptor,
        body: Optional[str],
        url_parts: dict[str, str],
    ) -> ET.Element:
        """Create HTTP Sampler for a single operation.

        Args:
            operation: Operation descriptor
            body: Serialized request body, None for no body
            url_parts: Parsed base URL from _parse_url()

        Returns:
            HTTPSamplerProxy XML Element
        """
        sampler = ET.Element(
            "HTTPSamplerProxy",
            {
                "guiclass": "HttpTestSampleGui",
                "testclass": "HTTPSamplerProxy",
                "testname": operation.sampler_name,
                "enabled": "true",
            },
        )

        if body is not None:
            ET.SubElement(sampler, "boolProp", {"name": "HTTPSampler.postBodyRaw"}).text = "true"

            body_elem_prop = ET.SubElement(
                sampler, "elementProp", {"name": "HTTPsampler.Arguments", "elementType": "Arguments"}
            )
            body_coll_prop = ET.SubElement(
                body_elem_prop, "collectionProp", {"name": "Arguments.arguments"}
            )
            body_arg_elem = ET.SubElement(
                body_coll_prop, "elementProp", {"name": "", "elementType": "HTTPArgument"}
            )
            ET.SubElement(body_arg_elem, "boolProp", {"name": "HTTPArgument.always_encode"}).text = (
                "false"
            )
            ET.SubElement(body_arg_elem, "stringProp", {"name": "Argument.value"}).text = body
            ET.SubElement(body_arg_elem, "stringProp", {"name": "Argument.metadata"}).text = "="
        else:
            self._create_empty_arguments(sampler)

        jmeter_path = url_parts["path"] + convert_path_parameters(operation.path)

        ET.SubElement(sampler, "stringProp", {"name": "HTTPSampler.domain"}).text = url_parts["domain"]
        ET.SubElement(sampler, "stringProp", {"name": "HTTPSampler.port"}).text = url_parts["port"]
        ET.SubElement(sampler, "stringProp", {"name": "HTTPSampler.protocol"}).text = (
            url_parts["protocol"]
        )
        ET.SubElement(sampler, "stringProp", {"name": "HTTPSampler.contentEncoding"}).text = "UTF-8"
        ET.SubElement(sampler, "stringProp", {"name": "HTTPSampler.path"}).text = jmeter_path
        ET.SubElement(sampler, "stringProp", {"name": "HTTPSampler.method"}).text = operation.method
        ET.SubElement(sampler, "boolProp", {"name": "HTTPSampler.follow_redirects"}).text = "true"
        ET.SubElement(sampler, "boolProp", {"name": "HTTPSampler.auto_redirects"}).text = "false"
        ET.SubElement(sampler, "boolProp", {"name": "HTTPSampler.use_keepalive"}).text = "true"
        ET.SubElement(sampler, "boolProp", {"name": "HTTPSampler.DO_MULTIPART_POST"}).text = "false"
        ET.SubElement(sampler, "stringProp", {"name": "HTTPSampler.embedded_url_re"}).text = ""
        ET.SubElement(sampler, "stringProp", {"name": "HTTPSampler.connect_timeout"}).text = (
            HTTP_TIMEOUT_MS
        )
        ET.SubElement(sampler, "stringProp", {"name": "HTTPSampler.response_timeout"}).text = (
            HTTP_TIMEOUT_MS
        )

        return sampler

    def _create_result_collector(self, guiclass: str, testname: str) -> ET.Element:
        """Create a ResultCollector listener.

        Args:
            guiclass: Listener GUI class (e.g., "ViewResultsFullVisualizer")
            testname: Listener display name

        Returns:
            ResultCollector XML Element
        """
        listener = ET.Element(
            "ResultCollector",
            {
                "guiclass": guiclass,
                "testclass": "ResultCollector",
                "testname": testname,
                "enabled": "true",
            },
        )

        ET.SubElement(listener, "boolProp", {"name": "ResultCollector.error_logging"}).text = (
            "false"
        )

        obj_prop = ET.SubElement(listener, "objProp")
        ET.SubElement(obj_prop, "name").text = "saveConfig"
        value_elem = ET.SubElement(obj_prop, "value", {"class": "SampleSaveConfiguration"})
        for key, val in SAVE_CONFIG_FIELDS:
            ET.SubElement(value_elem, key).text = val

        ET.SubElement(listener, "stringProp", {"name": "filename"}).text = ""

        return listener
