"""Shared pytest fixtures for all tests."""

import tempfile
from collections.abc import Generator
from pathlib import Path

import pytest

from swagger_jmeter.core.data_structures import TestPlanConfig


@pytest.fixture
def temp_project_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for spec and output files.

    Yields:
        Path object pointing to temporary directory
    """
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def plan_config() -> TestPlanConfig:
    """Create a test plan configuration with an explicit base URL.

    Returns:
        TestPlanConfig instance
    """
    return TestPlanConfig(
        thread_count=10,
        ramp_up_seconds=10,
        loop_count=1,
        base_url="https://api.example.com/v1",
        test_plan_name="API Performance Test",
    )


@pytest.fixture
def users_spec_yaml() -> str:
    """OpenAPI 3.0 YAML spec with a GET and a POST operation.

    Returns:
        Spec document text
    """
    return """openapi: 3.0.0
info:
  title: Users API
  version: 1.0.0
servers:
  - url: http://localhost:8000/api
paths:
  /users:
    get:
      operationId: listUsers
      summary: Get users
      tags:
        - users
      responses:
        '200':
          description: Success
    post:
      summary: Create user
      requestBody:
        required: true
        content:
          application/json:
            schema:
              $ref: '#/components/schemas/User'
      responses:
        '201':
          description: Created
components:
  schemas:
    User:
      type: object
      properties:
        id:
          type: integer
        name:
          type: string
"""


@pytest.fixture
def users_spec_json() -> str:
    """OpenAPI 3.0 JSON spec equivalent to users_spec_yaml.

    Returns:
        Spec document text
    """
    return """{
  "openapi": "3.0.0",
  "info": {"title": "Users API", "version": "1.0.0"},
  "servers": [{"url": "http://localhost:8000/api"}],
  "paths": {
    "/users": {
      "get": {
        "operationId": "listUsers",
        "summary": "Get users",
        "tags": ["users"],
        "responses": {"200": {"description": "Success"}}
      },
      "post": {
        "summary": "Create user",
        "requestBody": {
          "required": true,
          "content": {
            "application/json": {
              "schema": {"$ref": "#/components/schemas/User"}
            }
          }
        },
        "responses": {"201": {"description": "Created"}}
      }
    }
  },
  "components": {
    "schemas": {
      "User": {
        "type": "object",
        "properties": {
          "id": {"type": "integer"},
          "name": {"type": "string"}
        }
      }
    }
  }
}
"""


@pytest.fixture
def swagger2_spec_yaml() -> str:
    """Swagger 2.0 YAML spec with host, basePath and a body parameter.

    Returns:
        Spec document text
    """
    return """swagger: '2.0'
info:
  title: Petstore
  version: 1.0.0
host: petstore.swagger.io
basePath: /v2
schemes:
  - http
  - https
paths:
  /pet:
    post:
      operationId: addPet
      parameters:
        - in: body
          name: body
          required: true
          schema:
            $ref: '#/definitions/Pet'
  /pet/{petId}:
    parameters:
      - name: petId
        in: path
        required: true
        type: integer
    get:
      operationId: getPetById
definitions:
  Pet:
    type: object
    properties:
      name:
        type: string
      status:
        type: string
        enum:
          - available
          - pending
"""
