"""Test fixtures and configuration."""

import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest

# Add backend to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from scriptflow.config import EngineConfig
from scriptflow.context import ExecutionContext
from scriptflow.definition import ScriptStepSpec
from scriptflow.scope import VariableScope


@pytest.fixture
def config():
    """Engine config independent of the environment."""
    return EngineConfig(
        enable_override_cache=True,
        skip_expressions_enabled=True,
        legacy_languages=["template", "juel"],
        default_language="python",
        state_dir=None,
        debug=False,
    )


@pytest.fixture
def make_context():
    """Build an ExecutionContext with a recording advance callable."""
    def factory(step: ScriptStepSpec, variables: dict | None = None, definition_id: str = "proc:1"):
        return ExecutionContext(
            current_step=step,
            process_definition_id=definition_id,
            scope=VariableScope(variables or {}),
            advance=MagicMock(),
            execution_id="exec-1",
        )
    return factory


@pytest.fixture
def process_yaml():
    """A small process exercising bindings, skipping and boundaries."""
    return """
name: order-review
version: "2"
variables:
  _SKIP_EXPRESSION_ENABLED: true
  status: pending
  order:
    amount: 250
    customer: Ada
steps:
  - id: fee
    type: script
    language: expression
    script: order.amount / 10
    resultVariable: fee
  - id: check_limit
    language: python
    script: |
      if amount > limit:
          raise DomainError("E_LIMIT", "over the limit")
      amount
    resultVariable: approved_amount
    inputs:
      - target: amount
        source: order.amount
      - target: limit
        source: "200"
    boundaries:
      - errorCode: E_LIMIT
        target: reject
  - id: approve
    language: python
    storeScriptVariables: true
    script: |
      status = "approved"
      f"Approved {order['customer']}"
    resultVariable: message
  - id: reject
    language: python
    skipExpression: status == 'approved'
    script: |
      f"Rejected {order['customer']}: {_error_code}"
    resultVariable: message
"""


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "slow: tests that take longer to run")
