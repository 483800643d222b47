"""
Runtime Overrides for Step Definitions.

Provides:
  - A cache of dynamically edited step properties (script text, skip
    expression), keyed by process definition and step
  - Optional persistence of that cache to a state directory
  - Resolution of the effective script text for one invocation

Overrides never touch the step definitions themselves: the resolved text is
returned to the caller and used for that invocation only.
"""

import json
import logging
import threading
from datetime import datetime
from pathlib import Path
from typing import Any

from .config import EngineConfig
from .definition import ScriptStepSpec

logger = logging.getLogger(__name__)

SCRIPT_KEY = "script"
SKIP_EXPRESSION_KEY = "skipExpression"


class OverrideStore:
    """
    Thread-safe store of per-step property overrides.

    Reads hand out copies, so callers can never mutate shared state.

    A store can be layered over a base store: its own properties win, the
    base fills in the rest, and writes never reach the base.
    """

    STATE_FILE = "overrides.json"

    def __init__(self, state_dir: Path | str | None = None, base: "OverrideStore | None" = None):
        """
        Initialize the override store.

        Args:
            state_dir: Optional directory for persisting overrides
            base: Optional store consulted for properties this one lacks
        """
        self.state_dir = Path(state_dir) if state_dir else None
        self.base = base
        self._lock = threading.RLock()
        self._definitions: dict[str, dict[str, dict[str, Any]]] = {}

        if self.state_dir:
            self.state_dir.mkdir(parents=True, exist_ok=True)
            self._load_state()

    def _load_state(self) -> None:
        """Load overrides from disk."""
        state_file = self.state_dir / self.STATE_FILE

        if not state_file.exists():
            return

        try:
            with open(state_file, "r") as f:
                data = json.load(f)
            self._definitions = {
                definition_id: {step_id: dict(props) for step_id, props in steps.items()}
                for definition_id, steps in data.get("definitions", {}).items()
            }
        except (json.JSONDecodeError, IOError, AttributeError) as e:
            # Corrupted state, start fresh
            logger.warning(f"Ignoring unreadable override state {state_file}: {e}")
            self._definitions = {}

    def _save_state(self) -> None:
        """Save overrides to disk."""
        if not self.state_dir:
            return

        data = {
            "updated_at": datetime.utcnow().isoformat(),
            "definitions": self._definitions,
        }

        with open(self.state_dir / self.STATE_FILE, "w") as f:
            json.dump(data, f, indent=2, default=str)

    def get_element_properties(self, step_id: str, definition_id: str) -> dict[str, Any] | None:
        """
        Get the overridden properties of a step.

        Returns:
            A copy of the properties, or None when nothing is overridden
        """
        with self._lock:
            props = self._definitions.get(definition_id, {}).get(step_id)
            own = dict(props) if props is not None else None

        inherited = self.base.get_element_properties(step_id, definition_id) if self.base else None
        if inherited is None:
            return own
        if own is not None:
            inherited.update(own)
        return inherited

    def lookup(self, step_id: str, definition_id: str) -> str | None:
        """Get the overridden script text of a step, if any."""
        props = self.get_element_properties(step_id, definition_id)
        if not props or props.get(SCRIPT_KEY) is None:
            return None
        return str(props[SCRIPT_KEY])

    def set_element_property(self, definition_id: str, step_id: str, key: str, value: Any) -> None:
        with self._lock:
            steps = self._definitions.setdefault(definition_id, {})
            steps.setdefault(step_id, {})[key] = value
            self._save_state()
        logger.debug(f"Override set: {definition_id}/{step_id} {key}")

    def set_script(self, definition_id: str, step_id: str, script: str) -> None:
        self.set_element_property(definition_id, step_id, SCRIPT_KEY, script)

    def set_skip_expression(self, definition_id: str, step_id: str, expression: str) -> None:
        self.set_element_property(definition_id, step_id, SKIP_EXPRESSION_KEY, expression)

    def remove(self, definition_id: str, step_id: str | None = None) -> None:
        """Remove the overrides of one step, or of a whole definition."""
        with self._lock:
            if step_id is None:
                self._definitions.pop(definition_id, None)
            else:
                steps = self._definitions.get(definition_id, {})
                steps.pop(step_id, None)
                if not steps:
                    self._definitions.pop(definition_id, None)
            self._save_state()

    def clear(self) -> None:
        with self._lock:
            self._definitions = {}
            self._save_state()


def resolve_script(
    step: ScriptStepSpec,
    definition_id: str,
    overrides: OverrideStore | None,
    config: EngineConfig,
) -> str:
    """
    Resolve the script text to run for one invocation.

    The override wins when the override cache is enabled and the override is
    present, non-empty and different from the step's own script.

    Args:
        step: The shared step definition (left untouched)
        definition_id: The running process definition
        overrides: Override store, or None when there is none
        config: Engine configuration

    Returns:
        The effective script text
    """
    if overrides is None or not config.enable_override_cache:
        return step.script

    override = overrides.lookup(step.id, definition_id)
    if override and override != step.script:
        logger.debug(f"Using overridden script for step '{step.id}' of {definition_id}")
        return override

    return step.script
