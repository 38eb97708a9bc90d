"""
@file loader.py
@brief Build typed documents from YAML or already-parsed mappings.
"""

from __future__ import annotations

import json
import os
import re
from dataclasses import fields
from typing import Any, Dict, List, Optional

import yaml
from jsonschema import Draft202012Validator

from .exceptions import DocumentError
from .models.document import Document, Macro, TestCase, TestSuite
from .models.steps import (
    STEP_TYPES,
    AssertOperator,
    Expectation,
    SelectorExpectation,
    Step,
    ValueExpectation,
)

SCHEMA_PATH = os.path.join(os.path.dirname(os.path.abspath(__file__)), "schemas", "document.schema.json")

_VAR_PATTERN = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)\}")

_validator: Optional[Draft202012Validator] = None


def _get_validator() -> Draft202012Validator:
    global _validator
    if _validator is None:
        with open(SCHEMA_PATH, "r", encoding="utf-8") as f:
            _validator = Draft202012Validator(json.load(f))
    return _validator


def _substitute(value: Any, variables: Dict[str, Any]) -> Any:
    """Replace ${name} references in strings; unknown names are left as-is."""
    if isinstance(value, str):

        def repl(m):
            key = m.group(1)
            if key not in variables:
                return m.group(0)
            return str(variables[key])

        return _VAR_PATTERN.sub(repl, value)
    if isinstance(value, list):
        return [_substitute(v, variables) for v in value]
    if isinstance(value, dict):
        return {k: _substitute(v, variables) for k, v in value.items()}
    return value


def validate(data: Dict[str, Any]) -> None:
    """
    Validate a document mapping against the bundled schema.

    @throws DocumentError listing every violation
    """
    errors = sorted(_get_validator().iter_errors(data), key=lambda e: [str(p) for p in e.path])
    if errors:
        lines = ["Document schema validation failed:"]
        for e in errors:
            lines.append(f"- {list(e.path)}: {e.message}")
        raise DocumentError("\n".join(lines))


def _build_expect(raw: Dict[str, Any]) -> Expectation:
    if "selector" in raw:
        return SelectorExpectation(selector=raw["selector"], exists=raw.get("exists", True))
    return ValueExpectation(
        expected=raw.get("expected"),
        operator=AssertOperator(raw.get("operator", AssertOperator.EQUALS.value)),
    )


def build_step(raw: Dict[str, Any]) -> Step:
    """Build one typed step from its mapping. The `action` key selects the class."""
    args = dict(raw)
    action = args.pop("action", None)
    cls = STEP_TYPES.get(action)
    if cls is None:
        raise DocumentError(f"Unknown step action: {action!r}")

    accepted = {f.name for f in fields(cls)}
    extra = sorted(set(args) - accepted)
    if extra:
        raise DocumentError(f"{action} step does not accept field(s): {extra}")

    if args.get("expect") is not None:
        args["expect"] = _build_expect(args["expect"])
    return cls(**args)


def _build_steps(raw_steps: List[Dict[str, Any]], where: str) -> List[Step]:
    steps = []
    for idx, raw in enumerate(raw_steps):
        try:
            steps.append(build_step(raw))
        except DocumentError as e:
            raise DocumentError(f"{where} step {idx}: {e}") from e
    return steps


def parse_document(data: Dict[str, Any], variables: Optional[Dict[str, Any]] = None) -> Document:
    """
    Validate a mapping and build a Macro (`steps`) or TestSuite (`test_cases`).

    Variables from the document's `vars` block are merged with `variables`
    (the argument wins) and substituted into step values.

    @throws DocumentError on schema violations or unusable steps
    """
    if not isinstance(data, dict):
        raise DocumentError("Document must be a mapping at root")
    validate(data)

    merged = dict(data.get("vars") or {})
    merged.update(variables or {})
    description = data.get("description", "")
    metadata = data.get("metadata") or {}
    context = data.get("context") or {}

    if "steps" in data:
        steps = _build_steps(_substitute(data["steps"], merged), "document")
        return Macro(steps=steps, description=description, metadata=metadata, context=context)

    test_cases = []
    for raw_tc in data["test_cases"]:
        tc_steps = _build_steps(_substitute(raw_tc["steps"], merged), f"test case '{raw_tc['id']}'")
        test_cases.append(
            TestCase(
                id=raw_tc["id"],
                steps=tc_steps,
                description=raw_tc.get("description", ""),
                depends=raw_tc.get("depends", ()),
            )
        )
    suite = TestSuite(test_cases=test_cases, description=description, metadata=metadata, context=context)
    ids = [tc.id for tc in suite.test_cases]
    duplicates = sorted({i for i in ids if ids.count(i) > 1})
    if duplicates:
        raise DocumentError(f"Duplicate test case id(s): {duplicates}")
    suite.dependency_order()
    return suite


def loads_document(text: str, variables: Optional[Dict[str, Any]] = None) -> Document:
    """Parse a YAML (or JSON) string into a document."""
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise DocumentError(f"Invalid YAML: {e}") from e
    return parse_document(data, variables)


def load_document(path: str, variables: Optional[Dict[str, Any]] = None) -> Document:
    """Load a document file from disk."""
    with open(path, "r", encoding="utf-8") as f:
        text = f.read()
    return loads_document(text, variables)
