"""JSON Schema and a markdown reference for suite files."""

from __future__ import annotations

import json
from pathlib import Path

from pledge.config import SuiteFile
from pledge.dsl.lexer import KEYWORDS

SCHEMA_ID = "https://pledge.dev/schemas/pledge.schema.json"

STATEMENT_FORM = (
    "[Ok|Some|Err] ( <subject> ) to [not] "
    "equal <expr> | be Ok|Err|Some|None|true|false|empty | succeed | panic"
)


def _refs_in(node: object) -> list[str]:
    """Names of the ``$defs`` entries *node* points at, in order of appearance."""
    if isinstance(node, list):
        return [name for item in node for name in _refs_in(item)]
    if not isinstance(node, dict):
        return []
    found = []
    ref = node.get("$ref", "")
    if ref.startswith("#/$defs/"):
        found.append(ref.removeprefix("#/$defs/"))
    for value in node.values():
        found.extend(_refs_in(value))
    return found


def _dependencies_first(defs: dict[str, dict]) -> dict[str, dict]:
    """Reorder ``$defs`` so a model comes after every model it references.

    ``GroupConfig`` refers to itself; a name already on the stack is skipped.
    """
    ordered: dict[str, dict] = {}
    pending = set(defs)

    def place(name: str) -> None:
        if name not in pending:
            return
        pending.discard(name)
        for dep in _refs_in(defs[name]):
            place(dep)
        ordered[name] = defs[name]

    for name in list(defs):
        place(name)
    return ordered


def generate_json_schema() -> dict:
    schema = SuiteFile.model_json_schema()
    schema = {"$schema": "https://json-schema.org/draft/2020-12/schema", "$id": SCHEMA_ID, **schema}
    if "$defs" in schema:
        schema["$defs"] = _dependencies_first(schema["$defs"])
    return schema


def write_json_schema(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(generate_json_schema(), indent=2) + "\n")


def _type_label(prop: dict) -> str:
    if "$ref" in prop:
        return prop["$ref"].removeprefix("#/$defs/")
    if "enum" in prop:
        return " or ".join(repr(v) for v in prop["enum"])
    if prop.get("type") == "array":
        return f"list[{_type_label(prop.get('items', {}))}]"
    if prop.get("type") == "object":
        return f"map[str, {_type_label(prop.get('additionalProperties', {}))}]"
    return prop.get("type", "any")


def _field_table(model: dict) -> list[str]:
    required = set(model.get("required", []))
    rows = ["| key | type | required | description |", "|---|---|---|---|"]
    for key, prop in model.get("properties", {}).items():
        flag = "yes" if key in required else "no"
        rows.append(f"| `{key}` | {_type_label(prop)} | {flag} | {prop.get('description', '')} |")
    return rows


def generate_schema_doc() -> str:
    schema = generate_json_schema()
    defs = schema.get("$defs", {})

    sections = [
        "# pledge suite format",
        "",
        "Generated from the suite file models; edit those, not this file.",
        "",
        "## Suite file",
        "",
        *_field_table(schema),
    ]
    for name, model in defs.items():
        sections += ["", f"## {name}", "", *_field_table(model)]
    sections += [
        "",
        "## Statements",
        "",
        f"`{STATEMENT_FORM}`",
        "",
        "Reserved words: " + ", ".join(f"`{word}`" for word in sorted(KEYWORDS)),
        "",
    ]
    return "\n".join(sections)


def write_schema_doc(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(generate_schema_doc())
