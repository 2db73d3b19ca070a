from __future__ import annotations

import importlib
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, field_validator, model_validator

from pledge.assertions.evaluator import base_scope
from pledge.dsl.ast import AssertionExpression
from pledge.dsl.parser import parse
from pledge.errors import ConfigError, ParseError


class CaseConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")
    it: str = Field(description="Case description shown by the reporter")
    expect: str = Field(description="Assertion statement, e.g. `(x) to not be None`")

    _expression: AssertionExpression | None = PrivateAttr(default=None)

    @model_validator(mode="after")
    def statement_must_parse(self) -> CaseConfig:
        try:
            self._expression = parse(self.expect)
        except ParseError as exc:
            raise ValueError(f"invalid statement {self.expect!r}: {exc}") from None
        return self

    @property
    def expression(self) -> AssertionExpression:
        """The statement as parsed while the suite loaded."""
        return self._expression


class GroupConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")
    describe: str = Field(description="Group description")
    bindings: dict[str, str] = Field(
        default_factory=dict, description="Names visible to this group and its nested groups"
    )
    cases: list[CaseConfig] = []
    suites: list[GroupConfig] = Field(default_factory=list, description="Nested groups")

    @model_validator(mode="after")
    def group_must_not_be_empty(self) -> GroupConfig:
        if not self.cases and not self.suites:
            raise ValueError(f"group '{self.describe}' has no cases or nested suites")
        return self


class SuiteFile(BaseModel):
    model_config = ConfigDict(extra="forbid")
    imports: list[str] = Field(default_factory=list, description="Modules imported before bindings")
    bindings: dict[str, str] = Field(
        default_factory=dict, description="Name to Python expression, evaluated in order"
    )
    isolation: Literal["thread", "process"] = Field(
        "thread", description="Execution context for `succeed` / `panic`"
    )
    suites: list[GroupConfig]

    @field_validator("suites")
    @classmethod
    def suites_must_not_be_empty(cls, v: list[GroupConfig]) -> list[GroupConfig]:
        if not v:
            raise ValueError("suites must not be empty")
        return v


def evaluate_bindings(bindings: dict[str, str], scope: dict[str, Any]) -> dict[str, Any]:
    """Evaluate ``name: expression`` bindings in order, each seeing the ones before it."""
    scope = dict(scope)
    for name, source in bindings.items():
        try:
            code = compile(source, f"<binding {name}>", "eval")
            scope[name] = eval(code, scope)
        except Exception as exc:
            raise ConfigError(f"binding '{name}' ({source!r}) failed: {exc}") from exc
    return scope


def build_namespace(imports: list[str], bindings: dict[str, str]) -> dict[str, Any]:
    """Scope for a suite: containers, imported modules, then top-level bindings."""
    scope = base_scope()
    for module_name in imports:
        try:
            importlib.import_module(module_name)
        except ImportError as exc:
            raise ConfigError(f"cannot import '{module_name}': {exc}") from exc
        top = module_name.split(".", 1)[0]
        scope[top] = importlib.import_module(top)
    return evaluate_bindings(bindings, scope)


def load_config(path: Path) -> SuiteFile:
    """Load and validate a suite file from YAML.

    Every ``expect`` statement is parsed here, so grammar mistakes surface
    before any case runs.
    """
    with open(path) as f:
        raw = yaml.safe_load(f)

    if not isinstance(raw, dict):
        raise ConfigError(f"{path}: expected a mapping at the top level")

    return SuiteFile(**raw)
