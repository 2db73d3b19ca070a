import math
from pathlib import Path

import pytest
from pydantic import ValidationError

from pledge.cli import EXAMPLE_SUITE
from pledge.config import SuiteFile, build_namespace, evaluate_bindings, load_config
from pledge.errors import ConfigError
from pledge.outcome import Ok

EXAMPLES_DIR = Path(__file__).parent.parent / "examples"


def test_load_minimal_suite(tmp_yaml):
    path = tmp_yaml("""
        suites:
          - describe: math
            cases:
              - it: adds
                expect: "(1 + 1) to equal 2"
    """)
    config = load_config(path)
    assert config.isolation == "thread"
    assert config.imports == []
    assert config.suites[0].describe == "math"
    assert config.suites[0].cases[0].expect == "(1 + 1) to equal 2"


def test_load_nested_groups_with_bindings(tmp_yaml):
    path = tmp_yaml("""
        imports: [json]
        bindings:
          doc: "json.loads('[1, 2]')"
        isolation: process
        suites:
          - describe: documents
            suites:
              - describe: lists
                bindings:
                  first: "doc[0]"
                cases:
                  - it: starts at one
                    expect: "(first) to equal 1"
    """)
    config = load_config(path)
    assert config.isolation == "process"
    inner = config.suites[0].suites[0]
    assert inner.bindings == {"first": "doc[0]"}


def test_malformed_statement_rejected_at_load(tmp_yaml):
    path = tmp_yaml("""
        suites:
          - describe: math
            cases:
              - it: adds
                expect: "(1 + 1) to equals 2"
    """)
    with pytest.raises(ValidationError, match="invalid statement"):
        load_config(path)


def test_unknown_keys_rejected(tmp_yaml):
    path = tmp_yaml("""
        suites:
          - describe: math
            cases:
              - it: adds
                expect: "(1) to equal 1"
                weight: 2
    """)
    with pytest.raises(ValidationError):
        load_config(path)


def test_empty_group_rejected(tmp_yaml):
    path = tmp_yaml("""
        suites:
          - describe: nothing here
    """)
    with pytest.raises(ValidationError, match="no cases or nested suites"):
        load_config(path)


def test_empty_suites_rejected(tmp_yaml):
    path = tmp_yaml("suites: []\n")
    with pytest.raises(ValidationError, match="must not be empty"):
        load_config(path)


def test_unknown_isolation_rejected(tmp_yaml):
    path = tmp_yaml("""
        isolation: fiber
        suites:
          - describe: math
            cases:
              - it: adds
                expect: "(1) to equal 1"
    """)
    with pytest.raises(ValidationError):
        load_config(path)


def test_non_mapping_file_rejected(tmp_yaml):
    path = tmp_yaml("- just\n- a list\n")
    with pytest.raises(ConfigError, match="expected a mapping"):
        load_config(path)


def test_bindings_see_earlier_bindings():
    scope = evaluate_bindings({"a": "2", "b": "a * 3"}, {})
    assert scope["b"] == 6


def test_bindings_do_not_mutate_the_parent_scope():
    parent = {"a": 1}
    evaluate_bindings({"b": "a + 1"}, parent)
    assert parent == {"a": 1}


def test_failing_binding_names_itself():
    with pytest.raises(ConfigError, match="binding 'bad'"):
        evaluate_bindings({"bad": "1 / 0"}, {})


def test_build_namespace_binds_imported_modules():
    scope = build_namespace(["math", "os.path"], {"root": "math.sqrt(16)"})
    assert scope["math"] is math
    assert "os" in scope
    assert scope["root"] == 4.0
    assert scope["Ok"] is Ok


def test_build_namespace_missing_module():
    with pytest.raises(ConfigError, match="cannot import 'no_such_module_here'"):
        build_namespace(["no_such_module_here"], {})


def test_config_error_is_a_value_error():
    assert issubclass(ConfigError, ValueError)


def test_example_suite_written_by_init_is_valid(tmp_yaml):
    config = load_config(tmp_yaml(EXAMPLE_SUITE))
    assert [group.describe for group in config.suites] == ["Outcomes", "Behaviour"]


@pytest.mark.parametrize("path", sorted(EXAMPLES_DIR.glob("*.yaml")), ids=lambda p: p.name)
def test_shipped_examples_are_valid(path):
    config = load_config(path)
    assert isinstance(config, SuiteFile)


def test_statements_are_parsed_once_at_load(tmp_yaml):
    from pledge.dsl.parser import parse

    config = load_config(tmp_yaml("""
        suites:
          - describe: math
            cases:
              - it: adds
                expect: "(1 + 1) to equal 2"
    """))
    case = config.suites[0].cases[0]
    assert case.expression == parse("(1 + 1) to equal 2")
    assert case.expression.source == "(1 + 1) to equal 2"
