from __future__ import annotations

from pathlib import Path

import typer

app = typer.Typer(name="pledge", help="Readable assertions for Python tests")
schema_app = typer.Typer(name="schema", help="Generate schema tooling for suite files")
app.add_typer(schema_app, name="schema")

EXAMPLE_SUITE = """\
imports:
  - math

bindings:
  parsed: "Ok(int('42'))"
  missing: "None"

suites:
  - describe: Outcomes
    cases:
      - it: holds the parsed value
        expect: "(parsed) to be Ok"
      - it: unwraps to 42
        expect: "Ok(parsed) to equal 42"
      - it: is not an error
        expect: "(parsed) to not be Err"
    suites:
      - describe: optional values
        bindings:
          found: "Some(math.pi)"
        cases:
          - it: is present
            expect: "(found) to be Some"
          - it: reports absence
            expect: "(missing) to be None"

  - describe: Behaviour
    cases:
      - it: divides cleanly
        expect: "(10 / 2) to succeed"
      - it: rejects division by zero
        expect: "(1 / 0) to panic"
"""


@app.command()
def run(
    suite: str = typer.Argument(help="Path to suite YAML file"),
    output_dir: str = typer.Option("runs", help="Output directory for run results"),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output to terminal"
    ),
    isolation: str | None = typer.Option(
        None, help="Isolation for succeed/panic: thread or process (default from suite)"
    ),
):
    """Run every case of a suite file."""
    from pledge.config import load_config
    from pledge.runner import Runner

    suite_path = Path(suite)
    if not suite_path.exists():
        typer.echo(f"Error: suite file not found: {suite}", err=True)
        raise typer.Exit(1)

    try:
        suite_config = load_config(suite_path)
        runner = Runner(
            config=suite_config,
            output_dir=Path(output_dir),
            verbose=verbose,
            isolation=isolation,
        )
        run_dir = runner.execute()
    except ValueError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    typer.echo(f"Run complete: {run_dir}")
    typer.echo(f"JUnit report: {run_dir / 'junit.xml'}")
    if not verbose:
        typer.echo(f"Debug log: {run_dir / 'debug.log'}")

    if not runner.all_passed:
        raise typer.Exit(1)


@app.command()
def check(
    statement: str = typer.Argument(help='Statement, e.g. "(x) to not be None"'),
    bind: list[str] | None = typer.Option(
        None, "--bind", "-b", help="Binding NAME=EXPRESSION, may be repeated"
    ),
    imports: list[str] | None = typer.Option(
        None, "--import", "-i", help="Module to import before evaluating, may be repeated"
    ),
    isolation: str = typer.Option("thread", help="Isolation for succeed/panic"),
):
    """Evaluate a single statement. Exit 1 on failure, 2 when the statement itself is broken."""
    from pledge.assertions.evaluator import evaluate
    from pledge.config import build_namespace
    from pledge.dsl.parser import parse
    from pledge.errors import PledgeError
    from pledge.isolation import get_isolation

    bindings: dict[str, str] = {}
    for item in bind or []:
        name, sep, source = item.partition("=")
        if not sep or not name.strip():
            typer.echo(f"Error: binding must look like NAME=EXPRESSION: {item}", err=True)
            raise typer.Exit(2)
        bindings[name.strip()] = source

    try:
        expression = parse(statement)
        scope = build_namespace(imports or [], bindings)
        verdict = evaluate(expression, scope, isolation=get_isolation(isolation))
    except (PledgeError, ValueError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(2)
    except Exception as e:
        # raised by the subject or expected value itself, e.g. an undefined name
        typer.echo(f"Error: {type(e).__name__}: {e}", err=True)
        raise typer.Exit(2)

    if verdict:
        typer.echo(f"{typer.style('✔', fg=typer.colors.GREEN, bold=True)} {statement}")
        return
    typer.echo(f"{typer.style('✘', fg=typer.colors.RED, bold=True)} {statement}")
    typer.echo(f"    {verdict.message}")
    raise typer.Exit(1)


@app.command()
def init(
    dir: str = typer.Option("pledge", "--dir", help="Directory to write the example suite in"),
):
    """Write an example suite file."""
    project_dir = Path(dir)
    project_dir.mkdir(parents=True, exist_ok=True)

    example = project_dir / "suite.yaml"
    if example.exists():
        typer.echo(f"suite.yaml already exists in {dir}, skipping.")
        return

    example.write_text(EXAMPLE_SUITE)
    typer.echo(f"Initialized example suite in {dir}:")
    typer.echo("  suite.yaml  - example suite file")


@schema_app.command("generate")
def schema_generate(
    dir: str = typer.Option(
        "pledge", "--dir", help="Project directory for default schema/doc outputs"
    ),
    out: str | None = typer.Option(
        None,
        help="Output path for JSON Schema (defaults to <dir>/schemas/pledge.schema.json)",
    ),
    doc: str | None = typer.Option(
        None, help="Output path for schema docs (defaults to <dir>/docs/schema.md)"
    ),
):
    """Generate JSON Schema and docs for the suite YAML format."""
    from pledge.schema import write_json_schema, write_schema_doc

    project_dir = Path(dir)
    out_path = (
        Path(out) if out is not None else project_dir / "schemas" / "pledge.schema.json"
    )
    doc_path = Path(doc) if doc is not None else project_dir / "docs" / "schema.md"
    write_json_schema(out_path)
    write_schema_doc(doc_path)
    typer.echo(f"Wrote schema: {out_path}")
    typer.echo(f"Wrote docs: {doc_path}")
