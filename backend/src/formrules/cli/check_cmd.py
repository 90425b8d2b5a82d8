"""Check command: inspect the rules a controller declares."""

import importlib
import logging

import click

from formrules.builder import plan_rules
from formrules.errors import ConfigurationError
from formrules.introspection import collect_field_specs
from formrules.registry import RuleRegistry, create_default_registry


def _load_object(reference: str):
    """Import `package.module:attribute`."""
    module_name, _, attribute = reference.partition(":")
    if not module_name or not attribute:
        raise click.BadParameter(f"Expected MODULE:NAME, got '{reference}'")
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise click.BadParameter(f"Cannot import '{module_name}': {e}") from e
    try:
        return getattr(module, attribute)
    except AttributeError as e:
        raise click.BadParameter(f"'{module_name}' has no attribute '{attribute}'") from e


@click.command()
@click.argument("controller")
@click.option(
    "--registry",
    "registry_factory",
    default=None,
    help="MODULE:FACTORY returning the RuleRegistry to use (default: built-ins only).",
)
@click.option("--verbose", "-v", is_flag=True, default=False, help="Enable debug logging.")
def check(controller: str, registry_factory: str | None, verbose: bool):
    """Show the validated fields of CONTROLLER (MODULE:CLASS) and their rules."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    controller_type = _load_object(controller)
    if not isinstance(controller_type, type):
        raise click.BadParameter(f"'{controller}' is not a class")

    if registry_factory is not None:
        registry = _load_object(registry_factory)()
        if not isinstance(registry, RuleRegistry):
            raise click.BadParameter(f"'{registry_factory}' did not return a RuleRegistry")
    else:
        registry = create_default_registry()

    specs = collect_field_specs(controller_type, registry)
    if not specs.specs:
        click.echo(click.style(f"No validated fields found on {controller_type.__name__}.", fg="red"))
        raise SystemExit(1)

    try:
        plans = plan_rules(specs.specs, registry)
    except ConfigurationError as e:
        click.echo(click.style(f"Configuration error: {e}", fg="red"), err=True)
        raise SystemExit(1)

    click.echo(f"{controller_type.__name__}: {len(specs.specs)} field(s), "
               f"{'ordered' if specs.ordered else 'unordered'}")
    for spec, field_plans in zip(specs.specs, plans):
        position = "-" if spec.sequence is None else spec.sequence
        click.echo(f"  [{position}] {spec.name} ({spec.field_type.__name__})")
        for plan in sorted(field_plans, key=lambda plan: plan.declaration.sequence):
            data_type = plan.data_type.__name__ if plan.data_type else "field"
            click.echo(f"      {type(plan.declaration).__name__} -> {data_type}")

    if not specs.ordered:
        click.echo(click.style(
            "Fields are unordered: IMMEDIATE mode, validate_till() and "
            "validate_before() are unavailable.",
            fg="yellow",
        ))

    click.echo(click.style("\nAll rules resolved.", fg="green", bold=True))
