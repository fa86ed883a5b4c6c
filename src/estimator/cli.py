"""CLI for HVAC sizing and Good/Better/Best estimates."""
import logging
import sys
from pathlib import Path
from typing import Optional, Tuple

import click
import yaml

from catalog.formatting import format_btu, format_capacity, format_currency, format_tonnage
from schemas.enums import ClimateZone, EquipmentType, FloorType, Tier
from sizing.session import SizingSession
from sizing.tables import MAX_FLOORS

from .session import EstimateSession
from .settings import load_settings
from .store import EstimateStore

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

EQUIPMENT_CHOICES = {t.name.lower(): t for t in EquipmentType}
TIER_CHOICES = {t.value.lower(): t for t in Tier}


def fail(message: str):
    click.echo(f"Error: {message}", err=True)
    sys.exit(1)


def parse_floor(spec: str) -> Tuple[FloorType, float, Optional[str]]:
    """
    Parse a ``TYPE:SQFT[:NAME]`` floor argument.

    Raises:
        click.BadParameter: If the type or area is invalid
    """
    parts = spec.split(":", 2)
    if len(parts) < 2:
        raise click.BadParameter(f"Expected TYPE:SQFT[:NAME], got '{spec}'")
    try:
        floor_type = FloorType(parts[0].strip().lower())
    except ValueError:
        valid = ", ".join(t.value for t in FloorType)
        raise click.BadParameter(f"Unknown floor type '{parts[0]}'. Valid: {valid}")
    try:
        sqft = float(parts[1])
    except ValueError:
        raise click.BadParameter(f"Invalid square footage '{parts[1]}'")
    if sqft <= 0:
        raise click.BadParameter(f"Square footage must be positive, got {parts[1]}")
    name = parts[2].strip() if len(parts) > 2 and parts[2].strip() else None
    return floor_type, sqft, name


def open_session(ctx: click.Context) -> EstimateSession:
    if "session" not in ctx.obj:
        settings = ctx.obj["settings"]
        ctx.obj["session"] = EstimateSession(EstimateStore(settings.data_dir), settings)
    return ctx.obj["session"]


def find_system_id(session: EstimateSession, ref: str):
    """Resolve a system by 1-based position or by name."""
    systems = session.current.systems
    if ref.isdigit() and 1 <= int(ref) <= len(systems):
        return systems[int(ref) - 1].id
    for system in systems:
        if system.name.lower() == ref.lower():
            return system.id
    fail(f"No system '{ref}' in the current estimate")


def report_save_error(session: EstimateSession):
    if session.last_save_error is not None:
        click.echo(f"Warning: changes were not saved: {session.last_save_error}", err=True)


def show_estimate(session: EstimateSession):
    estimate = session.current
    number = estimate.estimate_number or "(unnumbered)"
    click.echo(f"Estimate {number} [{estimate.status.value}]")
    for i, system in enumerate(estimate.systems, 1):
        state = "" if system.enabled else " (disabled)"
        capacity = format_capacity(system.tonnage, system.equipment_type)
        click.echo(f"  {i}. {system.name} - {system.equipment_type.value}, {capacity}{state}")
        for option in system.options:
            mark = "*" if option.is_selected_by_customer else " "
            hidden = "" if option.show_to_customer else " (hidden)"
            click.echo(f"     [{mark}] {option.tier.value:<7} {format_currency(option.price):>12}{hidden}")
    click.echo(f"  Systems: {format_currency(estimate.systems_subtotal)}")
    click.echo(f"  Add-Ons: {format_currency(estimate.add_ons_subtotal)}")
    click.echo(f"  Total:   {format_currency(estimate.grand_total)}")


@click.group()
@click.option(
    "--config",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Settings YAML overriding the packaged defaults"
)
@click.option(
    "--data-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory holding estimates and templates (overrides settings)"
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, config: Optional[Path], data_dir: Optional[Path], verbose: bool):
    """HVAC estimator - floor sizing and Good/Better/Best proposals."""
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
    try:
        settings = load_settings(config)
    except (ValueError, yaml.YAMLError) as e:
        raise click.ClickException(f"Could not load settings: {e}")
    if data_dir is not None:
        settings = settings.model_copy(update={"data_dir": data_dir})
    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings


# ============================================================================
# Sizing
# ============================================================================

@cli.command()
@click.option("--zone", "-z", type=click.IntRange(1, 5), required=True, help="Climate zone (1-5)")
@click.option(
    "--floor", "-f", "floors",
    multiple=True,
    required=True,
    help="Floor as TYPE:SQFT[:NAME], TYPE one of basement, main, upper (repeat up to 3 times)"
)
@click.option("--no-heating", is_flag=True, help="Size cooling only")
@click.option("--no-cooling", is_flag=True, help="Size heating only")
def size(zone: int, floors: Tuple[str, ...], no_heating: bool, no_cooling: bool):
    """
    Recommend tonnage and furnace size per floor.

    Example:
        hvac-estimator size --zone 3 --floor main:1600 --floor upper:900
    """
    if len(floors) > MAX_FLOORS:
        fail(f"At most {MAX_FLOORS} floors are supported")

    session = SizingSession()
    session.selected_climate_zone = ClimateZone(zone)
    for spec in floors:
        try:
            floor_type, sqft, name = parse_floor(spec)
        except click.BadParameter as e:
            fail(e.message)
        floor = session.add_floor()
        changes = {
            "floor_type": floor_type,
            "square_footage": sqft,
            "needs_cooling": not no_cooling,
            "needs_heating": not no_heating,
        }
        if name:
            changes["name"] = name
        session.update_floor(floor.id, **changes)

    results = session.calculate_sizing()
    click.echo(session.selected_climate_zone.title)
    for result in results:
        click.echo(f"\n{result.floor_name} ({result.floor_type.title})")
        if result.recommended_tonnage is not None:
            click.echo(f"  Cooling: {format_tonnage(result.recommended_tonnage)}")
        if result.recommended_furnace_btu is not None:
            click.echo(f"  Furnace: {format_btu(result.recommended_furnace_btu)}")
        click.echo(f"  {result.explanation}")


# ============================================================================
# Catalog
# ============================================================================

@cli.group()
def catalog():
    """Inspect and manage system and add-on templates."""
    pass


@catalog.command("show")
@click.option(
    "--type", "-t", "type_name",
    type=click.Choice(sorted(EQUIPMENT_CHOICES)),
    default=None,
    help="Only show templates of this equipment type"
)
@click.pass_context
def catalog_show(ctx: click.Context, type_name: Optional[str]):
    """List templates with their tier prices."""
    session = open_session(ctx)
    templates = session.catalog.system_templates
    if type_name:
        templates = session.catalog.templates_of_type(EQUIPMENT_CHOICES[type_name])

    click.echo(f"System templates ({len(templates)}):")
    for template in templates:
        prices = "  ".join(
            f"{o.tier.value}: {format_currency(o.price)}" for o in template.options
        )
        click.echo(f"  {template.name:<28} {prices}")

    click.echo(f"\nAdd-on templates ({len(session.catalog.add_on_templates)}):")
    for template in session.catalog.add_on_templates:
        flags = []
        if not template.enabled:
            flags.append("off by default")
        if template.free_when_tier_is_best:
            flags.append("free with Best")
        suffix = f" ({', '.join(flags)})" if flags else ""
        click.echo(f"  {template.name:<28} {format_currency(template.default_price)}{suffix}")


@catalog.command("export")
@click.option("--output", "-o", type=click.Path(dir_okay=False, path_type=Path), default=None,
              help="Write to a file instead of stdout")
@click.option("--systems-only", is_flag=True, help="Export only system templates")
@click.option("--add-ons-only", is_flag=True, help="Export only add-on templates")
@click.pass_context
def catalog_export(ctx: click.Context, output: Optional[Path], systems_only: bool, add_ons_only: bool):
    """Export templates as a JSON bundle."""
    if systems_only and add_ons_only:
        fail("--systems-only and --add-ons-only are mutually exclusive")
    session = open_session(ctx)
    text = session.export_templates(include_systems=not add_ons_only, include_add_ons=not systems_only)
    if output is None:
        click.echo(text)
    else:
        output.write_text(text)
        click.echo(f"Wrote {output}")


@catalog.command("import")
@click.argument("bundle_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_context
def catalog_import(ctx: click.Context, bundle_path: Path):
    """Replace both template lists from a JSON bundle."""
    session = open_session(ctx)
    try:
        session.import_templates(bundle_path.read_text())
    except ValueError as e:
        fail(str(e))
    click.echo(
        f"Imported {len(session.catalog.system_templates)} system templates and "
        f"{len(session.catalog.add_on_templates)} add-on templates"
    )
    report_save_error(session)


@catalog.command("reset")
@click.confirmation_option(prompt="Replace all templates with the defaults?")
@click.pass_context
def catalog_reset(ctx: click.Context):
    """Restore the default templates."""
    session = open_session(ctx)
    session.reset_templates()
    click.echo("Templates reset to defaults")
    report_save_error(session)


# ============================================================================
# Estimates
# ============================================================================

@cli.group()
def estimate():
    """Create and edit estimates."""
    pass


@estimate.command("new")
@click.option("--customer", default=None, help="Customer name")
@click.option("--address", default=None, help="Customer address")
@click.pass_context
def estimate_new(ctx: click.Context, customer: Optional[str], address: Optional[str]):
    """Start a new numbered estimate and make it current."""
    session = open_session(ctx)
    session.create_new_estimate()
    fields = {}
    if customer is not None:
        fields["customer_name"] = customer
    if address is not None:
        fields["address"] = address
    if fields:
        session.update_customer(**fields)
    show_estimate(session)
    report_save_error(session)


@estimate.command("add-system")
@click.option("--name", "-n", required=True, help="System name, e.g. 'Upstairs'")
@click.option("--tonnage", "-t", type=float, default=3.0, help="Tons, or BTU for furnace-only")
@click.option(
    "--type", "type_name",
    type=click.Choice(sorted(EQUIPMENT_CHOICES)),
    default="ac_furnace",
    help="Equipment type"
)
@click.pass_context
def estimate_add_system(ctx: click.Context, name: str, tonnage: float, type_name: str):
    """Add a system to the current estimate."""
    if tonnage <= 0:
        fail(f"Tonnage must be positive, got {tonnage}")
    session = open_session(ctx)
    session.add_new_system(name, tonnage, EQUIPMENT_CHOICES[type_name])
    show_estimate(session)
    report_save_error(session)


@estimate.command("select")
@click.argument("system_ref")
@click.argument("tier", type=click.Choice(sorted(TIER_CHOICES), case_sensitive=False))
@click.pass_context
def estimate_select(ctx: click.Context, system_ref: str, tier: str):
    """
    Select a tier for one system.

    SYSTEM_REF is the system's position (1, 2, ...) or its name.
    """
    session = open_session(ctx)
    system_id = find_system_id(session, system_ref)
    option = session.current.find_system(system_id).option_for(TIER_CHOICES[tier.lower()])
    if option is None:
        fail(f"System '{system_ref}' has no {tier} option")
    session.select_option(system_id, option.id)
    show_estimate(session)
    report_save_error(session)


@estimate.command("accept")
@click.argument("tier", type=click.Choice(sorted(TIER_CHOICES), case_sensitive=False))
@click.pass_context
def estimate_accept(ctx: click.Context, tier: str):
    """Select the same tier for every system."""
    session = open_session(ctx)
    session.accept_proposal(TIER_CHOICES[tier.lower()])
    show_estimate(session)
    report_save_error(session)


@estimate.command("summary")
@click.option("--tiers", is_flag=True, help="Also show the total for each tier")
@click.pass_context
def estimate_summary(ctx: click.Context, tiers: bool):
    """Print the shareable text summary of the current estimate."""
    session = open_session(ctx)
    click.echo(session.text_summary())

    if tiers:
        click.echo("\nBy tier:")
        for tier, total in session.tier_totals().items():
            click.echo(f"- {tier.value}: {format_currency(total)}")

    breakdown = session.payment_breakdown()
    click.echo(f"\nPayment ({session.settings.payment_option.display_name}):")
    if breakdown["fee"]:
        click.echo(f"- Fee: {format_currency(breakdown['fee'])}")
    click.echo(f"- Amount due: {format_currency(breakdown['amount_due'])}")
    if breakdown["monthly_payment"] is not None:
        term = session.settings.finance.term_months
        click.echo(f"- {term} monthly payments of {format_currency(breakdown['monthly_payment'])}")


@estimate.command("list")
@click.pass_context
def estimate_list(ctx: click.Context):
    """List saved estimates."""
    session = open_session(ctx)
    if not session.estimates:
        click.echo("No saved estimates")
        return
    for saved in session.estimates:
        current = "*" if saved.id == session.current.id else " "
        number = saved.estimate_number or "(unnumbered)"
        customer = saved.customer_name or "-"
        click.echo(
            f"{current} {number:<12} {saved.estimate_date:%Y-%m-%d}  {saved.status.value:<9} "
            f"{customer:<24} {format_currency(saved.grand_total):>12}"
        )


@estimate.command("open")
@click.argument("number")
@click.pass_context
def estimate_open(ctx: click.Context, number: str):
    """Make a saved estimate current, by number or id."""
    session = open_session(ctx)
    saved = session.find_estimate(number)
    if saved is None:
        fail(f"No estimate '{number}'")
    session.load_estimate(saved.id)
    show_estimate(session)


@estimate.command("approve")
@click.pass_context
def estimate_approve(ctx: click.Context):
    """Mark the current estimate approved."""
    session = open_session(ctx)
    session.approve_estimate()
    number = session.current.estimate_number or "(unnumbered)"
    click.echo(f"Estimate {number} approved")
    report_save_error(session)


if __name__ == "__main__":
    cli()
