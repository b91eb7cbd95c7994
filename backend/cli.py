"""
Menu core CLI.

Command-line interface for staff operations on the catalog graph and branch
availability.
"""

import sys
from pathlib import Path

# Add backend to path for imports
sys.path.insert(0, str(Path(__file__).parent))

import typer
from rich.console import Console
from rich.table import Table

from menu_core.models import Base
from menu_core.services.catalog import CompositionResolver, DependencyGuard
from menu_core.services.crud import CatalogStore
from menu_core.services.domain import AvailabilityService
from shared.config.constants import EntityKind
from shared.config.logging import get_logger, setup_logging
from shared.config.settings import settings
from shared.infrastructure.db import engine, get_db_context
from shared.utils.exceptions import AppException

app = typer.Typer(
    name="menu-core",
    help="Menu composition and branch availability CLI",
    add_completion=False,
)
console = Console()
logger = get_logger(__name__)


@app.callback()
def main():
    setup_logging()

    config_errors = settings.validate_production_settings()
    if config_errors:
        for error in config_errors:
            logger.error("Configuration error", error=error)
            console.print(f"[red]✗ Configuration error: {error}[/red]")
        if settings.environment == "production":
            raise typer.Exit(1)


def _fail(error: AppException) -> None:
    console.print(f"[red]✗ {error.detail}[/red]")
    raise typer.Exit(1)


# =============================================================================
# Database Commands
# =============================================================================

@app.command()
def db_init():
    """Create all tables."""
    Base.metadata.create_all(bind=engine)
    console.print("[green]✓ Tables created[/green]")


# =============================================================================
# Catalog Commands
# =============================================================================

@app.command()
def resolve(group_id: int = typer.Argument(..., help="ProductGroup ID")):
    """Show the concrete items of a group and their effective prices."""
    with get_db_context() as db:
        try:
            items = CompositionResolver(CatalogStore(db)).resolve_by_id(group_id)
        except AppException as e:
            _fail(e)

    table = Table(title=f"Group #{group_id}")
    table.add_column("Kind", style="cyan")
    table.add_column("ID", style="green")
    table.add_column("Name")
    table.add_column("Price", style="yellow", justify="right")

    for item in items:
        table.add_row(item.kind.value, str(item.id), item.name, f"{item.effective_price:.2f}")

    console.print(table)


@app.command()
def show_product(product_id: int = typer.Argument(..., help="Product ID")):
    """Show a product with every group resolved."""
    with get_db_context() as db:
        try:
            view = CompositionResolver(CatalogStore(db)).build_product(product_id)
        except AppException as e:
            _fail(e)

    console.print(f"[bold]{view.name}[/bold] #{view.id}  {view.base_price:.2f}")
    for group in view.groups:
        table = Table(title=f"{group.group_name} ({group.type.value})")
        table.add_column("ID", style="green")
        table.add_column("Name")
        table.add_column("Price", style="yellow", justify="right")
        for item in group.items:
            table.add_row(str(item.id), item.name, f"{item.effective_price:.2f}")
        console.print(table)


@app.command()
def can_delete(
    kind: EntityKind = typer.Argument(..., help="Record kind"),
    entity_id: int = typer.Argument(..., help="Record ID"),
):
    """Check whether a record can be deleted, and what blocks it."""
    with get_db_context() as db:
        check = DependencyGuard(CatalogStore(db)).can_delete(kind, entity_id)

    if check.ok:
        console.print(f"[green]✓ {kind.value} #{entity_id} can be deleted[/green]")
        return

    table = Table(title=f"{kind.value} #{entity_id} is in use by")
    table.add_column("Dependant", style="red")
    for blocker in check.blockers:
        table.add_row(blocker)
    console.print(table)
    raise typer.Exit(1)


# =============================================================================
# Availability Commands
# =============================================================================

@app.command()
def enable(
    branch_id: int = typer.Argument(..., help="Branch ID"),
    product_id: int = typer.Argument(..., help="Product ID"),
):
    """Enable a product at a branch, cascading to everything it contains."""
    with get_db_context() as db:
        try:
            result = AvailabilityService(db).set_product_available(branch_id, product_id, True)
        except AppException as e:
            _fail(e)

    table = Table(title=f"Enabled at branch #{branch_id}")
    table.add_column("Kind", style="cyan")
    table.add_column("IDs", style="green")
    table.add_row("products", ", ".join(str(i) for i in result.products_marked))
    table.add_row("ingredients", ", ".join(str(i) for i in result.ingredients_marked) or "-")
    console.print(table)

    if result.skipped:
        console.print(f"[yellow]Skipped {result.skipped} missing references[/yellow]")
    if result.truncated:
        console.print("[yellow]Walk stopped at the configured node limit[/yellow]")


@app.command()
def disable(
    branch_id: int = typer.Argument(..., help="Branch ID"),
    product_id: int = typer.Argument(..., help="Product ID"),
):
    """Mark one product unavailable at a branch (no cascade)."""
    with get_db_context() as db:
        try:
            AvailabilityService(db).set_product_available(branch_id, product_id, False)
        except AppException as e:
            _fail(e)
    console.print(f"[green]✓ Product #{product_id} disabled at branch #{branch_id}[/green]")


@app.command()
def remove(
    branch_id: int = typer.Argument(..., help="Branch ID"),
    product_id: int = typer.Argument(..., help="Product ID"),
):
    """Take a product off a branch (no cascade)."""
    with get_db_context() as db:
        try:
            removed = AvailabilityService(db).remove_product(branch_id, product_id)
        except AppException as e:
            _fail(e)

    if removed:
        console.print(f"[green]✓ Product #{product_id} removed from branch #{branch_id}[/green]")
    else:
        console.print(f"[yellow]Product #{product_id} was not at branch #{branch_id}[/yellow]")


@app.command()
def is_available(
    branch_id: int = typer.Argument(..., help="Branch ID"),
    item_id: int = typer.Argument(..., help="Product or ingredient ID"),
    ingredient: bool = typer.Option(False, "--ingredient", "-i", help="Look up an ingredient"),
):
    """Print whether a product (or ingredient) is available at a branch."""
    with get_db_context() as db:
        service = AvailabilityService(db)
        try:
            if ingredient:
                available = service.is_ingredient_available(branch_id, item_id)
            else:
                available = service.is_product_available(branch_id, item_id)
        except AppException as e:
            _fail(e)

    label = "Ingredient" if ingredient else "Product"
    if available:
        console.print(f"[green]{label} #{item_id} is available at branch #{branch_id}[/green]")
    else:
        console.print(f"[red]{label} #{item_id} is not available at branch #{branch_id}[/red]")


if __name__ == "__main__":
    app()
