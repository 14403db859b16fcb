# doc_catalog/cli/main.py

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from tqdm import tqdm

from doc_catalog.core.categories import category_ids, find_category
from doc_catalog.core.config_manager import AppConfig, load_config
from doc_catalog.core.document_store import DocumentStore
from doc_catalog.core.file_metadata import describe_file, parse_tags, placeholder_size, scan_directory
from doc_catalog.core.models import Document, DocumentDraft, SortField, SortOrder, ViewState
from doc_catalog.core.persistence import JsonDocumentRepository
from doc_catalog.core.seed_data import seed_documents
from doc_catalog.core.session import Session, display_label
from doc_catalog.utils.formatting import format_date, format_file_size, format_timestamp
from doc_catalog.utils.logger import setup_logging

# --- Setup ---
console = Console()
logger = logging.getLogger(__name__)

# Category color hints -> rich styles.
BADGE_STYLES = {
    'destructive': 'red',
    'success': 'green',
    'primary': 'blue',
    'warning': 'yellow',
    'secondary': 'magenta',
    'muted': 'dim',
}

CATEGORY_CHOICE = click.Choice(category_ids(), case_sensitive=False)
SORT_FIELD_CHOICE = click.Choice([field.value for field in SortField])
SORT_ORDER_CHOICE = click.Choice([order.value for order in SortOrder], case_sensitive=False)


@dataclass
class CatalogContext:
    """Everything a command needs, built once per invocation by the group."""
    config: AppConfig
    store: DocumentStore
    repository: JsonDocumentRepository
    session: Optional[Session]


def open_catalog(config: AppConfig, session: Optional[Session] = None) -> CatalogContext:
    """Builds a store, hydrates it from disk and wires persistence to it."""
    store = DocumentStore(view_state=ViewState(
        sort_field=config.default_sort_field,
        sort_order=config.default_sort_order,
    ))
    repository = JsonDocumentRepository(config.data_file)
    repository.hydrate(store, seed_documents())
    repository.attach(store)
    return CatalogContext(config=config, store=store, repository=repository, session=session)


def _category_badge(category_id: str) -> str:
    category = find_category(category_id)
    if category is None:
        return f"[dim]{escape(category_id)}[/dim]"
    style = BADGE_STYLES.get(category.color, 'white')
    return f"[{style}]{escape(category.name)}[/{style}]"


def _require_document(store: DocumentStore, doc_id: str) -> Optional[Document]:
    document = store.get(doc_id)
    if document is None:
        console.print(f"[yellow]No document with id '{escape(doc_id)}'.[/yellow]")
    return document


def _documents_table(documents: List[Document]) -> Table:
    table = Table(title="Documents", style="cyan", title_style="bold magenta")
    table.add_column("ID", style="bright_black", no_wrap=True)
    table.add_column("★", justify="center")
    table.add_column("Name", style="green")
    table.add_column("Category")
    table.add_column("Size", justify="right")
    table.add_column("Modified")
    table.add_column("Tags", style="blue")
    for doc in documents:
        table.add_row(
            doc.id,
            "[yellow]★[/yellow]" if doc.is_favorite else "",
            escape(doc.name),
            _category_badge(doc.category),
            format_file_size(doc.size),
            format_date(doc.modified_at),
            escape(", ".join(doc.tags)),
        )
    return table


# --- Main Command Group ---
@click.group(context_settings=dict(help_option_names=['-h', '--help']))
@click.version_option(version="1.0", prog_name="Document Catalog")
@click.option('--config', 'config_path', type=click.Path(dir_okay=False, path_type=Path), default=None,
              help="Path to a custom settings.json.")
@click.option('--data-file', type=click.Path(dir_okay=False, path_type=Path), default=None,
              help="Use this JSON file for the document collection.")
@click.pass_context
def docs(ctx: click.Context, config_path: Optional[Path], data_file: Optional[Path]):
    """
    📚 Document Catalog - Organize, tag and find your documents.

    Every change is saved immediately to the local document file.
    Use `[COMMAND] --help` for more information on a specific command.
    """
    config = load_config(config_path)
    if data_file is not None:
        config.data_file = data_file
    setup_logging(config.log_file)
    ctx.obj = open_catalog(config, Session.from_env())


# --- Browsing Commands ---

@docs.command(name="list")
@click.option('-s', '--search', default="", help="Case-insensitive text to find in names, tags or descriptions.")
@click.option('-c', '--category', type=CATEGORY_CHOICE, default=None, help="Only show this category.")
@click.option('--sort', 'sort_field', type=SORT_FIELD_CHOICE, default=None, help="Field to sort by.")
@click.option('--order', 'sort_order', type=SORT_ORDER_CHOICE, default=None, help="Sort direction.")
@click.option('--favorites', is_flag=True, help="Only show favorite documents.")
@click.pass_obj
def list_documents(catalog: CatalogContext, search: str, category: Optional[str], sort_field: Optional[str],
                   sort_order: Optional[str], favorites: bool):
    """🔎 Lists documents, filtered and sorted."""
    store = catalog.store
    store.set_search_term(search)
    store.set_selected_category(category.lower() if category else None)
    if sort_field:
        store.set_sort_field(sort_field)
    if sort_order:
        store.set_sort_order(sort_order.lower())

    documents = store.derived_view()
    if favorites:
        documents = [doc for doc in documents if doc.is_favorite]

    _, total = store.counts()
    plural = "s" if len(documents) > 1 else ""
    console.print(f"[bold]{escape(display_label(catalog.session))}[/bold] • "
                  f"{len(documents)} document{plural} • {total} total")

    if not documents:
        console.print("[yellow]No documents match the current filters.[/yellow]")
        return
    console.print(_documents_table(documents))


@docs.command()
@click.argument('doc_id')
@click.pass_obj
def show(catalog: CatalogContext, doc_id: str):
    """📄 Shows every detail of one document."""
    document = _require_document(catalog.store, doc_id)
    if document is None:
        return

    table = Table(title=escape(document.name), show_header=False, title_style="bold magenta")
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("ID", document.id)
    table.add_row("Category", _category_badge(document.category))
    table.add_row("Type", escape(document.type))
    table.add_row("Size", f"{format_file_size(document.size)} ({document.size} bytes)")
    table.add_row("Created", format_timestamp(document.created_at))
    table.add_row("Modified", format_timestamp(document.modified_at))
    table.add_row("Tags", escape(", ".join(document.tags)) or "-")
    table.add_row("Description", escape(document.description or "-"))
    table.add_row("Favorite", "yes" if document.is_favorite else "no")
    console.print(table)


@docs.command()
@click.pass_obj
def categories(catalog: CatalogContext):
    """🗂️ Lists the categories and how many documents each holds."""
    counts = {}
    for document in catalog.store.documents:
        counts[document.category] = counts.get(document.category, 0) + 1

    table = Table(title="Categories", style="cyan", title_style="bold magenta")
    table.add_column("ID", style="bright_black")
    table.add_column("Name")
    table.add_column("Documents", justify="right", style="bold magenta")
    for category in catalog.store.categories:
        table.add_row(category.id, _category_badge(category.id), str(counts.get(category.id, 0)))
    console.print(table)


@docs.command()
@click.pass_obj
def whoami(catalog: CatalogContext):
    """👤 Shows the signed-in user."""
    if catalog.session is None:
        console.print("[yellow]Not signed in.[/yellow] Set DOC_CATALOG_USER_EMAIL to identify yourself.")
        return
    console.print(f"[bold]{escape(catalog.session.display_label)}[/bold] <{escape(catalog.session.email)}>")


# --- Editing Commands ---

@docs.command()
@click.option('-n', '--name', default=None, help="Display name (defaults to the file name).")
@click.option('-f', '--file', 'file_path',
              type=click.Path(exists=True, dir_okay=False, readable=True, path_type=Path), default=None,
              help="Pre-fill name, size and category from this file.")
@click.option('-c', '--category', type=CATEGORY_CHOICE, default=None,
              help="Category (inferred from the file type when --file is given).")
@click.option('-t', '--tags', default="", help="Comma-separated tags.")
@click.option('-d', '--description', default="", help="Optional description.")
@click.pass_obj
def add(catalog: CatalogContext, name: Optional[str], file_path: Optional[Path], category: Optional[str],
        tags: str, description: str):
    """➕ Adds a document to the catalog."""
    category = category.lower() if category else None
    try:
        if file_path is not None:
            draft = describe_file(file_path, name=name, category=category,
                                  tags=parse_tags(tags), description=description)
        else:
            if not name or not name.strip():
                raise click.UsageError("A document name is required (use --name or --file).")
            if not category:
                raise click.UsageError("Please choose a category with --category.")
            draft = DocumentDraft(
                name=name.strip(),
                type=category,
                size=placeholder_size(),
                category=category,
                tags=parse_tags(tags),
                description=description.strip() or None,
            )
    except OSError as e:
        console.print(f"[bold red]❌ Could not read '{escape(str(file_path))}': {escape(str(e))}[/bold red]")
        logger.error("CLI add command failed.", exc_info=True)
        return

    if not draft.name:
        raise click.UsageError("The document name cannot be empty.")

    document = catalog.store.add(draft)
    console.print(f"[bold green]✅ Added '{escape(document.name)}'[/bold green] (id {document.id}).")


@docs.command()
@click.argument('doc_id')
@click.option('-n', '--name', default=None, help="New display name.")
@click.option('-c', '--category', type=CATEGORY_CHOICE, default=None, help="New category.")
@click.option('--type', 'doc_type', default=None, help="New free-form type.")
@click.option('-t', '--tags', default=None, help="Replace the tags (comma-separated).")
@click.option('-d', '--description', default=None, help="New description (empty string clears it).")
@click.pass_obj
def update(catalog: CatalogContext, doc_id: str, name: Optional[str], category: Optional[str],
           doc_type: Optional[str], tags: Optional[str], description: Optional[str]):
    """✏️ Edits the metadata of a document."""
    if _require_document(catalog.store, doc_id) is None:
        return

    patch = {}
    if name is not None:
        if not name.strip():
            raise click.UsageError("The document name cannot be empty.")
        patch["name"] = name.strip()
    if category is not None:
        patch["category"] = category.lower()
    if doc_type is not None:
        patch["type"] = doc_type
    if tags is not None:
        patch["tags"] = parse_tags(tags)
    if description is not None:
        patch["description"] = description.strip() or None

    if not patch:
        console.print("[yellow]Nothing to update.[/yellow]")
        return

    catalog.store.update(doc_id, patch)
    console.print(f"[bold green]✅ Updated document {escape(doc_id)}.[/bold green]")


@docs.command()
@click.argument('doc_id')
@click.option('-y', '--yes', is_flag=True, help="Do not ask for confirmation.")
@click.pass_obj
def delete(catalog: CatalogContext, doc_id: str, yes: bool):
    """🗑️ Deletes a document from the catalog."""
    document = _require_document(catalog.store, doc_id)
    if document is None:
        return
    if not yes:
        click.confirm(f"Delete '{document.name}'?", abort=True)
    catalog.store.remove(doc_id)
    console.print(f"[bold green]✅ Deleted '{escape(document.name)}'.[/bold green]")


@docs.command()
@click.argument('doc_id')
@click.pass_obj
def favorite(catalog: CatalogContext, doc_id: str):
    """⭐ Toggles the favorite flag of a document."""
    if _require_document(catalog.store, doc_id) is None:
        return
    catalog.store.toggle_favorite(doc_id)
    state = "added to" if catalog.store.get(doc_id).is_favorite else "removed from"
    console.print(f"[bold green]⭐ Document {escape(doc_id)} {state} favorites.[/bold green]")


@docs.command(name="import")
@click.argument('source', type=click.Path(exists=True, file_okay=False, dir_okay=True, readable=True, path_type=Path))
@click.option('-r', '--recursive', is_flag=True, help="Also scan sub-directories.")
@click.option('-t', '--tags', default="", help="Comma-separated tags to put on every imported document.")
@click.pass_obj
def import_directory(catalog: CatalogContext, source: Path, recursive: bool, tags: str):
    """📥 Adds one document per file found in a directory."""
    console.print(f"[bold cyan]Scanning '{escape(str(source))}'...[/bold cyan]")
    files = scan_directory(source, recursive=recursive)
    if not files:
        console.print("[bold green]✅ No files found to import.[/bold green]")
        return

    tag_list = parse_tags(tags)
    imported, failed = 0, 0
    for file_path in tqdm(files, desc="Importing", unit="file"):
        try:
            catalog.store.add(describe_file(file_path, tags=tag_list))
            imported += 1
        except OSError as e:
            failed += 1
            logger.warning(f"Could not import '{file_path}': {e}")

    table = Table(title="Import Summary", show_header=False)
    table.add_column("Status", style="cyan")
    table.add_column("Count", style="bold magenta")
    table.add_row("Documents Added", str(imported))
    if failed:
        table.add_row("[red]Unreadable Files[/red]", str(failed))
    console.print(table)
