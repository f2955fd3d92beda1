from __future__ import annotations
from contextlib import contextmanager
from pathlib import Path
from typing import Iterable, Optional
import json

import typer
import uvicorn
from rich.console import Console
from rich.prompt import Prompt
from rich.table import Table

from .app import create_app
from .config import Settings
from .errors import NoteNotFound, NoteValidationError, StorageError
from .log import setup_logging
from .models import Note, NoteUpdate, parse_tags
from .store import NoteStore

app = typer.Typer(help="Jotbook: notes from the command line")
console = Console()


@app.callback(invoke_without_command=True)
def _boot(
    ctx: typer.Context,
    data: Optional[Path] = typer.Option(None, "--data", "-d", help="notes file (default: JOTBOOK_DATA_PATH or data/notes.json)"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
):
    settings = Settings.from_env()
    setup_logging("INFO" if verbose else settings.log_level)
    store = NoteStore(data or settings.data_path)
    try:
        store.load()
    except StorageError as e:
        console.print(f"[red]Cannot load notes[/]: {e}")
        raise typer.Exit(1)
    ctx.obj = store
    if ctx.invoked_subcommand is None:
        # no command: interactive menu
        menu(ctx)


@contextmanager
def _reported():
    """Turn store errors into a red message and exit code 1."""
    try:
        yield
    except NoteNotFound as e:
        console.print(f"[red]Not found[/]: {e.note_id}")
        raise typer.Exit(1)
    except NoteValidationError as e:
        console.print(f"[red]Invalid[/]: {e}")
        raise typer.Exit(1)
    except StorageError as e:
        console.print(f"[red]Storage error[/]: {e}")
        raise typer.Exit(1)


def _table(notes: Iterable[Note], title: str = "Jotbook") -> Table:
    table = Table(title=title)
    table.add_column("#", justify="right", style="dim")
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Title", style="bold green")
    table.add_column("Tags", style="magenta")
    table.add_column("Updated")
    for i, n in enumerate(notes, start=1):
        table.add_row(
            str(i), n.id[:8], n.title, ", ".join(n.tags),
            n.updated_at.isoformat(timespec="minutes"),
        )
    return table


def _print_notes(notes: list[Note], empty: str, title: str = "Jotbook") -> None:
    if not notes:
        console.print(f"[yellow]{empty}[/]")
        return
    console.print(_table(notes, title))


def _show(n: Note) -> None:
    console.rule(n.title)
    console.print(f"[cyan]id:[/] {n.id}")
    if n.tags:
        console.print(f"[dim]tags:[/] {' '.join('#' + t for t in n.tags)}")
    console.print(n.body or "[dim]<empty>[/]")
    console.print(f"[dim]created {n.created_at.isoformat()} · updated {n.updated_at.isoformat()}[/]")


@app.command()
def add(
    ctx: typer.Context,
    title: str = typer.Option(..., "--title", "-t"),
    body: str = typer.Option("", "--body", "-b"),
    tags: Optional[str] = typer.Option(None, "--tags", "-g", help="comma separated"),
):
    store: NoteStore = ctx.obj
    with _reported():
        n = store.create(title, body, parse_tags(tags))
    console.print(f"[green]Created[/] {n.id}: {n.title}")


@app.command("list")
def _list(
    ctx: typer.Context,
    tag: Optional[str] = typer.Option(None, "--tag"),
    search: Optional[str] = typer.Option(None, "--search"),
):
    store: NoteStore = ctx.obj
    notes = store.search(search) if search is not None else store.list()
    if tag:
        notes = [n for n in notes if n.has_tag(tag)]
    _print_notes(notes, "No notes found.")


@app.command()
def show(ctx: typer.Context, note_id: str):
    store: NoteStore = ctx.obj
    with _reported():
        n = store.get(note_id)
    _show(n)


@app.command()
def search(ctx: typer.Context, query: str):
    store: NoteStore = ctx.obj
    _print_notes(store.search(query), f"No notes found matching '{query}'", title=f"Search: {query}")


@app.command()
def tag(ctx: typer.Context, name: str):
    """List notes carrying a tag."""
    store: NoteStore = ctx.obj
    _print_notes(store.filter_by_tag(name), f"No notes tagged '{name}'", title=f"#{name.lower()}")


@app.command()
def tags(ctx: typer.Context):
    store: NoteStore = ctx.obj
    all_tags = store.tags()
    if not all_tags:
        console.print("[yellow]No tags yet.[/]")
        return
    for t in all_tags:
        console.print(f"#{t} [dim]({len(store.filter_by_tag(t))})[/]")


@app.command()
def edit(
    ctx: typer.Context,
    note_id: str,
    title: Optional[str] = typer.Option(None, "--title", "-t"),
    body: Optional[str] = typer.Option(None, "--body", "-b"),
    tags: Optional[str] = typer.Option(None, "--tags", "-g"),
):
    store: NoteStore = ctx.obj
    update = NoteUpdate(title=title, body=body, tags=None if tags is None else parse_tags(tags))
    if update.is_empty():
        console.print("[yellow]Nothing to change[/] (use --title, --body or --tags)")
        raise typer.Exit(1)
    with _reported():
        n = store.update(note_id, update)
    console.print(f"[green]Updated[/] {n.id}: {n.title}")


@app.command()
def delete(ctx: typer.Context, note_id: str):
    store: NoteStore = ctx.obj
    with _reported():
        n = store.delete(note_id)
    console.print(f"[yellow]Deleted[/] {n.id}: {n.title}")


@app.command()
def stats(ctx: typer.Context):
    store: NoteStore = ctx.obj
    s = store.stats()
    last = s["last_updated"]
    console.print(f"notes: [cyan]{s['total_notes']}[/]  tags: [cyan]{s['total_tags']}[/]")
    console.print(f"last updated: {last.isoformat() if last else '-'}")


@app.command()
def export(ctx: typer.Context, to: Path = typer.Option(..., "--to")):
    store: NoteStore = ctx.obj
    payload = [n.model_dump(mode="json") for n in store.list()]
    try:
        to.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    except OSError as e:
        console.print(f"[red]Cannot write[/] {to}: {e}")
        raise typer.Exit(1)
    console.print(f"[green]Exported[/] {len(payload)} notes → {to}")


@app.command("import")
def import_(ctx: typer.Context, from_: Path = typer.Option(..., "--from")):
    store: NoteStore = ctx.obj
    try:
        data = json.loads(from_.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        console.print(f"[red]Cannot read[/] {from_}: {e}")
        raise typer.Exit(1)
    if not isinstance(data, list):
        console.print(f"[red]Invalid[/]: {from_} must contain a JSON list")
        raise typer.Exit(1)
    with _reported():
        created = store.import_notes(data)
    console.print(f"[green]Imported[/] {len(created)} notes")


@app.command()
def serve(
    ctx: typer.Context,
    host: Optional[str] = typer.Option(None, "--host"),
    port: Optional[int] = typer.Option(None, "--port"),
):
    """Start the web API and UI."""
    store: NoteStore = ctx.obj
    settings = Settings.from_env()
    host = host or settings.host
    port = port or settings.port
    console.print(f"[green]Web server starting on[/] http://{host}:{port}")
    uvicorn.run(create_app(store, settings), host=host, port=port, log_level=settings.log_level.lower())


# ---------- interactive menu ----------
MENU = [
    ("1", "Add new note"),
    ("2", "List all notes"),
    ("3", "View note details"),
    ("4", "Search notes"),
    ("5", "Update note"),
    ("6", "Delete note"),
    ("7", "Start web server"),
    ("8", "Exit"),
]


def _pick(store: NoteStore, verb: str) -> Optional[Note]:
    raw = Prompt.ask(f"Enter note number to {verb}", console=console)
    if not raw.isdigit():
        console.print("[red]Please enter a valid number![/]")
        return None
    try:
        return store.get_by_index(int(raw) - 1)
    except NoteNotFound:
        console.print("[red]Invalid note number![/]")
        return None


def _read_body(prompt: str) -> Optional[str]:
    """Read lines until END; KEEP aborts and returns None."""
    console.print(f"[yellow]{prompt}[/]")
    lines: list[str] = []
    while True:
        line = input()
        if line == "END":
            break
        if line == "KEEP":
            return None
        lines.append(line)
    return "\n".join(lines)


def _menu_add(store: NoteStore) -> None:
    title = Prompt.ask("[green]Title[/]", console=console)
    body = _read_body("Content (type 'END' on a new line to finish):") or ""
    tags = Prompt.ask("Tags (comma separated)", default="", console=console)
    n = store.create(title, body, parse_tags(tags))
    console.print(f"[green]Note added![/] ID: [cyan]{n.id}[/]")


def _menu_search(store: NoteStore) -> None:
    query = Prompt.ask("Search query", console=console)
    _print_notes(store.search(query), f"No notes found matching '{query}'", title=f"Search: {query}")


def _menu_update(store: NoteStore) -> None:
    n = _pick(store, "update")
    if n is None:
        return
    console.print("[blue]Leave a field blank to keep its current value.[/]")
    title = Prompt.ask(f"Title [{n.title}]", default="", show_default=False, console=console)
    console.print(f"[blue]Current content:[/]\n{n.body}")
    body = _read_body("Content ('END' to finish, 'KEEP' to keep current):")
    tags = Prompt.ask(f"Tags [{', '.join(n.tags)}]", default="", show_default=False, console=console)
    update = NoteUpdate(
        title=title or None,
        body=body or None,
        tags=parse_tags(tags) if tags else None,
    )
    store.update(n.id, update)
    console.print("[green]Note updated![/]")


def _menu_delete(store: NoteStore) -> None:
    n = _pick(store, "delete")
    if n is not None:
        store.delete(n.id)
        console.print("[green]Note deleted![/]")


def _menu_view(store: NoteStore) -> None:
    n = _pick(store, "view")
    if n is not None:
        _show(n)


@app.command()
def menu(ctx: typer.Context):
    """Interactive numbered menu."""
    store: NoteStore = ctx.obj
    actions = {
        "1": _menu_add,
        "2": lambda s: _print_notes(s.list(), "No notes found."),
        "3": _menu_view,
        "4": _menu_search,
        "5": _menu_update,
        "6": _menu_delete,
    }
    console.print("[bold magenta]Jotbook[/]")
    while True:
        console.print("\n[bold cyan]Available commands:[/]")
        for key, label in MENU:
            console.print(f"  [green]{key}[/] - {label}")
        try:
            choice = Prompt.ask("Enter your choice", console=console).strip()
            if choice == "7":
                serve(ctx, host=None, port=None)
                return
            if choice == "8":
                break
            action = actions.get(choice)
            if action is None:
                console.print("[red]Invalid choice! Please enter a number between 1 and 8.[/]")
                continue
            action(store)
        except EOFError:
            # stdin closed: same as choosing Exit
            break
        except (NoteNotFound, NoteValidationError, StorageError) as e:
            console.print(f"[red]Error:[/] {e}")
    console.print("\n[magenta]Goodbye![/]")


def main():
    app()


if __name__ == "__main__":
    main()
