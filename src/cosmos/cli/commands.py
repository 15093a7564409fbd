"""CLI commands for Cosmos Reader.

Commands:
- add-text / add-pdf: add books to the library
- books / read / goto: browse and navigate
- keywords / glossary / click: vocabulary discovery
- achievements / leaderboard: gamification
- ask: reading assistant
- serve: run the Web API

Every command acts on behalf of the user given by --user or COSMOS_USER.
"""

import os
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table
from rich.text import Text

from cosmos.config import load_app_config
from cosmos.core.achievements import evaluate, load_counts, sync_unlocked_achievements
from cosmos.core.assistant import (
    AssistantError,
    EmptyMessageError,
    ReadingAssistant,
    book_context,
)
from cosmos.core.book_importer import BookImportError, add_pdf_book, add_text_book
from cosmos.core.glossary import highlight_terms, list_entries, lookup, record_term_click
from cosmos.core.keywords import STRATEGIES, get_extractor
from cosmos.core.leaderboard import BOARDS, UnknownBoardError, load_leaderboard
from cosmos.core.pagination import get_page, progress_percent, total_pages_for
from cosmos.core.pdf_extractor import PdfExtractionError
from cosmos.core.progress import ProgressTracker
from cosmos.core.session import Session, SessionStore, bind_log_context
from cosmos.db import books_repository, init_db
from cosmos.db.books_repository import BookRecord
from cosmos.db.database import get_db_path
from cosmos.llm.client import LLMClient

app = typer.Typer(
    name="cosmos",
    help="Astronomy reading library with glossary, keywords and achievements.",
    no_args_is_help=True,
)

console = Console()


@app.callback()
def main(
    ctx: typer.Context,
    user: str | None = typer.Option(
        None, "--user", "-u", envvar="COSMOS_USER", help="User id to act as"
    ),
    db: str | None = typer.Option(
        None, "--db", envvar="COSMOS_DB", help="SQLite database path"
    ),
) -> None:
    """Open the database and bind the session for all commands."""
    init_db(Path(db or load_app_config().reader.db_path))

    store = SessionStore()
    store.subscribe(bind_log_context)
    if user:
        store.set_session(Session(user_id=user))
    ctx.call_on_close(store.clear)
    ctx.obj = store


def _session_or_exit(ctx: typer.Context) -> Session:
    """Session bound by the callback, or exit when no user was given."""
    store: SessionStore = ctx.obj
    if not store.is_authenticated:
        console.print("[red]✗ No user given. Pass --user or set COSMOS_USER.[/red]")
        raise typer.Exit(code=1)
    return store.session


def _resolve_book_or_exit(session: Session, book_id_prefix: str) -> BookRecord:
    """Resolve a book id prefix among the user's books, or exit."""
    books = books_repository.list_books(session.user_id)
    matches = [b for b in books if b.id == book_id_prefix]
    if not matches:
        matches = [b for b in books if b.id.startswith(book_id_prefix)]

    if not matches:
        console.print(f"[red]✗ Book not found: {book_id_prefix}[/red]")
        if books:
            console.print("\nAvailable books:")
            for b in books:
                console.print(f"  - {b.id[:8]}  {b.title}")
        raise typer.Exit(code=1)
    if len(matches) > 1:
        console.print(f"[red]✗ Ambiguous book id '{book_id_prefix}':[/red]")
        for b in matches:
            console.print(f"  - {b.id}  {b.title}")
        raise typer.Exit(code=1)
    return matches[0]


def _client(provider: str | None, model: str | None) -> LLMClient:
    return LLMClient(provider=provider, model=model)


def _truncate(text: str, max_len: int = 80) -> str:
    """Truncate text with ellipsis if too long."""
    if len(text) <= max_len:
        return text
    return text[:max_len - 3] + "..."


def _report_unlocked(user_id: str) -> None:
    added, _ = sync_unlocked_achievements(user_id)
    for badge in added:
        console.print(f"[magenta]★ Achievement unlocked: {badge}[/magenta]")


# =============================================================================
# LIBRARY
# =============================================================================


@app.command(name="add-text")
def add_text(
    ctx: typer.Context,
    title: str = typer.Argument(..., help="Book title"),
    file: str | None = typer.Option(
        None, "--file", "-f", help="Read content from a text file"
    ),
    content: str | None = typer.Option(None, "--content", "-c", help="Inline content"),
    author: str | None = typer.Option(None, "--author", "-a", help="Author"),
    pages: int | None = typer.Option(None, "--pages", help="Override page estimate"),
) -> None:
    """Add a text book from a file or inline content."""
    session = _session_or_exit(ctx)
    if file:
        path = Path(file).expanduser()
        if not path.exists():
            console.print(f"[red]✗ File not found: {path}[/red]")
            raise typer.Exit(code=1)
        content = path.read_text(encoding="utf-8")

    try:
        book = add_text_book(
            session, title=title, content=content or "", author=author, total_pages=pages
        )
    except BookImportError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(code=1)

    console.print(f"[green]✓ Added '{book.title}'[/green]")
    console.print(f"  [dim]book_id:[/dim] {book.id}")
    console.print(f"  [dim]pages:[/dim]   {total_pages_for(book)}")
    _report_unlocked(session.user_id)


@app.command(name="add-pdf")
def add_pdf(
    ctx: typer.Context,
    file: str = typer.Argument(..., help="Path to PDF file"),
    title: str | None = typer.Option(None, "--title", "-t", help="Book title"),
    author: str | None = typer.Option(None, "--author", "-a", help="Author"),
    pages: int | None = typer.Option(None, "--pages", help="Override page count"),
) -> None:
    """Add a PDF book to the library."""
    session = _session_or_exit(ctx)
    file_path = Path(file).expanduser().resolve()

    try:
        book = add_pdf_book(
            session, title=title, file_path=file_path, author=author, total_pages=pages
        )
    except (BookImportError, PdfExtractionError, FileNotFoundError) as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(code=1)

    console.print(f"[green]✓ Added '{book.title}'[/green]")
    console.print(f"  [dim]book_id:[/dim] {book.id}")
    console.print(f"  [dim]file:[/dim]    {book.file_url}")
    console.print(f"  [dim]pages:[/dim]   {book.total_pages}")
    _report_unlocked(session.user_id)


@app.command()
def books(ctx: typer.Context) -> None:
    """List your books with reading progress."""
    session = _session_or_exit(ctx)
    records = books_repository.list_books(session.user_id)
    if not records:
        console.print("[yellow]No books yet. Use add-text or add-pdf.[/yellow]")
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("ID", style="cyan", width=10)
    table.add_column("Title", width=40)
    table.add_column("Type", justify="center", width=6)
    table.add_column("Progress", justify="right", width=14)

    for book in records:
        tracker = ProgressTracker.load(session.user_id, book.id, total_pages_for(book))
        percent = progress_percent(tracker.pages_read, tracker.total_pages)
        table.add_row(
            book.id[:8],
            _truncate(book.title, 40),
            book.book_type,
            f"{tracker.pages_read}/{tracker.total_pages} ({percent:.0f}%)",
        )

    console.print(table)


def _print_page(book: BookRecord, tracker: ProgressTracker) -> None:
    console.print(
        f"[bold]{book.title}[/bold] [dim]page {tracker.current_page}/{tracker.total_pages}[/dim]"
    )
    text = get_page(book, tracker.current_page)
    if text is None:
        console.print("[dim]PDF book: open the file in a viewer.[/dim]")
        console.print(f"  [dim]file:[/dim] {book.file_url}")
        return

    rendered = Text()
    for segment in highlight_terms(text):
        if segment.is_term:
            rendered.append(segment.text, style="bold cyan" if segment.entry else "cyan")
        else:
            rendered.append(segment.text)
    console.print(rendered)


@app.command()
def read(
    ctx: typer.Context,
    book_id: str = typer.Argument(..., help="Book ID or unique prefix"),
) -> None:
    """Show the current page of a book."""
    session = _session_or_exit(ctx)
    book = _resolve_book_or_exit(session, book_id)
    tracker = ProgressTracker.load(session.user_id, book.id, total_pages_for(book))
    _print_page(book, tracker)


@app.command()
def goto(
    ctx: typer.Context,
    book_id: str = typer.Argument(..., help="Book ID or unique prefix"),
    page: int = typer.Argument(..., help="Page number (1-based)"),
) -> None:
    """Move to a page and record progress."""
    session = _session_or_exit(ctx)
    book = _resolve_book_or_exit(session, book_id)
    tracker = ProgressTracker.load(session.user_id, book.id, total_pages_for(book))

    if not tracker.go_to_page(page):
        console.print(
            f"[red]✗ Page {page} is out of range (1-{tracker.total_pages})[/red]"
        )
        raise typer.Exit(code=1)

    if tracker.last_write_ok is False:
        console.print("[yellow]⚠ Progress could not be saved[/yellow]")
    _print_page(book, tracker)


# =============================================================================
# VOCABULARY
# =============================================================================


@app.command()
def keywords(
    ctx: typer.Context,
    strategy: str = typer.Option(
        "frequency", "--strategy", "-s", help=f"One of: {', '.join(STRATEGIES)}"
    ),
    provider: str | None = typer.Option(
        None, "--provider", help="LLM provider for the ai strategy"
    ),
    model: str | None = typer.Option(None, "--model", help="LLM model for the ai strategy"),
) -> None:
    """Extract keywords from your books."""
    session = _session_or_exit(ctx)
    client = _client(provider, model) if strategy == "ai" else None

    try:
        extractor = get_extractor(strategy, client=client)
    except ValueError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(code=1)

    found = extractor.extract(books_repository.list_books(session.user_id))
    if not found:
        console.print("[yellow]No keywords found.[/yellow]")
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("Keyword", style="cyan", width=20)
    table.add_column("Category", width=14)
    table.add_column("Definition", width=60)
    for kw in found:
        entry = lookup(kw.keyword)
        definition = kw.definition or (entry.definition if entry else "")
        category = kw.category or (entry.category if entry else "")
        table.add_row(kw.keyword, category, _truncate(definition, 60))

    console.print(table)
    console.print(f"[dim]{len(found)} keywords ({strategy})[/dim]")


@app.command()
def glossary(
    term: str | None = typer.Argument(None, help="Term to look up"),
) -> None:
    """Look up a term, or list the whole glossary."""
    if term is None:
        for entry in list_entries():
            console.print(f"[bold cyan]{entry.term}[/bold cyan] [dim]({entry.category})[/dim]")
            console.print(f"  {entry.definition}")
        return

    entry = lookup(term)
    if entry is None:
        console.print(term, markup=False)
        console.print("  [dim]No glossary entry.[/dim]")
        return

    console.print(f"[bold cyan]{entry.term}[/bold cyan] [dim]({entry.category})[/dim]")
    console.print(f"  {entry.definition}")
    for url in entry.media:
        console.print(f"  [dim]media:[/dim] {url}")


@app.command()
def click(
    ctx: typer.Context,
    term: str = typer.Argument(..., help="Term that was opened"),
) -> None:
    """Record a glossary interaction."""
    session = _session_or_exit(ctx)
    result = record_term_click(session.user_id, term)
    console.print(f"[green]✓ Counted '{result.term}'[/green] [dim]{', '.join(result.counters)}[/dim]")
    _report_unlocked(session.user_id)


# =============================================================================
# GAMIFICATION
# =============================================================================


@app.command()
def achievements(ctx: typer.Context) -> None:
    """Show your badges."""
    session = _session_or_exit(ctx)
    statuses = evaluate(load_counts(session.user_id))
    sync_unlocked_achievements(session.user_id)

    table = Table(show_header=True, header_style="bold")
    table.add_column("Badge", style="cyan", width=22)
    table.add_column("Status", justify="center", width=8)
    table.add_column("Progress", justify="right", width=10)
    table.add_column("Description", width=50)

    for s in statuses:
        table.add_row(
            s.title,
            "[green]✓[/green]" if s.earned else "[dim]·[/dim]",
            f"{min(s.progress, s.target)}/{s.target}",
            s.description,
        )

    console.print(table)
    earned = sum(1 for s in statuses if s.earned)
    console.print(f"[dim]{earned}/{len(statuses)} earned[/dim]")


@app.command()
def leaderboard(
    ctx: typer.Context,
    board: str = typer.Argument("global", help=f"One of: {', '.join(BOARDS)}"),
) -> None:
    """Show a leaderboard."""
    session = _session_or_exit(ctx)
    try:
        entries = load_leaderboard(board, viewer=session)
    except UnknownBoardError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(code=1)

    if not entries:
        console.print("[yellow]No entries yet.[/yellow]")
        return

    table = Table(show_header=True, header_style="bold", title=board)
    table.add_column("#", justify="right", width=4)
    table.add_column("User", width=24)
    table.add_column("Score", justify="right", width=8)
    for e in entries:
        style = "bold green" if e.user_id == session.user_id else None
        table.add_row(str(e.rank), e.display_name, str(e.score), style=style)

    console.print(table)


# =============================================================================
# ASSISTANT & SERVER
# =============================================================================


@app.command()
def ask(
    ctx: typer.Context,
    message: str = typer.Argument(..., help="Question for the assistant"),
    book_id: str | None = typer.Option(
        None, "--book", "-b", help="Book ID or prefix to use as context"
    ),
    provider: str | None = typer.Option(None, "--provider", help="LLM provider"),
    model: str | None = typer.Option(None, "--model", help="LLM model"),
) -> None:
    """Ask the reading assistant a question.

    Requires an LLM server (LM Studio by default) to be running.
    """
    session = _session_or_exit(ctx)
    context = None
    if book_id:
        book = _resolve_book_or_exit(session, book_id)
        tracker = ProgressTracker.load(session.user_id, book.id, total_pages_for(book))
        context = book_context(book, tracker.current_page, tracker.total_pages)

    assistant = ReadingAssistant(_client(provider, model))
    try:
        for chunk in assistant.stream(message, context=context):
            console.print(chunk, end="", markup=False)
        console.print()
    except EmptyMessageError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(code=1)
    except AssistantError as e:
        console.print(f"\n[red]✗ Assistant unavailable: {e}[/red]")
        raise typer.Exit(code=1)


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", "--host", help="Bind address"),
    port: int = typer.Option(8000, "--port", "-p", help="Port"),
    reload: bool = typer.Option(False, "--reload", help="Reload on code changes"),
) -> None:
    """Run the Web API with uvicorn."""
    import uvicorn

    os.environ["COSMOS_DB"] = str(get_db_path())
    console.print(f"[blue]Serving Cosmos Reader API on http://{host}:{port}[/blue]")
    uvicorn.run("cosmos.web.api:app", host=host, port=port, reload=reload)


if __name__ == "__main__":
    app()
