"""
CodeSage CLI - command-line interface for CodeSage.

Runs the API server and drives an analysis session from the terminal.
"""

import asyncio
from pathlib import Path
from typing import Optional

import httpx
import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from codesage.api.schemas import ChatMessageResponse, CodeAnalysisResponse
from codesage.client import ApiError, CodeSageClient, Notification, SessionController
from codesage.logging_config import setup_logging

app = typer.Typer(
    name="codesage",
    help="CodeSage - AI-assisted Python code explanation and review",
    no_args_is_help=True,
)

console = Console()

SEVERITY_STYLES = {"error": "bold red", "warning": "yellow", "info": "cyan"}

SERVER_OPTION = typer.Option(
    "http://localhost:8000", "--server", envvar="CODESAGE_SERVER", help="API base URL"
)


def _init_logging() -> None:
    try:
        setup_logging(context="cli")
    except PermissionError:
        import logging

        logging.basicConfig(level=logging.INFO)


def _print_notification(notification: Notification) -> None:
    style = "red" if notification.destructive else "green"
    prefix = "✗" if notification.destructive else "✓"
    console.print(f"[{style}]{prefix} {notification.title}[/{style}]")
    if notification.description:
        console.print(f"  {notification.description}")


def _render_analysis(analysis: CodeAnalysisResponse) -> None:
    title = analysis.filename or f"analysis #{analysis.id}"
    console.print(f"\n[bold blue]Analysis #{analysis.id}[/bold blue] ({title})")

    if analysis.explanation and analysis.explanation.line_ranges:
        sections = Table(title="Explanation", show_lines=True)
        sections.add_column("Lines", style="cyan", no_wrap=True)
        sections.add_column("Section", style="bold")
        sections.add_column("Explanation")
        for line_range in analysis.explanation.line_ranges:
            lines = (
                str(line_range.start)
                if line_range.start == line_range.end
                else f"{line_range.start}-{line_range.end}"
            )
            sections.add_row(lines, line_range.title, line_range.explanation)
        console.print(sections)

    if not analysis.issues:
        console.print("[green]No issues found.[/green]")
        return

    issues = Table(title="Issues", show_lines=True)
    issues.add_column("Line", justify="right")
    issues.add_column("Severity")
    issues.add_column("Type")
    issues.add_column("Description")
    issues.add_column("Suggestion")
    for issue in analysis.issues:
        style = SEVERITY_STYLES.get(issue.severity, "")
        issues.add_row(
            str(issue.line),
            f"[{style}]{issue.severity}[/{style}]",
            issue.type,
            issue.description,
            issue.suggestion,
        )
    console.print(issues)


def _render_thread(messages: list[ChatMessageResponse]) -> None:
    if not messages:
        console.print("[dim]No messages yet.[/dim]")
        return
    for message in messages:
        console.print(Panel(message.message, title="You", title_align="left"))
        console.print(
            Panel(message.response, title="CodeSage", title_align="left", style="green")
        )


@app.command()
def serve(
    host: str = typer.Option("0.0.0.0", help="Host to bind to"),
    port: int = typer.Option(8000, help="Port to bind to"),
    reload: bool = typer.Option(False, help="Enable auto-reload"),
) -> None:
    """
    Start the FastAPI server.
    """
    import uvicorn

    console.print("[bold green]Starting CodeSage API server...[/bold green]")
    console.print(f"  Host: {host}")
    console.print(f"  Port: {port}")
    console.print(f"  Reload: {reload}")
    console.print(f"\n  API docs: http://{host}:{port}/docs")

    uvicorn.run(
        "codesage.api.app:app",
        host=host,
        port=port,
        reload=reload,
    )


@app.command()
def analyze(
    path: Path = typer.Argument(..., help="Python file to analyze"),
    question: Optional[str] = typer.Option(
        None, "--ask", "-q", help="Follow-up question to ask after the analysis"
    ),
    server: str = SERVER_OPTION,
) -> None:
    """
    Upload a Python file, analyze it and print the explanation and issues.
    """
    _init_logging()

    async def run() -> bool:
        async with CodeSageClient(server) as client:
            session = SessionController(client, notify=_print_notification)
            if await session.upload_path(path) is None:
                return False

            with console.status("Analyzing..."):
                analysis = await session.analyze()
            if analysis is None:
                return False
            _render_analysis(analysis)

            if question:
                with console.status("Thinking..."):
                    sent = await session.send_message(question)
                if sent is None:
                    return False
                _render_thread(session.chat_messages)
            return True

    if not asyncio.run(run()):
        raise typer.Exit(1)


@app.command()
def ask(
    analysis_id: int = typer.Argument(..., help="Analysis id"),
    question: str = typer.Argument(..., help="Question about the analyzed code"),
    server: str = SERVER_OPTION,
) -> None:
    """
    Ask a follow-up question about an existing analysis.
    """
    _init_logging()

    async def run() -> bool:
        async with CodeSageClient(server) as client:
            session = SessionController(client, notify=_print_notification)
            await session.set_active_analysis(analysis_id)
            with console.status("Thinking..."):
                sent = await session.send_message(question)
            if sent is None:
                return False
            _render_thread(session.chat_messages)
            return True

    if not asyncio.run(run()):
        raise typer.Exit(1)


@app.command()
def history(
    analysis_id: int = typer.Argument(..., help="Analysis id"),
    server: str = SERVER_OPTION,
) -> None:
    """
    Show an analysis and its chat thread.
    """
    _init_logging()

    async def run() -> bool:
        async with CodeSageClient(server) as client:
            session = SessionController(client, notify=_print_notification)
            try:
                analysis = await client.get_analysis(analysis_id)
            except (ApiError, httpx.HTTPError) as e:
                _print_notification(
                    Notification("Failed to load analysis", str(e), destructive=True)
                )
                return False
            _render_analysis(analysis)
            await session.set_active_analysis(analysis_id)
            _render_thread(session.chat_messages)
            return session.history.error is None

    if not asyncio.run(run()):
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
