"""
CLI Interface - Interactive command-line study assistant.

This module provides a terminal interface for the Textbook Tutor. It supports:
- Uploading PDF textbooks (/upload)
- Free-form questions about the uploaded books
- Study guide generation (/guide)
- Learning style, level and answer options (/style, /level, /examples, ...)
- Help and commands (/help)

Run with:
    python -m textbook_tutor
"""

import logging
from dataclasses import replace
from pathlib import Path

from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table

from textbook_tutor.config import (
    AVAILABLE_GROQ_MODELS,
    COMPLEXITY_LEVELS,
    GROQ_MODEL,
    LEARNING_STYLES,
)
from textbook_tutor.errors import TutorError
from textbook_tutor.logging_utils import configure_logging
from textbook_tutor.rag.pipeline import StudyPipeline
from textbook_tutor.session import Credentials, StudySession

logger = logging.getLogger(__name__)

console = Console()

# Toggle commands and the Preferences field each one flips
TOGGLES = {
    "examples": "include_examples",
    "analogies": "include_analogies",
    "questions": "include_questions",
}


def print_welcome():
    """Print welcome message and instructions."""
    welcome_text = """
[bold blue]Welcome to Textbook Tutor![/bold blue]

Upload a PDF textbook, then ask questions about it or ask for a study guide.

• [cyan]/upload <path.pdf> [more.pdf ...][/cyan] - load your textbook(s)
• [cyan]/guide <topic>[/cyan] - create a study guide
• [cyan]/style[/cyan], [cyan]/level[/cyan] - tailor answers to how you learn

[dim]Type /help for all commands[/dim]
"""
    console.print(Panel(welcome_text, border_style="blue"))


def print_help():
    """Print help message with available commands."""
    table = Table(title="Available Commands", show_header=True, header_style="bold cyan")
    table.add_column("Command", style="cyan")
    table.add_column("Description", style="white")
    table.add_column("Example", style="dim")

    commands = [
        ("(any question)", "Ask about your textbook", "What is osmosis?"),
        ("/upload <pdf> [...]", "Process one or more PDFs", "/upload biology.pdf"),
        ("/guide <topic>", "Generate a study guide", "/guide Photosynthesis"),
        ("/style <name>", f"Learning style ({', '.join(LEARNING_STYLES)})", "/style Visual"),
        ("/level <name>", f"Complexity ({', '.join(COMPLEXITY_LEVELS)})", "/level Beginner"),
        ("/model [name]", "Show or pick the Groq model", "/model llama-3.3-70b-versatile"),
        ("/examples", "Toggle worked examples", "/examples"),
        ("/analogies", "Toggle analogies", "/analogies"),
        ("/questions", "Toggle practice questions", "/questions"),
        ("/settings", "Show current preferences", "/settings"),
        ("/files", "Show uploaded files", "/files"),
        ("/clear", "Clear the screen", "/clear"),
        ("/help", "Show this help message", "/help"),
        ("/exit", "Exit the tutor", "/exit"),
    ]

    for cmd, desc, example in commands:
        table.add_row(cmd, desc, example)

    console.print(table)


def parse_command(user_input: str) -> tuple[str, list[str]]:
    """
    Parse user input into command and arguments.

    Returns:
        Tuple of (command, arguments)
        For regular questions, command is 'ask'
    """
    user_input = user_input.strip()

    if not user_input:
        return ("empty", [])

    if user_input.startswith("/"):
        parts = user_input[1:].split(maxsplit=1)
        command = parts[0].lower()
        args = parts[1].split() if len(parts) > 1 else []
        return (command, args)

    return ("ask", [user_input])


def _match_option(value: str, options: list[str]) -> str | None:
    """Case-insensitive lookup of a preference value."""
    for option in options:
        if option.lower() == value.lower():
            return option
    return None


def handle_upload(pipeline: StudyPipeline, session: StudySession, args: list[str]):
    """Handle /upload command."""
    if not args:
        console.print("[yellow]Usage: /upload <path.pdf> [more.pdf ...][/yellow]")
        return

    files = []
    for arg in args:
        path = Path(arg).expanduser()
        if not path.is_file():
            console.print(f"[red]File not found: {path}[/red]")
            return
        files.append((path.name, path.read_bytes()))

    with console.status("[bold green]Reading, chunking and embedding...", spinner="dots"):
        result = pipeline.process_documents(session, files)

    console.print(
        f"[green]✓ Processed {len(files)} file(s) into {result.chunk_count} chunks[/green]"
    )


def handle_preference(session: StudySession, command: str, args: list[str]):
    """Handle /style and /level commands."""
    field_name, options = {
        "style": ("learning_style", LEARNING_STYLES),
        "level": ("complexity_level", COMPLEXITY_LEVELS),
    }[command]

    value = _match_option(" ".join(args), options) if args else None
    if value is None:
        console.print(f"[yellow]Usage: /{command} <{' | '.join(options)}>[/yellow]")
        return

    session.preferences = replace(session.preferences, **{field_name: value})
    console.print(f"[green]{field_name.replace('_', ' ').capitalize()} set to {value}[/green]")


def handle_toggle(session: StudySession, command: str):
    """Handle /examples, /analogies and /questions."""
    field_name = TOGGLES[command]
    enabled = not getattr(session.preferences, field_name)
    session.preferences = replace(session.preferences, **{field_name: enabled})
    console.print(f"[green]{command.capitalize()} {'on' if enabled else 'off'}[/green]")


def handle_model(session: StudySession, credentials: Credentials, args: list[str]):
    """Handle /model command."""
    if credentials.provider != "groq":
        console.print(f"[yellow]Model selection is only available for Groq (provider: {credentials.provider})[/yellow]")
        return

    if not args:
        current = session.model_name or GROQ_MODEL
        for name in AVAILABLE_GROQ_MODELS:
            marker = "[green]●[/green]" if name == current else " "
            console.print(f"  {marker} {name}")
        return

    value = _match_option(args[0], AVAILABLE_GROQ_MODELS)
    if value is None:
        console.print(f"[yellow]Unknown model. Choose from: {', '.join(AVAILABLE_GROQ_MODELS)}[/yellow]")
        return

    session.model_name = value
    console.print(f"[green]Model set to {value}[/green]")


def handle_settings(session: StudySession, credentials: Credentials):
    """Handle /settings command."""
    prefs = session.preferences

    table = Table(title="Current Settings", show_header=True, header_style="bold cyan")
    table.add_column("Setting", style="white")
    table.add_column("Value", style="green")

    table.add_row("Learning style", prefs.learning_style)
    table.add_row("Complexity level", prefs.complexity_level)
    table.add_row("Examples", "on" if prefs.include_examples else "off")
    table.add_row("Analogies", "on" if prefs.include_analogies else "off")
    table.add_row("Practice questions", "on" if prefs.include_questions else "off")
    table.add_row("LLM provider", credentials.provider)
    table.add_row("Model", session.model_name or "(provider default)")
    table.add_row("Index", session.index_location or "(none yet)")

    console.print(table)


def handle_files(session: StudySession):
    """Handle /files command."""
    if session.uploaded_files:
        console.print("\n[bold]Uploaded files:[/bold]")
        for name in session.uploaded_files:
            console.print(f"  • {name}")
    else:
        console.print("[yellow]No files uploaded yet. Use /upload <path.pdf>[/yellow]")


def show_answer(title: str, answer: str):
    console.print(f"\n[bold green]{title}[/bold green]")
    console.print(Markdown(answer))


def main():
    """Main CLI loop."""
    configure_logging("WARNING")
    print_welcome()

    session = StudySession()
    credentials = Credentials.from_config()
    if credentials.provider == "groq" and not credentials.api_key:
        console.print("[yellow]⚠️  GROQ_API_KEY is not set; answers will fail until it is.[/yellow]")

    pipeline = StudyPipeline()
    console.print()

    while True:
        try:
            user_input = Prompt.ask("[bold cyan]You[/bold cyan]")
            command, args = parse_command(user_input)

            if command == "empty":
                continue

            elif command in ("exit", "quit"):
                console.print("\n[bold blue]Goodbye! Happy studying! 📚[/bold blue]")
                break

            elif command == "help":
                print_help()

            elif command == "clear":
                console.clear()
                print_welcome()

            elif command == "upload":
                handle_upload(pipeline, session, args)

            elif command in ("style", "level"):
                handle_preference(session, command, args)

            elif command == "model":
                handle_model(session, credentials, args)

            elif command in TOGGLES:
                handle_toggle(session, command)

            elif command == "settings":
                handle_settings(session, credentials)

            elif command == "files":
                handle_files(session)

            elif command == "guide":
                if not args:
                    console.print("[yellow]Usage: /guide <topic>[/yellow]")
                    continue
                topic = " ".join(args)
                with console.status("[bold green]Writing study guide...", spinner="dots"):
                    guide = pipeline.study_guide(session, topic, credentials)
                show_answer(f"📝 Study guide: {topic}", guide)

            elif command == "ask":
                with console.status("[bold green]Thinking...", spinner="dots"):
                    answer = pipeline.ask(session, args[0], credentials)
                show_answer("🎓 Tutor:", answer)

            else:
                console.print(f"[yellow]Unknown command /{command}. Type /help for commands.[/yellow]")

            console.print()

        except KeyboardInterrupt:
            console.print("\n\n[bold blue]Goodbye! Happy studying! 📚[/bold blue]")
            break
        except TutorError as e:
            console.print(f"[red]{e}[/red]")
        except Exception as e:
            logger.debug("Command failed", exc_info=True)
            console.print(f"[red]Error: {e}[/red]")
            console.print("[dim]Type /help for available commands[/dim]")


if __name__ == "__main__":
    main()
