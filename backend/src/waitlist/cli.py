"""Command-line interface for the MubXpress waitlist."""

import asyncio
import json
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from waitlist.errors import DuplicateEmailError, SubmissionWriteError
from waitlist.logging_config import configure_logging, get_logger
from waitlist.referral.codes import build_referral_link, generate_referral_code
from waitlist.referral.feed import LeaderboardFeed
from waitlist.referral.guard import DuplicateCheck, DuplicateEmailGuard
from waitlist.referral.leaderboard import filter_entries, summarize
from waitlist.session import file_session
from waitlist.settings import settings
from waitlist.signup.service import WaitlistService
from waitlist.submissions.client import SubmissionClient

# Configure logging
configure_logging()
logger = get_logger(__name__)

# Create Typer app
app = typer.Typer(
    name="waitlist",
    help="MubXpress waitlist - referral leaderboard and signups",
    no_args_is_help=True,
)

# Rich console for pretty output
console = Console()

RANK_BADGES = {1: "👑", 2: "🥈", 3: "🥉"}


def _client() -> SubmissionClient:
    return SubmissionClient()


def _require_email(email: str) -> str:
    email = email.strip()
    if "@" not in email:
        console.print(f"[red]Not an email address: {email}[/red]")
        raise typer.Exit(1)
    return email


@app.command("leaderboard")
def show_leaderboard(
    search: Annotated[str, typer.Option("--search", "-s", help="Filter by name, email or code")] = "",
    as_json: Annotated[bool, typer.Option("--json", help="Print entries as JSON")] = False,
) -> None:
    """Fetch submissions and show the referral leaderboard."""
    feed = LeaderboardFeed(_client())
    snapshot = asyncio.run(feed.refresh())

    if not snapshot.ok:
        console.print(f"[bold red]✗[/bold red] {snapshot.error}")
        raise typer.Exit(1)

    entries = filter_entries(snapshot.entries, search)

    if as_json:
        typer.echo(json.dumps([entry.to_dict() for entry in entries], indent=2))
        return

    if not snapshot.entries:
        console.print("[yellow]No referrals yet. Be the first to share and climb the leaderboard![/yellow]")
        return

    if not entries:
        console.print(f"[yellow]No participants match '{search}'[/yellow]")
        return

    table = Table(title="Referral Leaderboard")
    table.add_column("Rank", justify="right", style="cyan")
    table.add_column("Name", style="green")
    table.add_column("Email")
    table.add_column("Code", style="magenta")
    table.add_column("Referrals", justify="right", style="bold")

    for entry in entries:
        label = "referral" if entry.referral_count == 1 else "referrals"
        table.add_row(
            RANK_BADGES.get(entry.rank, f"#{entry.rank}"),
            entry.name,
            entry.email,
            entry.referral_code,
            f"{entry.referral_count} {label}",
        )

    console.print(table)

    stats = summarize(snapshot.entries)
    console.print(
        f"  Participants: {stats.participants}  "
        f"Referrals: {stats.total_referrals}"
    )


@app.command("code")
def make_code(
    email: Annotated[str, typer.Argument(help="Email to derive the code from")],
) -> None:
    """Generate a referral code (not stored anywhere)."""
    code = generate_referral_code(_require_email(email))
    console.print(f"[bold]Code:[/bold] {code}")
    console.print(f"[bold]Link:[/bold] {build_referral_link(code)}")


@app.command("check-email")
def check_email(
    email: Annotated[str, typer.Argument(help="Email to check")],
) -> None:
    """Check whether an email already joined the waitlist."""
    guard = DuplicateEmailGuard(_client())
    result = asyncio.run(guard.check(_require_email(email)))

    if result is DuplicateCheck.DUPLICATE:
        console.print(f"[bold red]✗[/bold red] {email} has already joined the waitlist")
        raise typer.Exit(1)
    if result is DuplicateCheck.CHECK_FAILED:
        console.print("[yellow]Could not reach the form service; signup would be allowed[/yellow]")
        return

    console.print(f"[bold green]✓[/bold green] {email} has not joined yet")


@app.command("ref")
def referral(
    code: Annotated[str, typer.Argument(help="Attribution code from a ?ref= link")] = "",
    clear: Annotated[bool, typer.Option("--clear", help="Forget the stored code")] = False,
) -> None:
    """Set, show or clear the stored referral attribution."""
    session = file_session(settings.state_dir)

    if clear:
        session.clear_referral()
        console.print("[bold green]✓[/bold green] Referral attribution cleared")
        return

    referred_by = session.capture_referral(code)
    if referred_by:
        console.print(f"[bold]Referred by:[/bold] {referred_by}")
    else:
        console.print("[yellow]No referral attribution stored[/yellow]")


@app.command("join")
def join(
    name: Annotated[str, typer.Option("--name", "-n", help="Your name")],
    email: Annotated[str, typer.Option("--email", "-e", help="Your email")],
    ref: Annotated[str, typer.Option("--ref", "-r", help="Referral code (defaults to stored attribution)")] = "",
) -> None:
    """Join the waitlist."""
    if not name.strip():
        console.print("[red]Name is required[/red]")
        raise typer.Exit(1)

    session = file_session(settings.state_dir)
    referred_by = session.capture_referral(ref)
    service = WaitlistService(_client())

    try:
        summary = asyncio.run(
            service.join(session, name=name, email=_require_email(email), referred_by=referred_by)
        )
    except DuplicateEmailError as e:
        console.print(f"[bold red]✗[/bold red] {e}")
        raise typer.Exit(1)
    except SubmissionWriteError as e:
        console.print(f"[bold red]✗[/bold red] Signup failed: {e}")
        raise typer.Exit(1)

    console.print("[bold green]✓[/bold green] You're on the list!")
    _print_summary(summary)


@app.command("summary")
def show_summary() -> None:
    """Show the last signup's referral code and share link."""
    summary = file_session(settings.state_dir).signup_summary()
    if summary is None:
        console.print("[yellow]No signup found. Run 'waitlist join' first.[/yellow]")
        raise typer.Exit(1)
    _print_summary(summary)


def _print_summary(summary) -> None:
    if summary.name:
        console.print(f"  Welcome, [bold]{summary.name}[/bold]!")
    if summary.email:
        console.print(f"  Email: {summary.email}")
    console.print(f"  Referral code: [bold magenta]{summary.referral_code}[/bold magenta]")
    console.print(f"  Share link: {summary.referral_link}")


if __name__ == "__main__":
    app()
