"""Rich-based console reporter for the migration commands.

Everything printed here comes from report metadata (ids, paths, env var
names, lengths). Secret values are never passed to this module.
"""

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .schemas import BatchSummary, MigrationFileReport


class MigrationLogger:
    """Rich-based logger for migration progress and results.

    Example:
        >>> logger = MigrationLogger()
        >>> logger.start(dry_run=True)
        >>> logger.summary(summarize(reports))
        >>> logger.show_reports(reports)
        >>> logger.dry_run_hint(summary)
    """

    def __init__(self, console: Console | None = None, verbose: bool = False) -> None:
        """Initialize the MigrationLogger.

        Args:
            console: Optional Rich Console instance. Creates new one if not provided.
            verbose: If True, show per-secret actions.
        """
        self.console = console or Console()
        self.verbose = verbose

    def start(self, dry_run: bool) -> None:
        """Display the migration header."""
        self.console.print()
        if dry_run:
            self.console.print(
                Panel.fit(
                    "[bold yellow]OpenClaw migration (dry-run)[/bold yellow]\n"
                    "[dim]No secrets were written and no files were modified.[/dim]",
                    border_style="yellow",
                )
            )
        else:
            self.console.print(
                Panel.fit(
                    "[bold green]OpenClaw migration (apply)[/bold green]",
                    border_style="green",
                )
            )

    def summary(self, summary: BatchSummary) -> None:
        """Display batch counts."""
        plural = "" if summary.files_scanned == 1 else "s"
        self.console.print(
            f"[dim]Scanned: {summary.files_scanned} auth store file{plural}[/dim]"
        )
        self.console.print(f"[dim]Files changed: {summary.files_changed}[/dim]")
        self.console.print(f"[dim]Secrets migrated: {summary.secrets_migrated}[/dim]")
        if summary.files_failed:
            self.console.print(f"[red]Files failed: {summary.files_failed}[/red]")
        if summary.files_scanned == 0:
            self.console.print("[yellow]No auth-profiles.json files found.[/yellow]")

    def show_reports(self, reports: list[MigrationFileReport]) -> None:
        """Display per-file failures, and per-secret changes when verbose.

        Args:
            reports: File reports from the batch.
        """
        for report in reports:
            if report.error:
                self.error(f"{report.agent_id}: {report.error}")

        if not self.verbose:
            return

        for report in reports:
            if not report.changed:
                continue
            table = Table(show_header=True, header_style="bold", box=None, padding=(0, 2))
            table.add_column("Profile", style="cyan")
            table.add_column("Field", style="dim")
            table.add_column("Env var", style="green")
            table.add_column("Length", justify="right")
            for change in report.changes:
                table.add_row(
                    change.profile_id,
                    change.field,
                    change.env_var,
                    f"{change.length} chars",
                )
            self.console.print()
            self.console.print(f"[bold]{report.agent_id}[/bold]")
            self.console.print(f"[dim]{report.auth_store_path}[/dim]")
            if report.backup_path:
                self.console.print(f"[dim]Backup: {report.backup_path}[/dim]")
            self.console.print(table)

    def dry_run_hint(self, summary: BatchSummary) -> None:
        """Tell the operator how to apply after a dry-run with pending changes."""
        if summary.secrets_migrated:
            self.console.print()
            self.console.print(
                "[dim]Re-run with --apply to write secrets to the keyring and "
                "update auth-profiles.json.[/dim]"
            )

    def restore_preview(self, backup_path: str, target_path: str) -> None:
        """Display what a restore would overwrite."""
        self.console.print()
        self.console.print(
            Panel(
                "[bold yellow]RESTORE OPERATION[/bold yellow]\n"
                f"From: {backup_path}\n"
                f"To:   {target_path}\n"
                "[dim]Any changes made after the backup will be lost.[/dim]",
                border_style="yellow",
            )
        )

    def restore_complete(self, target_path: str, backup_path: str) -> None:
        """Display restore completion and next steps."""
        self.console.print()
        self.console.print(
            Panel(
                "[green]✓ Restore completed successfully[/green]\n"
                f"[dim]Restored: {target_path}[/dim]\n\n"
                "Next steps:\n"
                "  1. Restart the OpenClaw gateway\n"
                "  2. Verify agents can authenticate\n"
                f"  3. If successful, you may delete the backup: {backup_path}",
                border_style="green",
            )
        )

    def error(self, message: str) -> None:
        """Display an error message.

        Args:
            message: The error message to display.
        """
        self.console.print(f"[red]✗ Error: {message}[/red]")

    def warning(self, message: str) -> None:
        self.console.print(f"[yellow]⚠ {message}[/yellow]")

    def info(self, message: str) -> None:
        """Display an info message (verbose only)."""
        if self.verbose:
            self.console.print(f"[dim]{message}[/dim]")
