# src/etu/cli/formatter.py
import io
import json
from typing import Any, Dict, List, Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.tree import Tree
from ruamel.yaml.comments import CommentedMap, CommentedSeq

from etu.core.exporter import yaml_emitter
from etu.core.models import (
    ConfigPair, DiffEntry, DiffResult, DiffStatus, Scalar, ValidationResult,
)
from etu.parsers.tree import unflatten

# Initialize the Rich console for high-quality terminal output
console = Console()
err_console = Console(stderr=True)

STATUS_STYLES = {
    DiffStatus.ADDED: "green",
    DiffStatus.MODIFIED: "yellow",
    DiffStatus.DELETED: "red",
    DiffStatus.UNCHANGED: "dim",
}

DIFF_OUTPUT_FORMATS = ("simple", "json", "yaml", "table")


def truncate(text: str, limit: int = 40) -> str:
    if len(text) <= limit:
        return text
    return text[:limit - 3] + "..."


class EtuFormatter:
    """
    EtuFormatter: The visual heart of the CLI.
    Responsible for rendering pairs, trees, diffs and validation reports.
    """

    def __init__(self, out: Optional[Console] = None, err: Optional[Console] = None):
        self.console = out or console
        self.err_console = err or err_console

    # --- Pairs ---

    def print_pairs_table(self, pairs: List[ConfigPair]):
        if not pairs:
            self.console.print("[dim]No configuration items found.[/dim]")
            return

        table = Table(title=f"{len(pairs)} configuration items", header_style="bold magenta")
        table.add_column("Key", style="cyan", overflow="fold")
        table.add_column("Value", overflow="fold")
        table.add_column("Type", style="dim")
        for pair in pairs:
            table.add_row(escape(pair.key), escape(pair.display_value()), pair.value.kind.value)
        self.console.print(table)

    def print_pairs_json(self, pairs: List[ConfigPair]):
        data = [{"key": p.key, "value": p.native} for p in pairs]
        self.console.out(json.dumps(data, indent=2, ensure_ascii=False), highlight=False)

    def print_tree(self, pairs: List[ConfigPair]):
        """
        Renders the hierarchy with rich.tree. Built on unflatten, so a
        colliding key set raises KeyCollisionError here as well.
        """
        root = Tree("[bold]/[/bold]")
        self._add_branch(root, unflatten(pairs, drop_empty=True))
        self.console.print(root)

    def _add_branch(self, node: Tree, data: Dict[str, Any]):
        for name in sorted(data):
            value = data[name]
            if isinstance(value, dict):
                branch = node.add(f"[bold blue]{escape(name)}/[/bold blue]")
                self._add_branch(branch, value)
            else:
                node.add(f"[cyan]{escape(name)}[/cyan] {escape(_tree_value(value))}")

    def print_document(self, text: str):
        """Raw YAML/JSON text, no markup or highlighting."""
        self.console.out(text.rstrip("\n"), highlight=False)

    # --- Validation ---

    def print_validation(self, result: ValidationResult):
        errors, warnings = result.errors, result.warnings

        for title, issues, style in (("Errors", errors, "bold red"), ("Warnings", warnings, "bold yellow")):
            if not issues:
                continue
            self.console.print(f"[{style}]{title} ({len(issues)}):[/{style}]")
            for issue in issues:
                key = f"[cyan]{escape(issue.key)}[/cyan]: " if issue.key else ""
                self.console.print(f"  • {key}{escape(issue.message)}")
            self.console.print()

        if result.valid:
            suffix = f" with {len(warnings)} warning(s)" if warnings else ""
            self.console.print(f"[bold green]✓ Validation passed{suffix}[/bold green]")
        elif not errors and result.strict:
            self.console.print("[bold red]✗ Validation failed: warnings are errors in strict mode[/bold red]")
        else:
            self.console.print(f"[bold red]✗ Validation failed with {len(errors)} error(s)[/bold red]")

    def validation_json(self, result: ValidationResult) -> str:
        return json.dumps({
            "valid": result.valid,
            "strict": result.strict,
            "issues": [
                {"key": i.key, "level": i.level.value, "message": i.message, "rule": i.rule}
                for i in result.issues
            ],
        }, indent=2, ensure_ascii=False)

    # --- Diff ---

    def print_diff(self, result: DiffResult, fmt: str = "simple", show_unchanged: bool = False):
        if fmt == "json":
            self.console.out(self.diff_json(result), highlight=False)
        elif fmt == "yaml":
            self.console.out(self.diff_yaml(result).rstrip("\n"), highlight=False)
        elif fmt == "table":
            self._print_diff_table(result, show_unchanged)
        else:
            self._print_diff_simple(result, show_unchanged)

    def diff_json(self, result: DiffResult) -> str:
        return json.dumps({
            "entries": [
                {"key": e.key, "status": e.status.value, "old_value": e.old_value, "new_value": e.new_value}
                for e in result.entries
            ],
            "added": result.added,
            "modified": result.modified,
            "deleted": result.deleted,
            "unchanged": result.unchanged,
        }, indent=2, ensure_ascii=False)

    def diff_yaml(self, result: DiffResult) -> str:
        """Same document as diff_json; missing old/new values are omitted."""
        entries = CommentedSeq()
        for e in result.entries:
            entry = CommentedMap()
            entry["key"] = e.key
            entry["status"] = e.status.value
            if e.old_value is not None:
                entry["old_value"] = e.old_value
            if e.new_value is not None:
                entry["new_value"] = e.new_value
            entries.append(entry)

        doc = CommentedMap()
        doc["entries"] = entries
        for name in ("added", "modified", "deleted", "unchanged"):
            doc[name] = getattr(result, name)

        stream = io.StringIO()
        yaml_emitter().dump(doc, stream)
        return stream.getvalue()

    def _print_diff_simple(self, result: DiffResult, show_unchanged: bool):
        if not result.has_changes:
            self.console.print("[bold green]No changes detected[/bold green]")

        for status in DiffStatus:
            entries = result.by_status(status)
            if not entries:
                continue
            style = STATUS_STYLES[status]
            self.console.print(f"[bold {style}]{status.value.capitalize()} ({len(entries)}):[/bold {style}]")
            for entry in entries:
                self._print_diff_entry(entry)
            self.console.print()

        self.console.print(self._summary_line(result, show_unchanged))

    def _print_diff_entry(self, entry: DiffEntry):
        style = STATUS_STYLES[entry.status]
        self.console.print(f"  [{style}]{entry.status.symbol}[/{style}] [cyan]{escape(entry.key)}[/cyan]")
        if entry.status is DiffStatus.MODIFIED:
            self.console.print(f"      [red]old: {escape(entry.old_value or '')}[/red]")
            self.console.print(f"      [green]new: {escape(entry.new_value or '')}[/green]")
        elif entry.status is DiffStatus.ADDED:
            self.console.print(f"      {escape(entry.new_value or '')}")
        elif entry.status is DiffStatus.DELETED:
            self.console.print(f"      {escape(entry.old_value or '')}")

    def _print_diff_table(self, result: DiffResult, show_unchanged: bool):
        if not result.entries:
            self.console.print("[bold green]No changes detected[/bold green]")
            return

        table = Table(header_style="bold magenta", show_lines=False)
        table.add_column("Status", justify="center")
        table.add_column("Key", style="cyan", overflow="fold")
        table.add_column("Old Value")
        table.add_column("New Value")
        for e in result.entries:
            style = STATUS_STYLES[e.status]
            table.add_row(
                f"[{style}]{e.status.symbol}[/{style}]",
                escape(e.key),
                escape(truncate(e.old_value or "")),
                escape(truncate(e.new_value or "")),
            )
        self.console.print(table)
        self.console.print(self._summary_line(result, show_unchanged))

    def _summary_line(self, result: DiffResult, show_unchanged: bool) -> str:
        line = f"Summary: +{result.added} ~{result.modified} -{result.deleted}"
        if show_unchanged:
            line += f" ={result.unchanged}"
        return f"{line} ({result.total} total)"

    def print_error(self, message: str):
        self.err_console.print(Panel(escape(message), title="[bold red]Error[/bold red]", border_style="red"))


def _tree_value(value: Any) -> str:
    text = Scalar.of(value).display()
    if "\n" in text:
        return f"[{len(text.strip().splitlines())} lines]"
    return truncate(text, 50)
