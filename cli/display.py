"""
Rich display components — banner, tables, panels.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from rich import box
from rich.align import Align
from rich.panel import Panel
from rich.table import Table
from rich.text import Text
from rich.tree import Tree

from cli.console import console
from verification.labels import LabelSet
from verification.models import VerificationResult


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
#  BANNER
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

BANNER = r"""
  ___ _      _       __   __       _  __
 / __(_)_ __(_)__    \ \ / /__ _ _(_)/ _|_  _
| (__| \ V /| / _|    \ V / -_) '_| |  _| || |
 \___|_|\_/ |_\__|     \_/\___|_| |_|_|  \_, |
                                         |__/
"""


def show_banner() -> None:
    """Display the startup banner."""
    panel = Panel(
        Align.center(Text(BANNER, style="bold cyan")),
        border_style="bright_blue",
        padding=(0, 2),
    )
    console.print(panel)


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
#  CONFIG TABLE
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

def show_config_table(config: Dict[str, Any]) -> None:
    """Display configuration as a rich table."""
    table = Table(
        title="⚙️  Configuration",
        box=box.ROUNDED,
        border_style="bright_blue",
        show_header=True,
        header_style="bold white on blue",
        padding=(0, 1),
    )
    table.add_column("Setting", style="stat_key", min_width=20)
    table.add_column("Value", style="stat_val", min_width=30)

    for key, value in config.items():
        if isinstance(value, bool):
            val_str = "✅ Yes" if value else "❌ No"
            style = "success" if value else "muted"
        elif isinstance(value, (list, tuple)):
            val_str = ", ".join(str(v) for v in value)
            style = "label"
        elif isinstance(value, (int, float)):
            val_str = str(value)
            style = "highlight"
        else:
            val_str = str(value)
            style = "stat_val"

        table.add_row(key, Text(val_str, style=style))

    console.print(table)
    console.print()


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
#  CLASSIFIER STATUS
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

def show_verification_status(status: Dict[str, Any]) -> None:
    """Show classifier lifecycle panel."""
    tree = Tree("🔍 Zero-shot Classifier", style="bold")

    ready = bool(status.get("ready"))
    state = "✅ Ready" if ready else f"❌ {status.get('state', 'unknown')}"
    model_branch = tree.add(f"State: {state}")
    model_branch.add(f"Model: {status.get('model', 'unknown')}")

    tree.add(f"Requested device: {status.get('requested_device', 'auto')}")
    tree.add(f"Device: {status.get('device', 'none')}")
    attempts = status.get("attempts") or []
    tree.add(f"Attempts: {' → '.join(attempts) if attempts else 'none'}")
    if ready:
        tree.add(f"Load time: {status.get('load_seconds', 0)}s")

    console.print(Panel(tree, border_style="green" if ready else "yellow"))
    console.print()


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
#  LABELS
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

def show_label_set(label_set: LabelSet, category: str) -> None:
    table = Table(
        title=f"🏷️  Candidate labels — {category}",
        box=box.ROUNDED,
        border_style="cyan",
    )
    table.add_column("Group", style="stat_key")
    table.add_column("#", justify="right")
    table.add_column("Labels")

    for group in ("category", "keyword", "compound", "negative"):
        labels = label_set.group(group)
        style = "negative" if group == "negative" else "label"
        text = ", ".join(labels) if labels else "—"
        table.add_row(group, str(len(labels)), Text(text, style=style if labels else "muted"))

    console.print(table)
    console.print()


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
#  RESULTS
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

def show_results(
    results: Sequence[VerificationResult],
    names: Optional[List[str]] = None,
) -> None:
    accepted = all(r.is_valid for r in results) and bool(results)
    table = Table(
        title="🔍 Verification Result",
        box=box.DOUBLE_EDGE,
        border_style="green" if accepted else "red",
    )
    table.add_column("Photo", style="stat_key")
    table.add_column("Decision")
    table.add_column("Confidence", justify="right")
    table.add_column("Reason")

    for i, result in enumerate(results):
        name = names[i] if names and i < len(names) else f"#{i + 1}"
        decision = "[success]✅ ACCEPTED[/]" if result.is_valid else "[error]❌ REJECTED[/]"
        conf_style = "score" if result.is_valid else "score_bad"
        table.add_row(name, decision, f"[{conf_style}]{result.confidence}%[/]", result.reason)

    console.print(table)
    console.print()
