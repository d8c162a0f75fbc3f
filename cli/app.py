"""
Typer CLI application with Rich integration.

Commands:
    preload   — Load the classifier and report which device it landed on
    verify    — Verify the photos of one report
    labels    — Show the candidate labels synthesized for a report
    config    — Show current configuration
"""

from __future__ import annotations

import asyncio
import base64
import json
import mimetypes
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from enum import Enum
from pathlib import Path
from typing import List, Optional

import typer

from cli.callbacks import validate_category, validate_photos
from cli.console import console
from cli.display import (
    show_banner,
    show_config_table,
    show_label_set,
    show_results,
    show_verification_status,
)
from verification.models import IssueCategory

app = typer.Typer(
    name="civic-verify",
    help="🔍 Civic Verify — zero-shot photo verification for issue reports",
    rich_markup_mode="rich",
    add_completion=False,
    no_args_is_help=False,
    pretty_exceptions_enable=True,
    pretty_exceptions_show_locals=False,
)

CATEGORY_HELP = "Issue category: " + ", ".join(c.value for c in IssueCategory)


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
#  ENUMS & HELPERS
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class Device(str, Enum):
    auto = "auto"
    cpu  = "cpu"
    cuda = "cuda"
    mps  = "mps"


def _apply_overrides(device: Optional[Device] = None, verbose: bool = False):
    from config.settings import cfg

    cfg.verbose = verbose or cfg.verbose
    if device is not None:
        cfg.verify = replace(cfg.verify, device=device.value)
    cfg.validate()
    return cfg


def _as_data_url(path: Path) -> str:
    """Encode a photo the way the upload form hands it over."""
    mime = mimetypes.guess_type(path.name)[0] or "image/jpeg"
    payload = base64.b64encode(path.read_bytes()).decode("ascii")
    return f"data:{mime};base64,{payload}"


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
#  PRELOAD COMMAND
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

@app.command()
def preload(
    device: Optional[Device] = typer.Option(None, "--device", help="Force a device"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """
    ⏳ Load the zero-shot classifier and show where it runs.
    """
    from utils.log_config import setup_root
    from verification.service import ImageVerificationService

    show_banner()
    cfg = _apply_overrides(device, verbose)
    cfg.paths.ensure()
    setup_root(cfg.paths.log_file, verbose=cfg.verbose)

    service = ImageVerificationService(cfg)
    with console.status("Loading classifier...", spinner="dots"):
        ready = asyncio.run(service.preload())

    show_verification_status(service.stats())
    if not ready:
        console.print("[error]Classifier could not be loaded![/]")
        console.print("[muted]Install: pip install transformers torch[/]")
        raise typer.Exit(code=1)


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
#  VERIFY COMMAND
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

@app.command()
def verify(
    images: List[Path] = typer.Argument(
        ..., help="Photo(s) attached to the report (max 2)", exists=True, dir_okay=False,
        callback=validate_photos,
    ),
    description: str = typer.Option("", "--description", "-d", help="Issue description"),
    category: str = typer.Option(
        "other", "--category", "-c", help=CATEGORY_HELP, callback=validate_category,
    ),
    timeout: Optional[float] = typer.Option(
        None, "--timeout", "-t", min=0.1, help="Give up after this many seconds",
    ),
    device: Optional[Device] = typer.Option(None, "--device", help="Force a device"),
    as_json: bool = typer.Option(False, "--json", help="Print results as JSON"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """
    🔍 Check that report photos actually show the reported issue.

    [dim]Example: civic-verify verify hole.jpg -c road_damage -d "large pothole on Main Street"[/dim]
    """
    from utils.log_config import setup_root
    from verification.models import REASON_TIMEOUT, VerificationResult
    from verification.service import ImageVerificationService

    cfg = _apply_overrides(device, verbose)
    cfg.paths.ensure()
    setup_root(cfg.paths.log_file, verbose=cfg.verbose)

    if not as_json:
        show_banner()
        console.print(f"[info]Category:[/] {category}")
        console.print(f"[info]Description:[/] {description or '[muted](none)[/]'}")
        console.print()

    photos = images[: cfg.verify.max_photos]
    if len(images) > len(photos) and not as_json:
        console.print(f"[warning]Only the first {len(photos)} photos are verified[/]")

    # owned here so a timed-out run can walk away from busy workers
    pool = ThreadPoolExecutor(max_workers=len(photos) + 1, thread_name_prefix="civic-verify")
    service = ImageVerificationService(cfg, executor=pool)
    payloads = [_as_data_url(p) for p in photos]

    async def _run():
        job = service.verify_photos(payloads, description, category)
        if timeout is None:
            return await job
        try:
            return await asyncio.wait_for(job, timeout)
        except asyncio.TimeoutError:
            return [VerificationResult.rejected(REASON_TIMEOUT) for _ in payloads]

    try:
        if as_json:
            results = asyncio.run(_run())
        else:
            with console.status("Verifying...", spinner="dots"):
                results = asyncio.run(_run())
    finally:
        pool.shutdown(wait=False, cancel_futures=True)

    if as_json:
        typer.echo(json.dumps(
            [{"photo": str(p), **r.to_dict()} for p, r in zip(photos, results)],
            indent=2,
        ))
    else:
        show_results(results, [p.name for p in photos])

    if not all(r.is_valid for r in results):
        raise typer.Exit(code=1)


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
#  LABELS COMMAND
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

@app.command()
def labels(
    description: str = typer.Option("", "--description", "-d", help="Issue description"),
    category: str = typer.Option(
        "other", "--category", "-c", help=CATEGORY_HELP, callback=validate_category,
    ),
) -> None:
    """
    🏷️  Show the labels a report would be classified against.
    """
    from config.settings import cfg
    from verification.labels import synthesize

    cat = IssueCategory.parse(category)
    show_label_set(synthesize(description, cat, cfg.labels), cat.value)


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
#  CONFIG COMMAND
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

@app.command()
def config() -> None:
    """
    ⚙️  Show current configuration from settings.py.
    """
    from config.settings import cfg

    show_banner()

    v = cfg.verify
    show_config_table({
        "Model": v.model_name,
        "Device": v.device,
        "Hypothesis": v.hypothesis_template,
        "Default Threshold": v.default_threshold,
        "Complex Threshold": v.complex_threshold,
        "Complex Categories": list(v.complex_categories),
        "Min Margin": v.min_margin,
        "Weights (cat/kw/cmp)": [v.category_weight, v.keyword_weight, v.compound_weight],
        "Max Photos": v.max_photos,
        "Result Cache": cfg.cache.enabled,
        "Cache TTL": f"{cfg.cache.ttl_seconds:.0f}s",
        "Fingerprint": "full image" if cfg.cache.hash_full_image
                       else f"first {cfg.cache.image_prefix_chars} chars",
        "Models Dir": str(cfg.paths.models_dir),
        "Log File": str(cfg.paths.log_file),
        "Verbose": cfg.verbose,
    })


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
#  DEFAULT (no command)
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

@app.callback(invoke_without_command=True)
def default(ctx: typer.Context) -> None:
    """
    🔍 Civic Verify — does this photo show the reported issue?

    Run [bold]civic-verify verify --help[/bold] to get started.
    """
    if ctx.invoked_subcommand is None:
        show_banner()
        console.print("Available commands:\n")
        console.print("  [bold cyan]preload[/]  Load the classifier")
        console.print("  [bold cyan]verify[/]   Verify report photos")
        console.print("  [bold cyan]labels[/]   Show candidate labels")
        console.print("  [bold cyan]config[/]   Show current configuration")
        console.print()
        console.print("[muted]Run 'python main.py verify --help' for detailed options[/]")
