"""
Typer callback validators.
"""

from __future__ import annotations

from pathlib import Path
from typing import List

import typer

from verification.models import IssueCategory

IMAGE_SUFFIXES = {".jpg", ".jpeg", ".png", ".webp", ".bmp", ".gif"}


def validate_category(value: str) -> str:
    """Normalise the category; unknown names fall back to ``other``."""
    category = IssueCategory.parse(value)
    if value and category.value != value.strip().lower():
        typer.echo(f"Unknown category '{value}', using 'other'", err=True)
    return category.value


def validate_photos(paths: List[Path]) -> List[Path]:
    """Only common image formats are accepted."""
    for path in paths:
        if path.suffix.lower() not in IMAGE_SUFFIXES:
            raise typer.BadParameter(
                f"Not an image: {path.name}. Valid: {', '.join(sorted(IMAGE_SUFFIXES))}"
            )
    return paths
