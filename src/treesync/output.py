"""Human-readable and JSON rendering of command results."""

import json
from enum import IntEnum

from .models import DiffResult, EnsureOutcome, SyncOutcome


class ExitCode(IntEnum):
    """Process exit codes for the CLI."""
    SUCCESS = 0
    INVALID_ARGUMENTS = 2
    ROOT_UNAVAILABLE = 3
    FILESYSTEM_ERROR = 4
    UNEXPECTED_ERROR = 5


def to_json(payload: dict) -> str:
    return json.dumps(payload, indent=2)


def render_sync(outcome: SyncOutcome, json_output: bool = False) -> str:
    """
    Render a sync outcome.

    Args:
        outcome: Result of a sync or reconcile
        json_output: Render as JSON instead of text

    Returns:
        Text to print
    """
    if json_output:
        return to_json(outcome.to_dict())

    if not outcome.ok:
        return f"Sync failed with {len(outcome.errors)} error(s):\n" + "\n".join(outcome.errors)

    lines = []
    if outcome.planned_left or outcome.planned_right:
        lines.append("Dry run - nothing was changed.")
        lines.append(f"  Would create in left:  {len(outcome.planned_left)}")
        for rel in outcome.planned_left:
            lines.append(f"    + {rel}")
        lines.append(f"  Would create in right: {len(outcome.planned_right)}")
        for rel in outcome.planned_right:
            lines.append(f"    + {rel}")
    elif outcome.has_changes:
        lines.append("Sync Summary:")
        lines.append(f"  Directories created in left:  {outcome.created_left}")
        lines.append(f"  Directories created in right: {outcome.created_right}")
        if outcome.gitkeep_created:
            lines.append(f"  .gitkeep files created:       {outcome.gitkeep_created}")
    else:
        lines.append("No changes needed - directories are already in sync.")

    lines.append(
        f"Synced {outcome.created_total + outcome.existing_total} directories "
        f"({outcome.created_total} created, {outcome.existing_total} existing) in {outcome.duration_ms}ms"
    )
    for warning in outcome.warnings:
        lines.append(f"warning: {warning}")
    return "\n".join(lines)


def render_ensure(outcome: EnsureOutcome, json_output: bool = False) -> str:
    """Render the result of ensure-path."""
    if json_output:
        return to_json(outcome.to_dict())

    if not outcome.ok:
        return f"Ensure path failed with {len(outcome.errors)} error(s):\n" + "\n".join(outcome.errors)

    created = outcome.created_left + outcome.created_right
    if created:
        return f"Ensured path '{outcome.relative_path}' ({created} created) in {outcome.duration_ms}ms"
    return f"Path '{outcome.relative_path}' already exists in {outcome.duration_ms}ms"


def render_check(diff: DiffResult, json_output: bool = False) -> str:
    """Render the result of check."""
    if json_output:
        return to_json(diff.to_dict())

    lines = []
    if not diff.has_differences:
        lines.append("✓ Directories are in sync")
    else:
        lines.append(f"✗ Found {diff.total_differences} differences:")
        if diff.missing_in_right:
            lines.append(f"\n  Missing in right ({len(diff.missing_in_right)}):")
            lines.extend(f"    - {rel}" for rel in sorted(diff.missing_in_right))
        if diff.missing_in_left:
            lines.append(f"\n  Missing in left ({len(diff.missing_in_left)}):")
            lines.extend(f"    - {rel}" for rel in sorted(diff.missing_in_left))
        lines.append("\nRun 'treesync sync' to synchronize.")

    for warning in diff.warnings:
        lines.append(f"warning: {warning}")
    return "\n".join(lines)
