"""Terminal viewer for version-control diffs."""
