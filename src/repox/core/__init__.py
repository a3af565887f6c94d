"""Path resolution, git invocation, scheduling and reporting."""
