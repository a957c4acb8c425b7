"""
Runner configuration.
"""

from __future__ import annotations


class RunnerConfig:
    """Configuration for the dialogue runner."""

    def __init__(
        self,
        missing_line_template: str = "[Missing: {line_id}]",
        reset_runtime_on_start: bool = True,
        default_wait_seconds: float = 1.0,
    ):
        self.missing_line_template = missing_line_template
        self.reset_runtime_on_start = reset_runtime_on_start
        self.default_wait_seconds = default_wait_seconds

    def missing_line_text(self, line_id: str) -> str:
        """Placeholder shown when a line has no localized text."""
        return self.missing_line_template.format(line_id=line_id)
