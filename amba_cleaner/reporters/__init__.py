"""
Report Generators
=================

This module provides output formatters for cleanup runs.

Available Reporters
-------------------
CLIReporter
    Rich terminal output with formatted tables and per-item status lines.
JSONReporter
    JSON export of the full cleanup report.

Example
-------
>>> from amba_cleaner.reporters import CLIReporter, JSONReporter
>>>
>>> cli = CLIReporter()
>>> cli.print_summary(report)
>>>
>>> filepath = JSONReporter(output_path="cleanup.json").report(report)

See Also
--------
amba_cleaner.orchestrator.CleanupReport : Input data structure.
"""

from amba_cleaner.reporters.cli_reporter import CLIReporter
from amba_cleaner.reporters.json_reporter import JSONReporter

__all__ = [
    "CLIReporter",
    "JSONReporter",
]
