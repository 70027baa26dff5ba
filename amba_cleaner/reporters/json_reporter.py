"""
JSON Reporter Module
====================

Exports cleanup reports to JSON format for programmatic access and audit.

Classes
-------
JSONReporter
    Main reporter class for JSON export.

Example
-------
>>> from amba_cleaner.reporters import JSONReporter
>>>
>>> reporter = JSONReporter(output_path="cleanup.json")
>>> filepath = reporter.report(cleanup_report)
>>>
>>> # Or get as string
>>> json_str = reporter.to_string(cleanup_report)

Output Structure
----------------
::

    {
      "metadata": {
        "tool": "amba-cleaner",
        "cleanup_scope": "Alerts",
        "pseudo_root_management_group": "contoso",
        "dry_run": false,
        "status": "completed",
        "generated_at": "2024-01-15T10:30:00"
      },
      "summary_by_resource_type": {
        "alert": {"found": 5, "deleted": 5, "failed": 0, "skipped": 0}
      },
      "report": {...}
    }

See Also
--------
CLIReporter : For terminal display.
CleanupReport.to_dict : The ``report`` section.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, Optional

if TYPE_CHECKING:
    from amba_cleaner.orchestrator import CleanupReport

# Module logger
logger = logging.getLogger(__name__)


class JSONReporter:
    """
    Reporter for exporting cleanup reports to JSON format.

    Parameters
    ----------
    output_path : str, optional
        Path for the output file. If not provided, generates a
        timestamped filename in the current directory.
    indent : int, default=2
        JSON indentation level for pretty printing.
        Set to None for compact output.

    Examples
    --------
    >>> reporter = JSONReporter(output_path="cleanup.json")
    >>> filepath = reporter.report(cleanup_report)

    Compact output (no indentation):

    >>> reporter = JSONReporter(indent=None)
    >>> json_str = reporter.to_string(cleanup_report)
    """

    def __init__(
        self,
        output_path: Optional[str] = None,
        indent: Optional[int] = 2,
    ) -> None:
        """Initialize the JSON reporter with optional output path and indentation."""
        self.output_path = output_path
        self.indent = indent
        logger.debug(f"Initialized JSONReporter (output_path={output_path})")

    def _get_output_path(self, cleanup_scope: str) -> Path:
        """
        Get the output file path.

        Parameters
        ----------
        cleanup_scope : str
            Cleanup scope name for filename generation.

        Returns
        -------
        Path
            Path object for the output file.
        """
        if self.output_path:
            return Path(self.output_path)

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        return Path(f"amba_cleanup_{cleanup_scope.lower()}_{timestamp}.json")

    def report(self, report: CleanupReport) -> str:
        """
        Export a cleanup report to a JSON file.

        Parameters
        ----------
        report : CleanupReport
            The finished run.

        Returns
        -------
        str
            Path to the created JSON file.
        """
        output_path = self._get_output_path(report.cleanup_scope.value)

        logger.info(f"Writing cleanup report to {output_path}")

        with open(output_path, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(report), f, indent=self.indent, default=str)

        logger.debug(f"JSON export complete: {output_path}")
        return str(output_path)

    def to_string(self, report: CleanupReport) -> str:
        """Convert a cleanup report to a JSON string without writing to file."""
        return json.dumps(self.to_dict(report), indent=self.indent, default=str)

    def to_dict(self, report: CleanupReport) -> Dict[str, Any]:
        """
        Convert a cleanup report to a Python dictionary.

        Parameters
        ----------
        report : CleanupReport
            The finished run.

        Returns
        -------
        dict
            Metadata, per-type summary and the full report.
        """
        return {
            "metadata": {
                "tool": "amba-cleaner",
                "cleanup_scope": report.cleanup_scope.value,
                "pseudo_root_management_group": report.pseudo_root_management_group,
                "dry_run": report.dry_run,
                "status": report.status.value,
                "generated_at": datetime.utcnow().isoformat(),
            },
            "summary_by_resource_type": self._build_type_summary(report),
            "report": report.to_dict(),
        }

    @staticmethod
    def _build_type_summary(report: CleanupReport) -> Dict[str, Dict[str, int]]:
        summary: Dict[str, Dict[str, int]] = {
            result.resource_type: {"found": result.count, "deleted": 0, "failed": 0, "skipped": 0}
            for result in report.scan_results
        }
        for delete_summary in report.delete_summaries:
            entry = summary.setdefault(
                delete_summary.resource_type,
                {"found": 0, "deleted": 0, "failed": 0, "skipped": 0},
            )
            entry["deleted"] += delete_summary.deleted
            entry["failed"] += delete_summary.failed
            entry["skipped"] += delete_summary.skipped
        return summary

    def __repr__(self) -> str:
        """Return string representation."""
        return f"JSONReporter(output_path={self.output_path!r}, indent={self.indent})"
