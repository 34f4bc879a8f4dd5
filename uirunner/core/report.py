"""Run report generation."""

from __future__ import annotations

import html
import json
import re
from functools import lru_cache
from pathlib import Path
from xml.etree.ElementTree import Element, SubElement, tostring

from uirunner.models.test import RunSummary, TestOutcome

_PLACEHOLDER_RE = re.compile(r"\{\{[a-z_]+\}\}")

# Status icons
STATUS_ICONS = {
    "passed": "&#10003;",  # checkmark
    "failed": "&#10007;",  # X mark
}


@lru_cache(maxsize=1)
def _load_template() -> str:
    """Load HTML template from templates directory."""
    template_path = Path(__file__).parent.parent / "templates" / "report.html"
    return template_path.read_text(encoding="utf-8")


def render_html(summary: RunSummary) -> str:
    """Render a run summary as a static HTML page.

    Output depends only on the summary, so rendering the same summary twice
    gives identical text.
    """
    results_dir = f"{summary.results_dir}/" if summary.results_dir else "-"

    content = _load_template()
    replacements = {
        "{{timestamp}}": html.escape(summary.timestamp),
        "{{platform}}": html.escape(summary.platform.value),
        "{{results_dir}}": html.escape(results_dir),
        "{{summary_passed}}": str(summary.passed_count),
        "{{summary_failed}}": str(summary.failed_count),
        "{{summary_total}}": str(summary.total_count),
        "{{failed_html}}": _failed_list_html(summary.failed_test_names),
        "{{tests_html}}": _tests_table_html(summary.outcomes),
    }
    # Single pass so substituted values are never rescanned for placeholders
    return _PLACEHOLDER_RE.sub(lambda m: replacements.get(m.group(0), m.group(0)), content)


def _failed_list_html(failed: list[str]) -> str:
    if not failed:
        return ""

    items = "\n".join(f"                <li>{html.escape(name)}</li>" for name in failed)
    return f"""        <div class="failed-list">
            <h3>Failed Tests</h3>
            <ul>
{items}
            </ul>
        </div>"""


def _tests_table_html(outcomes: tuple[TestOutcome, ...]) -> str:
    if not outcomes:
        return ""

    rows = []
    for outcome in outcomes:
        status = outcome.status.value
        screenshot = html.escape(outcome.screenshot_path.name) if outcome.screenshot_path else ""
        rows.append(
            f"""            <tr>
                <td>{html.escape(outcome.file_name)}</td>
                <td class="status {status}">{STATUS_ICONS[status]} {status}</td>
                <td>{outcome.attempt_count}</td>
                <td>{outcome.duration:.1f}s</td>
                <td>{screenshot}</td>
            </tr>"""
        )

    body = "\n".join(rows)
    return f"""        <table class="tests">
            <tr><th>Test</th><th>Status</th><th>Attempts</th><th>Duration</th><th>Screenshot</th></tr>
{body}
        </table>"""


def render_junit(summary: RunSummary) -> bytes:
    """Render a run summary as aggregate JUnit XML.

    One testcase per outcome; failed tests carry a <failure> element.
    """
    testsuite = Element(
        "testsuite",
        {
            "name": f"uirunner-{summary.platform.value}",
            "tests": str(summary.total_count),
            "failures": str(summary.failed_count),
            "timestamp": summary.timestamp,
            "time": f"{sum(o.duration for o in summary.outcomes):.3f}",
        },
    )

    for outcome in summary.outcomes:
        testcase = SubElement(
            testsuite,
            "testcase",
            {
                "name": outcome.test_name,
                "classname": summary.platform.value,
                "time": f"{outcome.duration:.3f}",
            },
        )
        properties = SubElement(testcase, "properties")
        SubElement(properties, "property", {"name": "attempts", "value": str(outcome.attempt_count)})
        if outcome.report_path:
            SubElement(properties, "property", {"name": "report", "value": str(outcome.report_path)})

        if not outcome.passed:
            message = f"Failed after {outcome.attempt_count} attempt(s)"
            failure = SubElement(testcase, "failure", {"message": message})
            failure.text = message
            if outcome.screenshot_path:
                SubElement(properties, "property", {
                    "name": "screenshot", "value": str(outcome.screenshot_path),
                })

    return b'<?xml version="1.0" encoding="UTF-8"?>\n' + tostring(testsuite)


class ReportGenerator:
    """Write HTML, JSON and JUnit reports for a run."""

    def __init__(self, output_dir: Path):
        """Initialize generator.

        Args:
            output_dir: Directory to write reports
        """
        self._output_dir = Path(output_dir)
        self._output_dir.mkdir(parents=True, exist_ok=True)

    def generate_html(self, summary: RunSummary) -> Path:
        """Generate report_{timestamp}.html.

        Args:
            summary: Run summary

        Returns:
            Path to generated report
        """
        path = self._output_dir / f"report_{summary.timestamp}.html"
        path.write_text(render_html(summary), encoding="utf-8")
        return path

    def generate_json(self, summary: RunSummary) -> Path:
        """Generate summary_{timestamp}.json (input for `uirunner report`)."""
        path = self._output_dir / f"summary_{summary.timestamp}.json"
        with open(path, "w", encoding="utf-8") as f:
            json.dump(summary.to_dict(), f, indent=2)
        return path

    def generate_junit(self, summary: RunSummary) -> Path:
        path = self._output_dir / f"junit_{summary.timestamp}.xml"
        path.write_bytes(render_junit(summary))
        return path

    def generate_all(self, summary: RunSummary) -> dict[str, Path]:
        return {
            "html": self.generate_html(summary),
            "json": self.generate_json(summary),
            "junit": self.generate_junit(summary),
        }


def load_summary(json_path: Path) -> RunSummary:
    """Load a summary written by ReportGenerator.generate_json.

    Raises:
        ValueError: File is not a valid summary
    """
    try:
        with open(json_path, encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in {json_path}: {e}") from e

    if not isinstance(data, dict):
        raise ValueError(f"Not a run summary: {json_path}")
    try:
        return RunSummary.from_dict(data)
    except (AttributeError, TypeError, ValueError) as e:
        raise ValueError(f"Not a run summary: {json_path}: {e}") from e
