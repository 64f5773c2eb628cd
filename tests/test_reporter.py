"""Tests for report rendering and reporters."""

import io

from rich.console import Console

from mirror_backup.sync.reporter import (
    ActionMarker,
    ConsoleReporter,
    LogFileReporter,
    ReportLine,
    render_failure,
)


def test_render_plain_line():
    assert ReportLine(ActionMarker.CREATE, "A/f1").render() == "+ A/f1"
    assert ReportLine(ActionMarker.UNCHANGED, "A/f1").render() == "= A/f1"


def test_render_with_note_and_simulation():
    line = ReportLine(ActionMarker.DELETE, "A/f1", "marked f1#deleted#", simulated=True)

    assert line.render() == "- A/f1 -- marked f1#deleted# (dry-run)"


def test_render_failure_is_distinct_from_markers():
    text = render_failure("A/f1", "destination is newer")

    assert text == "! A/f1 -- destination is newer"
    assert text[0] not in {marker.value for marker in ActionMarker}


def test_log_file_reporter_writes_lines():
    stream = io.StringIO()
    reporter = LogFileReporter(stream)

    reporter.report(ReportLine(ActionMarker.UPDATE, "A/f1"))
    reporter.failure("A/f2", "cannot delete")
    reporter.progress(ActionMarker.UPDATE, "A/f1", 1, 2)

    assert reporter.suppress_progress
    assert stream.getvalue() == "* A/f1\n! A/f2 -- cannot delete\n"


def test_console_reporter_prints_paths_verbatim():
    out = io.StringIO()
    err = io.StringIO()
    reporter = ConsoleReporter(
        Console(file=out, width=20, force_terminal=False),
        Console(file=err, width=20, force_terminal=False),
    )
    long_path = "A/[bold]x[/bold]/:smile:/" + "d" * 40

    reporter.report(ReportLine(ActionMarker.CREATE, long_path))
    reporter.failure("A/f2", "destination is not writable")

    assert out.getvalue() == f"+ {long_path}\n"
    assert err.getvalue() == "! A/f2 -- destination is not writable\n"
    assert not reporter.suppress_progress


def test_console_reporter_skips_progress_off_terminal():
    out = io.StringIO()
    reporter = ConsoleReporter(Console(file=out, force_terminal=False), Console(file=io.StringIO()))

    reporter.progress(ActionMarker.CREATE, "A/f1", 10, 20)

    assert out.getvalue() == ""


def test_console_progress_cleared_by_marker_line():
    out = io.StringIO()
    reporter = ConsoleReporter(Console(file=out, width=80, force_terminal=True),
                               Console(file=io.StringIO()))

    reporter.progress(ActionMarker.CREATE, "A/long-file-name.bin", 0, 100)
    reporter.progress(ActionMarker.CREATE, "A/long-file-name.bin", 100, 100)
    assert reporter.live_progress is not None

    reporter.report(ReportLine(ActionMarker.CREATE, "A/f"))

    assert reporter.live_progress is None
    assert out.getvalue().endswith("+ A/f\n")


def test_console_progress_restarts_for_next_file():
    reporter = ConsoleReporter(Console(file=io.StringIO(), force_terminal=True),
                               Console(file=io.StringIO()))

    reporter.progress(ActionMarker.CREATE, "A/one", 1, 2)
    reporter.progress(ActionMarker.UPDATE, "A/two", 1, 2)

    assert reporter.live_progress.tasks[0].description == "* A/two"
    reporter.end_progress()
    assert reporter.live_progress is None
