import io

from auto_approve.github.workflow_commands import StepSummary, WorkflowCommands, format_command


def test_format_command_escapes_message():
    assert format_command("warning", "50% done\r\nnext") == "::warning::50%25 done%0D%0Anext"


def test_format_command_leaves_colons_in_message():
    assert format_command("notice", "Reviewers: alice,bob") == "::notice::Reviewers: alice,bob"


def test_workflow_commands_write_to_stream():
    stream = io.StringIO()
    commands = WorkflowCommands(stream)

    commands.warning("env 'prod' missing")
    commands.notice("not a reviewer")
    commands.info("Reviewers: alice,bob")
    commands.error("failed")

    assert stream.getvalue().splitlines() == [
        "::warning::env 'prod' missing",
        "::notice::not a reviewer",
        "Reviewers: alice,bob",
        "::error::failed",
    ]


def test_step_summary_appends_markdown(step_summary_file):
    step_summary_file.write_text("existing\n", encoding="utf-8")
    summary = StepSummary()

    written = summary.add_heading(":white_check_mark: Auto Approval Status").add_quote("Reviewer: alice").write()

    assert written
    assert step_summary_file.read_text(encoding="utf-8") == (
        "existing\n# :white_check_mark: Auto Approval Status\n> Reviewer: alice\n"
    )
    assert summary.content == ""


def test_step_summary_without_path_is_skipped(monkeypatch):
    monkeypatch.delenv("GITHUB_STEP_SUMMARY", raising=False)
    summary = StepSummary().add_heading("Status")

    assert summary.write() is False
    assert summary.content == "# Status\n"
