"""
CLI Evals -- exit codes and output of the socratic-guard command.
"""

import json

import pytest
from typer.testing import CliRunner

from socratic_guard.cli import EXIT_COMPLIANT, EXIT_ERROR, EXIT_NON_COMPLIANT, app

runner = CliRunner()


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (
        "SOCRATIC_GUARD_CODE_BLOCK_LINE_THRESHOLD",
        "SOCRATIC_GUARD_PROSE_SENTENCE_THRESHOLD",
        "SOCRATIC_GUARD_MAX_INPUT_LENGTH",
        "SOCRATIC_GUARD_STEP_LIST_ITEM_THRESHOLD",
    ):
        monkeypatch.delenv(name, raising=False)


class TestCheckCommand:
    """Eval: Does `check` map verdicts and errors to exit codes?"""

    def test_compliant_file_exits_zero(self, tmp_path, socratic_response):
        path = tmp_path / "reply.md"
        path.write_text(socratic_response)
        result = runner.invoke(app, ["check", str(path)])
        assert result.exit_code == EXIT_COMPLIANT
        assert "compliant" in result.output

    def test_non_compliant_stdin_exits_one(self, finished_code_response):
        result = runner.invoke(app, ["check"], input=finished_code_response)
        assert result.exit_code == EXIT_NON_COMPLIANT
        assert "gave-finished-code" in result.output
        assert "unprompted-code-block" in result.output

    def test_json_output(self, finished_code_response):
        result = runner.invoke(app, ["check", "-", "--format", "json"], input=finished_code_response)
        assert result.exit_code == EXIT_NON_COMPLIANT
        data = json.loads(result.stdout)
        assert data["verdict"] == "non_compliant"
        assert data["category_counts"]["gave-finished-code"] == 2

    def test_threshold_option(self, make_fence):
        text = "Snippet:\n" + make_fence(3)
        assert runner.invoke(app, ["check"], input=text).exit_code == EXIT_COMPLIANT
        strict = runner.invoke(app, ["check", "--code-block-lines", "2"], input=text)
        assert strict.exit_code == EXIT_NON_COMPLIANT

    def test_unbalanced_fence_exits_two(self):
        result = runner.invoke(app, ["check"], input="```\nunclosed\n")
        assert result.exit_code == EXIT_ERROR

    def test_too_large_exits_two(self):
        result = runner.invoke(app, ["check", "--max-input-length", "5"], input="far too long")
        assert result.exit_code == EXIT_ERROR

    def test_missing_file_exits_two(self, tmp_path):
        result = runner.invoke(app, ["check", str(tmp_path / "nope.md")])
        assert result.exit_code == EXIT_ERROR

    def test_invalid_threshold_exits_two(self):
        result = runner.invoke(app, ["check", "--code-block-lines", "0"], input="Hi?")
        assert result.exit_code == EXIT_ERROR

    def test_ruleset_option(self, tmp_path):
        path = tmp_path / "rules.json"
        path.write_text(json.dumps(["prescribed-step-list"]))
        result = runner.invoke(
            app, ["check", "--ruleset", str(path)], input="Use a queue."
        )
        assert result.exit_code == EXIT_COMPLIANT


class TestExchangeCommand:
    def test_exchange_with_violation(self, tmp_path, finished_code_response):
        path = tmp_path / "transcript.json"
        path.write_text(json.dumps([
            {"role": "user", "content": "How do I build a cart?"},
            {"role": "assistant", "content": finished_code_response},
        ]))
        result = runner.invoke(app, ["exchange", str(path), "--format", "json"])
        assert result.exit_code == EXIT_NON_COMPLIANT
        data = json.loads(result.stdout)
        assert [t["turn_index"] for t in data["turns"]] == [1]

    def test_exchange_bad_json_exits_two(self, tmp_path):
        path = tmp_path / "transcript.json"
        path.write_text("[{")
        assert runner.invoke(app, ["exchange", str(path)]).exit_code == EXIT_ERROR

    def test_exchange_wrong_shape_exits_two(self, tmp_path):
        path = tmp_path / "transcript.json"
        path.write_text(json.dumps({"turns": "nope"}))
        assert runner.invoke(app, ["exchange", str(path)]).exit_code == EXIT_ERROR

    @pytest.mark.parametrize("turn", [
        {"role": None, "content": "hi"},
        {"role": "assistant", "content": 5},
    ])
    def test_exchange_bad_turn_fields_exit_two(self, tmp_path, turn):
        path = tmp_path / "transcript.json"
        path.write_text(json.dumps([turn]))
        result = runner.invoke(app, ["exchange", str(path)])
        assert result.exit_code == EXIT_ERROR
        assert result.exception is None or isinstance(result.exception, SystemExit)


class TestRulesCommand:
    def test_rules_table_lists_patterns(self):
        result = runner.invoke(app, ["rules"])
        assert result.exit_code == 0
        assert "unprompted-code-block" in result.output

    def test_rules_export_is_loadable_json(self):
        result = runner.invoke(app, ["rules", "--export"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert len(data["patterns"]) == 7
        assert "gave-finished-code" in data["questions"]


def test_version():
    result = runner.invoke(app, ["version"])
    assert result.exit_code == 0
    assert "socratic-guard v0.1.0" in result.output
