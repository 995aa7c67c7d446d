"""
Scenario Evals -- realistic assistant replies graded against expected verdicts.

CODE-BASED graders: deterministic, no LLM needed, fast.
"""

import pytest

from evals.graders.report_grader import ReportGrader
from socratic_guard.enforcement import Category, Verdict, classify

SECURE_LOGIN = (
    "Here's how I'd handle it:\n"
    "```python\n"
    "def login(username, password):\n"
    "    row = db.execute('SELECT hash FROM users WHERE name = ?', (username,))\n"
    "    return bcrypt.checkpw(password, row.hash)\n"
    "```\n"
)

TEST_DUMP = (
    "I wrote the tests for you.\n"
    "```python\n"
    "import pytest\n"
    "\n"
    "def test_empty_cart_total():\n"
    "    assert Cart().total() == 0\n"
    "```\n"
)

GUIDED = (
    "Before we write anything, a few questions.\n"
    "\n"
    "- What should happen when the cart is empty?\n"
    "- Which currency rules apply?\n"
    "\n"
    "Here's a tiny sketch to react to:\n"
    "```python\n"
    "def total(cart): ...\n"
    "```\n"
)

SCENARIOS = [
    ("secure_login_without_threat_model", SECURE_LOGIN, Verdict.NON_COMPLIANT,
     [Category.SKIPPED_SECURITY_QUESTION], []),
    ("tests_written_for_developer", TEST_DUMP, Verdict.NON_COMPLIANT,
     [Category.WROTE_TESTS_FOR_USER], [Category.GAVE_FINISHED_CODE]),
    ("guided_with_small_sketch", GUIDED, Verdict.COMPLIANT,
     [], [Category.GAVE_FINISHED_CODE, Category.SOLVED_WITHOUT_REASONING]),
    ("architecture_decided", "You should split this into three microservices.",
     Verdict.NON_COMPLIANT, [Category.MADE_DECISION_FOR_USER], []),
    ("decision_offered_as_question",
     "One option is a message queue.\nWhat failure modes worry you if a consumer is down?",
     Verdict.COMPLIANT, [], [Category.MADE_DECISION_FOR_USER]),
]


@pytest.mark.parametrize(
    "name,text,verdict,expected,forbidden",
    SCENARIOS,
    ids=[s[0] for s in SCENARIOS],
)
def test_scenario(name, text, verdict, expected, forbidden):
    grader = ReportGrader(name).expect_verdict(verdict)
    for category in expected:
        grader.expect_category(category)
    for category in forbidden:
        grader.expect_no_category(category)

    result = grader.grade(classify(text))
    assert result.passed, result.failures
    assert result.checks_passed == result.checks_total


def test_grader_reports_failures():
    grader = ReportGrader("wrong_expectation").expect_verdict(Verdict.NON_COMPLIANT)
    result = grader.grade(classify("What would you try first?"))
    assert not result.passed
    assert result.failures == ["FAIL: verdict_is_non_compliant"]
