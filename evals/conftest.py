"""Eval fixtures -- engines, configs and sample responses."""

import pytest

from socratic_guard.config import EngineConfig
from socratic_guard.enforcement import ComplianceEngine


def fenced(lines: int, language: str = "", body: str = "code line {n}") -> str:
    """A fenced code block with the given number of content lines."""
    content = "\n".join(body.format(n=n) for n in range(1, lines + 1))
    return f"```{language}\n{content}\n```"


@pytest.fixture
def make_fence():
    return fenced


@pytest.fixture
def config():
    return EngineConfig()


@pytest.fixture
def engine(config):
    return ComplianceEngine(config)


@pytest.fixture
def finished_code_response():
    """Twelve lines of code handed over with no question."""
    return "Here's the complete implementation:\n" + fenced(12)


@pytest.fixture
def socratic_response():
    """Questions only -- the behavior the policy asks for."""
    return "What's your threat model? What attacks concern you most?"


@pytest.fixture
def mixed_response():
    return (
        "# Caching options\n"
        "\n"
        "There are a few ways to approach this.\n"
        "\n"
        "- an in-process LRU cache\n"
        "- a shared Redis cache\n"
        "\n"
        "What read/write ratio do you expect?\n"
        "**How stale can the data be?**\n"
    )
