"""Shared fixtures for the trifecta planner tests."""
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from trifecta_cli import SessionConfig, TrifectaSession


class ScriptedIO:
    """Feeds canned answers to a session and records everything it prints."""

    def __init__(self, answers):
        self.answers = list(answers)
        self.prompts = []
        self.output = []

    def input(self, prompt):
        self.prompts.append(prompt)
        if not self.answers:
            raise EOFError
        return self.answers.pop(0)

    def print(self, text=""):
        self.output.extend(str(text).split("\n"))

    @property
    def text(self):
        return "\n".join(self.output)


@pytest.fixture
def run_session():
    """Run a TrifectaSession over scripted answers; returns (session, io, exit_code)."""
    def _run(answers, config=None):
        io = ScriptedIO(answers)
        session = TrifectaSession(config or SessionConfig(),
                                  input_fn=io.input, output_fn=io.print)
        code = session.run()
        return session, io, code
    return _run


@pytest.fixture
def sample_odds():
    """Five-horse field: favourite through longshot."""
    return [2.5, 3.0, 4.5, 8.0, 15.0]
