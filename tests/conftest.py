"""Shared fixtures."""

from types import SimpleNamespace

import numpy as np
import pytest


WEEKLY_SERIES = [100, 110, 105, 120, 115, 130, 125]


class FakeLLM:
    """Chat model stand-in recording prompts; no network."""

    def __init__(self, reply="Ответ модели", chunks=None, failures=None):
        self.reply = reply
        self.chunks = chunks or ["Выручка ", "растёт", ""]
        self.failures = list(failures or [])
        self.prompts = []
        self.stream_closed = False

    def invoke(self, prompt):
        self.prompts.append(prompt)
        if self.failures:
            raise self.failures.pop(0)
        return SimpleNamespace(content=f"  {self.reply}  ")

    def stream(self, prompt):
        self.prompts.append(prompt)
        return self._generate()

    def _generate(self):
        try:
            for chunk in self.chunks:
                yield SimpleNamespace(content=chunk)
        finally:
            self.stream_closed = True


@pytest.fixture
def rng():
    return np.random.default_rng(42)


@pytest.fixture
def weekly_series():
    return list(WEEKLY_SERIES)


@pytest.fixture
def fake_llm():
    return FakeLLM()
