# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

import pytest

from modelpile import Collection, Element


class Person(Element):
    name: str = ""
    age: int = 0


class Recorder:
    """Collects (event, args) pairs emitted by a collection."""

    def __init__(self):
        self.calls = []

    def listen(self, target, *events):
        for event in events:
            target.subscribe(event, self._handler(event))
        return self

    def _handler(self, event):
        def handle(*args):
            self.calls.append((event, args))

        return handle

    def events(self):
        return [event for event, _ in self.calls]

    def of(self, event):
        return [args for name, args in self.calls if name == event]


@pytest.fixture
def people():
    return [
        Person(id=1, name="Alice", age=31),
        Person(id=2, name="Bob", age=25),
        Person(id=3, name="Carol", age=40),
    ]


@pytest.fixture
def collection(people):
    return Collection(people)


@pytest.fixture
def recorder():
    return Recorder()
