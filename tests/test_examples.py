"""Tests for the example feed."""

from __future__ import annotations

import json

import pydantic
import pytest

from learning_app_mcp.errors import ExampleNotFoundError
from learning_app_mcp.examples import ExampleLibrary
from learning_app_mcp.models.app import ContentBasis, Example
from learning_app_mcp.parse import has_html_document


class TestPackagedExamples:
    def test_loads_bundled_records(self):
        library = ExampleLibrary.load()
        assert len(library) == 2
        assert library.default_example.title == "Functional harmony"

    def test_bundled_records_are_preseeded(self):
        for example in ExampleLibrary.load().examples:
            assert example.url.startswith("https://www.youtube.com/watch?v=")
            assert ContentBasis.from_example(example).preseeded
            assert has_html_document(example.code)


class TestCustomPath:
    def test_explicit_path(self, tmp_path):
        path = tmp_path / "examples.json"
        path.write_text(json.dumps([{"title": "Only", "url": "https://youtu.be/aaaaaaaaaaa", "spec": "S"}]))
        library = ExampleLibrary.load(str(path))
        assert library.default_example == Example(title="Only", url="https://youtu.be/aaaaaaaaaaa", spec="S")

    def test_configured_path(self, tmp_path, monkeypatch):
        path = tmp_path / "examples.json"
        path.write_text("[]")
        monkeypatch.setenv("LEARNING_APP_EXAMPLES_PATH", str(path))
        assert len(ExampleLibrary.load()) == 0

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            ExampleLibrary.load(str(tmp_path / "absent.json"))

    def test_wrong_shape(self, tmp_path):
        path = tmp_path / "examples.json"
        path.write_text('{"title": "not a list"}')
        with pytest.raises(pydantic.ValidationError):
            ExampleLibrary.load(str(path))


class TestLookup:
    LIB = ExampleLibrary([
        Example(title="A", url="https://youtu.be/aaaaaaaaaaa"),
        Example(title="B", url="https://youtu.be/bbbbbbbbbbb"),
        Example(title="No url"),
    ])

    def test_find_by_title_then_url(self):
        assert self.LIB.find("B").url == "https://youtu.be/bbbbbbbbbbb"
        assert self.LIB.find("https://youtu.be/aaaaaaaaaaa").title == "A"

    def test_find_unknown(self):
        with pytest.raises(ExampleNotFoundError, match="Z"):
            self.LIB.find("Z")

    def test_urls_skip_blank(self):
        assert self.LIB.urls() == {"https://youtu.be/aaaaaaaaaaa", "https://youtu.be/bbbbbbbbbbb"}

    def test_empty_library_default(self):
        assert ExampleLibrary().default_example == Example()

    def test_examples_is_a_copy(self):
        self.LIB.examples.clear()
        assert len(self.LIB) == 3
