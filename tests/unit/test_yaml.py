"""Tests for dotted path navigation and the YAML handler."""

from __future__ import annotations

import io
from pathlib import Path

import pytest
from ruamel.yaml import YAML

from shipmark.exceptions import KeyPathError, VersionFileError
from shipmark.handlers import FileConfig, YamlHandler
from shipmark.handlers.paths import get_path, parse_path, set_path
from shipmark.handlers.yaml_file import detect_layout


def load(text: str):
    yaml = YAML(typ="rt")
    yaml.preserve_quotes = True
    return yaml.load(text)


class TestParsePath:
    """Tests for parse_path()."""

    def test_simple(self):
        """A bare key is a single segment."""
        assert parse_path("version") == ["version"]

    def test_nested(self):
        """Dots separate segments."""
        assert parse_path("metadata.labels.version") == ["metadata", "labels", "version"]

    def test_double_quoted_segment_with_dot(self):
        """A double-quoted segment may contain dots."""
        assert parse_path('annotations."app.kubernetes.io/version"') == [
            "annotations",
            "app.kubernetes.io/version",
        ]

    def test_single_quoted_segment(self):
        """Single quotes work like double quotes."""
        assert parse_path("a.'b.c'.d") == ["a", "b.c", "d"]

    def test_empty_segments_dropped(self):
        """Repeated and trailing dots add no segments."""
        assert parse_path("a..b.") == ["a", "b"]


class TestGetPath:
    """Tests for get_path()."""

    def test_nested_value(self):
        """Nested mappings are walked segment by segment."""
        doc = load("image:\n  tag: '1.0.0'\n")
        assert get_path(doc, "image.tag") == "1.0.0"

    def test_numeric_leaf(self):
        """Non-string leaves are returned as loaded."""
        doc = load("release: 3\n")
        assert get_path(doc, "release") == 3

    def test_sequence_index(self):
        """An integer segment indexes into a sequence."""
        doc = load("containers:\n  - name: app\n    version: 2.1.0\n")
        assert get_path(doc, "containers.0.version") == "2.1.0"

    def test_sequence_requires_integer(self):
        """A non-integer segment cannot index a sequence."""
        doc = load("containers:\n  - name: app\n")
        assert get_path(doc, "containers.first.name") is None

    def test_sequence_index_out_of_range(self):
        """An index past the end resolves to None."""
        doc = load("containers:\n  - name: app\n")
        assert get_path(doc, "containers.3.name") is None

    def test_scalar_before_end(self):
        """A scalar in the middle of the path resolves to None."""
        doc = load("image: nginx\n")
        assert get_path(doc, "image.tag") is None

    def test_missing_key(self):
        """A missing key resolves to None."""
        doc = load("image:\n  repository: nginx\n")
        assert get_path(doc, "image.tag") is None


class TestSetPath:
    """Tests for set_path()."""

    def test_sets_existing_key(self):
        """An existing leaf is replaced."""
        doc = load("image:\n  tag: 1.0.0\n")
        set_path(doc, "image.tag", "2.0.0")
        assert doc["image"]["tag"] == "2.0.0"

    def test_adds_final_key_to_existing_map(self):
        """The last segment may be created."""
        doc = load("image:\n  repository: nginx\n")
        set_path(doc, "image.tag", "2.0.0")
        assert doc["image"]["tag"] == "2.0.0"

    def test_through_sequence(self):
        """Sequence indexes work on the way to the leaf."""
        doc = load("containers:\n  - name: app\n    tag: 1.0.0\n")
        set_path(doc, "containers.0.tag", "1.1.0")
        assert doc["containers"][0]["tag"] == "1.1.0"

    def test_missing_intermediate_raises(self):
        """Intermediate keys are never created."""
        doc = load("name: app\n")
        with pytest.raises(KeyPathError, match="Key not found: image"):
            set_path(doc, "image.tag", "1.0.0")

    def test_scalar_intermediate_raises(self):
        """A scalar cannot be descended into."""
        doc = load("image: nginx\nother: 1\n")
        with pytest.raises(KeyPathError, match="image.tag"):
            set_path(doc, "image.tag.value", "1.0.0")

    def test_empty_path_raises(self):
        """An empty path is rejected."""
        with pytest.raises(KeyPathError, match="Empty key path"):
            set_path(load("a: 1\n"), "", "1.0.0")

    def test_keeps_quote_style(self):
        """A double-quoted leaf stays double-quoted."""
        doc = load("tag: \"1.0.0\"\n")
        set_path(doc, "tag", "2.0.0")

        out = _dump(doc)
        assert out == 'tag: "2.0.0"\n'


def _dump(doc) -> str:
    yaml = YAML(typ="rt")
    yaml.preserve_quotes = True
    stream = io.StringIO()
    yaml.dump(doc, stream)
    return stream.getvalue()


class TestDetectLayout:
    """Tests for detect_layout()."""

    def test_defaults_for_flat_document(self):
        """A flat document falls back to the defaults."""
        assert detect_layout("name: app\nversion: 1.0.0\n") == (2, 0)

    def test_indented_sequence(self):
        """Dashes indented below their key set the offset."""
        assert detect_layout("ports:\n  - name: http\n    port: 80\n") == (2, 2)

    def test_flush_sequence(self):
        """Dashes level with their key give offset 0."""
        assert detect_layout("ports:\n- name: http\n") == (2, 0)

    def test_four_space_mapping(self):
        """The first nested mapping sets the indent."""
        assert detect_layout("image:\n    tag: 1.0.0\n") == (4, 0)

    def test_comments_are_skipped(self):
        """Comment lines do not count as content."""
        content = "# header\nimage:\n  # the tag\n  tag: 1.0.0\nargs:\n  - --verbose\n"
        assert detect_layout(content) == (2, 2)


class TestYamlHandler:
    """Tests for YamlHandler."""

    def test_can_handle_requires_key(self):
        """Only YAML files with a key path are handled."""
        handler = YamlHandler()

        assert handler.can_handle("Chart.yaml", FileConfig(path="Chart.yaml", key="version"))
        assert handler.can_handle("values.yml", FileConfig(path="values.yml", key="image.tag"))
        assert not handler.can_handle("Chart.yaml", FileConfig(path="Chart.yaml"))
        assert not handler.can_handle("Chart.yaml")
        assert not handler.can_handle("config.json", FileConfig(path="config.json", key="v"))

    def test_can_handle_false_even_with_version_field(self, tmp_path: Path, chart_yaml: Path):
        """A YAML file without a key is never guessed at."""
        assert not YamlHandler().can_handle("Chart.yaml", FileConfig(path="Chart.yaml"))

    def test_read_top_level(self, tmp_path: Path, chart_yaml: Path):
        """A top-level key is read."""
        config = FileConfig(path="Chart.yaml", key="appVersion")
        assert YamlHandler().read("Chart.yaml", tmp_path, config) == "1.0.0"

    def test_read_nested(self, tmp_path: Path, values_yaml: Path):
        """A nested key is read."""
        config = FileConfig(path="values.yaml", key="image.tag")
        assert YamlHandler().read("values.yaml", tmp_path, config) == "1.0.0"

    def test_read_number_is_stringified(self, tmp_path: Path):
        """Numeric leaves are returned as strings."""
        (tmp_path / "build.yaml").write_text("buildNumber: 42\n")
        config = FileConfig(path="build.yaml", key="buildNumber")
        assert YamlHandler().read("build.yaml", tmp_path, config) == "42"

    def test_read_map_leaf_is_not_found(self, tmp_path: Path, values_yaml: Path):
        """A mapping is not a version."""
        config = FileConfig(path="values.yaml", key="image")
        assert YamlHandler().read("values.yaml", tmp_path, config) is None

    def test_read_boolean_is_not_found(self, tmp_path: Path):
        """A boolean is not a version."""
        (tmp_path / "flags.yaml").write_text("enabled: true\n")
        config = FileConfig(path="flags.yaml", key="enabled")
        assert YamlHandler().read("flags.yaml", tmp_path, config) is None

    def test_read_missing_file(self, tmp_path: Path):
        """A missing file has no version."""
        config = FileConfig(path="Chart.yaml", key="version")
        assert YamlHandler().read("Chart.yaml", tmp_path, config) is None

    def test_read_malformed_yaml(self, tmp_path: Path):
        """Malformed YAML reads as not found."""
        (tmp_path / "bad.yaml").write_text("key: [unclosed\n  - : :\n")
        config = FileConfig(path="bad.yaml", key="key")
        assert YamlHandler().read("bad.yaml", tmp_path, config) is None

    def test_write_nested_preserves_comments(self, tmp_path: Path, values_yaml: Path):
        """Comments and quoting survive a write."""
        config = FileConfig(path="values.yaml", key="image.tag")

        YamlHandler().write("values.yaml", "2.0.0", tmp_path, config)

        content = values_yaml.read_text()
        assert "  # Docker image tag\n" in content
        assert 'tag: "2.0.0"' in content
        assert "repository: ghcr.io/example/app" in content
        assert YamlHandler().read("values.yaml", tmp_path, config) == "2.0.0"

    def test_write_changes_only_the_target_line(self, tmp_path: Path, chart_yaml: Path):
        """Only the changed value differs after a write."""
        before = chart_yaml.read_text()
        config = FileConfig(path="Chart.yaml", key="appVersion")

        YamlHandler().write("Chart.yaml", "3.1.0", tmp_path, config)

        assert chart_yaml.read_text() == before.replace('appVersion: "1.0.0"', 'appVersion: "3.1.0"')

    def test_write_keeps_indented_sequences(self, tmp_path: Path, values_yaml: Path):
        """Indented sequences keep their dash offset."""
        before = values_yaml.read_text()
        config = FileConfig(path="values.yaml", key="image.tag")

        YamlHandler().write("values.yaml", "2.0.0", tmp_path, config)

        assert values_yaml.read_text() == before.replace('tag: "1.0.0"', 'tag: "2.0.0"')

    def test_write_missing_file_raises(self, tmp_path: Path):
        """Writing a missing file is an error."""
        config = FileConfig(path="Chart.yaml", key="version")
        with pytest.raises(VersionFileError, match="File not found"):
            YamlHandler().write("Chart.yaml", "1.0.0", tmp_path, config)

    def test_write_without_key_raises(self, tmp_path: Path, chart_yaml: Path):
        """Writing needs a key path."""
        with pytest.raises(KeyPathError, match="key path"):
            YamlHandler().write("Chart.yaml", "1.0.0", tmp_path, FileConfig(path="Chart.yaml"))

    def test_write_unresolvable_path_raises(self, tmp_path: Path, values_yaml: Path):
        """A path through missing keys is an error."""
        config = FileConfig(path="values.yaml", key="deployment.image.tag")
        with pytest.raises(KeyPathError, match="deployment"):
            YamlHandler().write("values.yaml", "1.0.0", tmp_path, config)

    def test_write_keeps_block_scalar_value(self, tmp_path: Path):
        """A block scalar in a four-space document keeps its value."""
        chart = tmp_path / "Chart.yaml"
        chart.write_text(
            "name: app\n"
            "description: >-\n"
            "    A chart for\n"
            "    the app\n"
            "image:\n"
            "    tag: 1.0.0\n"
        )
        config = FileConfig(path="Chart.yaml", key="image.tag")

        YamlHandler().write("Chart.yaml", "1.1.0", tmp_path, config)

        doc = load(chart.read_text())
        assert doc["description"] == "A chart for the app"
        assert doc["image"]["tag"] == "1.1.0"
