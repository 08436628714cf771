# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Unit tests for source map serialisation."""

import json
import os
from pathlib import Path

import pytest

from doctestgen.sourcemap import (
    SourceMapGenerator,
    encode_vlq,
    source_mapping_url_comment,
)


@pytest.mark.parametrize(
    ("value", "expected"),
    [(0, "A"), (1, "C"), (-1, "D"), (2, "E"), (-2, "F"), (15, "e"), (16, "gB"), (-16, "hB")],
)
def test_encode_vlq(value: int, expected: str) -> None:
    assert encode_vlq(value) == expected


def test_generator_serialises_version_three_map() -> None:
    generator = SourceMapGenerator(file="test_examples.py")
    generator.add_mapping(
        generated_line=3, generated_column=2, source="a.py", original_line=2, original_column=4
    )
    generator.add_mapping(
        generated_line=2, generated_column=2, source="a.py", original_line=1, original_column=0
    )
    generator.add_mapping(
        generated_line=6, generated_column=2, source="b.md", original_line=3, original_column=2
    )

    payload = json.loads(generator.to_json())

    assert payload == {
        "version": 3,
        "file": "test_examples.py",
        "sources": ["a.py", "b.md"],
        "names": [],
        "mappings": ";EAAA;EACI;;;ECCF",
    }


def test_generated_columns_are_relative_within_one_line() -> None:
    generator = SourceMapGenerator()
    generator.add_mapping(
        generated_line=1, generated_column=0, source="a.py", original_line=1, original_column=0
    )
    generator.add_mapping(
        generated_line=1, generated_column=4, source="a.py", original_line=1, original_column=4
    )

    payload = generator.to_dict()

    assert "file" not in payload
    assert payload["mappings"] == "AAAA,IAAI"


def test_sources_are_made_relative_to_source_root(tmp_path: Path) -> None:
    generator = SourceMapGenerator()
    generator.add_mapping(
        generated_line=1,
        generated_column=0,
        source=str(tmp_path / "pkg" / "a.py"),
        original_line=1,
        original_column=0,
    )
    generator.add_mapping(
        generated_line=2, generated_column=0, source="b.md", original_line=1, original_column=0
    )

    payload = generator.to_dict(source_root=tmp_path / "build")
    relative_md = os.path.relpath("b.md", tmp_path / "build").replace(os.sep, "/")

    assert payload["sources"] == ["../pkg/a.py", relative_md]
    assert generator.sources() == [str(tmp_path / "pkg" / "a.py"), "b.md"]


def test_generator_rejects_invalid_positions() -> None:
    generator = SourceMapGenerator()

    with pytest.raises(ValueError):
        generator.add_mapping(
            generated_line=0, generated_column=0, source="a.py", original_line=1, original_column=0
        )
    with pytest.raises(ValueError):
        generator.add_mapping(
            generated_line=1, generated_column=0, source="a.py", original_line=1, original_column=-1
        )


def test_empty_generator_has_no_mappings() -> None:
    assert SourceMapGenerator().to_dict()["mappings"] == ""


def test_source_mapping_url_comment() -> None:
    assert source_mapping_url_comment("out.py.map") == "# sourceMappingURL=out.py.map\n"
