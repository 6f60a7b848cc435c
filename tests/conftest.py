"""Shared fixtures."""

import pytest


@pytest.fixture
def shim_tree(tmp_path):
    """A compat file and a shim directory with dependency markers."""
    shims = tmp_path / "shims"
    shims.mkdir()
    (shims / "es.map.constructor.js").write_text("var MapShim = 1;\n", encoding="utf-8")
    (shims / "es.array.iterator.js").write_text("var ArrayIter = 1;\n", encoding="utf-8")
    (shims / "esnext.map.from.js").write_text(
        "'use strict';\n// dependency: es.map.constructor\nvar MapFrom = 1;\n",
        encoding="utf-8",
    )
    (shims / "web.dom-collections.iterator.js").write_text(
        "// dependency: es.array.iterator\nvar DomIter = 1;\n// dependency: es.array.iterator\n",
        encoding="utf-8",
    )
    compat = tmp_path / "compat.json"
    compat.write_text(
        '{"es.map.constructor": {"chrome": "51", "firefox": "53"},'
        ' "es.array.iterator": {"chrome": "66", "firefox": "60"},'
        ' "web.dom-collections.iterator": {"chrome": "66"}}',
        encoding="utf-8",
    )
    return tmp_path
