"""Pytest configuration and fixtures for rc package tests."""

from pathlib import Path

import pytest

from delayrc.layering import RcSources
from delayrc.options import OptionKind, RcOption
from delayrc.resolver import DelayedResolver
from delayrc.scanner import DirectiveKind, iter_directives
from delayrc.store import RcStore


@pytest.fixture
def environ():
    """Isolated environment mapping, never os.environ."""
    return {}


@pytest.fixture
def sources(tmp_path):
    """Overlay locations inside a temporary directory."""
    return RcSources(
        system_path=str(tmp_path / "etc" / "delayrc"),
        user_path=str(tmp_path / "home" / ".delayrc"),
    )


@pytest.fixture
def write_file(tmp_path):
    """Write a file below the temporary directory and return its path."""

    def _write(relative: str, content: str) -> Path:
        path = tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
        return path

    return _write


@pytest.fixture
def make_store(sources, environ):
    """Build an RcStore from ``key=default`` keyword arguments."""

    def _make(**values):
        options = [RcOption(key, OptionKind.STRING, value) for key, value in values.items()]
        return RcStore(options, sources=sources, environ=environ)

    return _make


@pytest.fixture
def make_resolver():
    """Build a resolver directly over a plain map."""

    def _make(values, prefix_key="VARPREFIX"):
        pending = {
            key
            for key, value in values.items()
            if any(
                span.kind in (DirectiveKind.VARIABLE, DirectiveKind.IF, DirectiveKind.NOTIF)
                for span in iter_directives(value)
            )
        }
        return DelayedResolver(dict(values), pending, prefix_key)

    return _make
