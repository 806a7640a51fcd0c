"""
meshguard/policy/templates.py

Minimal renderer for the bundled policy templates. Only `{{ .Key }}`
placeholders are supported; a rendered file may hold several YAML documents
separated by `---` lines.
"""

from __future__ import annotations

import re
from importlib import resources
from typing import Iterable, List, Mapping

from meshguard.errors import ConfigError, ErrorCode

_PLACEHOLDER_RE = re.compile(r"\{\{\s*\.(\w+)\s*\}\}")
_SEPARATOR_RE = re.compile(r"^---\s*$", re.MULTILINE)


def render_one(template: str, params: Mapping[str, str]) -> str:
    def _sub(match: re.Match) -> str:
        key = match.group(1)
        if key not in params:
            raise ConfigError(
                f"Template placeholder {{{{ .{key} }}}} has no value",
                details={"known": sorted(params)},
                code=ErrorCode.CONFIG_MISSING_REQUIRED,
            )
        return str(params[key])

    return _PLACEHOLDER_RE.sub(_sub, template)


def split_documents(text: str) -> List[str]:
    return [doc.strip() + "\n" for doc in _SEPARATOR_RE.split(text) if doc.strip()]


def render(templates: Iterable[str], params: Mapping[str, str]) -> List[str]:
    """Render every template and flatten the result into single documents."""
    documents: List[str] = []
    for template in templates:
        documents.extend(split_documents(render_one(template, params)))
    return documents


def load_template(package: str, name: str) -> str:
    """Read a template shipped as package data, e.g. ("meshguard.scenarios", "testdata/jwt/x.yaml.tmpl")."""
    return resources.files(package).joinpath(name).read_text(encoding="utf-8")
