"""Line-preserving conversion of fragment dialects into executable Python.

Every captured position refers to a source line, so a transpiler may rewrite
lines but never add, remove or reflow them.
"""

from __future__ import annotations

from ..core.errors import TranspileFailure

PYTHON_LANGUAGES = frozenset({"python", "py", "python3"})
PROMPT_LANGUAGES = frozenset({"pycon", "python-repl"})
SUPPORTED_LANGUAGES = PYTHON_LANGUAGES | PROMPT_LANGUAGES

_PROMPTS = (">>> ", "... ")
_BARE_PROMPTS = (">>>", "...")


def needs_transpile(language: str) -> bool:
    return language.lower() in PROMPT_LANGUAGES


def _strip_prompt(line: str) -> str:
    for prompt in _PROMPTS:
        if line.startswith(prompt):
            return line[len(prompt):]
    if line.rstrip() in _BARE_PROMPTS:
        return ""
    if not line.strip():
        return line
    return f"# {line}"


def transpile(source: str, language: str) -> str:
    if not needs_transpile(language):
        return source
    lines = source.split("\n")
    converted = [_strip_prompt(line) for line in lines]
    if len(converted) != len(lines):
        raise TranspileFailure(f"transpiling {language} changed the line count")
    return "\n".join(converted)
