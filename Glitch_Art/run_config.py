"""
JSON run configs layered under the CLI.

A run config is a JSON object keyed by argparse dest names. How each value is
checked comes from the parser action that owns the key, so a new CLI flag is
accepted in the file without touching this module. Flags given explicitly on
the command line always win over the file.
"""

from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Dict, List, Sequence

# Dests that only make sense on the command line.
_CLI_ONLY = frozenset({"help", "config"})


def load_run_config(path: Path) -> Dict[str, object]:
    try:
        with path.open("r", encoding="utf-8") as fh:
            payload = json.load(fh)
    except FileNotFoundError:
        raise FileNotFoundError(f"Run config not found: {path}") from None
    except json.JSONDecodeError as exc:
        raise ValueError(f"{path}: invalid JSON ({exc.msg}, line {exc.lineno})") from exc
    if not isinstance(payload, dict):
        raise ValueError(f"{path}: expected a JSON object at the top level, got {type(payload).__name__}")
    return payload


def explicit_dests(parser: argparse.ArgumentParser, argv: Sequence[str], args: argparse.Namespace) -> set[str]:
    """
    Dests the user set on the command line.

    Optionals count when one of their flags appears in `argv` (`--flag` or
    `--flag=value`). Positionals count when they parsed to something other
    than their default.
    """

    tokens = list(argv)
    found: set[str] = set()
    for action in parser._actions:
        if action.dest in _CLI_ONLY:
            continue
        if action.option_strings:
            flags = tuple(action.option_strings)
            if any(tok in flags or tok.startswith(tuple(f + "=" for f in flags)) for tok in tokens):
                found.add(action.dest)
        elif getattr(args, action.dest, None) not in (None, [], action.default):
            found.add(action.dest)
    return found


def _str_list(value: object, key: str) -> List[str]:
    items = [value] if isinstance(value, str) else value
    if not isinstance(items, list) or not all(isinstance(v, str) for v in items):
        raise ValueError(f"{key}: expected a string or a list of strings")
    items = [v.strip() for v in items]
    if not items or "" in items:
        raise ValueError(f"{key}: empty entries are not allowed")
    return items


def _number(value: object, key: str, kind: type) -> object:
    # bool is an int subclass; true/false in JSON is never a number here
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{key}: expected a number, got {value!r}")
    if kind is int:
        if isinstance(value, float) and not value.is_integer():
            raise ValueError(f"{key}: expected an integer, got {value!r}")
        return int(value)
    return kind(value)


def coerce_value(action: argparse.Action, value: object) -> object:
    """Check one file value against the parser action that owns its key."""

    key = action.dest
    if action.nargs in ("*", "+"):
        coerced = _str_list(value, key)
    elif action.nargs == 0:
        # store_true / store_false
        if not isinstance(value, bool):
            raise ValueError(f"{key}: expected true or false, got {value!r}")
        coerced = value
    elif action.type in (int, float):
        coerced = _number(value, key, action.type)
    else:
        if not isinstance(value, str) or not value.strip():
            raise ValueError(f"{key}: expected a non-empty string, got {value!r}")
        coerced = value if action.type is None else action.type(value)

    if action.choices is not None and coerced not in action.choices:
        raise ValueError(f"{key}: {coerced!r} is not one of {sorted(action.choices)}")
    return coerced


def apply_run_config(
    *,
    args: argparse.Namespace,
    payload: Dict[str, object],
    cli_dests: set[str],
    parser: argparse.ArgumentParser,
) -> None:
    """Fill `args` from `payload`, leaving `cli_dests` and null values alone."""

    actions = {a.dest: a for a in parser._actions if a.dest not in _CLI_ONLY}
    rejected = sorted(k for k in payload if k not in actions)
    if rejected:
        raise ValueError(f"Unknown run config keys: {rejected}")

    for key, value in payload.items():
        if key in cli_dests or value is None:
            continue
        setattr(args, key, coerce_value(actions[key], value))
