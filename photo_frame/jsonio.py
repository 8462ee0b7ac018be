#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Machine-readable command results for `--json` mode.

Every command prints exactly one document on stdout:
`{"result": "success"|"error", "command": ..., "data"|"error": ..., "meta"|"debug": ...}`.
Logs move to stderr so stdout stays parseable.
"""

import json
import logging
import sys
from typing import Any, Dict, Optional


def enable_json_logging() -> None:
    """Route logs to stderr at ERROR so stdout carries only the JSON result."""
    for h in logging.root.handlers[:]:
        logging.root.removeHandler(h)
    logging.basicConfig(stream=sys.stderr, level=logging.ERROR)


def _to_jsonable(obj: Any) -> Any:
    # Registry records, configs and results know their own wire form
    if hasattr(obj, "to_dict"):
        return obj.to_dict()
    return str(obj)


def render(payload: Dict[str, Any]) -> str:
    return json.dumps(payload, ensure_ascii=False, default=_to_jsonable)


def _emit(payload: Dict[str, Any]) -> None:
    print(render(payload), file=sys.stdout)
    sys.stdout.flush()


def success(command: str, data: Any = None,
            meta: Optional[Dict[str, Any]] = None, code: int = 0) -> int:
    payload: Dict[str, Any] = {"result": "success", "command": command, "data": data if data is not None else {}}
    if meta:
        payload["meta"] = meta
    _emit(payload)
    return code


def error(command: str, message: str, debug: Optional[Dict[str, Any]] = None, code: int = 1) -> int:
    payload: Dict[str, Any] = {"result": "error", "command": command, "error": message}
    if debug:
        payload["debug"] = debug
    _emit(payload)
    return code
