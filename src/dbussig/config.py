"""
Configurable protocol limits.

Defaults follow the D-Bus specification. A YAML file can override them:

    schema_version: "1.0"
    limits:
      max_length: 255
      max_array_depth: 32

Set ``DBUSSIG_CONFIG`` to the path of such a file to apply it to the
command line tool.
"""

import logging
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "DBUSSIG_CONFIG"

# Upper bound for every depth limit. The parser recurses once per level
# and must stay inside the interpreter recursion limit
DEPTH_CEILING = 255

_DEPTH_LIMITS = ("max_array_depth", "max_struct_depth", "max_total_depth")


@dataclass(frozen=True)
class SignatureLimits:
    """Length and nesting limits applied to signatures."""
    min_length: int = 1         # applied to the string entry point only
    max_length: int = 255
    max_array_depth: int = 32
    max_struct_depth: int = 32
    max_total_depth: int = 64

    def __post_init__(self):
        for f in fields(self):
            value = getattr(self, f.name)
            if not isinstance(value, int) or isinstance(value, bool) or value < 0:
                raise ValueError(f"limit '{f.name}' must be a non-negative integer, got {value!r}")
            if f.name in _DEPTH_LIMITS and value > DEPTH_CEILING:
                raise ValueError(f"limit '{f.name}' must be at most {DEPTH_CEILING}, got {value}")
        if self.min_length > self.max_length:
            raise ValueError(
                f"min_length ({self.min_length}) is greater than max_length ({self.max_length})"
            )

    def length_ok(self, length: int) -> bool:
        return self.min_length <= length <= self.max_length


DEFAULT_LIMITS = SignatureLimits()


def limits_from_dict(data: Dict[str, Any], base: SignatureLimits = DEFAULT_LIMITS) -> SignatureLimits:
    """Build limits from a mapping, keeping ``base`` values for missing keys."""
    known = {f.name for f in fields(SignatureLimits)}
    unknown = set(data) - known
    if unknown:
        raise ValueError(f"Unknown limit(s): {sorted(unknown)}. Known limits: {sorted(known)}")
    return replace(base, **data)


def load_limits(path: Union[str, Path]) -> SignatureLimits:
    """Load and validate a YAML limits file."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path, 'r', encoding='utf-8') as f:
        data = yaml.safe_load(f)

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid config format in {path}: expected dict at root")

    schema_version = str(data.get("schema_version", "1.0"))
    if not schema_version.startswith("1."):
        raise ValueError(
            f"Unsupported schema version '{schema_version}' in {path}. "
            f"Expected version 1.x"
        )

    limits = data.get("limits") or {}
    if not isinstance(limits, dict):
        raise ValueError(f"Invalid config format in {path}: 'limits' must be a mapping")

    result = limits_from_dict(limits)
    logger.debug("loaded limits from %s: %s", path, result)
    return result


def limits_from_env(environ: Optional[Dict[str, str]] = None) -> SignatureLimits:
    """Load limits from the file named by DBUSSIG_CONFIG, or the defaults."""
    environ = os.environ if environ is None else environ
    path = environ.get(CONFIG_ENV_VAR)
    if not path:
        return DEFAULT_LIMITS
    return load_limits(path)
