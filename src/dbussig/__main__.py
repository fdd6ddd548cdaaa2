#!/usr/bin/env python3
"""
CLI for the D-Bus signature engine.

Usage:
    python -m dbussig check SIGNATURE [SIGNATURE ...] [--json]
    python -m dbussig tree SIGNATURE
    python -m dbussig format SIGNATURE

Examples:
    # Check that signatures parse and follow the protocol rules
    python -m dbussig check 'a(sv)' 'aai'

    # Show the type tree
    python -m dbussig tree 'a(a(i))'

    # Apply stricter limits from a YAML file
    python -m dbussig --config limits.yaml check 'aaai'
"""

import argparse
import json
import logging
import sys

import yaml

from .config import load_limits, limits_from_env
from .errors import SignatureError
from .types import ValueType, ArrayType, StructType, DictionaryType


def format_tree(value: ValueType, indent: int = 0) -> str:
    """Format a complete type as an indented tree."""
    pad = "  " * indent
    if isinstance(value, ArrayType):
        return f"{pad}array\n" + format_tree(value.element, indent + 1)
    elif isinstance(value, StructType):
        lines = [f"{pad}struct"]
        lines.extend(format_tree(f, indent + 1) for f in value.fields)
        return "\n".join(lines)
    elif isinstance(value, DictionaryType):
        return f"{pad}dict\n" + format_tree(value.value, indent + 1)
    else:
        return f"{pad}{value.name}"


def cmd_check(args, limits):
    """Parse and validate each signature."""
    from . import Signature

    failures = 0
    results = []

    for text in args.signature:
        try:
            sig = Signature.from_string(text, limits)
            result = sig.check(limits)
        except SignatureError as e:
            failures += 1
            if args.json:
                results.append({"signature": text, "diagnostics": [e.diagnostic.to_json()],
                                 "error_count": 1, "warning_count": 0})
            else:
                print(f"FAIL: {text!r}")
                print(e)
            continue

        if result.has_errors:
            failures += 1
        if args.json:
            results.append({"signature": text, **result.to_json()})
        elif result.has_errors:
            print(f"FAIL: {text!r}")
            print(result.format_all())
        else:
            print(f"OK: {text!r} - {len(sig)} complete type(s)")
            if result.has_warnings:
                print(result.format_all())

    if args.json:
        print(json.dumps(results, indent=2))

    return 1 if failures else 0


def cmd_tree(args, limits):
    """Print the type tree of a signature."""
    from . import Signature

    try:
        sig = Signature.from_string(args.signature, limits)
    except SignatureError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    for value in sig:
        print(format_tree(value))
    return 0


def cmd_format(args, limits):
    """Print the canonical re-encoding of a signature."""
    from . import Signature

    try:
        sig = Signature.from_string(args.signature, limits)
    except SignatureError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(sig.string_value)
    return 0


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog='python -m dbussig',
        description='D-Bus type signature parser and checker',
    )
    parser.add_argument('-c', '--config', metavar='FILE',
                        help='YAML file with signature limits (default: $DBUSSIG_CONFIG)')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Enable debug logging')

    subparsers = parser.add_subparsers(dest='action', required=True)

    # check command
    check_parser = subparsers.add_parser('check', help='Check signatures for errors')
    check_parser.add_argument('signature', nargs='+', help='Signature string')
    check_parser.add_argument('--json', action='store_true',
                              help='Print diagnostics as JSON')

    # tree command
    tree_parser = subparsers.add_parser('tree', help='Show the type tree of a signature')
    tree_parser.add_argument('signature', help='Signature string')

    # format command
    format_parser = subparsers.add_parser('format', help='Re-encode a signature')
    format_parser.add_argument('signature', help='Signature string')

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        limits = load_limits(args.config) if args.config else limits_from_env()
    except (OSError, ValueError, yaml.YAMLError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.action == 'check':
        return cmd_check(args, limits)
    elif args.action == 'tree':
        return cmd_tree(args, limits)
    elif args.action == 'format':
        return cmd_format(args, limits)
    else:
        parser.print_help()
        return 1


if __name__ == '__main__':
    sys.exit(main())
