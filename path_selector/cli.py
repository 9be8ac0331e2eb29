from __future__ import annotations
import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import List

from . import Rule, Finding
from .capabilities import CapabilitySet
from .lints import lint_syntax, lint_duplicates, lint_catch_all, aggregate_stats
from .priority import cohort_and_payloads, select
from .selector import MatcherOptions, PathMatcher


class _Palette:
    RESET = "\033[0m"
    BOLD = "\033[1m"
    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    BLUE = "\033[34m"
    CYAN = "\033[36m"
    BRIGHT_CYAN = "\033[96m"
    GREY = "\033[90m"


def _should_color(mode: str) -> bool:
    """Decide if we should emit ANSI colors."""
    if mode == "always":
        return True
    if mode == "never":
        return False
    # auto
    if os.environ.get("NO_COLOR"):
        return False
    return sys.stdout.isatty()


def _try_enable_windows_color() -> None:
    # colorama is optional; without it Windows consoles just show raw escapes
    try:
        import colorama
    except ImportError:
        return
    colorama.just_fix_windows_console()


def _clr(enabled: bool, text: str, *styles: str) -> str:
    if not enabled or not styles:
        return text
    return "".join(styles) + text + _Palette.RESET


def load_rules(path: Path) -> List[Rule]:
    """Read a JSON list of {"pattern": ..., "payload": ...} objects."""
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, list):
        raise ValueError(f"{path}: expected a JSON list of rules")
    rules: List[Rule] = []
    for i, item in enumerate(data):
        if not isinstance(item, dict) or not isinstance(item.get("pattern"), str):
            raise ValueError(f"{path}: rule #{i} needs a string 'pattern'")
        rules.append(Rule(pattern=item["pattern"], payload=item.get("payload"), source=str(path), order=i))
    return rules


def _filter_findings(findings: List[Finding], severity: str) -> List[Finding]:
    if severity == "all":
        return findings
    return [f for f in findings if f.severity == severity]


def main(argv: List[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description="Explain which selector rule applies to a node path")
    ap.add_argument("--rules", type=Path, required=True, help="JSON file with a list of {pattern, payload}")
    ap.add_argument("--path", dest="node_path", default=None, help="Node path to resolve (e.g., body.arm.lamp)")
    ap.add_argument("--cap", dest="caps", action="append", default=[],
                    help="Capability the node has (repeatable, e.g. --cap light)")
    ap.add_argument("--ignore-case", action="store_true", help="Compare path segments case insensitively")
    ap.add_argument("--severity", choices=["all", "high", "risky", "low"], default="all",
                    help="Filter which findings are shown (stats are unaffected).")
    ap.add_argument("--json", action="store_true", help="Emit JSON instead of human-readable")
    ap.add_argument("--color", choices=["auto", "always", "never"], default="auto",
                    help="Colorize output (default: auto)")
    ap.add_argument("--verbose", action="store_true", help="Log matcher decisions to stderr")
    args = ap.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    color_enabled = _should_color(args.color) and not args.json
    if color_enabled:
        _try_enable_windows_color()

    try:
        rules = load_rules(args.rules)
    except (OSError, ValueError) as e:
        print(_clr(color_enabled, f"Cannot load rules: {e}", _Palette.RED, _Palette.BOLD), file=sys.stderr)
        return 2
    matcher = PathMatcher(MatcherOptions(case_sensitive=not args.ignore_case))
    entity = CapabilitySet.from_iterable(args.caps)

    findings: List[Finding] = []
    findings.extend(lint_syntax(rules))
    findings.extend(lint_duplicates(rules))
    findings.extend(lint_catch_all(rules))
    syntax = [f.message for f in findings if f.code == "PATTERN_SYNTAX"]
    stats = aggregate_stats(findings, rules=len(rules), syntax_errors=len(syntax))
    visible_findings = _filter_findings(findings, args.severity)

    # invalid patterns would raise during matching; resolve over the valid ones only
    broken = {f.order for f in findings if f.code == "PATTERN_SYNTAX"}
    usable = [r for r in rules if r.order not in broken]

    winner = cohort = None
    if args.node_path is not None:
        winner = select(usable, args.node_path, entity, matcher)
        cohort, _ = cohort_and_payloads(usable, args.node_path, entity, matcher)

    exit_code = 2 if syntax else 0

    if args.json:
        payload = {
            "severity": args.severity,
            "stats": stats.__dict__,
            "syntax": syntax,
            "findings": [f.__dict__ for f in findings],
            "findings_visible": [f.__dict__ for f in visible_findings],
            "decision": {
                "path": args.node_path,
                "capabilities": sorted(entity.names),
                "winner": winner.__dict__ if winner else None,
                "specificity": matcher.get_specificity(winner.pattern) if winner else None,
                "cohort": [r.__dict__ for r in cohort],
            } if args.node_path is not None else None,
        }
        print(json.dumps(payload, indent=2, default=str))
        return exit_code

    # ----------- Human-readable (colored) -----------
    H = _Palette

    print(_clr(color_enabled, "Statistics", H.BRIGHT_CYAN, H.BOLD))
    for k, v in stats.__dict__.items():
        key = _clr(color_enabled, f"- {k}:", H.GREY)
        val = _clr(color_enabled, str(v), H.BOLD)
        print(f"{key} {val}")

    print()
    print(_clr(color_enabled, "Syntax messages:", H.BRIGHT_CYAN))
    if syntax:
        for e in syntax:
            print(_clr(color_enabled, f"- {e}", H.RED, H.BOLD))
    else:
        print(_clr(color_enabled, "- none", H.GREY))

    print()
    print(_clr(color_enabled, f"Findings (severity={args.severity}):", H.BRIGHT_CYAN))
    if visible_findings:
        for f in visible_findings:
            if f.severity == "high":
                tag = _clr(color_enabled, "[high]", H.RED, H.BOLD)
            elif f.severity == "risky":
                tag = _clr(color_enabled, "[risky]", H.YELLOW, H.BOLD)
            else:
                tag = _clr(color_enabled, "[low]", H.BLUE)
            loc = f" ({f.source}#{f.order})" if f.source and f.order is not None else ""
            print(f"- {tag} {f.code}: {f.message}{loc}")
    else:
        print(_clr(color_enabled, "- none", H.GREY))

    if args.node_path is not None:
        print()
        if winner:
            spec = matcher.get_specificity(winner.pattern)
            print(_clr(color_enabled, f"Winner: \"{winner.pattern}\" ({spec}) -> {winner.payload!r}", H.GREEN, H.BOLD))
        else:
            print(_clr(color_enabled, "Winner: none", H.YELLOW, H.BOLD))

        print()
        print(_clr(color_enabled, "Matched rules (highest specificity):", H.BRIGHT_CYAN))
        if cohort:
            for r in cohort:
                loc = f"{r.source}#{r.order}"
                pat = _clr(color_enabled, f"\"{r.pattern}\"", H.CYAN)
                print(f"- {loc}  pattern {pat} -> {r.payload!r}")
        else:
            print(_clr(color_enabled, "- none (no rules match this path)", H.GREY))

    return exit_code


if __name__ == "__main__":
    raise SystemExit(main())
