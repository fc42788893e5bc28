# src/pisanotower/cli.py

"""
Pisano Tower - nested Fibonacci towers modulo m

Description:
    Reads requests "a level m" and prints F(F(...F(a)...)) mod m with `level`
    applications of F (F(1) = F(2) = 1). Each inner level is reduced modulo
    the Pisano period of the modulus one level out.

usage: see pisanotower -h

"""

from __future__ import annotations

import argparse
import faulthandler
import sys
import textwrap
import traceback
from collections.abc import Iterable, Iterator
from importlib.resources import files as pkg_files
from typing import TextIO

from colorama import Fore, Style
from colorama import just_fix_windows_console

from pisanotower import __version__ as _ver
from pisanotower import config as CONFIG
from pisanotower.runtime import APPLY, CFG, ensure_runtime_deps
from pisanotower.runtime import current as _rt_current
from pisanotower.runtime import reset as _rt_reset
from pisanotower.tower import TowerSolver
from pisanotower.utility import (
    InputFormatError,
    TowerError,
    UserInputError,
    flatten_dotted,
    typename,
)
from pisanotower.workspace import ensure_workspace_seeded, seed_workspace, workspace_dir

_QUIT = {"q", "quit", "exit"}
_REQUEST_TOKENS = 3
_TWO_ARGS = 2


def _install_loud_error_handlers(debug: bool) -> None:
    if not debug:
        return
    # Always show full Python tracebacks
    try:
        faulthandler.enable()
    except (OSError, ValueError):
        pass  # stderr has no file descriptor (captured or redirected)

    def _excepthook(exc_type, exc, tb):
        sys.stderr.write("\n[UNCAUGHT EXCEPTION]\n")
        traceback.print_exception(exc_type, exc, tb, file=sys.stderr)
        sys.stderr.flush()
    sys.excepthook = _excepthook


def _print_user_error(msg: str) -> None:
    """Uniform, one-line friendly error."""
    prefix = f"{Fore.RED}Error:{Style.RESET_ALL}"
    if not msg.startswith("Error:"):
        msg = f"{prefix} {msg}"
    print(msg, file=sys.stderr)


def _print_invalid_input(msg: str) -> None:
    print(f"{Fore.RED}Invalid input:{Style.RESET_ALL} {msg}", file=sys.stderr)


# ---- request handling ----

def parse_request(line: str) -> tuple[int, int, int]:
    """Split 'a level m' into three ints or raise InputFormatError."""
    tokens = line.split()
    if len(tokens) != _REQUEST_TOKENS:
        raise InputFormatError(
            f"expected 'a level m' to compute F(...F(a)...) mod m, got {len(tokens)} token(s)."
        )
    values = []
    for tok in tokens:
        try:
            values.append(int(tok))
        except ValueError:
            raise InputFormatError(f"'{tok}' is not an integer.") from None
    a, level, m = values
    return a, level, m


def serve(lines: Iterable[str], solver: TowerSolver, *, out: TextIO | None = None) -> int:
    """
    Answer one request per line. Bad lines are reported and skipped; a fatal
    fault skips the request too, unless the runtime asks to abort on faults.
    Returns the number of requests that failed with a fatal fault.
    """
    out = sys.stdout if out is None else out
    failures = 0
    for raw in lines:
        line = raw.strip()
        if not line:
            continue
        if line.lower() in _QUIT:
            break

        try:
            a, level, m = parse_request(line)
            result = solver.solve(a, level, m)
        except UserInputError as e:
            _print_invalid_input(str(e))
            continue
        except TowerError as e:
            failures += 1
            if _rt_current().abort_on_fault:
                raise
            _print_user_error(f"{e.__class__.__name__}: {e}")
            continue

        print(result, file=out, flush=True)
    return failures


def _interactive_lines(prompt: str) -> Iterator[str]:
    while True:
        try:
            yield input(prompt)
        except (EOFError, KeyboardInterrupt):
            print()
            return


# ---- argparse ----
def _build_parser() -> argparse.ArgumentParser:

    epilog = textwrap.dedent("""\
    commands:
      init
          Create the workspace folder and copy the packaged profiles if missing.

      init overwrite
          Replace the workspace profiles with the packaged ones.

      profiles
          List the available profiles.

      where
          Show the workspace and package paths.

    Without arguments, requests "a level m" are read from stdin, one per line.
    """)

    p = argparse.ArgumentParser(
        description="Pisano Tower — F(F(...F(a)...)) mod m",
        usage=(
            "pisanotower [a level m] [--profile NAME] [--debug] [--strict] [--quiet]\n"
            "       pisanotower init [overwrite] | profiles | where\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=epilog,
    )
    p.add_argument("items", nargs="*", metavar="[a level m]",
                   help="one request to solve, or a command")
    p.add_argument("--profile", default=None, help="Profile from the workspace (default: 'default')")
    p.add_argument("--debug", action="store_true", help="Trace periods and merge rounds on stderr")
    p.add_argument("--strict", action="store_true", help="Abort on the first fatal fault instead of skipping the line")
    p.add_argument("--quiet", action="store_true", help="No banner or prompt in interactive mode")
    p.add_argument("--version", action="version", version=f"%(prog)s {_ver}")

    return p


def main(argv=None) -> int:
    """Thin wrapper: catch friendly errors, hide tracebacks unless debug."""
    try:
        return _main_impl(argv)
    except UserInputError as e:
        _print_user_error(str(e))
        return 2
    except TowerError as e:
        # strict posture: the first fatal fault ends the run
        if _rt_current().debug:
            traceback.print_exc()
        _print_user_error(f"{e.__class__.__name__}: {e}")
        return 1
    except KeyboardInterrupt:
        print("Aborted by user.", file=sys.stderr)
        return 130
    except Exception as e:
        # Only show traceback in debug mode
        debug = ("--debug" in (argv or sys.argv)) or _rt_current().debug
        if debug:
            raise
        print(f"Unexpected error: {e.__class__.__name__}: {e}", file=sys.stderr)
        print("Run with --debug for a full traceback.", file=sys.stderr)
        return 1


def _apply_profile(name: str, debug: bool) -> None:
    selected = CONFIG.load_settings(name)
    APPLY(selected)  # install into runtime

    if debug:
        print(f"[debug] active profile: {selected.name}", file=sys.stderr)
        if selected._source:
            print(f"[debug] profile file: {selected._source}", file=sys.stderr)
        flat = flatten_dotted(selected.as_dict())
        for k in sorted(flat.keys(), key=str.lower):
            runtime_val = CFG(k, None)
            print(f"        {k:.<40} {runtime_val!r} ({typename(runtime_val)})", file=sys.stderr)
        print(file=sys.stderr)


def _run_command(cmd: list[str]) -> int | None:
    """Workspace commands; None when `cmd` is not one."""
    head = cmd[0].lower()
    if head == "init":
        overwrite = len(cmd) == _TWO_ARGS and cmd[1].lower() == "overwrite"
        ws, copied = seed_workspace(overwrite=overwrite)
        note = " (overwrote existing files)" if overwrite else ""
        print(f"Workspace ready at: {ws}{note}")
        print(f"Copied -> profiles: {copied.get('profiles', 0)}")
        return 0
    if len(cmd) != 1:
        return None
    if head == "where":
        print(f"Workspace: {workspace_dir()}")
        print(f"Package:   {pkg_files('pisanotower')}")
        return 0
    if head == "profiles":
        for name, desc in CONFIG.list_profiles_with_descriptions():
            print(f"{name:<16} {desc}")
        return 0
    return None


# ---- main ----
def _main_impl(argv=None) -> int:

    just_fix_windows_console()
    _rt_reset()

    parser = _build_parser()
    args = parser.parse_args(argv)

    if not ensure_runtime_deps(strict=True):
        return 1

    ensure_workspace_seeded()

    if args.items and not args.items[0].lstrip("+-").isdigit():
        code = _run_command(args.items)
        if code is not None:
            return code

    # Choose profile: explicit → default
    profile_name = args.profile or "default"
    if args.profile and not CONFIG.has_profile(args.profile):
        print(f"Unknown profile: '{args.profile}'", file=sys.stderr)
        print("Available profiles:", ", ".join(CONFIG.list_all_profiles()), file=sys.stderr)
        return 2
    if CONFIG.has_profile(profile_name):
        _apply_profile(profile_name, args.debug)

    # command-line flags win over the profile
    rt = _rt_current()
    if args.debug:
        rt.debug = True
    if args.strict:
        rt.abort_on_fault = True
    _install_loud_error_handlers(rt.debug)

    solver = TowerSolver()

    # --- one-shot path ---
    if args.items:
        a, level, m = parse_request(" ".join(args.items))
        print(solver.solve(a, level, m))
        return 0

    # --- request loop ---
    if sys.stdin.isatty():
        if not args.quiet:
            print(f"{Fore.YELLOW}{Style.BRIGHT}Pisano Tower v{_ver} — F(F(...F(a)...)) mod m{Style.RESET_ALL}")
        prompt = "" if args.quiet else "\nEnter a level m (q=Quit): "
        lines: Iterable[str] = _interactive_lines(prompt)
    else:
        lines = sys.stdin

    serve(lines, solver)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
