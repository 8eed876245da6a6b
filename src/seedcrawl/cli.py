from __future__ import annotations

import argparse
import json
import logging
import shutil
import sys
from typing import Any, Dict, List, Optional

from . import __version__
from .background import compute_seed, find_code_files
from .config import Rules, load_rules
from .core.random import RandomStream
from .exceptions import RulesValidationError, SeedcrawlError
from .game.session import GameSession
from .logging_config import configure_logging

logger = logging.getLogger(__name__)


def _level_from_verbosity(verbosity: int) -> int:
    if verbosity >= 2:
        return logging.DEBUG
    if verbosity == 1:
        return logging.INFO
    return logging.WARNING


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="seedcrawl",
        description="Seed-deterministic terminal dungeon crawler",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="Increase log verbosity (-v, -vv)")
    parser.add_argument("--rules", default=None, help="Path to a rules YAML file (default: bundled rules)")
    sub = parser.add_subparsers(dest="command", required=True)

    play = sub.add_parser("play", help="Play in the terminal")
    play.add_argument("--root", default=".", help="Directory whose source files seed the run")
    play.add_argument("--seed", type=int, default=None, help="Override the seed derived from --root")
    play.add_argument("--log-file", default=None, help="Write logs here instead of stderr while playing")

    gen = sub.add_parser("generate", help="Generate one level and print a summary")
    gen.add_argument("--seed", type=int, required=True)
    gen.add_argument("--width", type=int, default=80, help="Viewport columns")
    gen.add_argument("--height", type=int, default=24, help="Viewport rows, including the status lines")
    gen.add_argument("--level", type=int, default=1, help="Level number to generate")
    gen.add_argument("--ascii", action="store_true", help="Print the map instead of JSON")
    return parser


def level_summary(session: GameSession, seed: int) -> Dict[str, Any]:
    dungeon = session.dungeon
    assert dungeon is not None and session.player is not None
    return {
        "seed": seed,
        "level": session.level,
        "width": dungeon.width,
        "height": dungeon.height,
        "rooms": [[r.x, r.y, r.w, r.h] for r in dungeon.rooms],
        "player": list(session.player.pos),
        "door": list(session.door),
        "hazard": list(session.hazard.pos) if session.hazard is not None else None,
        "enemies": [{"kind": e.kind.value, "x": e.x, "y": e.y} for e in session.enemies],
        "potions": [list(p.pos) for p in session.potions],
        "signature": dungeon.signature(),
    }


def level_ascii(session: GameSession) -> List[str]:
    """Whole map, no fog, with every entity and the hazard drawn on top."""
    assert session.dungeon is not None and session.player is not None
    grid = [list(row) for row in session.dungeon.to_lines()]
    if session.hazard is not None:
        grid[session.hazard.y][session.hazard.x] = "^"
    for p in session.potions:
        grid[p.y][p.x] = p.glyph
    for e in session.enemies:
        grid[e.y][e.x] = e.glyph
    grid[session.player.y][session.player.x] = session.player.glyph
    return ["".join(row) for row in grid]


def _cmd_generate(args: argparse.Namespace, rules: Rules) -> int:
    if not 1 <= args.level <= rules.max_level:
        raise SeedcrawlError(f"--level must be between 1 and {rules.max_level}")
    session = GameSession(RandomStream(args.seed), args.width, args.height, rules=rules)
    session.level = args.level
    session.generate_level()
    if args.ascii:
        print("\n".join(level_ascii(session)))
    else:
        print(json.dumps(level_summary(session, args.seed), indent=2, sort_keys=True))
    return 0


def _cmd_play(args: argparse.Namespace, rules: Rules) -> int:
    from .game.session import new_session
    from .render.terminal import play

    files = find_code_files(args.root)
    seed = args.seed if args.seed is not None else compute_seed(files)
    size = shutil.get_terminal_size()
    logger.info("Playing with seed %d from %d source files", seed, len(files))
    session = new_session(files, seed, size.columns, size.lines, rules=rules)
    play(session)

    outcome = "victory" if session.victory else ("died" if session.game_over else "quit")
    print(f"seed={seed} level={session.level}/{session.max_level} kills={session.kills} moves={session.move_count} {outcome}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(_level_from_verbosity(args.verbose), log_file=getattr(args, "log_file", None))

    try:
        rules = load_rules(args.rules)
        if args.command == "generate":
            return _cmd_generate(args, rules)
        return _cmd_play(args, rules)
    except RulesValidationError as exc:
        print(exc.to_human(), file=sys.stderr)
        return 2
    except SeedcrawlError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
