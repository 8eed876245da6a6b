from __future__ import annotations

from enum import Enum
from typing import List, NamedTuple

from ..dungeon.tiles import TILE_CHARS, Tile
from ..game.session import GameSession

HAZARD_GLYPH = "~"


class Style(str, Enum):
    HIDDEN = "hidden"
    FOG = "fog"
    WALL = "wall"
    FLOOR = "floor"
    DOOR = "door"
    HAZARD = "hazard"
    PLAYER = "player"
    ENEMY = "enemy"
    POTION = "potion"


class Cell(NamedTuple):
    char: str
    style: Style


def render_cells(session: GameSession) -> List[List[Cell]]:
    """
    Map layer as styled cells, fog of war applied.

    Unexplored tiles are blank. Explored tiles keep their terrain but are drawn
    as fog once out of sight. Potions and living enemies appear only while
    visible; the player is always drawn.
    """
    dungeon = session.dungeon
    vis = session.visibility
    assert dungeon is not None and vis is not None and session.player is not None

    cells: List[List[Cell]] = []
    for y in range(dungeon.height):
        row: List[Cell] = []
        for x in range(dungeon.width):
            if not vis.explored[y][x]:
                row.append(Cell(" ", Style.HIDDEN))
                continue
            tile = dungeon.tiles[y][x]
            ch = TILE_CHARS[tile]
            if not vis.visible[y][x]:
                row.append(Cell(ch, Style.FOG))
            elif tile is Tile.WALL:
                row.append(Cell(ch, Style.WALL))
            elif tile is Tile.DOOR:
                row.append(Cell(ch, Style.DOOR))
            elif session.hazard is not None and session.hazard.contains(x, y):
                row.append(Cell(HAZARD_GLYPH, Style.HAZARD))
            else:
                row.append(Cell(ch, Style.FLOOR))
        cells.append(row)

    for potion in session.potions:
        if vis.is_visible(potion.x, potion.y):
            cells[potion.y][potion.x] = Cell(potion.glyph, Style.POTION)
    for enemy in session.enemies:
        if enemy.is_alive and vis.is_visible(enemy.x, enemy.y):
            cells[enemy.y][enemy.x] = Cell(enemy.glyph, Style.ENEMY)
    p = session.player
    cells[p.y][p.x] = Cell(p.glyph, Style.PLAYER)
    return cells


def status_line(session: GameSession) -> str:
    p = session.player
    assert p is not None
    text = f"HP: {p.hp}/{p.max_hp} | Level: {session.level}/{session.max_level} | Kills: {session.kills} | [q]uit"
    if session.invulnerable:
        text += " | INVULNERABLE"
    return text


def end_screen_lines(session: GameSession) -> List[str]:
    """Summary box shown once the run is over; empty while still playing."""
    if session.victory:
        title, blurb, cleared = "VICTORY!", "You've conquered all the dungeons!", session.level
    elif session.game_over:
        title, blurb, cleared = "GAME OVER", "The bugs and scope creeps won...", session.level - 1
    else:
        return []
    body = [
        title.center(36),
        "",
        blurb,
        "",
        f"Levels Cleared: {cleared}",
        f"Enemies Killed: {session.kills}",
        "",
        "Press ENTER or SPACE to exit".center(36),
    ]
    width = max(len(s) for s in body) + 4
    top = "+" + "-" * (width - 2) + "+"
    return [top] + ["| " + s.ljust(width - 4) + " |" for s in body] + [top]


def render_lines(session: GameSession) -> List[str]:
    """Plain-text frame: map rows, then the status bar, then the message line."""
    lines = ["".join(c.char for c in row) for row in render_cells(session)]
    lines.append(status_line(session))
    lines.append(session.message)
    return lines
