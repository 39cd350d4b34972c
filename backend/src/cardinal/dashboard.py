"""
Terminal dashboard for the bus.

Renders the display queue, the transport status and its liveness once per UI
tick, and reports a quit request on ``q``, ``Esc`` or ``Ctrl+C``.
"""
import asyncio
import curses
from typing import Optional

from loguru import logger

from .pipeline import Pipeline
from .schemas import Snapshot, Stats
from .utilities import UI_TICK_INTERVAL, DashboardError, format_status

TITLE = "Cardinal - Fast DDS pub/sub demo"
HELP = "Press 'q' or Ctrl+C to quit"

QUIT_KEYS = (ord("q"), 27, 3)   # q, Esc, Ctrl+C

CP_TITLE = 1
CP_TIME = 2
CP_CONTENT = 3
CP_ACTIVE = 4
CP_IDLE = 5


def format_stats(stats: Stats) -> str:
    return (f"Uptime {stats.uptime_sec}s | Published {stats.published} | Received {stats.received}"
            f" | Rate {stats.message_rate:.2f}/s | Errors {stats.publish_errors} | Dropped {stats.decode_drops}")


def render_lines(snapshot: Snapshot, height: int):
    ''' Message lines that fit the message pane, newest kept when space runs out.'''
    lines = [
        (f"[{env.timestamp.strftime('%H:%M:%S')}] ", env.content)
        for env in snapshot.messages
    ]
    if height <= 0:
        return []
    return lines[-height:]


class CursesDashboard:
    def __init__(self):
        self.stdscr: Optional["curses.window"] = None
        self.quit_requested = False

    # -------------- terminal lifecycle --------------
    def open(self):
        try:
            stdscr = curses.initscr()
            curses.noecho()
            curses.raw()
            stdscr.keypad(True)
            stdscr.nodelay(True)
            curses.curs_set(0)
            if curses.has_colors():
                curses.start_color()
                curses.use_default_colors()
                curses.init_pair(CP_TITLE, curses.COLOR_WHITE, curses.COLOR_MAGENTA)
                curses.init_pair(CP_TIME, curses.COLOR_WHITE, -1)
                curses.init_pair(CP_CONTENT, curses.COLOR_CYAN, -1)
                curses.init_pair(CP_ACTIVE, curses.COLOR_GREEN, -1)
                curses.init_pair(CP_IDLE, curses.COLOR_YELLOW, -1)
        except curses.error as exc:
            self._restore()
            raise DashboardError(f"cannot set up terminal: {exc}") from exc
        self.stdscr = stdscr

    def close(self):
        if self.stdscr is not None:
            self.stdscr = None
            self._restore()

    @staticmethod
    def _restore():
        try:
            curses.noraw()
            curses.echo()
            curses.endwin()
        except curses.error:
            # terminal was never fully initialised
            pass

    # -------------- per tick --------------
    def poll_quit(self) -> bool:
        while True:
            key = self.stdscr.getch()
            if key == -1:
                break
            if key in QUIT_KEYS:
                self.quit_requested = True
        return self.quit_requested

    def render(self, snapshot: Snapshot, stats: Optional[Stats] = None):
        scr = self.stdscr
        scr.erase()
        height, width = scr.getmaxyx()
        try:
            scr.addnstr(0, 0, TITLE.center(width), width - 1,
                        curses.color_pair(CP_TITLE) | curses.A_BOLD)
            scr.addnstr(2, 0, "DDS Messages", width - 1, curses.A_BOLD)
            row = 3
            for stamp, content in render_lines(snapshot, height - 8):
                scr.addnstr(row, 0, stamp, width - 1, curses.color_pair(CP_TIME) | curses.A_DIM)
                if len(stamp) < width - 1:
                    scr.addnstr(row, len(stamp), content, width - 1 - len(stamp),
                                curses.color_pair(CP_CONTENT))
                row += 1
            pair = CP_ACTIVE if snapshot.active else CP_IDLE
            scr.addnstr(height - 4, 0, format_status(snapshot.status, snapshot.active),
                        width - 1, curses.color_pair(pair))
            if stats is not None:
                scr.addnstr(height - 2, 0, format_stats(stats), width - 1, curses.A_DIM)
            scr.addnstr(height - 1, 0, HELP.center(width), width - 1, curses.A_DIM)
        except curses.error:
            # window too small for the layout
            pass
        scr.refresh()


async def run_dashboard(dashboard: CursesDashboard, pipeline: Pipeline,
                        tick: float = UI_TICK_INTERVAL):
    ''' UI loop: render and poll keys every tick until quit is requested.'''
    while True:
        dashboard.render(pipeline.snapshot(), pipeline.stats_view())
        if dashboard.poll_quit():
            logger.info("Quit requested from dashboard")
            return
        await asyncio.sleep(tick)
