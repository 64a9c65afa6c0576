from __future__ import annotations

import argparse
from typing import Dict, Optional

import pygame

from schedule_puzzle.game import (
    DEFAULT_DAYS,
    DragController,
    RoundConfig,
    ScheduleSession,
    SessionView,
    load_days,
)
from .renderer import Renderer


WIDTH, HEIGHT = 1000, 720


def _pick_piece(renderer: Renderer, drag: DragController, screen_point) -> Optional[int]:
    geometry = drag.round.geometry
    if geometry is None:
        return None
    # Last drawn is on top
    for idx in reversed(range(len(drag.round.pieces))):
        if renderer.piece_at(geometry, drag.round.pieces[idx], screen_point):
            return idx
    return None


def run(days: Dict[int, RoundConfig], start_day: int = 1) -> None:
    pygame.init()
    try:
        screen = pygame.display.set_mode((WIDTH, HEIGHT))
        pygame.display.set_caption("The Assistant - Schedule")
        font = pygame.font.SysFont(None, 24)
        renderer = Renderer(origin=(WIDTH // 2, HEIGHT // 2), font=font)
        clock = pygame.time.Clock()

        finished: Dict[int, bool] = {}

        def day_finished(day: int, success: bool) -> None:
            finished[day] = success
            print(f"Day {day}: {'completed' if success else 'failed'} "
                  f"(sentience {session.stats.sentience}, dependency {session.stats.dependency})")

        session = ScheduleSession(days, on_day_finished=day_finished, day=start_day)
        drag = DragController(session.round)
        view = session.open()

        running = True
        while running:
            dt = clock.tick(60) / 1000.0
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN:
                    if event.key == pygame.K_ESCAPE:
                        running = False
                    elif event.key in (pygame.K_RETURN, pygame.K_b) and not session.round.is_active:
                        if view == SessionView.INSTRUCTIONS:
                            session.begin()
                        elif session.day + 1 in days and session.day in finished:
                            session.reset_for_new_day(session.day + 1)
                            view = session.open()
                    elif event.key in (pygame.K_RETURN, pygame.K_c) and session.round.is_active:
                        session.round.commit_success()
                elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                    idx = _pick_piece(renderer, drag, event.pos)
                    if idx is not None:
                        drag.begin_drag(session.round.pieces[idx], renderer.to_local(event.pos))
                elif event.type == pygame.MOUSEMOTION:
                    drag.drag(renderer.to_local(event.pos))
                elif event.type == pygame.MOUSEBUTTONUP and event.button == 1:
                    drag.end_drag(renderer.to_local(event.pos))

            session.round.tick(dt)
            if not session.round.is_active and drag.piece is not None:
                drag.cancel_drag()
            if session.round.pieces == [] and session.day in finished:
                view = session.open()

            screen.fill((15, 15, 20))
            if session.round.pieces:
                renderer.draw_grid(screen, drag)
                geometry = session.round.geometry
                assert geometry is not None
                for piece in session.round.pieces:
                    renderer.draw_piece(screen, geometry, piece, dragging=piece is drag.piece)
                renderer.draw_text(screen, session.round.timer_text(), (20, 20))
                renderer.draw_text(screen, session.round.status_text(), (20, 44))
                if session.round.can_commit:
                    renderer.draw_text(screen, "Complete: Enter / C", (20, 68), (120, 220, 140))
            elif view == SessionView.INSTRUCTIONS:
                for i, line in enumerate(session.instructions_text().splitlines()):
                    renderer.draw_text(screen, line, (60, 60 + i * 24))
            else:
                renderer.draw_text(screen, session.completion_message(), (60, 60))
                if session.day + 1 in days:
                    renderer.draw_text(screen, "Next day: Enter", (60, 90))
            pygame.display.flip()
    finally:
        pygame.quit()


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser()
    p.add_argument("--day", type=int, default=1)
    p.add_argument("--days", type=str, default=None, help="JSON file with per-day round configurations")
    return p


def main() -> None:
    args = build_parser().parse_args()
    days = load_days(args.days) if args.days else DEFAULT_DAYS
    if args.day not in days:
        raise SystemExit(f"No schedule configured for day {args.day}")
    run(days, args.day)


if __name__ == "__main__":  # pragma: no cover
    main()
