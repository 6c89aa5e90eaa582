from __future__ import annotations

import argparse
import logging
from dataclasses import replace
from typing import Optional, Sequence

import glfw
import numpy as np
from OpenGL.GL import *
from OpenGL.GLU import gluLookAt, gluPerspective

from common_quantum import Camera, find_orbital
from orbital_sampler import VARIANTS, SampleStatus, SamplerConfig, as_generator, generate_points
from point_files import load_points, save_points
from viewer_state import REGENERATION_INTERVAL, ViewerState

WIDTH, HEIGHT = 800, 600
POINT_SIZE = 2.0
POINT_ALPHA = 0.5
SELFTEST_POINTS = 500

logger = logging.getLogger("orbital_viewer")

camera = Camera()
state = ViewerState()


def mouse_button_callback(window, button, action, mods):
    if button in (glfw.MOUSE_BUTTON_LEFT, glfw.MOUSE_BUTTON_MIDDLE):
        if action == glfw.PRESS:
            camera.dragging = True
            camera.last_x, camera.last_y = glfw.get_cursor_pos(window)
        elif action == glfw.RELEASE:
            camera.dragging = False


def cursor_callback(window, x, y):
    dx = x - camera.last_x
    dy = y - camera.last_y
    if camera.dragging:
        camera.azimuth += dx * camera.orbit_speed
        camera.elevation -= dy * camera.orbit_speed
    camera.last_x, camera.last_y = x, y


def scroll_callback(window, xoff, yoff):
    camera.zoom(yoff)


def key_callback(window, key, scancode, action, mods):
    if action != glfw.PRESS:
        return
    if key == glfw.KEY_ESCAPE:
        glfw.set_window_should_close(window, True)
        return
    if glfw.KEY_1 <= key <= glfw.KEY_9 and state.select(key - glfw.KEY_1):
        print(f"Switched to orbital: {state.orbital.name}")


def draw_points() -> None:
    r, g, b = state.orbital.color
    glPointSize(POINT_SIZE)
    glColor4f(r, g, b, POINT_ALPHA)
    glBegin(GL_POINTS)
    for x, y, z in state.scaled_points():
        glVertex3f(x, y, z)
    glEnd()


def run_viewer(rng: np.random.Generator) -> None:
    if not glfw.init():
        raise RuntimeError("failed to init glfw")
    win = glfw.create_window(WIDTH, HEIGHT, "Hydrogen Orbital Viewer (python)", None, None)
    if not win:
        glfw.terminate()
        raise RuntimeError("failed to create window")

    glfw.make_context_current(win)
    glEnable(GL_DEPTH_TEST)
    glEnable(GL_BLEND)
    glBlendFunc(GL_SRC_ALPHA, GL_ONE_MINUS_SRC_ALPHA)

    glfw.set_mouse_button_callback(win, mouse_button_callback)
    glfw.set_cursor_pos_callback(win, cursor_callback)
    glfw.set_scroll_callback(win, scroll_callback)
    glfw.set_key_callback(win, key_callback)

    print(f"Showing orbital: {state.orbital.name} (keys 1-{len(state.orbitals)} switch, Esc quits)")
    start = glfw.get_time()

    while not glfw.window_should_close(win):
        now = glfw.get_time() - start
        camera.advance()

        result = state.maybe_regenerate(now, rng)
        if result is not None and result.status is SampleStatus.DEGRADED:
            print(f"Degraded cloud for {state.orbital.name}: {result.accepted}/{result.target} points after {result.attempts} attempts")

        glClear(GL_COLOR_BUFFER_BIT | GL_DEPTH_BUFFER_BIT)
        width, height = glfw.get_framebuffer_size(win)
        glViewport(0, 0, width, height)

        glMatrixMode(GL_PROJECTION)
        glLoadIdentity()
        gluPerspective(45.0, width / max(1, height), 0.1, 100.0)

        glMatrixMode(GL_MODELVIEW)
        glLoadIdentity()
        cx, cy, cz = camera.position()
        gluLookAt(cx, cy, cz, 0.0, 0.0, 0.0, 0.0, 1.0, 0.0)

        draw_points()

        glfw.swap_buffers(win)
        glfw.poll_events()

    glfw.destroy_window(win)
    glfw.terminate()


def run_self_test(args: argparse.Namespace) -> None:
    variant = VARIANTS[args.variant]
    config = replace(build_config(args), num_points=SELFTEST_POINTS)
    rng = as_generator(args.seed)
    for orbital in variant.orbitals:
        result = generate_points(orbital, 0.0, config, rng)
        if not result.complete or result.accepted != SELFTEST_POINTS:
            raise RuntimeError(f"self-test failed: {orbital.name} ended {result.status.value} with {result.accepted} points")
        radius = np.linalg.norm(result.points, axis=1)
        if radius.max(initial=0.0) > config.r_max + 1e-9:
            raise RuntimeError(f"self-test failed: {orbital.name} sampled outside r_max")
    print(f"SELFTEST_OK orbitals={len(variant.orbitals)} points={SELFTEST_POINTS}")


def build_config(args: argparse.Namespace) -> SamplerConfig:
    variant = VARIANTS[args.variant]
    overrides = {}
    if args.points is not None:
        overrides["num_points"] = args.points
    if args.r_max is not None:
        overrides["r_max"] = args.r_max
    if args.max_prob is not None:
        overrides["max_prob"] = args.max_prob
    if args.max_attempts is not None:
        overrides["max_attempts"] = args.max_attempts
    if args.convention is not None:
        overrides["convention"] = args.convention
    config = variant.config(**overrides)
    config.validate()
    return config


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Render hydrogen orbital probability clouds.")
    parser.add_argument("--variant", choices=sorted(VARIANTS), default="multi")
    parser.add_argument("--orbital", help="initial orbital label, e.g. 2pz")
    parser.add_argument("--points", type=int, help="points per cloud")
    parser.add_argument("--r-max", type=float, help="radius of the sampling region")
    parser.add_argument("--max-prob", type=float, help="fixed acceptance bound M (default: grid-searched per orbital)")
    parser.add_argument("--max-attempts", type=int, help="candidate cap per regeneration")
    parser.add_argument("--convention", choices=["real", "complex"], help="angular normalization")
    parser.add_argument("--seed", type=int, help="seed for reproducible clouds")
    parser.add_argument("--interval", type=float, default=REGENERATION_INTERVAL, help="seconds between regenerations")
    parser.add_argument("--export", metavar="PATH", help="sample once, write JSON and exit")
    parser.add_argument("--load", metavar="PATH", help="display a saved cloud")
    parser.add_argument("--log-level", default="WARNING")
    parser.add_argument("--self-test", action="store_true")
    return parser.parse_args(argv)


def configure_logging(level: str) -> None:
    root = logging.getLogger()
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s"))
        root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.WARNING))


def main(argv: Optional[Sequence[str]] = None) -> None:
    global state
    args = parse_args(argv)
    configure_logging(args.log_level)

    if args.self_test:
        run_self_test(args)
        return

    variant = VARIANTS[args.variant]
    state = ViewerState(variant.orbitals, build_config(args), args.interval)
    for orbital in state.orbitals:
        logger.info("acceptance bound for %s: %.6g", orbital.name, state.config.bound_for(orbital))
    if args.orbital:
        orbital = find_orbital(args.orbital)
        if orbital not in variant.orbitals:
            raise ValueError(f"orbital {orbital.name} is not part of the {variant.name} variant")
        state.select(variant.orbitals.index(orbital))

    rng = as_generator(args.seed)

    if args.export:
        result = generate_points(state.orbital, 0.0, state.config, rng)
        path = save_points(args.export, state.orbital, result, 0.0)
        print(f"Saved {result.accepted} samples ({result.status.value}) to: {path}")
        return

    if args.load:
        points, header = load_points(args.load)
        name = header.get("name")
        if name in [o.name for o in state.orbitals]:
            state.select([o.name for o in state.orbitals].index(name))
        state.show(points)
        print(f"Loaded {len(points)} samples from: {args.load}")

    run_viewer(rng)


if __name__ == "__main__":
    main()
