# main.py
import argparse
import dataclasses
import math
import time
import pygame
from core.vector import Vector3
from renderer.config import QUALITY_LEVELS, RenderConfig
from renderer.frame_driver import FrameDriver
from scenes import default_camera, default_scene

class PygameControls:
    """
    Keyboard and mouse state turned into camera deltas.

    poll() returns (local_move, dyaw, dpitch) where local_move is expressed
    as x: right, y: world up, z: forward, already scaled by the elapsed time.
    """
    def __init__(self, move_speed: float = 3.0, rotation_speed: float = math.radians(60),
                 mouse_sensitivity: float = 0.001):
        self.move_speed = move_speed
        self.rotation_speed = rotation_speed
        self.mouse_sensitivity = mouse_sensitivity
        self.mouse_locked = True
        self.last_poll = time.perf_counter()

        self.key_map = {
            'w': pygame.K_w,
            's': pygame.K_s,
            'a': pygame.K_a,
            'd': pygame.K_d,
            'up_move': pygame.K_e,
            'down_move': pygame.K_q,
            'left': pygame.K_LEFT,
            'right': pygame.K_RIGHT,
            'up': pygame.K_UP,
            'down': pygame.K_DOWN,
        }

    def poll(self):
        now = time.perf_counter()
        dt = now - self.last_poll
        self.last_poll = now
        keys = pygame.key.get_pressed()

        dyaw = 0.0
        dpitch = 0.0
        if self.mouse_locked:
            mouse_dx, mouse_dy = pygame.mouse.get_rel()
            # Ignore single-pixel jitter
            if abs(mouse_dx) > 1 or abs(mouse_dy) > 1:
                dyaw += mouse_dx * self.mouse_sensitivity
                dpitch -= mouse_dy * self.mouse_sensitivity
        if keys[self.key_map['left']]:
            dyaw -= self.rotation_speed * dt
        if keys[self.key_map['right']]:
            dyaw += self.rotation_speed * dt
        if keys[self.key_map['up']]:
            dpitch += self.rotation_speed * dt
        if keys[self.key_map['down']]:
            dpitch -= self.rotation_speed * dt

        move = Vector3(0, 0, 0)
        if keys[self.key_map['w']]:
            move = move + Vector3(0, 0, 1)
        if keys[self.key_map['s']]:
            move = move - Vector3(0, 0, 1)
        if keys[self.key_map['a']]:
            move = move - Vector3(1, 0, 0)
        if keys[self.key_map['d']]:
            move = move + Vector3(1, 0, 0)
        if keys[self.key_map['up_move']]:
            move = move + Vector3(0, 1, 0)
        if keys[self.key_map['down_move']]:
            move = move - Vector3(0, 1, 0)
        if move.length() > 0:
            move = move.normalize() * (self.move_speed * dt)

        return move, dyaw, dpitch

class Application:
    def __init__(self, config: RenderConfig, env_path: str = None):
        pygame.init()
        self.config = config

        # Integer upscale of the render resolution that fits the display
        display_info = pygame.display.Info()
        max_w = min(1280, display_info.current_w - 100)
        max_h = min(720, display_info.current_h - 100)
        self.window_scale = max(1, min(max_w // config.width, max_h // config.height))
        self.window_width = config.width * self.window_scale
        self.window_height = config.height * self.window_scale

        self.screen = pygame.display.set_mode((self.window_width, self.window_height))
        pygame.display.set_caption("Real-Time Path Tracer")

        # Mouse control settings
        pygame.mouse.set_visible(False)
        pygame.event.set_grab(True)
        pygame.mouse.set_pos(self.window_width // 2, self.window_height // 2)

        self.controls = PygameControls()
        self.scene = default_scene(env_path)
        self.camera = default_camera(config.width, config.height, controls=self.controls)
        self.driver = FrameDriver(self.scene, self.camera, config)

        self.clock = pygame.time.Clock()
        self.font = pygame.font.Font(None, 28)
        self.cached_status_surface = None
        self.last_status_update_time = 0
        self.status_update_interval_ms = 500

        self.quality_keys = {
            pygame.K_1: "interactive",
            pygame.K_2: "balanced",
            pygame.K_3: "high_quality",
        }

    def set_mouse_lock(self, locked: bool):
        self.controls.mouse_locked = locked
        pygame.event.set_grab(locked)
        pygame.mouse.set_visible(not locked)
        if locked:
            pygame.mouse.set_pos(self.window_width // 2, self.window_height // 2)
            pygame.mouse.get_rel()

    def apply_quality(self, quality: str):
        """Restart the driver at the resolution of a quality preset."""
        preset = QUALITY_LEVELS[quality]
        if (preset["width"], preset["height"]) == (self.config.width, self.config.height):
            return
        self.driver.close()
        self.config = dataclasses.replace(self.config, **preset)
        self.camera.width = self.config.width
        self.camera.height = self.config.height
        self.camera.update_camera()
        self.driver = FrameDriver(self.scene, self.camera, self.config)
        print(f"Quality changed to: {quality} ({self.config.width}x{self.config.height})")

    def present(self):
        frame = self.driver.surface.to_rgb_array().transpose(1, 0, 2)
        frame_surface = pygame.surfarray.make_surface(frame)
        if frame_surface.get_size() != (self.window_width, self.window_height):
            frame_surface = pygame.transform.scale(frame_surface, (self.window_width, self.window_height))
        self.screen.blit(frame_surface, (0, 0))

        current_time = pygame.time.get_ticks()
        if current_time - self.last_status_update_time > self.status_update_interval_ms:
            self.last_status_update_time = current_time
            self.cached_status_surface = self.font.render(
                f"FPS: {self.clock.get_fps():.1f} | SPP: {self.driver.spp} | {self.driver.mode}",
                True, (255, 255, 255))
        if self.cached_status_surface:
            self.screen.blit(self.cached_status_surface, (10, 10))
        pygame.display.flip()

    def handle_key(self, key) -> bool:
        """
        React to a key press. Returns False when the application should quit.
        Accumulation resets (SPACE) are only accepted while rendering without
        a time limit, so a timed run always reports an uninterrupted count.
        """
        if key == pygame.K_ESCAPE:
            return False
        if key == pygame.K_TAB:
            self.set_mouse_lock(not self.controls.mouse_locked)
        elif key == pygame.K_SPACE:
            if self.config.run_time is None:
                self.driver.invalidate()
        elif key in self.quality_keys:
            self.apply_quality(self.quality_keys[key])
        return True

    def run(self):
        try:
            print("\n=== Initializing Renderer ===")
            print(f"Render resolution: {self.config.width}x{self.config.height} (window x{self.window_scale})")
            print(f"Engine: {self.driver.mode}")

            # Reset mouse position for the initial delta
            pygame.mouse.get_rel()
            running = True
            while running and not self.driver.finished:
                self.clock.tick()
                for event in pygame.event.get():
                    if event.type == pygame.QUIT:
                        running = False
                    elif event.type == pygame.KEYDOWN:
                        running = self.handle_key(event.key)

                self.driver.tick()
                self.present()
        finally:
            print("Cleaning up...")
            self.driver.close()
            pygame.quit()

def run_headless(config: RenderConfig, env_path: str = None):
    """Render the default scene without a window until the time budget is spent."""
    scene = default_scene(env_path)
    camera = default_camera(config.width, config.height)
    driver = FrameDriver(scene, camera, config)
    try:
        print(f"Rendering {config.width}x{config.height} for {config.run_time} s on {driver.mode}")
        driver.run()
    finally:
        driver.close()
    return driver

def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Progressive Monte Carlo path tracer")
    parser.add_argument("--width", type=int, default=320, help="Render width in pixels")
    parser.add_argument("--height", type=int, default=180, help="Render height in pixels")
    parser.add_argument("--quality", choices=list(QUALITY_LEVELS.keys()),
                        help="Resolution preset; overrides --width/--height")
    parser.add_argument("--time", type=float, default=None,
                        help="Seconds to render before reporting (default: until the window closes)")
    parser.add_argument("--gpu", action="store_true", help="Render on the CUDA device")
    parser.add_argument("--platform", type=int, default=0, help="CUDA device index")
    parser.add_argument("--no-fallback", action="store_true",
                        help="Abort instead of using the CPU when the device build fails")
    parser.add_argument("--seed", type=int, default=42, help="Top-level random seed")
    parser.add_argument("--workers", type=int, default=None, help="CPU worker count (default: all cores)")
    parser.add_argument("--executor", choices=["thread", "process"], default="thread",
                        help="CPU tile pool")
    parser.add_argument("--env", type=str, default=None, help="Equirectangular environment image")
    parser.add_argument("--output", type=str, default=None, help="Save the final frame to this image")
    parser.add_argument("--headless", action="store_true", help="Render without a window (needs --time)")
    parser.add_argument("--debug", action="store_true", help="Print per-frame diagnostics")
    args = parser.parse_args(argv)
    if args.headless and args.time is None:
        parser.error("--headless needs --time")
    return args

def config_from_args(args) -> RenderConfig:
    options = dict(
        run_time=args.time,
        use_device=args.gpu,
        device_index=args.platform,
        device_fallback=not args.no_fallback,
        seed=args.seed,
        workers=args.workers,
        executor=args.executor,
        debug_mode=args.debug,
        report_path=args.output,
    )
    if args.quality:
        return RenderConfig.from_quality(args.quality, **options)
    return RenderConfig(width=args.width, height=args.height, **options)

def main(argv=None):
    args = parse_args(argv)
    config = config_from_args(args)
    if args.headless:
        run_headless(config, args.env)
    else:
        Application(config, args.env).run()

if __name__ == "__main__":
    main()
