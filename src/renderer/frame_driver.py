# renderer/frame_driver.py
import time
from enum import Enum
from renderer.accumulator import Accumulator
from renderer.config import RenderConfig
from renderer.device import DeviceBuildError
from renderer.engine_factory import EngineFactory
from renderer.surface import Surface

class DriverState(Enum):
    INIT = "init"
    RUNNING = "running"
    REPORTING = "reporting"

def print_report(elapsed_ms: float, spp: int, surface: Surface, path: str = None):
    """Default reporter: prints the totals and optionally saves the final image."""
    print("\n=== Render Report ===")
    print(f"Elapsed: {elapsed_ms:.0f} ms")
    print(f"Samples per pixel: {spp}")
    if elapsed_ms > 0:
        print(f"Frames per second: {spp * 1000.0 / elapsed_ms:.2f}")
    if path:
        surface.save(path)

class FrameDriver:
    """
    Drives one rendering step per tick().

    INIT starts the timer on the first tick. RUNNING polls the camera (only
    when no time budget is set), clears the accumulator if the camera moved,
    renders one frame, counts it and presents the resolved colours. Once the
    budget is spent the driver reports exactly once and ignores later ticks.
    """
    def __init__(self, scene, camera, config: RenderConfig, reporter=None, clock=time.perf_counter):
        self.scene = scene
        self.camera = camera
        self.config = config
        self.clock = clock
        self.reporter = reporter or (lambda elapsed_ms, spp, surface:
                                     print_report(elapsed_ms, spp, surface, config.report_path))

        self.accumulator = Accumulator(config.width, config.height)
        self.surface = Surface(config.width, config.height)
        self.engine = self._create_engine()
        self.mode = self.engine.name

        self.state = DriverState.INIT
        self.start_time = None
        self.elapsed_ms = 0.0

    def _create_engine(self):
        if not self.config.use_device:
            return EngineFactory.create('cpu', self.scene, self.camera, self.config)
        try:
            return EngineFactory.create('device', self.scene, self.camera, self.config)
        except DeviceBuildError as e:
            print(f"Device build failed: {e}")
            print(e.build_log)
            if not self.config.device_fallback:
                raise
            print("Falling back to the CPU path")
            return EngineFactory.create('cpu', self.scene, self.camera, self.config)

    @property
    def spp(self) -> int:
        return self.accumulator.spp

    @property
    def finished(self) -> bool:
        return self.state == DriverState.REPORTING

    def invalidate(self):
        """Discard all accumulated samples; the next frame starts from scratch."""
        self.accumulator.clear()
        self.engine.reset(self.camera)
        if self.config.debug_mode:
            print("Accumulator reset")

    def tick(self):
        if self.state == DriverState.REPORTING:
            return
        if self.state == DriverState.INIT:
            self.start_time = self.clock()
            self.state = DriverState.RUNNING

        if self.config.run_time is None and self.camera.handle_input():
            self.invalidate()

        self.engine.dispatch(self.scene, self.camera, self.accumulator)
        self.accumulator.advance()
        self.engine.present(self.accumulator, self.surface)

        self.elapsed_ms = (self.clock() - self.start_time) * 1000.0
        if self.config.debug_mode:
            print(f"Frame {self.accumulator.spp}: {self.elapsed_ms:.1f} ms elapsed")

        if self.config.run_time is not None and self.elapsed_ms >= self.config.run_time * 1000.0:
            self.state = DriverState.REPORTING
            self.reporter(self.elapsed_ms, self.accumulator.spp, self.surface)

    def run(self):
        """Tick until the time budget is spent. Needs a finite run_time."""
        if self.config.run_time is None:
            raise ValueError("run() needs a finite run_time; tick() from the host loop instead")
        while not self.finished:
            self.tick()

    def close(self):
        self.engine.close()
