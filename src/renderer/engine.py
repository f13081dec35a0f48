# renderer/engine.py
from abc import ABC, abstractmethod
from renderer.tiles import TileScheduler

class ExecutionEngine(ABC):
    """
    One way of producing accumulation frames (CPU tiles or CUDA device).

    Every engine honours the same accumulator contract: dispatch() adds
    exactly one sample per pixel to the accumulator sums and leaves 'spp'
    to the caller; present() writes the resolved colours for the current
    'spp' to the surface; reset() runs after the accumulator was cleared
    and before the next dispatch.
    """
    name = "abstract"

    @abstractmethod
    def dispatch(self, scene, camera, accumulator):
        pass

    @abstractmethod
    def present(self, accumulator, surface):
        pass

    def reset(self, camera):
        """Hook for engines that mirror camera or accumulator state elsewhere."""
        pass

    def close(self):
        pass

class CpuEngine(ExecutionEngine):
    """Multi-core CPU path: tiles on a thread or process pool."""
    name = "cpu"

    def __init__(self, scene, camera, width: int, height: int, seed: int = 42,
                 workers: int = None, executor: str = "thread"):
        self.scheduler = TileScheduler(width, height, seed=seed, workers=workers,
                                       executor=executor, scene=scene)

    def dispatch(self, scene, camera, accumulator):
        self.scheduler.render_frame(scene, camera, accumulator)

    def present(self, accumulator, surface):
        surface.plot(accumulator.resolve_all())

    def close(self):
        self.scheduler.close()
