# renderer/tiles.py
import math
import os
from concurrent.futures import ProcessPoolExecutor, ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Iterator, List
import numpy as np
from core.rng import make_rng
from renderer.integrator import trace_pixel

@dataclass(frozen=True)
class Tile:
    index: int
    row: int
    col: int
    x0: int
    y0: int
    width: int
    height: int

    def pixel_indices(self, frame_width: int) -> List[int]:
        """Global pixel indices (x + y * frame_width) covered by this tile."""
        return [(self.y0 + ly) * frame_width + self.x0 + lx
                for ly in range(self.height) for lx in range(self.width)]

@dataclass(frozen=True)
class TileGrid:
    width: int
    height: int
    tile_count: int
    tile_width: int
    tile_height: int

    @property
    def num_tiles(self) -> int:
        return self.tile_count * self.tile_count

    def tile(self, t: int) -> Tile:
        row = t // self.tile_count
        col = t % self.tile_count
        return Tile(t, row, col, col * self.tile_width, row * self.tile_height,
                    self.tile_width, self.tile_height)

    def tiles(self) -> Iterator[Tile]:
        for t in range(self.num_tiles):
            yield self.tile(t)

def partition(width: int, height: int) -> TileGrid:
    """
    Splits the frame into gcd(width, height)^2 equal tiles. Because the tile
    count divides both dimensions, the tiles cover the frame exactly once.
    """
    if not isinstance(width, int) or not isinstance(height, int):
        raise TypeError(f"Frame dimensions must be integers, got {width!r}x{height!r}")
    if width <= 0 or height <= 0:
        raise ValueError(f"Frame dimensions must be positive, got {width}x{height}")
    tile_count = math.gcd(width, height)
    return TileGrid(width, height, tile_count, width // tile_count, height // tile_count)

def render_tile(scene, camera, tile: Tile, seed: int, frame_index: int):
    """
    Samples every pixel of one tile once with the tile's own generator.
    Returns (tile, block) with block shaped (tile.height, tile.width, 3).
    """
    rng = make_rng(seed, frame_index, tile.index)
    block = np.empty((tile.height, tile.width, 3), dtype=np.float32)
    for ly in range(tile.height):
        y = tile.y0 + ly
        for lx in range(tile.width):
            color = trace_pixel(scene, camera, rng, tile.x0 + lx, y)
            block[ly, lx, 0] = color.x
            block[ly, lx, 1] = color.y
            block[ly, lx, 2] = color.z
    return tile, block

# Scene handed to each worker process once by the pool initializer.
_worker_scene = None

def _init_worker(scene):
    global _worker_scene
    _worker_scene = scene

def _render_tile_in_worker(camera, tile: Tile, seed: int, frame_index: int):
    return render_tile(_worker_scene, camera, tile, seed, frame_index)

class TileScheduler:
    """
    CPU execution of one frame: one task per tile on a thread or process pool.

    Tiles own disjoint pixels and their own generator, so tasks run without
    any synchronisation. The frame ends with a join over all tasks; only then
    are the blocks added to the accumulator, one integrate per pixel.
    """
    def __init__(self, width: int, height: int, seed: int = 42, workers: int = None,
                 executor: str = "thread", scene=None):
        self.grid = partition(width, height)
        self.seed = seed
        self.workers = workers or os.cpu_count() or 1
        self.executor_kind = executor
        self.frame_index = 0
        self._warn_if_serial()

        if executor == "thread":
            self._executor = ThreadPoolExecutor(max_workers=self.workers)
        elif executor == "process":
            if scene is None:
                raise ValueError("The process executor needs the scene at construction")
            self._executor = ProcessPoolExecutor(max_workers=self.workers,
                                                 initializer=_init_worker, initargs=(scene,))
        else:
            raise ValueError(f"Unknown executor '{executor}'. Available: thread, process")

        print(f"Tile scheduler: {self.grid.num_tiles} tiles of {self.grid.tile_width}x{self.grid.tile_height} "
              f"on {self.workers} {executor} workers")

    def _warn_if_serial(self):
        if self.grid.tile_count == 1 and self.grid.width * self.grid.height > 1:
            print(f"Warning: {self.grid.width}x{self.grid.height} has coprime dimensions; "
                  f"rendering as a single tile without parallelism")

    def resize(self, width: int, height: int):
        self.grid = partition(width, height)
        self._warn_if_serial()

    def render_frame(self, scene, camera, accumulator):
        """Dispatch all tiles for one frame and integrate the results after the join."""
        if (accumulator.width, accumulator.height) != (self.grid.width, self.grid.height):
            raise ValueError("Accumulator and tile grid dimensions differ")
        frame_index = self.frame_index
        if self.executor_kind == "process":
            futures = [self._executor.submit(_render_tile_in_worker, camera, tile, self.seed, frame_index)
                       for tile in self.grid.tiles()]
        else:
            futures = [self._executor.submit(render_tile, scene, camera, tile, self.seed, frame_index)
                       for tile in self.grid.tiles()]

        results = [future.result() for future in as_completed(futures)]
        for tile, block in results:
            accumulator.integrate_tile(tile, block)
        self.frame_index += 1

    def close(self):
        self._executor.shutdown(wait=True)
