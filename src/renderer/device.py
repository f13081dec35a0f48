# renderer/device.py
import math
import traceback
import numpy as np
from numba import cuda
from numba.cuda.random import create_xoroshiro128p_states
from renderer.cuda_kernels import clear_accumulator_kernel, path_trace_kernel
from renderer.engine import ExecutionEngine

class DeviceBuildError(RuntimeError):
    """The device program could not be built; 'build_log' holds the diagnostics."""

    def __init__(self, message: str, build_log: str = ""):
        super().__init__(message)
        self.build_log = build_log

class DeviceEngine(ExecutionEngine):
    """
    CUDA path: the integrator runs in path_trace_kernel over a device-resident
    accumulation buffer.

    Static inputs (spheres, materials, sky, RNG states) are uploaded once; the
    camera block is re-uploaded on reset only. Each dispatch is one blocking
    kernel launch followed by a download of the accumulator sums, so the host
    accumulator always equals the device buffer between frames.
    """
    name = "device"

    def __init__(self, scene, camera, width: int, height: int, seed: int = 42,
                 device_index: int = 0, threads_per_block: int = 128, debug_mode: bool = False):
        self.width = width
        self.height = height
        self.num_pixels = width * height
        self.device_index = device_index
        self.threads_per_block = threads_per_block
        self.blocks_per_grid = math.ceil(self.num_pixels / threads_per_block)
        self.debug_mode = debug_mode

        self.d_sphere_centers = None
        self.d_sphere_radii = None
        self.d_sphere_materials = None
        self.d_sky = None
        self.rng_states = None
        self.d_camera = None
        self.d_accum = None
        self.d_pixels = None

        self._select_device()
        self.update_scene_data(scene)
        self.seed = seed
        # One Xoroshiro128+ stream per pixel lane, persisting across frames
        self.rng_states = create_xoroshiro128p_states(self.num_pixels, seed=seed)
        self.d_camera = cuda.to_device(camera.device_params())
        self.d_accum = cuda.to_device(np.zeros((self.num_pixels, 3), dtype=np.float32))
        self.d_pixels = cuda.to_device(np.zeros(self.num_pixels, dtype=np.int32))
        self.build()

    def _select_device(self):
        if not cuda.is_available():
            raise DeviceBuildError("No CUDA device available",
                                   build_log="numba.cuda.is_available() returned False")
        try:
            cuda.select_device(self.device_index)
        except Exception as exc:
            raise DeviceBuildError(f"Cannot select CUDA device {self.device_index}",
                                   build_log=traceback.format_exc()) from exc

    def update_scene_data(self, scene):
        """Upload the read-only scene arrays to the GPU."""
        centers, radii, materials, sky = scene.device_arrays()
        print(f"Uploading scene: {len(radii)} spheres, sky {sky.shape[1]}x{sky.shape[0]}")
        self.d_sphere_centers = cuda.to_device(np.ascontiguousarray(centers))
        self.d_sphere_radii = cuda.to_device(np.ascontiguousarray(radii))
        self.d_sphere_materials = cuda.to_device(np.ascontiguousarray(materials))
        self.d_sky = cuda.to_device(np.ascontiguousarray(sky))

    def build(self):
        """
        Compile the kernel with a one-pixel launch on scratch buffers. The
        argument types equal those of render launches, so the compiled
        specialisation is reused afterwards.
        """
        try:
            scratch_states = create_xoroshiro128p_states(1, seed=self.seed)
            scratch_accum = cuda.to_device(np.zeros((1, 3), dtype=np.float32))
            scratch_pixels = cuda.to_device(np.zeros(1, dtype=np.int32))
            path_trace_kernel[1, 1](
                self.d_camera, 1, 1, scratch_states, scratch_accum, scratch_pixels,
                self.d_sphere_centers, self.d_sphere_radii, self.d_sphere_materials,
                self.d_sky, 1.0
            )
            clear_accumulator_kernel[1, 1](scratch_accum)
            cuda.synchronize()
        except Exception as exc:
            raise DeviceBuildError("Failed to build the path tracing kernel",
                                   build_log=traceback.format_exc()) from exc
        print(f"Device kernel built: {self.blocks_per_grid} blocks x {self.threads_per_block} threads")

    def dispatch(self, scene, camera, accumulator):
        # The kernel resolves pixels with the count this frame will bring spp to.
        scale = 1.0 / (accumulator.spp + 1)
        path_trace_kernel[self.blocks_per_grid, self.threads_per_block](
            self.d_camera, self.width, self.height, self.rng_states, self.d_accum, self.d_pixels,
            self.d_sphere_centers, self.d_sphere_radii, self.d_sphere_materials,
            self.d_sky, scale
        )
        cuda.synchronize()
        self.download(accumulator)
        if self.debug_mode:
            print(f"Device frame {accumulator.spp + 1} dispatched (scale {scale:.6f})")

    def present(self, accumulator, surface):
        self.d_pixels.copy_to_host(surface.pixels)

    def reset(self, camera):
        """Re-synchronise the device after the host accumulator was cleared."""
        self.d_camera.copy_to_device(camera.device_params())
        clear_accumulator_kernel[self.blocks_per_grid, self.threads_per_block](self.d_accum)
        cuda.synchronize()

    def download(self, accumulator):
        """Copy the device sums into the host accumulator."""
        self.d_accum.copy_to_host(accumulator.sums)

    def upload(self, accumulator):
        """Copy the host sums to the device buffer."""
        self.d_accum.copy_to_device(accumulator.sums)

    def close(self):
        self.d_sphere_centers = None
        self.d_sphere_radii = None
        self.d_sphere_materials = None
        self.d_sky = None
        self.rng_states = None
        self.d_camera = None
        self.d_accum = None
        self.d_pixels = None
