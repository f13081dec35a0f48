# renderer/engine_factory.py
from renderer.config import RenderConfig
from renderer.device import DeviceEngine
from renderer.engine import CpuEngine, ExecutionEngine

class EngineFactory:
    """Factory for the execution engines."""

    _engines = {
        'cpu': CpuEngine,
        'device': DeviceEngine,
    }

    @classmethod
    def create(cls, engine_type: str, scene, camera, config: RenderConfig) -> ExecutionEngine:
        """
        Create an engine for the given scene, camera and configuration.

        Raises:
            ValueError: If engine_type is not recognized
            DeviceBuildError: If the device engine cannot be built
        """
        engine_type = engine_type.lower()
        if engine_type not in cls._engines:
            available = ', '.join(cls._engines.keys())
            raise ValueError(f"Unknown engine type '{engine_type}'. Available: {available}")

        if engine_type == 'device':
            return DeviceEngine(scene, camera, config.width, config.height, seed=config.seed,
                                device_index=config.device_index, debug_mode=config.debug_mode)
        return CpuEngine(scene, camera, config.width, config.height, seed=config.seed,
                         workers=config.workers, executor=config.executor)

    @classmethod
    def get_available_engines(cls) -> list:
        return list(cls._engines.keys())
