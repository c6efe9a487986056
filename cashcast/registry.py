import importlib
import pkgutil
from pathlib import Path
from typing import Any

from cashcast.exceptions import ValidationError
from cashcast.runners import ModelRunner


class RunnerRegistry:
    """Light registry mapping model kinds to runner classes"""

    _runners: dict[str, type[ModelRunner]] = {}

    @classmethod
    def register(cls, runner_class: type[ModelRunner]) -> None:
        """Register a runner class under its model kind"""
        cls._runners[runner_class.kind.value] = runner_class

    @classmethod
    def get(cls, kind: str) -> type[ModelRunner] | None:
        """Get a runner class by model kind"""
        return cls._runners.get(str(getattr(kind, "value", kind)))

    @classmethod
    def create(cls, kind: str, **kwargs: Any) -> ModelRunner:
        """Create a runner instance, passing kwargs to its constructor"""
        runner_class = cls.get(kind)
        if runner_class is None:
            raise ValidationError(f"No runner registered for model kind '{kind}'", {"kind": kind})
        return runner_class(**kwargs)

    @classmethod
    def list_all(cls) -> list[str]:
        """List all registered model kinds"""
        return list(cls._runners.keys())


def autodiscover_runners() -> None:
    """Automatically discover and register all runners"""
    runners_path = Path(__file__).parent / "runners"
    for _, name, _ in pkgutil.iter_modules([str(runners_path)]):
        if name != "base":
            importlib.import_module(f"cashcast.runners.{name}")

    for runner_class in ModelRunner.__subclasses__():
        if runner_class.__module__.startswith("cashcast.runners."):
            RunnerRegistry.register(runner_class)
