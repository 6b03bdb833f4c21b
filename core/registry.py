"""
Module Registry - Dynamic module registration and management.
Implements Open/Closed Principle (OCP) for extensibility.
"""
from typing import TYPE_CHECKING, Dict, List, Optional, Type
import logging

from core.interface import IAppModule
from core.app_context import AppContext

if TYPE_CHECKING:
    from fastapi import FastAPI


class ModuleRegistry:
    """
    Registry for managing application modules.
    Allows dynamic registration and lookup of modules.
    """

    def __init__(self) -> None:
        self._modules: Dict[str, IAppModule] = {}
        self._logger = logging.getLogger(__name__)
        self._context: Optional[AppContext] = None

    def set_context(self, context: AppContext) -> None:
        """Set the application context for module initialization."""
        self._context = context

    def register(self, module: IAppModule) -> bool:
        """
        Register a module with the registry.

        Args:
            module: The module instance to register

        Returns:
            bool: True if registration successful, False otherwise
        """
        module_name = module.get_module_name()

        if module_name in self._modules:
            self._logger.warning(f"Module '{module_name}' already registered. Skipping.")
            return False

        self._modules[module_name] = module
        self._logger.info(f"Module '{module_name}' registered successfully.")

        # Initialize module if context is available
        if self._context:
            try:
                module.on_entry(self._context)
                self._context.log_event(f"Module '{module_name}' initialized", "SUCCESS")
            except Exception as e:
                self._logger.error(f"Failed to initialize module '{module_name}': {e}")
                self._context.log_event(f"Module '{module_name}' init failed: {e}", "ERROR")

        return True

    def register_class(self, module_class: Type[IAppModule]) -> bool:
        """
        Register a module by its class (instantiates automatically).

        Args:
            module_class: The module class to instantiate and register

        Returns:
            bool: True if registration successful, False otherwise
        """
        try:
            module_instance = module_class()
            return self.register(module_instance)
        except Exception as e:
            self._logger.error(f"Failed to instantiate module class: {e}")
            return False

    def unregister(self, module_name: str) -> bool:
        """
        Unregister a module from the registry.

        Args:
            module_name: The name of the module to unregister

        Returns:
            bool: True if unregistration successful, False otherwise
        """
        if module_name not in self._modules:
            self._logger.warning(f"Module '{module_name}' not found in registry.")
            return False

        module = self._modules[module_name]
        try:
            module.on_shutdown()
        except Exception as e:
            self._logger.error(f"Error during module '{module_name}' shutdown: {e}")

        del self._modules[module_name]
        self._logger.info(f"Module '{module_name}' unregistered.")
        return True

    def get_module(self, module_name: str) -> Optional[IAppModule]:
        """Retrieve a module by name, or None if not found."""
        return self._modules.get(module_name)

    def get_all_modules(self) -> List[IAppModule]:
        """Get all registered modules."""
        return list(self._modules.values())

    def get_module_names(self) -> List[str]:
        """Get names of all registered modules."""
        return list(self._modules.keys())

    async def async_startup_all(self, app: "FastAPI") -> None:
        """Run async startup hooks of all modules (event loop is running)."""
        for module_name, module in self._modules.items():
            await module.async_startup(app)
            self._logger.info(f"Module '{module_name}' async startup complete.")

    async def async_shutdown_all(self, app: "FastAPI") -> None:
        """Run async shutdown hooks; one failing module does not stop the others."""
        for module_name, module in self._modules.items():
            try:
                await module.async_shutdown(app)
            except Exception as e:
                self._logger.error(f"Error during module '{module_name}' async shutdown: {e}")

    def shutdown_all(self) -> None:
        """Shutdown all registered modules."""
        for module_name in list(self._modules.keys()):
            self.unregister(module_name)
        self._logger.info("All modules shut down.")


class ModuleLoader:
    """
    Dynamic module loader for discovering and loading modules.
    """

    def __init__(self, registry: ModuleRegistry) -> None:
        self._registry = registry
        self._logger = logging.getLogger(__name__)

    def load_from_directory(self, modules_path: str, package: str = "modules") -> int:
        """
        Load package modules (subdirectories with __init__.py) from a directory.

        Every IAppModule implementation exported by a package's __init__
        is instantiated and registered.

        Args:
            modules_path: Path to the modules directory
            package: Dotted package name of that directory

        Returns:
            int: Number of modules loaded
        """
        import importlib
        from pathlib import Path

        path = Path(modules_path)
        if not path.exists():
            self._logger.warning(f"Modules directory '{modules_path}' does not exist.")
            return 0

        loaded_count = 0

        for subdir in sorted(path.iterdir()):
            if not subdir.is_dir() or subdir.name.startswith("_"):
                continue
            if not (subdir / "__init__.py").exists():
                continue

            try:
                module = importlib.import_module(f"{package}.{subdir.name}")
            except Exception as e:
                self._logger.error(f"Error loading package module '{subdir.name}': {e}")
                continue

            for attr_name in dir(module):
                attr = getattr(module, attr_name)
                if (isinstance(attr, type) and
                        issubclass(attr, IAppModule) and
                        attr is not IAppModule):
                    if self._registry.register_class(attr):
                        loaded_count += 1
                        self._logger.info(f"Loaded package module: {subdir.name}")

        return loaded_count
