"""
Importer Registry - picks an importer from the source location's extension.

Archive formats register the extensions they handle; every other location is
treated as a folder.
"""

from pathlib import Path
from typing import Dict, List, Optional, Type, Union

from .base import BaseImporter


class ImporterRegistry:
    """
    Registry of importer classes keyed by lower-cased file extension.

    Usage:
        @ImporterRegistry.register(".apkg")
        class AnkiPackageImporter(ArchiveImporter):
            ...

        importer = ImporterRegistry.create("deck.apkg", asset_store=store)
    """

    _registry: Dict[str, Type[BaseImporter]] = {}
    _default: Optional[Type[BaseImporter]] = None

    @classmethod
    def register(cls, *extensions: str, default: bool = False):
        """
        Decorator to register an importer class.

        Args:
            extensions: File extensions handled by the class (".apkg")
            default: Use this class for locations with no registered extension
        """
        def decorator(importer_cls: Type[BaseImporter]) -> Type[BaseImporter]:
            for ext in extensions:
                cls._registry[ext.lower()] = importer_cls
            if default:
                cls._default = importer_cls
            return importer_cls
        return decorator

    @classmethod
    def importer_for(cls, location: Union[str, Path]) -> Type[BaseImporter]:
        """
        Select the importer class for a location.

        Raises:
            KeyError: If nothing matches and no default is registered
        """
        suffix = Path(location).suffix.lower()
        if suffix in cls._registry:
            return cls._registry[suffix]
        if cls._default is None:
            raise KeyError(f"No importer registered for '{suffix}'")
        return cls._default

    @classmethod
    def create(cls, location: Union[str, Path], **kwargs) -> BaseImporter:
        """Instantiate the importer for ``location``."""
        return cls.importer_for(location)(**kwargs)

    @classmethod
    def extensions(cls) -> List[str]:
        return sorted(cls._registry.keys())
