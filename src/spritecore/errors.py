"""Exception types raised by spritecore."""


class SpriteCoreError(Exception):
    """Base class for all spritecore errors."""


class MalformedSceneData(SpriteCoreError, ValueError):
    """Scene or configuration data could not be turned into valid objects."""


class ComponentNotFound(SpriteCoreError, LookupError):
    """An entity does not own the requested component."""
