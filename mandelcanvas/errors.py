class RenderError(ValueError):
    """Base class for rejected render inputs."""


class InvalidDimensions(RenderError):
    pass


class InvalidScale(RenderError):
    pass


class InvalidConfig(RenderError):
    pass
