"""Exceptions raised by the annotation extractors."""


class AnnotationSourceError(Exception):
    """A source file could not be read or parsed."""

    def __init__(self, path: str, message: str):
        self.path = path
        self.message = message
        super().__init__(f"{path}: {message}")
