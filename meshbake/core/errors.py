"""
Error types raised by meshbake.

Every error derives from MeshError so callers (the CLI, a GUI shell) can
catch one type. Parse errors abort a load entirely; no partial mesh is ever
returned.
"""


class MeshError(Exception):
    """Base class for every error raised by this package."""
    pass


class MeshParseError(MeshError):
    """
    Raised when a line of mesh text cannot be parsed.

    Carries the 1-based line number and the raw line so the message can
    point the user at the offending input.
    """

    def __init__(self, message: str, line_number: int, line: str):
        super().__init__(f"line {line_number}: {message}: {line.rstrip()!r}")
        self.line_number = line_number
        self.line = line


class MalformedNumericToken(MeshParseError):
    """A line requiring a float or int contains missing or unparsable text."""
    pass


class IncompleteFaceRecord(MeshParseError):
    """An f line with fewer than 3 complete 4-index corner groups."""
    pass


class IndexOutOfRange(MeshError, IndexError):
    """
    Raised when a face index does not address its attribute array.

    The loader does not cross-validate indices, so this is detected when
    the value is dereferenced (baking, display).
    """

    def __init__(self, attribute: str, face_array: str, corner: int,
                 index: int, size: int):
        super().__init__(
            f"{face_array}[{corner}] = {index} is out of range for "
            f"{attribute} (size {size})"
        )
        self.attribute = attribute
        self.face_array = face_array
        self.corner = corner
        self.index = index
        self.size = size


class RasterWriteError(MeshError):
    """Raised when a baked raster cannot be written to its output path."""
    pass
