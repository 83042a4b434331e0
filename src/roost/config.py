"""Generator configuration.

GeneratorConfig is a frozen dataclass — immutable after creation,
IDE-autocompletable, no string-key dict lookups.
"""

from dataclasses import dataclass
from pathlib import Path

from roost.errors import ConfigurationError

LOG_LEVELS = ("debug", "info", "warning", "error")


@dataclass(frozen=True, slots=True)
class GeneratorConfig:
    """Generator configuration. Immutable after creation.

    Only ``source_dir`` and ``package`` are required::

        config = GeneratorConfig(source_dir="src/myapp", package="myapp")
    """

    # Source tree
    source_dir: str | Path
    package: str
    exclude: tuple[str, ...] = ()  # Glob patterns relative to source_dir

    # Declarations
    marker: str = "route"  # Decorator name that marks page classes

    # Output
    output: str | Path | None = None  # Defaults to <source_dir>/routing/routes.py
    variable: str = "ROUTES"

    # Unreachable nested routes raise instead of being dropped
    strict: bool = False

    log_level: str = "info"

    def __post_init__(self) -> None:
        if not self.package or not all(part.isidentifier() for part in self.package.split(".")):
            msg = f"package must be a dotted module name, got {self.package!r}"
            raise ConfigurationError(msg)
        for label, value in (("marker", self.marker), ("variable", self.variable)):
            if not value.isidentifier():
                msg = f"{label} must be a Python identifier, got {value!r}"
                raise ConfigurationError(msg)
        if self.log_level.lower() not in LOG_LEVELS:
            msg = f"log_level must be one of {', '.join(LOG_LEVELS)}, got {self.log_level!r}"
            raise ConfigurationError(msg)

    @property
    def output_path(self) -> Path:
        """Absolute location of the generated module."""
        if self.output is None:
            return (Path(self.source_dir) / "routing" / "routes.py").resolve()
        return Path(self.output).resolve()
