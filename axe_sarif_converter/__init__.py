from .baseline import MultitoolBaselineMatcher, apply_baseline_file
from .config import CONVERTER_VERSION as __version__
from .converter import (
    ConverterOptions,
    combine_logs,
    convert_axe_to_sarif,
    convert_raw_to_sarif,
    sarif_reporter,
)
from .errors import (
    BaselineError,
    BaselineResultParseError,
    BaselineToolExecutionError,
    BaselineToolLaunchError,
    ConversionError,
    MalformedFinding,
    UnsupportedInputShape,
)

__all__ = [
    "BaselineError",
    "BaselineResultParseError",
    "BaselineToolExecutionError",
    "BaselineToolLaunchError",
    "ConversionError",
    "ConverterOptions",
    "MalformedFinding",
    "MultitoolBaselineMatcher",
    "UnsupportedInputShape",
    "__version__",
    "apply_baseline_file",
    "combine_logs",
    "convert_axe_to_sarif",
    "convert_raw_to_sarif",
    "sarif_reporter",
]
