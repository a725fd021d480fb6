"""DualCode package exports."""

from .cli import __all__ as _cli_all
from .service import __all__ as _service_all
from .terminology import __all__ as _terminology_all

__all__ = [
    *_cli_all,
    *_service_all,
    *_terminology_all,
]
