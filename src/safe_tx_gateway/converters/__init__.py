from .info import InfoClassifier, TokenLookup, prefetched, is_settings_change
from .parameters import data_size, get_parameter
from .status import resolve_module_status, resolve_status

__all__ = [
    "InfoClassifier",
    "TokenLookup",
    "prefetched",
    "is_settings_change",
    "data_size",
    "get_parameter",
    "resolve_module_status",
    "resolve_status",
]
