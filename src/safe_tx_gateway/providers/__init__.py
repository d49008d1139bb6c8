from .info import InfoProvider, InfoProviderError, SafeInfo, TokenInfo, TokenType

__all__ = [
    "InfoProvider",
    "InfoProviderError",
    "SafeInfo",
    "TokenInfo",
    "TokenType",
]
