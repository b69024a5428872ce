"""
Suggested clone name/symbol derived from the origin token.

Strips "wrapped" markers: wETH -> ETH, "Wrapped Ether" -> "Ether".
"""

from dataclasses import dataclass
from typing import Any, Mapping, Optional


@dataclass(frozen=True)
class CloneSuggestion:
    name: Optional[str] = None
    symbol: Optional[str] = None


def derive_symbol(symbol: Optional[str]) -> Optional[str]:
    if not symbol:
        return None
    if symbol[0] == 'w':
        return symbol[1:].upper() or None
    return symbol


def derive_name(name: Optional[str]) -> Optional[str]:
    if not name:
        return None
    words = [word for word in name.split() if word.lower() != 'wrapped']
    return ' '.join(words) or None


def _field(origin: Any, key: str) -> Optional[str]:
    if origin is None:
        return None
    if isinstance(origin, Mapping):
        return origin.get(key)
    return getattr(origin, key, None)


def derive_clone_metadata(origin: Any) -> CloneSuggestion:
    """Accepts TokenMetadata, a CloneSuggestion or a plain mapping"""
    return CloneSuggestion(
        name=derive_name(_field(origin, 'name')),
        symbol=derive_symbol(_field(origin, 'symbol')),
    )
