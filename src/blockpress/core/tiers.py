"""Access tier -> storage namespace and URL strategy"""

from blockpress.config import Settings
from blockpress.core.errors import InvalidDocument
from blockpress.core.models import AccessTier, StoragePlacement, UrlStrategy


def resolve_strategy(tier: AccessTier, settings: Settings) -> StoragePlacement:
    """Free media is addressed by its public URL; paid media only through the proxy."""
    if tier == AccessTier.paid:
        return StoragePlacement(namespace=settings.paid_namespace, strategy=UrlStrategy.proxy)
    return StoragePlacement(namespace=settings.public_namespace, strategy=UrlStrategy.public)


def parse_tier(value) -> AccessTier:
    """Coerce a user-supplied tier; anything outside the enum is rejected before it can be stored."""
    try:
        return AccessTier(value)
    except ValueError:
        allowed = ", ".join(t.value for t in AccessTier)
        raise InvalidDocument(f"Invalid tier {value!r}; expected one of: {allowed}") from None
