"""Reader profiles: lookup, upsert and plan resolution"""

from typing import Optional

from sqlmodel import Session

from blockpress.core.models import AccessTier
from blockpress.crud.models import Profile


def get_profile(session: Session, user_id: str) -> Profile | None:
    return session.get(Profile, user_id)


def upsert_profile(
    session: Session,
    user_id: str,
    plan: Optional[AccessTier] = None,
    full_name: Optional[str] = None,
    avatar_url: Optional[str] = None,
    ) -> Profile:
    """Create the profile if missing; only non-None fields overwrite an existing one.

    Flushes but does not commit; caller controls the transaction.
    """
    profile = session.get(Profile, user_id) or Profile(user_id=user_id)
    if plan is not None:
        profile.plan = AccessTier(plan)
    if full_name is not None:
        profile.full_name = full_name
    if avatar_url is not None:
        profile.avatar_url = avatar_url
    session.add(profile)
    session.flush()
    return profile


def reader_plan(session: Session, user_id: str) -> AccessTier:
    """A reader without a profile is on the free plan."""
    profile = session.get(Profile, user_id)
    return profile.plan if profile else AccessTier.free
