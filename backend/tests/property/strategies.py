"""
Hypothesis Strategies for Property-Based Testing

Custom strategies for generating burn requests and tier inputs.
"""

import string

from hypothesis import strategies as st

from burnbox.domain.quota.value_objects import (
    FREE_LIMITS,
    PRO_LIMITS,
    UNLIMITED_DOWNLOADS,
    Tier,
)

# =============================================================================
# Primitive Strategies
# =============================================================================

file_names = st.text(
    alphabet=string.ascii_letters + string.digits + "-_. ",
    min_size=1,
    max_size=40,
).filter(lambda name: name.strip())

tiers = st.sampled_from(list(Tier))

passwords = st.text(min_size=1, max_size=32)


@st.composite
def download_ceilings(draw, allow_unlimited: bool = False) -> int:
    """Generate a max_downloads value valid for the free tier, or unlimited."""
    if allow_unlimited and draw(st.booleans()):
        return UNLIMITED_DOWNLOADS
    return draw(st.integers(min_value=1, max_value=FREE_LIMITS.max_downloads))


# =============================================================================
# Request Strategies
# =============================================================================

@st.composite
def requests_within(draw, tier: Tier):
    """Generate (file_size, ttl, max_downloads) inside the tier's ceilings."""
    limits = FREE_LIMITS if tier == Tier.FREE else PRO_LIMITS
    file_size = draw(st.integers(min_value=1, max_value=limits.max_file_size_bytes))
    ttl = draw(st.integers(min_value=1, max_value=limits.max_ttl_seconds))
    max_downloads = draw(download_ceilings(allow_unlimited=limits.allows_unlimited_downloads))
    return file_size, ttl, max_downloads


@st.composite
def oversized_requests(draw, tier: Tier):
    """Generate requests whose file size alone breaches the tier ceiling."""
    limits = FREE_LIMITS if tier == Tier.FREE else PRO_LIMITS
    file_size = draw(st.integers(
        min_value=limits.max_file_size_bytes + 1,
        max_value=limits.max_file_size_bytes * 4,
    ))
    ttl = draw(st.integers(min_value=1, max_value=limits.max_ttl_seconds * 2))
    max_downloads = draw(download_ceilings(allow_unlimited=True))
    return file_size, ttl, max_downloads
