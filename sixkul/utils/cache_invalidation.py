# sixkul/utils/cache_invalidation.py
"""Cache invalidation utilities."""
from ..core.cache import cache_manager


async def invalidate_student_cache(student_id=None):
    """Invalidate cached student views, for one student or for all of them."""
    if student_id:
        await cache_manager.delete_pattern(cache_manager.make_key("student", student_id, "*"))
    else:
        await cache_manager.delete_pattern(cache_manager.make_key("student", "*"))


async def invalidate_admin_cache():
    """Invalidate admin overview, statistics and health entries."""
    await cache_manager.delete_pattern(cache_manager.make_key("admin", "*"))


async def invalidate_extracurricular_cache():
    """Anything touching an extracurricular shows up on admin and student dashboards."""
    await invalidate_admin_cache()
    await invalidate_student_cache()
