# sixkul/services/base_service.py
"""Base service with common lookup and paging helpers."""
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from typing import Type, Any, Dict, Optional, TypeVar, Generic

from ..core.exceptions import NotFoundError

# Define generic type
T = TypeVar('T')

class BaseService(Generic[T]):
    not_found_message = "Data tidak ditemukan."

    def __init__(self, model: Type[T], db: AsyncSession):
        self.model = model
        self.db = db

    async def get(self, id: Any, include_deleted: bool = False) -> Optional[T]:
        stmt = select(self.model).where(self.model.id == id)
        if not include_deleted:
            stmt = stmt.where(self.model.is_deleted == False)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_or_404(self, id: Any) -> T:
        obj = await self.get(id)
        if obj is None:
            raise NotFoundError(self.not_found_message)
        return obj

    async def paginate(self, stmt, page: int = 1, size: int = 20) -> Dict[str, Any]:
        """Run ``stmt`` with offset/limit and return items plus the total count."""
        count_stmt = select(func.count()).select_from(stmt.order_by(None).subquery())
        total = (await self.db.execute(count_stmt)).scalar() or 0

        result = await self.db.execute(stmt.offset((page - 1) * size).limit(size))
        return {"items": result.scalars().all(), "total": total, "page": page, "size": size}
