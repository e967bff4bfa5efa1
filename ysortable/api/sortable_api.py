"""
排序模块 - 拖拽排序 API

把前端提交的 ID 顺序交给排序引擎。
使用动词风格路由，只使用 POST 请求。
"""

from typing import Any, Callable, Dict, Optional, Type

from fastapi import APIRouter, Body, Depends, Query
from sqlalchemy.orm import Session

from ysortable.exceptions import Err
from ysortable.log import get_logger
from ysortable.orm.db_session import get_db
from ysortable.orm.sortable import OrderEngine, SortableMixin
from ysortable.response import OkResponse, Resp

logger = get_logger()


def create_sortable_router(
    model_class: Type[SortableMixin],
    engine: Optional[OrderEngine] = None,
    session_dependency: Callable = get_db,
    items_param: Optional[str] = None,
    path: str = "/sort",
) -> APIRouter:
    """创建拖拽排序路由

    Args:
        model_class: 具备排序能力的模型类（继承 SortableMixin）
        engine: 排序引擎，不传则使用 model_class.sortable_engine()
        session_dependency: 提供 Session 的 FastAPI 依赖，默认 get_db
        items_param: 请求体中 ID 列表的键名，默认取 SortableSettings.items_param（sortItems）
        path: 路由路径

    Returns:
        APIRouter

    生成的路由:
        POST /sort?sort=desc   请求体 {"sortItems": [3, 1, 2]}

    Raises:
        PreconditionError: 模型不具备排序能力

    使用示例:
        app.include_router(create_sortable_router(Banner), prefix="/api/banner")
    """
    if engine is None:
        if not (isinstance(model_class, type) and issubclass(model_class, SortableMixin)):
            name = getattr(model_class, "__name__", repr(model_class))
            raise Err.precondition(f"{name} 不具备排序能力", model=name)
        engine = model_class.sortable_engine()

    param = items_param or engine.config.items_param
    default_sort = engine.config.default_direction.value

    router = APIRouter()

    @router.post(
        path,
        summary="拖拽排序",
        response_model=OkResponse,
        description=f"按请求体 `{param}` 中的 ID 顺序重新设置排序"
    )
    def set_sort_order(
        payload: Dict[str, Any] = Body(..., description=f"包含 `{param}` ID 列表的对象"),
        sort: str = Query(default_sort, description="对齐方向：desc 第一个 ID 排序值最大，asc 最小"),
        db: Session = Depends(session_dependency),
    ):
        """拖拽排序"""
        ids = payload.get(param)
        if not isinstance(ids, list) or not ids:
            raise Err.precondition(
                f"缺少排序 ID 列表 `{param}`",
                model=engine.config.model_name
            )

        updated = engine.apply_order(db, ids, sort)
        logger.info(f"{engine.config.model_name} 排序已更新: {len(ids)} 个 ID，{updated} 条变化")
        return Resp.OK(data={"updated": updated}, message="排序已更新")

    return router


__all__ = [
    "create_sortable_router",
]
