"""API 模块

提供拖拽排序的 FastAPI 路由工厂。

使用示例:
    from fastapi import FastAPI
    from ysortable.api import create_sortable_router
    from ysortable.exceptions import register_exception_handlers

    app = FastAPI()
    register_exception_handlers(app)
    app.include_router(create_sortable_router(Banner), prefix="/api/banner")
"""

from .sortable_api import create_sortable_router

__all__ = [
    "create_sortable_router",
]
