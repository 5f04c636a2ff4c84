"""Central router registry."""
from __future__ import annotations

from fastapi import FastAPI

from officehub.routers.attendance import router as attendance_router
from officehub.routers.auth import router as auth_router
from officehub.routers.expenses import router as expenses_router
from officehub.routers.leaves import router as leaves_router
from officehub.routers.organizations import router as organizations_router
from officehub.routers.summaries import router as summaries_router
from officehub.routers.tasks import router as tasks_router
from officehub.routers.users import router as users_router

ALL_ROUTERS = (
    auth_router,
    organizations_router,
    users_router,
    tasks_router,
    attendance_router,
    leaves_router,
    expenses_router,
    summaries_router,
)


def include_all_routers(app: FastAPI) -> None:
    for router in ALL_ROUTERS:
        app.include_router(router)
