"""
Builder for the standard list/get/create/update/delete(/toggle) endpoints of
a CrudService-backed entity.

Endpoint signatures reference the schema classes passed to the builder, so
this module must not use postponed annotations.
"""
from typing import List, Sequence, Type
from uuid import UUID

from fastapi import APIRouter, Depends, Path, status
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from mes_api.core.deps import MANAGER_ROLES, get_current_active_user, get_session, get_tenant_id, require_roles
from mes_api.services.base import CrudService


# PUBLIC_INTERFACE
def register_crud_routes(
    router: APIRouter,
    *,
    path: str,
    service_class: Type[CrudService],
    read_model: Type[BaseModel],
    create_model: Type[BaseModel],
    update_model: Type[BaseModel],
    label: str,
    write_roles: Sequence[str] = MANAGER_ROLES,
    with_toggle: bool = False,
    with_code_lookup: bool = True,
) -> None:
    """Attach CRUD endpoints for one entity to `router` under `path`."""
    read_deps = [Depends(get_current_active_user)]
    write_deps = [Depends(require_roles(*write_roles))]

    async def list_items(
        tenant_id: str = Depends(get_tenant_id),
        session: AsyncSession = Depends(get_session),
    ):
        items = await service_class(session).find_by_tenant(tenant_id)
        return [read_model.model_validate(x) for x in items]

    async def get_item(
        item_id: UUID = Path(...),
        tenant_id: str = Depends(get_tenant_id),
        session: AsyncSession = Depends(get_session),
    ):
        return read_model.model_validate(await service_class(session).find_by_id(tenant_id, item_id))

    async def get_item_by_code(
        code: str = Path(...),
        tenant_id: str = Depends(get_tenant_id),
        session: AsyncSession = Depends(get_session),
    ):
        return read_model.model_validate(await service_class(session).find_by_code(tenant_id, code))

    async def create_item(
        payload: create_model,  # type: ignore[valid-type]
        tenant_id: str = Depends(get_tenant_id),
        session: AsyncSession = Depends(get_session),
    ):
        return read_model.model_validate(await service_class(session).create(tenant_id, payload))

    async def update_item(
        payload: update_model,  # type: ignore[valid-type]
        item_id: UUID = Path(...),
        tenant_id: str = Depends(get_tenant_id),
        session: AsyncSession = Depends(get_session),
    ):
        return read_model.model_validate(await service_class(session).update(tenant_id, item_id, payload))

    async def delete_item(
        item_id: UUID = Path(...),
        tenant_id: str = Depends(get_tenant_id),
        session: AsyncSession = Depends(get_session),
    ) -> None:
        await service_class(session).delete(tenant_id, item_id)

    async def toggle_item(
        item_id: UUID = Path(...),
        tenant_id: str = Depends(get_tenant_id),
        session: AsyncSession = Depends(get_session),
    ):
        return read_model.model_validate(await service_class(session).toggle_active(tenant_id, item_id))

    name = label.lower().replace(" ", "_")
    router.add_api_route(
        path, list_items, methods=["GET"], response_model=List[read_model],
        summary=f"List {label}s", dependencies=read_deps, name=f"list_{name}s",
    )
    if with_code_lookup:
        router.add_api_route(
            f"{path}/code/{{code}}", get_item_by_code, methods=["GET"], response_model=read_model,
            summary=f"Get {label} by code", dependencies=read_deps, name=f"get_{name}_by_code",
        )
    router.add_api_route(
        f"{path}/{{item_id}}", get_item, methods=["GET"], response_model=read_model,
        summary=f"Get {label}", dependencies=read_deps, name=f"get_{name}",
    )
    router.add_api_route(
        path, create_item, methods=["POST"], response_model=read_model, status_code=status.HTTP_201_CREATED,
        summary=f"Create {label}", dependencies=write_deps, name=f"create_{name}",
    )
    router.add_api_route(
        f"{path}/{{item_id}}", update_item, methods=["PATCH"], response_model=read_model,
        summary=f"Update {label}", dependencies=write_deps, name=f"update_{name}",
    )
    router.add_api_route(
        f"{path}/{{item_id}}", delete_item, methods=["DELETE"], status_code=status.HTTP_204_NO_CONTENT,
        summary=f"Delete {label}", dependencies=write_deps, name=f"delete_{name}",
    )
    if with_toggle:
        router.add_api_route(
            f"{path}/{{item_id}}/toggle-active", toggle_item, methods=["POST"], response_model=read_model,
            summary=f"Toggle {label} active flag", dependencies=write_deps, name=f"toggle_{name}",
        )
