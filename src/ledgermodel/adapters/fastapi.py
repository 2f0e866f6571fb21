"""
FastAPI Web Adapter

Exposes one EntitySet as a small REST resource:

    GET  {path}/            list   -> load() then to_json()
    GET  {path}/{identity}  detail -> lookup()
    POST {path}/            create -> build() + write_many() + save()
    PUT  {path}/{identity}  update -> write_many() + save()

```python
from fastapi import FastAPI
from ledgermodel.adapters.fastapi import include_entity_set

app = FastAPI()
include_entity_set(app, articles)
```
"""

from typing import Any, Dict, List

from fastapi import APIRouter, Body, FastAPI, HTTPException, status
from fastapi.responses import JSONResponse

from ..core.collection import EntitySet
from ..core.entity import Entity


def _find(entity_set: EntitySet, identity: str) -> Entity:
    entity = entity_set.lookup(identity)
    if entity is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{entity_set.name or 'entity'} {identity!r} not found",
        )
    return entity


def _failure(entity: Entity, extra: List[Any]) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content={
            "errors": entity.errors.to_dict(),
            "detail": [str(item) for item in extra],
        },
    )


def entity_router(entity_set: EntitySet) -> APIRouter:
    """Build list/detail/create/update routes for entity_set under its configured path."""
    router = APIRouter(prefix=entity_set.config.path or "")

    @router.get("/")
    async def list_entities():
        await entity_set.aload()
        return entity_set.to_json()

    @router.get("/{identity}")
    async def get_entity(identity: str):
        return _find(entity_set, identity).to_json()

    @router.post("/", status_code=status.HTTP_201_CREATED)
    async def create_entity(attributes: Dict[str, Any] = Body(...)):
        entity = entity_set.build().write_many(attributes)
        success, *extra = await entity.asave()
        if not success:
            return _failure(entity, extra)
        return entity.to_json()

    @router.put("/{identity}")
    async def update_entity(identity: str, attributes: Dict[str, Any] = Body(...)):
        entity = _find(entity_set, identity)
        entity.write_many(attributes)
        success, *extra = await entity.asave()
        if not success:
            response = _failure(entity, extra)
            # keep the in-memory entity in step with storage
            entity.reset()
            return response
        return entity.to_json()

    return router


def include_entity_set(app: FastAPI, entity_set: EntitySet) -> FastAPI:
    """Mount entity_router(entity_set) on app and return the app."""
    app.include_router(entity_router(entity_set))
    return app


__all__ = ["entity_router", "include_entity_set"]
