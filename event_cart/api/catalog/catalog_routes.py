from http import HTTPStatus

from fastapi import APIRouter, HTTPException, Response

from event_cart.store import catalog_queries as store

from .catalog_contracts import (
    PackageRequest,
    PackageResponse,
    ServiceRequest,
    ServiceResponse,
)

package_router = APIRouter(prefix="/packages")
service_router = APIRouter(prefix="/services")


@package_router.post(
    "",
    status_code=HTTPStatus.CREATED,
)
async def post_package(info: PackageRequest, response: Response) -> PackageResponse:
    entity = store.add_package(info.as_package_info())
    response.headers["location"] = f"/packages/{entity.id}"
    return PackageResponse.from_entity(entity)


@package_router.get(
    "/{id}",
    responses={
        HTTPStatus.OK: {"description": "Successfully returned requested package"},
        HTTPStatus.NOT_FOUND: {"description": "Failed to return requested package as one was not found"},
    },
)
async def get_package(id: int) -> PackageResponse:
    entity = store.get_package(id)
    if entity is None:
        raise HTTPException(HTTPStatus.NOT_FOUND, f"Request resource /packages/{id} was not found")
    return PackageResponse.from_entity(entity)


@package_router.delete("/{id}")
async def delete_package(id: int) -> Response:
    store.delete_package(id)
    return Response("")


@service_router.post(
    "",
    status_code=HTTPStatus.CREATED,
)
async def post_service(info: ServiceRequest, response: Response) -> ServiceResponse:
    entity = store.add_service(info.as_service_info())
    response.headers["location"] = f"/services/{entity.id}"
    return ServiceResponse.from_entity(entity)


@service_router.get(
    "/{id}",
    responses={
        HTTPStatus.OK: {"description": "Successfully returned requested service"},
        HTTPStatus.NOT_FOUND: {"description": "Failed to return requested service as one was not found"},
    },
)
async def get_service(id: int) -> ServiceResponse:
    entity = store.get_service(id)
    if entity is None:
        raise HTTPException(HTTPStatus.NOT_FOUND, f"Request resource /services/{id} was not found")
    return ServiceResponse.from_entity(entity)


@service_router.delete("/{id}")
async def delete_service(id: int) -> Response:
    store.delete_service(id)
    return Response("")
