from fastapi import HTTPException, status
from fastapi.responses import JSONResponse

from storefront.core import exceptions
from storefront.schemas import ActionResult

STATUS_BY_ERROR_TYPE = {
    exceptions.ValidationError.error_type: status.HTTP_422_UNPROCESSABLE_ENTITY,
    exceptions.InvalidSortError.error_type: status.HTTP_422_UNPROCESSABLE_ENTITY,
    exceptions.NotFoundError.error_type: status.HTTP_404_NOT_FOUND,
    exceptions.ConstraintViolationError.error_type: status.HTTP_409_CONFLICT,
    exceptions.ConnectivityError.error_type: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def status_for(error_type: str | None) -> int:
    return STATUS_BY_ERROR_TYPE.get(error_type, status.HTTP_500_INTERNAL_SERVER_ERROR)


def http_error(exc: exceptions.ServiceError) -> HTTPException:
    return HTTPException(status_code=status_for(exc.error_type), detail=str(exc))


def action_response(result: ActionResult, success_status: int = status.HTTP_200_OK) -> JSONResponse:
    status_code = success_status if result.ok else status_for(result.error_type)
    return JSONResponse(
        status_code=status_code,
        content=result.model_dump(mode="json", by_alias=True, exclude_none=True),
    )
