"""
Action result responses

Action endpoints always answer with the ActionResult body; the HTTP status
follows its error code.
"""
from fastapi.responses import JSONResponse

from storefront.core.error_handler import SIGN_IN_PATH
from storefront.core.exceptions import HTTP_STATUS_BY_CODE, AuthorizationError
from storefront.schemas.results import ActionResult


def status_for_result(result: ActionResult, success_status: int = 200) -> int:
    if result.success:
        return success_status
    return HTTP_STATUS_BY_CODE.get(result.error_code, 400)


def action_response(result: ActionResult, success_status: int = 200, **extra) -> JSONResponse:
    content = result.model_dump()
    if result.error_code == AuthorizationError.default_code:
        content["redirect"] = SIGN_IN_PATH
    content.update(extra)
    return JSONResponse(status_code=status_for_result(result, success_status), content=content)
