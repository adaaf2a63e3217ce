"""GraphQL-over-HTTP endpoint.

Accepts ``GET`` with query-string parameters and ``POST`` with a JSON,
form-encoded or ``application/graphql`` body. Outside production a browser
``GET`` receives the GraphiQL explorer instead of JSON.
"""

from __future__ import annotations

import json
import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Request, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import HTMLResponse, JSONResponse
from graphql import GraphQLError, OperationType, get_operation_ast, parse, validate
from sqlalchemy.orm import Session

from noteserver.core.database import get_db
from noteserver.core.session import SessionContext
from noteserver.templating import get_environment


logger = logging.getLogger(__name__)

router = APIRouter(tags=["graphql"])

DbDep = Annotated[Session, Depends(get_db)]


class GraphQLHTTPError(Exception):
    def __init__(self, status_code: int, message: str, headers: dict[str, str] | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.headers = headers


def _error_response(exc: GraphQLHTTPError) -> JSONResponse:
    return JSONResponse(
        {"errors": [{"message": str(exc)}]},
        status_code=exc.status_code,
        headers=exc.headers,
    )


async def _read_params(request: Request) -> dict[str, Any]:
    params: dict[str, Any] = dict(request.query_params)
    if request.method != "POST":
        return params

    content_type = request.headers.get("content-type", "").split(";")[0].strip().lower()
    if content_type == "application/json":
        try:
            body = await request.json()
        except ValueError:
            raise GraphQLHTTPError(status.HTTP_400_BAD_REQUEST, "POST body sent invalid JSON.")
        if not isinstance(body, dict):
            raise GraphQLHTTPError(status.HTTP_400_BAD_REQUEST, "POST body must be a JSON object.")
        params.update(body)
    elif content_type == "application/graphql":
        params["query"] = (await request.body()).decode("utf-8")
    elif content_type in {"application/x-www-form-urlencoded", "multipart/form-data"}:
        form = await request.form()
        params.update({key: value for key, value in form.items() if isinstance(value, str)})
    return params


def _variables(params: dict[str, Any]) -> dict[str, Any] | None:
    variables = params.get("variables")
    if variables in (None, ""):
        return None
    if isinstance(variables, str):
        try:
            variables = json.loads(variables)
        except ValueError:
            raise GraphQLHTTPError(status.HTTP_400_BAD_REQUEST, "Variables are invalid JSON.")
    if not isinstance(variables, dict):
        raise GraphQLHTTPError(status.HTTP_400_BAD_REQUEST, "Variables must be an object.")
    return variables


def _wants_graphiql(request: Request, params: dict[str, Any]) -> bool:
    if request.method != "GET" or "raw" in params:
        return False
    if not request.app.state.settings.is_prod:
        return "text/html" in request.headers.get("accept", "")
    return False


def render_graphiql(params: dict[str, Any]) -> str:
    template = get_environment().get_template("graphiql.html")
    return template.render(
        query=params.get("query") or "",
        variables=params.get("variables") or "",
        operation_name=params.get("operationName") or "",
    )


@router.api_route("/graphql", methods=["GET", "POST"])
async def graphql_endpoint(request: Request, db: DbDep):
    registry = request.app.state.graphql_registry
    try:
        params = await _read_params(request)
        if _wants_graphiql(request, params):
            return HTMLResponse(render_graphiql(params))

        query = params.get("query")
        if not query:
            raise GraphQLHTTPError(status.HTTP_400_BAD_REQUEST, "Must provide query string.")
        variables = _variables(params)
        operation_name = params.get("operationName") or None
    except GraphQLHTTPError as exc:
        return _error_response(exc)

    try:
        document = parse(query)
    except GraphQLError as err:
        return JSONResponse({"errors": [err.formatted]}, status_code=status.HTTP_400_BAD_REQUEST)

    validation_errors = validate(registry.schema, document)
    if validation_errors:
        return JSONResponse(
            {"errors": [err.formatted for err in validation_errors]},
            status_code=status.HTTP_400_BAD_REQUEST,
        )

    if request.method == "GET":
        operation = get_operation_ast(document, operation_name)
        if operation is not None and operation.operation != OperationType.QUERY:
            return _error_response(
                GraphQLHTTPError(
                    status.HTTP_405_METHOD_NOT_ALLOWED,
                    f"Can only perform a {operation.operation.value} operation from a POST request.",
                    headers={"Allow": "POST"},
                )
            )

    context = {"request": request, "session": SessionContext(request.session), "db": db}
    result = await run_in_threadpool(registry.execute, query, variables, operation_name, context)
    if result.errors:
        logger.info("GraphQL errors: %s", "; ".join(err.message for err in result.errors))
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR if result.data is None else status.HTTP_200_OK
    return JSONResponse(result.formatted, status_code=status_code)
