# src/telebugs_mcp/mcp/requests.py
"""Tool argument models.

One frozen pydantic model per tool. Each model is both the validator for
incoming ``arguments`` and the source of the tool's advertised JSON input
schema, so the two can never drift apart.

Validation never raises across the tool boundary: ``parse_request`` returns
either a model instance or a ``ValidationFailure`` that the server renders as
``{"error": "Invalid arguments: ..."}``.
"""

from dataclasses import dataclass
from typing import Annotated, Any, Literal, TypeVar

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, ValidationError


def _coerce_int(value: Any) -> Any:
    """Accept ints and whole-number floats; reject booleans.

    JSON clients frequently send ``5.0`` for ``5``. ``True`` is an int subclass
    in Python and must not pass as ``1``.
    """
    if isinstance(value, bool):
        raise ValueError("expected an integer, got a boolean")
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError("expected an integer, got a fractional number")
        return int(value)
    return value


WholeNumber = Annotated[int, BeforeValidator(_coerce_int)]
PageLimit = Annotated[WholeNumber, Field(ge=1, le=100, description="Maximum number of results (1-100, default 20)")]
PageOffset = Annotated[WholeNumber, Field(ge=0, description="Number of results to skip for pagination")]
ProjectFilter = Annotated[WholeNumber | None, Field(description="Filter by project ID")]


class _Request(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)


class ListProjectsRequest(_Request):
    pass


class ListErrorGroupsRequest(_Request):
    project_id: ProjectFilter = None
    error_type: str | None = Field(default=None, description="Filter by exact error type")
    error_message: str | None = Field(default=None, description="Filter by error message (substring match)")
    status: Literal["open", "resolved", "muted", "all"] = Field(default="open", description="Filter by status (default: open)")
    date_from: str | None = Field(
        default=None,
        alias="from",
        description="Start date on last occurrence (ISO 8601 format, e.g., 2024-01-01)",
    )
    date_to: str | None = Field(
        default=None,
        alias="to",
        description="End date on last occurrence (ISO 8601 format, e.g., 2024-12-31)",
    )
    limit: PageLimit = 20
    offset: PageOffset = 0


class GetErrorGroupRequest(_Request):
    group_id: WholeNumber = Field(description="The error group ID")


class ListReportsRequest(_Request):
    group_id: WholeNumber | None = Field(default=None, description="Filter by error group ID")
    project_id: ProjectFilter = None
    date_from: str | None = Field(default=None, alias="from", description="Start date (ISO 8601 format)")
    date_to: str | None = Field(default=None, alias="to", description="End date (ISO 8601 format)")
    limit: PageLimit = 20
    offset: PageOffset = 0


class GetReportRequest(_Request):
    report_id: WholeNumber = Field(description="The report ID")


class GetStatisticsRequest(_Request):
    project_id: ProjectFilter = None
    period: Literal["hour", "day", "week", "month"] = Field(default="day", description="Aggregation period (default: day)")
    limit: Annotated[WholeNumber, Field(ge=1, le=100, description="Number of periods to return (1-100, default 30)")] = 30


class SearchErrorsRequest(_Request):
    query: str = Field(
        min_length=1,
        description="Search terms for error type, message or culprit (all must match; end a term with * for a prefix match)",
    )
    project_id: ProjectFilter = None
    limit: PageLimit = 20
    offset: PageOffset = 0


class ListReleasesRequest(_Request):
    project_id: WholeNumber = Field(description="The project ID (required)")
    limit: PageLimit = 20
    offset: PageOffset = 0


class ListReleaseArtifactsRequest(_Request):
    release_id: WholeNumber = Field(description="The release ID")
    limit: PageLimit = 20
    offset: PageOffset = 0


class GetSourcemapStatusRequest(_Request):
    debug_id: str = Field(min_length=1, description="The debug ID to look up")
    project_id: ProjectFilter = None


class GroupRequest(_Request):
    """Arguments shared by resolve, unresolve and unmute."""

    group_id: WholeNumber = Field(description="The error group ID")


class MuteErrorGroupRequest(_Request):
    group_id: WholeNumber = Field(description="The error group ID")
    muted_until: str | None = Field(default=None, description="Optional ISO 8601 date until which the group is muted")


class AddNoteRequest(_Request):
    group_id: WholeNumber = Field(description="The error group ID")
    content: str = Field(min_length=1, description="The note content")


class DeleteNoteRequest(_Request):
    group_id: WholeNumber = Field(description="The error group ID")
    note_id: WholeNumber = Field(description="The note ID to delete")


@dataclass(frozen=True, slots=True)
class ValidationFailure:
    """Arguments rejected before any storage access."""

    message: str


def _describe(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors(include_url=False):
        location = ".".join(str(part) for part in error["loc"]) or "arguments"
        parts.append(f"{location}: {error['msg']}")
    return "; ".join(parts)


R = TypeVar("R", bound=_Request)


def parse_request(model: type[R], arguments: dict[str, Any] | None) -> R | ValidationFailure:
    """Validate raw tool arguments against a request model.

    Args:
        model: Request model class for the tool
        arguments: Raw ``arguments`` object from the tool call (may be None)

    Returns:
        The validated request, or a ValidationFailure naming every bad field
    """
    try:
        return model.model_validate(arguments or {})
    except ValidationError as exc:
        return ValidationFailure(message=_describe(exc))


def input_schema(model: type[_Request]) -> dict[str, Any]:
    """JSON schema advertised for a tool, using wire names (``from``, ``to``)."""
    return model.model_json_schema(by_alias=True)
