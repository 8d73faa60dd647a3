from pydantic import BaseModel
from typing import Optional


class ProblemDetail(BaseModel):
    """RFC 7807 compliant error response."""

    type: str = "about:blank"
    title: str
    detail: Optional[str] = None
    status: int
    instance: Optional[str] = None
    code: str


class DomainException(Exception):
    """Base class for domain-specific exceptions."""

    def __init__(
        self,
        status_code: int,
        title: str,
        *,
        code: str,
        detail: str | None = None,
        type_: str = "about:blank",
    ) -> None:
        super().__init__(detail or title)
        self.status_code = status_code
        self.title = title
        self.detail = detail
        self.type = type_
        self.code = code

    def to_problem(self, instance: str | None = None) -> ProblemDetail:
        return ProblemDetail(
            type=self.type,
            title=self.title,
            detail=self.detail,
            status=self.status_code,
            instance=instance,
            code=self.code,
        )


class NotFound(DomainException):
    def __init__(self, entity: str, entity_id: str) -> None:
        super().__init__(
            status_code=404,
            title=f"{entity.replace('_', ' ').capitalize()} not found",
            detail=f"{entity.replace('_', ' ')} '{entity_id}' not found",
            code=f"{entity}_not_found",
        )
        self.entity = entity
        self.entity_id = entity_id


class InvalidConfig(DomainException):
    def __init__(self, detail: str) -> None:
        super().__init__(
            status_code=400,
            title="Invalid match configuration",
            detail=detail,
            code="match_config_invalid",
        )


class InvalidOutcome(DomainException):
    def __init__(self, detail: str) -> None:
        super().__init__(
            status_code=400,
            title="Invalid point outcome",
            detail=detail,
            code="point_outcome_invalid",
        )


class MatchAlreadyComplete(DomainException):
    def __init__(self, match_id: str) -> None:
        super().__init__(
            status_code=409,
            title="Match already complete",
            detail=f"match '{match_id}' has already finished",
            code="match_already_complete",
        )
        self.match_id = match_id


class OutOfSequence(DomainException):
    def __init__(
        self,
        expected: int | None,
        received: int,
        *,
        detail: str | None = None,
        code: str = "point_out_of_sequence",
        title: str = "Point out of sequence",
    ) -> None:
        super().__init__(
            status_code=409,
            title=title,
            detail=detail
            or f"expected point {expected}, received point {received}",
            code=code,
        )
        self.expected = expected
        self.received = received


class Conflict(OutOfSequence):
    """A point number that another write has already claimed."""

    def __init__(
        self, expected: int | None, received: int, *, detail: str | None = None
    ) -> None:
        super().__init__(
            expected,
            received,
            detail=detail or f"point {received} has already been recorded",
            code="point_conflict",
            title="Point already recorded",
        )


class PersistenceFailure(DomainException):
    def __init__(self, detail: str) -> None:
        super().__init__(
            status_code=500,
            title="Persistence failure",
            detail=detail,
            code="persistence_failure",
        )
