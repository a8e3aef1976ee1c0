from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
import logging

from tail_registry.domain.challenge import ChallengeCoordinator
from tail_registry.domain.contracts import AuthorizationClient, RegistryClient
from tail_registry.domain.errors import SubmissionNotReadyError
from tail_registry.domain.submission import SubmissionAssembler, SubmissionOutcome
from tail_registry.domain.validation import FieldError, TailFields, validate_fields

logger = logging.getLogger("tail_registry")

FieldEdit = tuple[str, str]


@dataclass
class FormSession:
    """State container of one registration form.

    Field edits are processed strictly in arrival order: the value is stored,
    the challenge coordinator sees it, then the whole form is validated again.
    """

    session_id: str
    coordinator: ChallengeCoordinator
    assembler: SubmissionAssembler
    fields: dict[str, str] = field(default_factory=dict)
    validated: TailFields | None = None
    errors: list[FieldError] = field(default_factory=list)
    inserted: bool = False
    last_outcome: SubmissionOutcome | None = None

    def __post_init__(self) -> None:
        self._revalidate()

    @classmethod
    def open(
        cls,
        *,
        session_id: str,
        authorization: AuthorizationClient,
        registry: RegistryClient,
    ) -> FormSession:
        return cls(
            session_id=session_id,
            coordinator=ChallengeCoordinator(client=authorization, session_id=session_id),
            assembler=SubmissionAssembler(registry=registry),
        )

    @property
    def can_submit(self) -> bool:
        return not self.inserted and self.validated is not None and self.coordinator.ready_challenge is not None

    def apply_edits(self, edits: Mapping[str, str] | Iterable[FieldEdit]) -> None:
        items = edits.items() if isinstance(edits, Mapping) else edits
        for name, value in items:
            self.fields[name] = value
            self.coordinator.handle_edit(name, value)
            self._revalidate()

    async def submit(self, signature: str) -> SubmissionOutcome:
        if self.inserted:
            raise SubmissionNotReadyError("this TAIL record was already submitted")
        if self.validated is None:
            raise SubmissionNotReadyError("form has invalid fields")
        challenge = self.coordinator.ready_challenge
        if challenge is None:
            raise SubmissionNotReadyError("no signing challenge is available for this asset")

        outcome = await self.assembler.submit(self.validated, challenge, signature)
        self.last_outcome = outcome
        self.inserted = outcome.succeeded
        logger.info(
            "form submitted",
            extra={"session_id": self.session_id, "outcome": outcome.status.value},
        )
        return outcome

    def _revalidate(self) -> None:
        result = validate_fields(self.fields)
        if isinstance(result, TailFields):
            self.validated = result
            self.errors = []
        else:
            self.validated = None
            self.errors = result
