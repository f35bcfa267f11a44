"""
Review state for the proposals of one generation.

Each proposal is pending, accepted or rejected. Rejected items stay in the
state (hidden from view) so they can be accepted again; there is no way back
to pending.
"""
from dataclasses import dataclass
from typing import Iterable, List, Optional

from pydantic import ValidationError as PydanticValidationError

from flashcards.core.exceptions import NotFoundError, ValidationError
from flashcards.models.enums import FlashcardSource
from flashcards.schemas.flashcard import FlashcardContent
from flashcards.schemas.generation import CreateGenerationResponse, FlashcardProposal


@dataclass
class ProposalItem:
    temp_id: str
    front: str
    back: str
    source: FlashcardSource = FlashcardSource.AI_FULL
    accepted: bool = False
    rejected: bool = False

    @classmethod
    def from_proposal(cls, proposal: FlashcardProposal) -> "ProposalItem":
        return cls(
            temp_id=proposal.temp_id,
            front=proposal.front,
            back=proposal.back,
            source=FlashcardSource(proposal.source),
        )

    @property
    def pending(self) -> bool:
        return not self.accepted and not self.rejected


class ReviewState:
    """Ordered proposals of a generation plus their review flags."""

    def __init__(self):
        self.generation_id: Optional[int] = None
        self.items: List[ProposalItem] = []

    @classmethod
    def from_generation(cls, response: CreateGenerationResponse) -> "ReviewState":
        state = cls()
        state.load(response.generation_id, response.flashcards_proposals)
        return state

    def load(self, generation_id: int, proposals: Iterable[FlashcardProposal]) -> None:
        """Replace the current contents with a fresh set of pending proposals."""
        self.generation_id = generation_id
        self.items = [ProposalItem.from_proposal(proposal) for proposal in proposals]

    def _get(self, temp_id: str) -> ProposalItem:
        for item in self.items:
            if item.temp_id == temp_id:
                return item
        raise NotFoundError(f"Proposal {temp_id} not found")

    def accept(self, temp_id: str) -> ProposalItem:
        item = self._get(temp_id)
        item.accepted = True
        item.rejected = False
        return item

    def reject(self, temp_id: str) -> ProposalItem:
        item = self._get(temp_id)
        item.rejected = True
        item.accepted = False
        return item

    def edit(self, temp_id: str, front: str, back: str) -> ProposalItem:
        """
        Replace the content of a proposal.

        The first edit turns an ``ai-full`` proposal into ``ai-edited``.
        Review flags are left as they are.

        Raises:
            NotFoundError: no proposal with this temp id
            ValidationError: front/back empty or too long; the item is unchanged
        """
        item = self._get(temp_id)
        try:
            content = FlashcardContent(
                front=front.strip() if isinstance(front, str) else front,
                back=back.strip() if isinstance(back, str) else back,
            )
        except PydanticValidationError as e:
            first = e.errors()[0]
            field = first["loc"][0] if first.get("loc") else "content"
            raise ValidationError(f"{field}: {first['msg']}") from e

        item.front = content.front
        item.back = content.back
        if item.source == FlashcardSource.AI_FULL:
            item.source = FlashcardSource.AI_EDITED
        return item

    def remove(self, temp_ids: Iterable[str]) -> None:
        """Drop items, typically the ones just committed."""
        removed = set(temp_ids)
        self.items = [item for item in self.items if item.temp_id not in removed]

    def reset(self) -> None:
        self.generation_id = None
        self.items = []

    @property
    def total_count(self) -> int:
        return len(self.items)

    @property
    def accepted_items(self) -> List[ProposalItem]:
        return [item for item in self.items if item.accepted]

    @property
    def non_rejected_items(self) -> List[ProposalItem]:
        return [item for item in self.items if not item.rejected]

    @property
    def visible_items(self) -> List[ProposalItem]:
        # Rejected items are hidden but kept
        return self.non_rejected_items

    @property
    def accepted_count(self) -> int:
        return len(self.accepted_items)

    @property
    def non_rejected_count(self) -> int:
        return len(self.non_rejected_items)

    @property
    def is_empty(self) -> bool:
        return not self.items
