"""Base formatter interface for Redline."""

from abc import ABC, abstractmethod
from typing import Optional

from redline.core.review import ReviewState


class Formatter(ABC):
    """Abstract base class for output formatters."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique identifier for this formatter."""
        pass

    @abstractmethod
    def format(
        self,
        state: ReviewState,
        target: str = "",
        include_comments: bool = True,
    ) -> str:
        """Format a review.

        Args:
            state: The review to format.
            target: Name of the patch being reviewed.
            include_comments: Whether to include comment threads.

        Returns:
            Formatted output as a string.
        """
        pass


def approval_label(approved: Optional[bool]) -> str:
    """Human label for an effective approval value."""
    if approved is True:
        return "approved"
    if approved is False:
        return "rejected"
    return "pending"
