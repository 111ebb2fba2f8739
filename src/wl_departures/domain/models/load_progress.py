"""Load progress domain model."""

from dataclasses import dataclass


@dataclass(frozen=True)
class LoadProgress:
    """Progress of a batched monitor fetch after a batch has completed."""

    processed: int
    total: int
    succeeded: int
    batch_number: int
    total_batches: int

    @property
    def percentage(self) -> int:
        """Completion in percent, rounded."""
        if self.total <= 0:
            return 0
        return round(self.processed / self.total * 100)
