"""In-memory threshold bands with persistence-intent notification."""

from loguru import logger

from src.qc.domain.exceptions import PersistenceError
from src.qc.domain.models import ThresholdBand
from src.qc.domain.protocols import ThresholdRepository


class ThresholdStore:
    """
    Current mapping of parameter name to safety band.

    The mapping is replaced wholesale, never partially mutated. Readers get
    independent copies.
    """

    def __init__(self, bands: dict[str, ThresholdBand] | None = None, repository: ThresholdRepository | None = None):
        self._bands: dict[str, ThresholdBand] = dict(bands or {})
        self.repository = repository

        logger.info(f"ThresholdStore initialized with {len(self._bands)} thresholds")

    @classmethod
    def from_repository(cls, repository: ThresholdRepository) -> "ThresholdStore":
        """Load the initial mapping through ``repository``."""
        return cls(bands=repository.load(), repository=repository)

    def get(self, parameter_name: str) -> ThresholdBand | None:
        return self._bands.get(parameter_name)

    def get_thresholds(self) -> dict[str, ThresholdBand]:
        """Snapshot of the current mapping."""
        return dict(self._bands)

    def set_thresholds(self, new_bands: dict[str, ThresholdBand]) -> bool:
        """
        Replace all bands and request persistence.

        The in-memory replacement takes effect even if persisting fails.

        Returns:
            True if the repository accepted the write (or none is attached)
        """
        self._bands = dict(new_bands)

        if self.repository is None:
            logger.info(f"Thresholds updated in memory ({len(self._bands)} parameters)")
            return True

        try:
            self.repository.save(self.get_thresholds())
        except PersistenceError as e:
            logger.error(f"Thresholds updated in memory but not persisted: {e.message} {e.details}")
            return False

        logger.info("Thresholds updated and persisted")
        return True

    def __len__(self):
        return len(self._bands)

    def __contains__(self, parameter_name: str) -> bool:
        return parameter_name in self._bands
