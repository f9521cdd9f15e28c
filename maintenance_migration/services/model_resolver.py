"""Resolves an equipment model name in both stores."""

import logging
from dataclasses import dataclass

from ..exceptions import ModelNotFoundError
from ..models.record import EquipmentModel
from .repository import MaintenancePlanRepository

logger = logging.getLogger(__name__)


@dataclass
class ResolvedModel:
    """The same equipment model as seen by each store."""
    source: EquipmentModel
    destination: EquipmentModel


class ModelResolver:
    """Confirms a model exists, by exact name, in destination and source."""

    def __init__(
        self,
        source: MaintenancePlanRepository,
        destination: MaintenancePlanRepository
    ):
        self.source = source
        self.destination = destination

    def resolve(self, model_name: str) -> ResolvedModel:
        """
        Resolve ``model_name`` in both stores.

        The destination is checked first so a model that cannot receive
        data is reported without touching the source.

        Raises:
            ModelNotFoundError: with ``side`` set to the store lacking the model
        """
        dest_model = self.destination.find_model(model_name)
        if dest_model is None:
            raise ModelNotFoundError(model_name, "destination")
        logger.debug(f"Found destination model: {dest_model.id}")

        source_model = self.source.find_model(model_name)
        if source_model is None:
            raise ModelNotFoundError(model_name, "source")
        logger.debug(f"Found source model: {source_model.id}")

        return ResolvedModel(source=source_model, destination=dest_model)
