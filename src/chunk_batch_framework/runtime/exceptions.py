"""Component loading exceptions."""

from chunk_batch_framework.core.item.exceptions import BatchError


class ComponentInstantiationError(BatchError):
    """Failed to load or instantiate a source, processor or sink from configuration."""

    def __init__(self, class_path: str, cause: Exception) -> None:
        self.class_path = class_path
        self.cause = cause
        super().__init__(f"Failed to instantiate '{class_path}': {cause}")
        self.__cause__ = cause
