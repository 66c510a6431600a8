# services/writer.py
import logging
from exceptions import BatchWriteError

logger = logging.getLogger(__name__)

class BatchWriter:
    """Applies a chunk's product upserts as one batched write"""

    def __init__(self, db_manager):
        self.db = db_manager

    def write(self, instructions, chunk_index):
        """
        Args:
            instructions (list): UpsertInstruction objects for the chunk
            chunk_index (int): 1-based chunk ordinal, for error context

        Returns:
            int: Number of products upserted

        Raises:
            BatchWriteError: If the batch fails. It is not retried.
        """
        if not instructions:
            return 0

        try:
            count = self.db.upsert_products(instructions)
        except Exception as e:
            logger.error(
                f"Error on bulk upsert of chunk {chunk_index} "
                f"({len(instructions)} instructions): {str(e)}"
            )
            raise BatchWriteError(chunk_index, len(instructions), str(e)) from e

        logger.debug(f"Upserted {count} products for chunk {chunk_index}")
        return count
