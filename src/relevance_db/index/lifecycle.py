"""
Document lifecycle: removing a document's postings before re-indexing.
"""

import logging

from ..errors import StatementFailure
from .postings import PostingStore

logger = logging.getLogger(__name__)


class DocumentLifecycle:
    """Bulk removal of one document's postings within an index."""

    def __init__(self, store: PostingStore):
        self.store = store

    def flush(self, index_name: str, document_id: int) -> int:
        """
        Delete every posting of a document in every field of an index.

        Call this before re-indexing a changed document; saving alone only
        replaces the terms present in the new text.

        Args:
            index_name: Index namespace
            document_id: Document to remove

        Returns:
            Total rows removed (0 if the index does not exist)
        """
        try:
            index_id = self.store.indexes.lookup(index_name)
            fields = self.store.fields.list_fields(index_id) if index_id is not None else []
        except StatementFailure as e:
            logger.error(f"Failed to resolve index '{index_name}' for flush: {e}")
            return 0

        total = 0
        for field in fields:
            try:
                total += self.store.delete_document(index_id, field.field_id, document_id)
            except StatementFailure as e:
                logger.error(
                    f"Failed to flush document {document_id} from field "
                    f"'{field.name}' of index '{index_name}': {e}"
                )

        logger.info(f"Flushed {total} postings of document {document_id} from '{index_name}'")
        return total
