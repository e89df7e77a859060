"""
FastAPI server for indexing documents and running ranked queries.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException
from fastapi.responses import JSONResponse

from relevance_db.api.loader import get_search, init_search
from relevance_db.api.models import (
    DocumentRequest,
    DocumentResponse,
    FlushResponse,
    SearchHit,
    SearchRequest,
    SearchResponse,
    SensitivityRequest,
    TermResponse,
)
from relevance_db.config import get_config
from relevance_db.errors import StatementFailure
from relevance_db.index.accumulator import PostingAccumulator
from relevance_db.normalization.text_normalizer import normalize_text
from relevance_db.search.criteria import QueryCriteria

# Configure logging
logging.basicConfig(
    level=get_config().log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for the FastAPI app.

    Opens the storage root on startup.
    """
    base_path = get_config().storage.base_path
    logger.info(f"Starting up: opening storage at {base_path}...")
    init_search(base_path)

    yield

    logger.info("Shutting down...")


# Create FastAPI app
app = FastAPI(
    title="Relevance DB API",
    description="Inverted index with weighted fields and ranked queries",
    version="0.1.0",
    lifespan=lifespan,
)


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"status": "ok", "message": "Relevance DB API is running"}


@app.put("/v1/indexes/{index}/documents/{document_id}", response_model=DocumentResponse)
async def put_document(index: str, document_id: int, body: DocumentRequest) -> DocumentResponse:
    """
    Index (or re-index) one document.

    Each entry of ``fields`` is tokenized into its own field. With
    ``replace`` the document's previous postings are flushed first.
    """
    try:
        search = get_search()

        removed = search.flush(index, document_id) if body.replace else 0

        accumulator = PostingAccumulator(search.config.indexing.min_term_length)
        for field_name, text in body.fields.items():
            accumulator.record(index, field_name, document_id, text)
        stats = search.save(accumulator)

        return DocumentResponse(
            index=index,
            document_id=document_id,
            postings_written=stats.postings_written,
            postings_removed=removed,
            fields_failed=stats.fields_failed,
        )
    except Exception as e:
        logger.error(f"Error in put_document: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")


@app.delete("/v1/indexes/{index}/documents/{document_id}", response_model=FlushResponse)
async def delete_document(index: str, document_id: int) -> FlushResponse:
    """Remove every posting of a document from an index."""
    try:
        removed = get_search().flush(index, document_id)
        return FlushResponse(index=index, document_id=document_id, postings_removed=removed)
    except Exception as e:
        logger.error(f"Error in delete_document: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")


@app.post("/v1/indexes/{index}/search", response_model=SearchResponse)
async def search_index(index: str, body: SearchRequest) -> SearchResponse:
    """
    Run a ranked query with pagination.

    Unlike the stateful facade, a storage failure is reported as a 500
    instead of an empty result.
    """
    search = get_search()
    max_limit = search.config.query.max_limit
    if body.limit > max_limit:
        raise HTTPException(status_code=422, detail=f"limit must be <= {max_limit}")

    try:
        criteria = QueryCriteria.build(
            fields=body.fields,
            terms=body.terms,
            document_ids=body.document_ids,
            field_mode=body.fields_mode,
            term_mode=body.terms_mode,
            content_filter=body.content_filter,
            config=search.config.query,
        )

        total = search.engine.count(index, criteria)
        ranked = search.engine.query(index, criteria, body.offset, body.limit)
    except StatementFailure as e:
        logger.error(f"Search on index '{index}' failed: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")

    items = [SearchHit(document_id=doc.document_id, relevance=doc.relevance) for doc in ranked]
    end = body.offset + len(items)
    next_offset = end if end < total else None

    return SearchResponse(index=index, total=total, items=items, next_offset=next_offset)


@app.put("/v1/terms/{term}/sensitivity", response_model=TermResponse)
async def put_term_sensitivity(term: str, body: SensitivityRequest) -> TermResponse:
    """Assign the content-sensitivity flag of a term."""
    normalized = normalize_text(term)
    if not normalized:
        raise HTTPException(status_code=422, detail=f"Term normalizes to nothing: {term!r}")

    search = get_search()
    try:
        term_id = search.set_term_sensitivity(term, body.sensitive)
    except StatementFailure as e:
        logger.error(f"Error in put_term_sensitivity: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")

    return TermResponse(term=normalized, term_id=term_id, sensitive=body.sensitive)


@app.exception_handler(404)
async def not_found_handler(request, exc):
    """Custom 404 handler."""
    return JSONResponse(status_code=404, content={"detail": str(exc.detail)})


@app.exception_handler(500)
async def internal_error_handler(request, exc):
    """Custom 500 handler."""
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


def main():
    """Run the server (for development)."""
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000, log_level="info")


if __name__ == "__main__":
    main()
