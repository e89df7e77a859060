"""
Example: API Server

Demonstrates running the FastAPI server for indexing and ranked queries.

Start the server and call it:
```bash
# Start the server
uv run python examples/api_server.py

# In another terminal:
curl -X PUT http://localhost:8000/v1/indexes/blog/documents/10 \
     -H 'Content-Type: application/json' \
     -d '{"fields": {"title": "Hello World"}}'
curl -X POST http://localhost:8000/v1/indexes/blog/search \
     -H 'Content-Type: application/json' \
     -d '{"terms": ["hello"], "limit": 10}'
```
"""

import logging

# Configure logging
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)


def main():
    """Run the API server."""
    import uvicorn

    from relevance_db.api.server import app
    from relevance_db.config import get_config

    base_path = get_config().storage.base_path

    print("=" * 80)
    print("Starting Relevance DB API Server")
    print("=" * 80)
    print()
    print(f"Storage root: {base_path} (override with STORAGE_BASE_PATH)")
    print("The server will start on http://0.0.0.0:8000")
    print()
    print("API Endpoints:")
    print("  GET    /                                         - Health check")
    print("  PUT    /v1/indexes/{index}/documents/{id}        - Index a document")
    print("  DELETE /v1/indexes/{index}/documents/{id}        - Flush a document")
    print("  POST   /v1/indexes/{index}/search                - Ranked search")
    print("  PUT    /v1/terms/{term}/sensitivity              - Flag a term")
    print()
    print("=" * 80)
    print()

    # Run server
    uvicorn.run(app, host="0.0.0.0", port=8000, log_level="info")


if __name__ == "__main__":
    main()
