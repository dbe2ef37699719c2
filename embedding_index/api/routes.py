"""API routes for index, record and search operations.

Handlers are plain functions: the Redis and embedding clients block, so
FastAPI runs them in its threadpool.
"""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request, status
from pydantic import BaseModel, Field

from embedding_index.embeddings.service import EmbeddingService
from embedding_index.exceptions import ValidationError
from embedding_index.logging_config import get_logger
from embedding_index.service import EmbeddingIndexService
from embedding_index.vectorstore.models import SearchResult

logger = get_logger(__name__)


router = APIRouter(prefix="/api/v1", tags=["Embeddings"])


def get_index_service(request: Request) -> EmbeddingIndexService:
    """Index service started by the application lifespan."""
    service = getattr(request.app.state, "index_service", None)
    if service is None:
        logger.warning("Index service not configured")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={"error": "Index service not configured"},
        )
    return service


def get_embedding_service(request: Request) -> EmbeddingService:
    """Embedding client started by the application lifespan."""
    service = getattr(request.app.state, "embedding_service", None)
    if service is None:
        logger.warning("Embedding service not configured")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={"error": "Embedding service not configured"},
        )
    return service


class CreateIndexResponse(BaseModel):
    """Response from index provisioning."""

    tenant_id: str = Field(description="Tenant identifier")
    index_name: str = Field(description="Name of the tenant index")
    created: bool = Field(description="Whether this request created the index")


class IndexDocumentRequest(BaseModel):
    """Request body for indexing a document."""

    key: str = Field(min_length=1, description="Batch key of the document")
    title: str = Field(description="Document title")
    description: str = Field(description="Document description")
    texts: list[str] = Field(
        min_length=1,
        description="Document chunks to embed, in order",
    )


class IndexDocumentResponse(BaseModel):
    """Response from document indexing."""

    key: str = Field(description="Batch key of the document")
    chunks_written: int = Field(description="Number of chunk records written")


class DeleteDocumentResponse(BaseModel):
    """Response from document deletion."""

    key: str = Field(description="Batch key of the document")
    chunks_deleted: int = Field(description="Number of chunk records removed")


class SearchRequest(BaseModel):
    """Request body for similarity search."""

    query: str = Field(description="Text to search for")
    merge: bool = Field(
        default=False,
        description="Rank hits of all query chunks together",
    )


class SearchResponse(BaseModel):
    """Response from similarity search."""

    message: str = Field(description="Formatted, length-bounded result text")
    documents: list[dict[str, Any]] = Field(description="Ranked documents")
    total: int = Field(description="Total matches reported by the store")


@router.post("/tenants/{tenant_id}/index", response_model=CreateIndexResponse)
def create_index_endpoint(
    tenant_id: str,
    index_service: EmbeddingIndexService = Depends(get_index_service),
) -> CreateIndexResponse:
    """Provision the tenant index if it does not exist."""
    created = index_service.create_index(tenant_id)
    return CreateIndexResponse(
        tenant_id=tenant_id,
        index_name=index_service.indexes.index_name(tenant_id),
        created=created,
    )


@router.post("/documents", response_model=IndexDocumentResponse)
def index_document_endpoint(
    request: IndexDocumentRequest,
    index_service: EmbeddingIndexService = Depends(get_index_service),
    embedding_service: EmbeddingService = Depends(get_embedding_service),
) -> IndexDocumentResponse:
    """Embed document chunks and store them under the document key."""
    embeddings = embedding_service.embed(request.texts)
    written = index_service.index_embeddings(
        embeddings,
        request.key,
        request.title,
        request.description,
    )
    return IndexDocumentResponse(key=request.key, chunks_written=written)


@router.delete("/documents/{key}", response_model=DeleteDocumentResponse)
def delete_document_endpoint(
    key: str,
    index_service: EmbeddingIndexService = Depends(get_index_service),
) -> DeleteDocumentResponse:
    """Delete the chunk records of a document."""
    deleted = index_service.delete_embedding(key)
    return DeleteDocumentResponse(key=key, chunks_deleted=deleted)


@router.delete("/documents", status_code=status.HTTP_204_NO_CONTENT)
def delete_all_documents_endpoint(
    index_service: EmbeddingIndexService = Depends(get_index_service),
) -> None:
    """Flush every record and index in the store."""
    index_service.delete_all_documents()


@router.delete("/indexes/{index_name}", status_code=status.HTTP_204_NO_CONTENT)
def drop_index_endpoint(
    index_name: str,
    index_service: EmbeddingIndexService = Depends(get_index_service),
) -> None:
    """Drop an index, keeping its records."""
    index_service.drop_index(index_name)


@router.post("/tenants/{tenant_id}/search", response_model=SearchResponse)
def search_endpoint(
    tenant_id: str,
    request: SearchRequest,
    index_service: EmbeddingIndexService = Depends(get_index_service),
    embedding_service: EmbeddingService = Depends(get_embedding_service),
) -> SearchResponse:
    """Embed the query, search the tenant index and format the hits."""
    if not request.query.strip():
        raise ValidationError("Query must not be empty", details={"field": "query"})

    query_embedding = embedding_service.embed([request.query])
    if request.merge:
        result = index_service.similarity_search_merged(tenant_id, query_embedding)
    else:
        result = index_service.similarity_search(tenant_id, query_embedding)

    return search_result_to_response(result, index_service.format_message(result))


def search_result_to_response(
    result: SearchResult | None,
    message: str,
) -> SearchResponse:
    """Convert a search result to the API response."""
    if result is None:
        return SearchResponse(message=message, documents=[], total=0)

    return SearchResponse(
        message=message,
        documents=[
            {
                "id": doc.id,
                "title": doc.title,
                "description": doc.description,
                "score": doc.score,
            }
            for doc in result.documents
        ],
        total=result.total,
    )
