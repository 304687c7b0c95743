from reply_stream.models.schemas.request_schemas import GenerationRequest, ResponseContext

__all__ = ["GenerationRequest", "ResponseContext"]
