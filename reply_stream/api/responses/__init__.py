from reply_stream.api.responses.sse import format_sse, sse_body

__all__ = ["format_sse", "sse_body"]
