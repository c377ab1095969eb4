"""Serve the API locally: python -m thrift_store"""
import uvicorn

from thrift_store.config import settings

if __name__ == "__main__":
    uvicorn.run(
        "thrift_store.api.main:app",
        host="0.0.0.0",
        port=8000,
        log_level=settings.log_level.lower(),
    )
