# harness/helpers/__init__.py
from harness.helpers.request_builder import PayloadBuilder, RequestBuilder, RequestSpec

__all__ = ["PayloadBuilder", "RequestBuilder", "RequestSpec"]
