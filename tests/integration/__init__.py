"""
Integration tests for the release hosting client.

Full flows (announce, list, fetch, resolve) against an in-memory hosting
service mounted into httpx.MockTransport, marked with @pytest.mark.integration.
"""
