# backends/localmoc_backend.py

"""
Local deterministic mock backend - no external dependency, never fails
"""

from rewriteforge.backends.base import RewriteBackend, build_prompt


class LocalMockBackend(RewriteBackend):
    name = "localmoc"
    supports_streaming = False

    async def _generate(self, text: str, style: str) -> str:
        return build_prompt(text, style)
