from .ai_gateway import AIGatewayClient, relay_stream

__all__ = [
    "AIGatewayClient",
    "relay_stream",
]
