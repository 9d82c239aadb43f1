"""
Career coach chat endpoint.

Relays chat turns to the AI gateway and streams the SSE response back.
"""
from fastapi import APIRouter, Depends, Request, Response

from career_coach.api.dependencies.auth import SupabaseTokenVerifier, get_token_verifier
from career_coach.api.models import ErrorResponse
from career_coach.config.settings import Settings, get_settings
from career_coach.controllers.coach_controller import CoachController
from career_coach.services.gateway import AIGatewayClient

# ============================================================================
# Dependency Injection
# ============================================================================


def get_ai_gateway(
    request: Request, settings: Settings = Depends(get_settings)
) -> AIGatewayClient:
    """Dependency injection for AIGatewayClient (shared HTTP client)."""
    return AIGatewayClient(request.app.state.http_client, settings)


def get_coach_controller(
    request: Request,
    settings: Settings = Depends(get_settings),
    token_verifier: SupabaseTokenVerifier = Depends(get_token_verifier),
    gateway: AIGatewayClient = Depends(get_ai_gateway),
) -> CoachController:
    """Dependency injection for CoachController."""
    return CoachController(
        settings=settings,
        rate_limiters=request.app.state.rate_limiters,
        token_verifier=token_verifier,
        gateway=gateway,
    )


# ============================================================================
# Router
# ============================================================================

router = APIRouter()


# ============================================================================
# Endpoints
# ============================================================================


@router.api_route(
    "/career-coach",
    methods=["POST", "OPTIONS", "GET", "HEAD", "PUT", "PATCH", "DELETE"],
    responses={
        200: {"content": {"text/event-stream": {}}, "description": "SSE token stream"},
        400: {"model": ErrorResponse, "description": "Invalid request"},
        401: {"model": ErrorResponse, "description": "Unauthorized"},
        405: {"model": ErrorResponse, "description": "Method not allowed"},
        413: {"model": ErrorResponse, "description": "Request body too large"},
        429: {"model": ErrorResponse, "description": "Rate limited"},
        500: {"model": ErrorResponse, "description": "Internal server error"},
        503: {"model": ErrorResponse, "description": "Upstream unavailable"},
    },
)
async def career_coach(
    request: Request,
    controller: CoachController = Depends(get_coach_controller),
) -> Response:
    """
    Career coach chat endpoint with streaming LLM response.

    The raw request is handed to the controller so that rate limiting runs
    before the body is parsed and authentication runs after it is validated.
    """
    return await controller.handle(request)
