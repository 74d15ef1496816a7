"""
HTTP relay for the Cosmily ingredient list analysis API.
"""
import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from skinadvisor.api.essential_endpoints import get_cosmily_relay
from skinadvisor.services.cosmily_relay import CosmilyRelay, InvalidMethod, validate_payload

logger = logging.getLogger(__name__)

router = APIRouter()

RELAY_PATH = "/analyzeIngredientList"


@router.api_route(
    RELAY_PATH,
    methods=["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
)
async def analyze_ingredient_list(
    request: Request,
    relay: CosmilyRelay = Depends(get_cosmily_relay),
) -> JSONResponse:
    """
    Forward an ingredient list to the analysis API.

    Expected JSON format:
    {
        "ingredients": "Water, Glycerin, Niacinamide",
        "ingredientGroup": "hydration_and_brightening"
    }

    The upstream status code and JSON body are returned unchanged. Errors are
    returned as {"message": "..."}.
    """
    if request.method != "POST":
        raise InvalidMethod()

    try:
        payload = await request.json()
    except ValueError:
        payload = None

    ingredients, group = validate_payload(payload)
    status_code, body = await relay.analyze(ingredients, group)
    logger.info(f"Relayed ingredient analysis for group {group!r}: upstream status {status_code}")
    return JSONResponse(status_code=status_code, content=body)
