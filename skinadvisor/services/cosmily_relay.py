"""
Relay to the Cosmily ingredient list analysis API.

Requests are forwarded unchanged and the upstream status and JSON body are
returned as-is. Failures are mapped onto RelayError subclasses that carry
the HTTP status and message to send back to the caller. Nothing is retried.
"""
import logging
from typing import Any, Dict, List, Mapping, Optional, Tuple

import httpx

from skinadvisor.models.skin_traits import (
    AcneLevel,
    PigmentationLevel,
    SkinTraitAssessment,
    WrinkleLevel,
)

logger = logging.getLogger(__name__)


class RelayError(Exception):
    status_code = 500
    message = "Internal Server Error"

    def __init__(self, message: Optional[str] = None, status_code: Optional[int] = None):
        if message is not None:
            self.message = message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class InvalidMethod(RelayError):
    status_code = 405
    message = "Method Not Allowed. Use POST."


class MissingField(RelayError):
    status_code = 400
    message = "Missing 'ingredients' or 'ingredientGroup' in request body."


class UpstreamError(RelayError):
    message = "Error from Cosmily API"


class NoUpstreamResponse(RelayError):
    status_code = 500
    message = "No response from Cosmily API."


class RequestSetupError(RelayError):
    status_code = 500
    message = "Error setting up request to Cosmily API."


def validate_payload(payload: Any) -> Tuple[str, str]:
    """Return (ingredients, ingredientGroup) or raise MissingField."""
    if not isinstance(payload, Mapping):
        raise MissingField()
    ingredients = payload.get("ingredients")
    group = payload.get("ingredientGroup")
    if not ingredients or not group:
        raise MissingField()
    return ingredients, group


class CosmilyRelay:
    def __init__(
        self,
        api_url: str,
        access_token: str = "",
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_url = api_url
        self.access_token = access_token
        self.timeout = timeout
        self.transport = transport

    async def analyze(self, ingredients: str, ingredient_group: str) -> Tuple[int, Any]:
        """
        Forward an ingredient list to the upstream API.

        Returns:
            (status_code, json_body) exactly as the upstream sent them
        """
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.access_token}",
        }
        body = {"ingredients": ingredients, "ingredientGroup": ingredient_group}

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(self.api_url, json=body, headers=headers)
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(f"Error communicating with Cosmily API: {e}")
            raise UpstreamError(
                _upstream_message(e.response),
                status_code=e.response.status_code,
            ) from e
        except (httpx.TimeoutException, httpx.NetworkError, httpx.RemoteProtocolError) as e:
            logger.error(f"Error communicating with Cosmily API: {e}")
            raise NoUpstreamResponse() from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.error(f"Error communicating with Cosmily API: {e}")
            raise RequestSetupError() from e

        try:
            return response.status_code, response.json()
        except ValueError as e:
            logger.error(f"Cosmily API returned a non-JSON body (status {response.status_code})")
            raise UpstreamError("Invalid response from Cosmily API", status_code=502) from e


def _upstream_message(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return UpstreamError.message
    if isinstance(data, Mapping) and data.get("message"):
        return str(data["message"])
    return UpstreamError.message


def suggest_ingredient_query(assessment: SkinTraitAssessment) -> Tuple[str, str]:
    """Pick the ingredient list and group to analyze for a trait assessment."""
    if assessment.acne != AcneLevel.CLEAR:
        return "Salicylic Acid, Benzoyl Peroxide, Tea Tree Oil", "acne_treatment"
    if assessment.pigmentation != PigmentationLevel.NONE or assessment.wrinkles != WrinkleLevel.NONE:
        return "Retinol, Glycolic Acid, Lactic Acid", "anti-aging"
    return "Hyaluronic Acid, Vitamin C, Niacinamide", "hydration_and_brightening"


def extract_positive_ingredients(payload: Any) -> List[str]:
    """Collect ingredient titles listed under the analysis' positive effects."""
    if not isinstance(payload, Mapping):
        return []
    analysis = payload.get("analysis")
    positive = analysis.get("positive") if isinstance(analysis, Mapping) else None
    if not isinstance(positive, Mapping):
        return []

    titles: Dict[str, None] = {}
    for effect in positive.values():
        items = effect.get("list") if isinstance(effect, Mapping) else None
        for item in items or []:
            title = item.get("title") if isinstance(item, Mapping) else None
            if title:
                titles.setdefault(title, None)
    return list(titles)
