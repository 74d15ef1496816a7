from fastapi import APIRouter, Depends, File, HTTPException, Request, UploadFile, status
from fastapi.responses import StreamingResponse
from starlette.concurrency import run_in_threadpool
from pydantic import BaseModel, Field
import json
import logging
from typing import Dict, Any, List, AsyncIterator

from skinadvisor.core.config import settings
from skinadvisor.models.skin_analyzer import SkinAnalyzer, ImageDecodeError
from skinadvisor.models.skin_traits import (
    AcneLevel,
    InvalidTraitSelection,
    OilinessLevel,
    PigmentationLevel,
    SkinTraitAssessment,
    WrinkleLevel,
)
from skinadvisor.services.cosmily_relay import (
    CosmilyRelay,
    extract_positive_ingredients,
    suggest_ingredient_query,
)
from skinadvisor.services.gemini_service import GeminiService, get_gemini_service
from skinadvisor.services.ingredient_index import TitleIndex
from skinadvisor.services.ingredient_matcher import IngredientMatcher
from skinadvisor.services.reveal_stream import RevealStream, annotate, paced

logger = logging.getLogger(__name__)

router = APIRouter()
analyzer = SkinAnalyzer()


class AssessmentModel(BaseModel):
    """Confirmed skin traits sent back by the client."""
    acne: AcneLevel = Field(AcneLevel.CLEAR, description="Acne severity")
    oiliness: OilinessLevel = Field(OilinessLevel.LOW, description="Oiliness level")
    pigmentation: PigmentationLevel = Field(PigmentationLevel.NONE, description="Pigmentation severity")
    wrinkles: WrinkleLevel = Field(WrinkleLevel.NONE, description="Wrinkle level")

    def to_assessment(self) -> SkinTraitAssessment:
        return SkinTraitAssessment(
            acne=self.acne,
            oiliness=self.oiliness,
            pigmentation=self.pigmentation,
            wrinkles=self.wrinkles,
        )


class ToggleRequest(BaseModel):
    assessment: AssessmentModel = Field(default_factory=AssessmentModel)
    trait: str = Field(..., description="acne, oiliness, pigmentation or wrinkles")
    level: str = Field(..., description="Level to select for the trait")


class DetectRequest(BaseModel):
    text: str = Field(..., description="Text to scan for known ingredients")


def get_ingredient_index(request: Request) -> TitleIndex:
    return request.app.state.ingredient_index


def get_cosmily_relay() -> CosmilyRelay:
    return CosmilyRelay(
        api_url=settings.COSMILY_API_URL,
        access_token=settings.COSMILY_ACCESS_TOKEN,
        timeout=settings.COSMILY_TIMEOUT,
    )


@router.post("/analyze")
async def analyze_skin(file: UploadFile = File(...)) -> Dict[str, Any]:
    """
    Analyze skin from an uploaded image

    Args:
        file: Image file for skin analysis (JPEG, PNG)

    Returns:
        JSON with raw readings and the initial trait assessment
    """
    content = await file.read()
    if len(content) > settings.MAX_UPLOAD_SIZE:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"Image exceeds {settings.MAX_UPLOAD_SIZE} bytes"
        )

    try:
        result = await run_in_threadpool(analyzer.analyze_skin, content)
    except ImageDecodeError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error processing skin analysis: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))

    result["filename"] = file.filename
    return result


@router.post("/traits/toggle")
async def toggle_trait(request: ToggleRequest) -> Dict[str, Any]:
    """Select a trait level; selecting the current level resets the trait."""
    assessment = request.assessment.to_assessment()
    try:
        assessment.toggle(request.trait, request.level)
    except InvalidTraitSelection as e:
        raise HTTPException(status_code=400, detail=str(e))

    return {
        "assessment": assessment.to_dict(),
        "summary": assessment.describe()
    }


@router.post("/routine")
async def generate_routine(
    assessment: AssessmentModel,
    index: TitleIndex = Depends(get_ingredient_index),
    gemini: GeminiService = Depends(get_gemini_service),
) -> Dict[str, Any]:
    """Generate a routine and return it with every ingredient it mentions."""
    traits = assessment.to_assessment()
    routine = await gemini.generate_routine(traits)

    matcher = IngredientMatcher(index)
    ingredients = matcher.flush(routine)

    return {
        "assessment": traits.to_dict(),
        "routine": routine,
        "ingredients": [record.to_dict() for record in ingredients]
    }


@router.post("/routine/stream")
async def stream_routine(
    assessment: AssessmentModel,
    index: TitleIndex = Depends(get_ingredient_index),
    gemini: GeminiService = Depends(get_gemini_service),
) -> StreamingResponse:
    """
    Generate a routine and reveal it one character at a time.

    The response is newline-delimited JSON: one ``text`` event per character,
    ``ingredient`` events as soon as an ingredient is recognized, and a final
    ``done`` event.
    """
    routine = await gemini.generate_routine(assessment.to_assessment())
    events = annotate(RevealStream(routine), IngredientMatcher(index))

    async def ndjson() -> AsyncIterator[str]:
        async for event in paced(events, settings.TYPING_DELAY_MS / 1000):
            yield json.dumps(event.to_dict()) + "\n"

    return StreamingResponse(ndjson(), media_type="application/x-ndjson")


@router.post("/ingredients/detect")
async def detect_ingredients(
    request: DetectRequest,
    index: TitleIndex = Depends(get_ingredient_index),
) -> Dict[str, List[Dict[str, Any]]]:
    matcher = IngredientMatcher(index)
    return {"ingredients": [record.to_dict() for record in matcher.flush(request.text)]}


@router.get("/ingredients/{title}")
async def get_ingredient(title: str, index: TitleIndex = Depends(get_ingredient_index)) -> Dict[str, Any]:
    record = index.get(title)
    if record is None:
        raise HTTPException(status_code=404, detail=f"Ingredient '{title}' not found")
    return record.to_dict()


@router.post("/recommendations")
async def recommend_ingredients(
    assessment: AssessmentModel,
    relay: CosmilyRelay = Depends(get_cosmily_relay),
) -> Dict[str, Any]:
    """
    Ask the ingredient analysis API which ingredients suit the assessment.

    Returns:
        JSON with the query sent upstream, the positive ingredient titles and
        a short summary
    """
    traits = assessment.to_assessment()
    ingredients, group = suggest_ingredient_query(traits)
    status_code, payload = await relay.analyze(ingredients, group)

    titles = extract_positive_ingredients(payload) if status_code == 201 else []
    if titles:
        summary = (
            f"Based on your skin analysis ({traits.describe()}), we recommend the following "
            f"ingredients:\n\n{', '.join(titles)}\n\n"
            "Consider products containing these ingredients for better results."
        )
    else:
        logger.warning(f"Unexpected response from Cosmily API (status {status_code})")
        summary = "Unable to retrieve product recommendations at this time."

    return {
        "query": {"ingredients": ingredients, "ingredientGroup": group},
        "recommendations": titles,
        "summary": summary,
    }


@router.get("/health")
async def health_check(index: TitleIndex = Depends(get_ingredient_index)) -> Dict[str, Any]:
    """Health check endpoint"""
    return {"status": "healthy", "service": "skin-advisor-api", "ingredients": len(index)}
