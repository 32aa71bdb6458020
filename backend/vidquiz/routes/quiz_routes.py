import logging

from fastapi import APIRouter, Body, Depends
from fastapi.responses import JSONResponse

from ..errors import InternalError, QuizError
from ..schemas.quiz import ErrorResponse, GenerateRequest, QuizSet
from ..services.quiz_service import QuizService, describe_quiz, get_quiz_service

logger = logging.getLogger("vidquiz.routes.quiz_routes")

router = APIRouter()


@router.post(
    "/generate",
    response_model=QuizSet,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
async def generate_quiz(
    request: GenerateRequest = Body(...),
    service: QuizService = Depends(get_quiz_service),
):
    """
    Generate a multiple-choice quiz from a YouTube video's transcript.
    The model output is returned as-is; X-Transcript-Source tells whether the
    real transcript or the demonstration fallback was used.
    """
    try:
        result, source = await service.generate(request.url, request.options)
    except QuizError:
        raise
    except Exception as e:
        logger.error(f"API Error: {e}", exc_info=True)
        raise InternalError(str(e) or "Internal Server Error")

    logger.info(f"Generated quiz ({describe_quiz(result)}, transcript source: {source})")
    return JSONResponse(content=result, headers={"X-Transcript-Source": source})
