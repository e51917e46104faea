# routers/rewrite_router.py

"""
Synchronous Rewrite API Routes
"""

import logging
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from rewriteforge.core.dependencies import ServiceContainer, get_services
from rewriteforge.core.exceptions import RewriteError
from rewriteforge.models.rewrite import Backend, RewriteRequest, RewriteResponse, Style
from rewriteforge.utils.validate import validate_request

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/rewrite", tags=["Rewrite"])


@router.post("", response_model=RewriteResponse)
async def rewrite(request: RewriteRequest, services: ServiceContainer = Depends(get_services)):
    """Rewrite text and wait for the result"""
    settings = services.settings
    validate_request(request.llm, request.text, request.style, settings.max_text_length).raise_if_invalid()

    style = Style(request.style or settings.default_style)
    backend = Backend(request.llm or settings.default_backend)
    logger.info(f"POST /rewrite - backend={backend.value}, style={style.value}")

    try:
        rewritten = await services.rewrite.rewrite(request.text, style, backend)
    except RewriteError as e:
        logger.warning(f"Rewrite failed ({backend.value}): {e.message}")
        return JSONResponse(
            status_code=e.status_code,
            content={**e.to_dict(), "original": request.text, "rewritten": "", "style": style.value}
        )
    except Exception as e:
        logger.error(f"Error in rewrite endpoint: {e}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={
                "error": str(e) or "Failed to rewrite text",
                "original": request.text,
                "rewritten": "",
                "style": style.value
            }
        )

    return RewriteResponse(original=request.text, rewritten=rewritten, style=style, llm=backend)
