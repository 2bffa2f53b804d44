from fastapi import APIRouter, Depends, File, Request, UploadFile
from hootai.config import settings
from hootai.core.rate_limit import limiter
from hootai.modules.analysis.llm_client import AzureChatClient, get_llm_client
from hootai.modules.analysis.schemas import AnalysisRequest, AnalysisResult
from hootai.modules.analysis.service import AnalysisService

router = APIRouter(prefix="/analyze", tags=["analysis"])


def get_analysis_service(llm: AzureChatClient = Depends(get_llm_client)) -> AnalysisService:
    return AnalysisService(llm)


@router.post("", response_model=AnalysisResult)
@limiter.limit(settings.analyze_rate_limit)
async def analyze(
    request: Request,
    body: AnalysisRequest,
    service: AnalysisService = Depends(get_analysis_service)
):
    """UX report for a URL or for file text already extracted by the client"""
    return await service.analyze(body)


@router.post("/upload", response_model=AnalysisResult)
@limiter.limit(settings.analyze_rate_limit)
async def analyze_upload(
    request: Request,
    file: UploadFile = File(...),
    service: AnalysisService = Depends(get_analysis_service)
):
    """UX report for an uploaded CSV or PDF"""
    # One byte past the limit is enough to reject an oversized upload
    data = await file.read(settings.max_upload_bytes + 1)
    return await service.analyze_upload(file.filename or "", data)
