from fastapi import APIRouter, Form, Request, UploadFile
from fastapi.responses import Response, StreamingResponse

from service import watermark_service

router = APIRouter(prefix="/api/watermark", tags=["watermark"])


@router.post("")
async def watermark_image(request: Request, file: UploadFile, options: str = Form("{}")):
    """multipart 업로드 이미지에 워터마크를 입혀 바로 돌려준다.

    options: WatermarkOptions JSON (예: {"text": "sample", "pattern": true})
    """
    opts = watermark_service.parse_request_options(options)
    data, media_type = await watermark_service.watermark_upload(
        file, opts, request.app.state.executor
    )
    return Response(content=data, media_type=media_type)


@router.post("/stream")
async def watermark_stream(request: Request, options: str = "{}"):
    """요청 본문(이미지 바이트)을 스트리밍으로 받아 결과도 스트리밍으로 돌려준다."""
    opts = watermark_service.parse_request_options(options)
    chunks, media_type = await watermark_service.watermark_body(
        request.stream(), opts, request.app.state.executor
    )
    return StreamingResponse(chunks, media_type=media_type)
