"""Heartbeat and payment push endpoints called by the monitor agent."""

import logging

from fastapi import APIRouter, Depends, Request

from paymonitor.core.timeutils import utc_timestamp
from paymonitor.interfaces.http.deps import get_monitor_service
from paymonitor.modules.monitor import HeartbeatMessage, PushMessage
from paymonitor.modules.monitor.service import MonitorService
from paymonitor.schemas import ApiResponse, HeartbeatRequest, PushRequest, PushResult

logger = logging.getLogger(__name__)

router = APIRouter()

_FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


async def _read_params(request: Request) -> dict[str, str]:
    """Merge query parameters with a form body; form fields win."""
    params = dict(request.query_params)
    content_type = request.headers.get("content-type", "")
    if request.method == "POST" and content_type.startswith(_FORM_CONTENT_TYPES):
        form = await request.form()
        params.update({key: value for key, value in form.items() if isinstance(value, str)})
    return params


@router.api_route("/heart", methods=["GET", "POST"], response_model=ApiResponse, summary="监控端心跳")
async def heartbeat(
    request: Request,
    service: MonitorService = Depends(get_monitor_service),
) -> ApiResponse:
    payload = HeartbeatRequest.model_validate(await _read_params(request))
    await service.process_heartbeat(
        HeartbeatMessage(t=payload.t, sign=payload.sign, appid=payload.appid),
        utc_timestamp(),
    )
    return ApiResponse.success()


@router.api_route("/push", methods=["GET", "POST"], response_model=ApiResponse, summary="监控端收款推送")
async def push(
    request: Request,
    service: MonitorService = Depends(get_monitor_service),
) -> ApiResponse:
    payload = PushRequest.model_validate(await _read_params(request))
    outcome = await service.process_push(
        PushMessage(
            t=payload.t,
            sign=payload.sign,
            type=payload.type,
            price=payload.price,
            appid=payload.appid,
        ),
        utc_timestamp(),
    )
    result = PushResult(
        matched=outcome.matched,
        order_code=outcome.order.order_code if outcome.order else None,
    )
    return ApiResponse.success(result.model_dump())
