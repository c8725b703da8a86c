"""Creative asset tools."""

from __future__ import annotations

from typing import Mapping

import httpx
from mcp.server.fastmcp import Context, FastMCP

from ..errors import ClassifiedError, ErrorKind, MetaApiException
from ..logging import get_logger
from ..meta_client.models import ImageUploadRequest
from .common import ToolEnvironment, failure, normalize_account_id, success, usage_meta

logger = get_logger(__name__)

DEFAULT_IMAGE_CONTENT_TYPE = "image/jpeg"


async def download_image(url: str, timeout: float) -> tuple[bytes, str]:
    """Fetch image bytes and content type from a public URL."""

    async with httpx.AsyncClient(timeout=timeout, follow_redirects=True) as http:
        response = await http.get(url)
    if response.status_code >= 400:
        raise MetaApiException(
            ClassifiedError(
                kind=ErrorKind.HTTP_ERROR,
                message=f"Failed to download image: HTTP {response.status_code}",
                status=response.status_code,
            )
        )
    content_type = response.headers.get("content-type", DEFAULT_IMAGE_CONTENT_TYPE).split(";")[0].strip()
    return response.content, content_type or DEFAULT_IMAGE_CONTENT_TYPE


def register(server: FastMCP, env: ToolEnvironment) -> None:
    @server.tool(
        name="creatives.upload_image",
        structured_output=True,
        description=(
            "Upload an image to the ad account's image library from a URL. "
            "Returns the image hash to reference from ad creatives."
        ),
    )
    async def creatives_upload_image(args: ImageUploadRequest, ctx: Context) -> Mapping[str, object]:
        del ctx
        account_id = normalize_account_id(args.account_id)
        image_url = str(args.image_url)
        logger.info("image_download_started", image_url=image_url)
        try:
            content, content_type = await download_image(image_url, env.settings.request_timeout_seconds)
        except httpx.HTTPError as exc:
            return failure(
                ClassifiedError(kind=ErrorKind.HTTP_ERROR, message=f"Failed to download image: {exc}")
            )
        except MetaApiException as exc:
            return failure(exc.error)

        extension = ".png" if "png" in content_type else ".jpg"
        fields = {"name": args.name} if args.name else {}
        try:
            result = await env.client.post_multipart(
                f"/{account_id}/adimages",
                fields=fields,
                files={"filename": (f"image{extension}", content, content_type)},
            )
        except MetaApiException as exc:
            return failure(exc.error)

        images = result.get("images") if isinstance(result, Mapping) else None
        uploaded = next(iter(images.values()), None) if images else None
        if not uploaded or not uploaded.get("hash"):
            return failure(
                ClassifiedError(kind=ErrorKind.UNKNOWN, message="Image upload failed: no image hash returned.")
            )

        data = {
            "hash": uploaded["hash"],
            "url": uploaded.get("url"),
            "name": uploaded.get("name") or args.name,
        }
        summary = (
            f"Image uploaded successfully!\nHash: {data['hash']}\nURL: {data['url']}\n"
            f"Name: {data['name'] or 'N/A'}"
        )
        return success(data, summary=summary, meta=usage_meta(env))


__all__ = ["download_image", "register"]
