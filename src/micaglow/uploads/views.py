"""Image upload endpoint for hosts and admins."""

from django.conf import settings
from django.http import JsonResponse
from django.views import View

from micaglow.core.mixins import HostPortalMixin

from .storage import ImageValidationError, StorageError, list_images, upload_image


def unknown_bucket_response(bucket):
    return JsonResponse({"error": f"Unknown bucket: {bucket}"}, status=400)


class ImageUploadView(HostPortalMixin, View):
    """Upload or list product images.

    POST /uploads/images/ (multipart)
        file: the image
        bucket: optional bucket name, one of STORAGE_ALLOWED_BUCKETS
        path: optional object path

    GET /uploads/images/?bucket=product-images&prefix=semaglutide
    """

    def get(self, request):
        bucket = request.GET.get("bucket") or settings.STORAGE_DEFAULT_BUCKET
        if bucket not in settings.STORAGE_ALLOWED_BUCKETS:
            return unknown_bucket_response(bucket)

        try:
            images = list_images(bucket, prefix=request.GET.get("prefix", ""))
        except StorageError as e:
            return JsonResponse({"error": f"Listing failed: {e}"}, status=502)
        return JsonResponse({"bucket": bucket, "images": images})

    def post(self, request):
        file = request.FILES.get("file")
        if file is None:
            return JsonResponse({"error": "No file provided"}, status=400)

        bucket = request.POST.get("bucket") or settings.STORAGE_DEFAULT_BUCKET
        if bucket not in settings.STORAGE_ALLOWED_BUCKETS:
            return unknown_bucket_response(bucket)

        try:
            result = upload_image(
                file,
                bucket=bucket,
                path=request.POST.get("path") or None,
                upsert=request.POST.get("upsert") == "true",
            )
        except ImageValidationError as e:
            return JsonResponse({"error": str(e)}, status=400)

        if not result.success:
            return JsonResponse({"error": result.error}, status=502)
        return JsonResponse(result.as_dict(), status=201)
