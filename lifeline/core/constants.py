"""Core constants: storage strategy thresholds and shared literal values.

These are design constants, not settings: every backend must behave the
same way for the same payload, so none of them is configurable per call.
"""

from datetime import timedelta

# Payloads strictly larger than this use multipart (S3) or resumable (GCS) upload.
MULTIPART_THRESHOLD_BYTES = 5 * 1024 * 1024  # 5 MiB

# Part size for S3 multipart and chunk size for GCS resumable uploads.
# S3 requires >= 5 MiB for every part but the last; GCS requires a multiple of 256 KiB.
UPLOAD_PART_SIZE_BYTES = 5 * 1024 * 1024

# Lifetime of signed download URLs issued to browsers and desktop clients.
SIGNED_URL_TTL = timedelta(minutes=10)

DEFAULT_CONTENT_TYPE = "application/octet-stream"
CONTENT_TYPE_METADATA_KEY = "content-type"

# Snapshot artifacts: "{tenant_id}/{object_id}.json.gz"
SNAPSHOT_OBJECT_SUFFIX = ".json.gz"
PATH_SEPARATOR = "/"

# Provider validation run
VALIDATION_OBJECT_PREFIX = "validation/"
VALIDATION_PING_CONTENT = b"Lifeline validation ping"
