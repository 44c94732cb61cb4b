"""
Upload Module
=============

Multipart upload of recordings to the inference endpoint.

Components:
    - UploadClient: POSTs a recording and parses the detection response
    - build_multipart: Builds the multipart/form-data body
"""

from storycam.upload.client import UploadClient, build_multipart


__all__ = [
    "UploadClient",
    "build_multipart",
]
