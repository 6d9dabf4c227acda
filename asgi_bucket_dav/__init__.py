#!/usr/bin/env python


"""
ASGI Bucket WebDAV Server
"""

__name__ = "ASGIBucketDAV"
__version__ = "0.1.0"

__author__ = "Rex Zhang"
__author_email__ = "rex.zhang@gmail.com"
__licence__ = "MIT"

__description__ = (
    "An asynchronous WebDAV server that exposes a flat object bucket "
    "as a browsable file tree."
)
__project_url__ = "https://github.com/rexzhang/asgi-bucket-dav"
