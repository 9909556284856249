"""ASGI entrypoint for the crop-session gateway."""

from crop_gateway.api.app import create_app
from crop_gateway.containers import build_container

app = create_app(build_container())
