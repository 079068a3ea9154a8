"""
SmartFilter Gateway - Flask API in front of the image worker

This app is deployed next to the worker. It:
1. Accepts photo uploads from browser clients
2. Hands each one to the worker over TCP and waits for its verdict
3. Serves the processed images back by name

Deployment:
    pip install smartfilter
    flask --app smartfilter_gateway.app:create_app run
"""

from .app import create_app
from .config import BackendConfig, Config

__all__ = ["create_app", "Config", "BackendConfig"]
