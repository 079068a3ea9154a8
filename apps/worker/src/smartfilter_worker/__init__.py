"""
This app is the reference image-processing worker. It:
1. Listens for gateway commands over TCP
2. Reads "<input>,<output>,<mode>" once per connection
3. Runs the filter (using the smartfilter_filters package)
4. Replies with a status byte and closes

Deployment:
    pip install smartfilter
    smartfilter-worker --port 9000
"""

from .config import WorkerConfig
from .server import WorkerServer

__all__ = ["WorkerConfig", "WorkerServer"]
